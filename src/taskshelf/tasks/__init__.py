"""
Task subsystem.

Components:
- task_models.py: data structures (Category, Task, TaskStatus, TaskPriority, FilterCriteria)
- migrations.py: additive schema migrations applied to stored task records
- persistence.py: durable categories/tasks records on a key-value store
- task_store.py: in-memory authoritative store + mutators + active filters
- task_query.py: pure filtering/sorting and other derived views
- backup.py: JSON export/import of the whole state
- task_api.py: small high-level helpers used by UI adapters
"""
