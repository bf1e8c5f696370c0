# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKSHELF_APP_NAME": "App display name (default: taskshelf).",
    "TASKSHELF_LOG_LEVEL": "Console logging level (default: INFO).",
    # Console
    "TASKSHELF_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "TASKSHELF_LIST_LIMIT": "Max tasks printed per list (default: 200).",
    # Paths (gitignored)
    "TASKSHELF_DATA_DIR": "Local data directory (default: .local/taskshelf).",
    "TASKSHELF_STORAGE_DB_PATH": "Key-value SQLite path (default: <data_dir>/storage.sqlite3).",
    "TASKSHELF_STORAGE_NAMESPACE": "Prefix of the stored record keys (default: todoapp).",
    "TASKSHELF_BACKUP_DIR": "Where /export writes backups (default: <data_dir>/backups).",
}
