"""Configuration file schema for SSB-Manager."""

CRON_EXPRESSION = {
    "type": "string",
    "pattern": r"^\S+\s+\S+\s+\S+\s+\S+\s+\S+$",
}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "backup_dir": {
            "type": "string",
            "minLength": 1,
            "description": "Main backup directory",
        },
        "home_dir": {
            "type": "string",
            "minLength": 1,
            "description": "Directory synced into home_files",
        },
        "log_file": {
            "type": "string",
            "minLength": 1,
        },
        "min_free_space_gb": {
            "type": "integer",
            "minimum": 0,
            "description": "Minimum free space required to start a backup",
        },
        "stop_backup_space_gb": {
            "type": "integer",
            "minimum": 0,
            "description": "Below this, old backups are deleted",
        },
        "include_database": {
            "type": "boolean",
            "default": True,
        },
        "include_site_files": {
            "type": "boolean",
            "default": True,
        },
        "backup_option": {
            "type": "string",
            "enum": ["full", "new_files_only", "changed_only", "no_file_updates"],
            "default": "full",
        },
        "mysql": {
            "type": "object",
            "properties": {
                "user": {"type": "string", "minLength": 1},
                "password": {"type": ["string", "null"]},
                "host": {"type": "string"},
                "port": {"type": "integer", "minimum": 1, "maximum": 65535},
            },
            "additionalProperties": False,
        },
        "schedule": {
            "type": "object",
            "properties": {
                "daily": CRON_EXPRESSION,
                "weekly": CRON_EXPRESSION,
                "monthly": CRON_EXPRESSION,
            },
            "additionalProperties": False,
        },
    },
    "required": [
        "backup_dir",
        "home_dir",
        "min_free_space_gb",
        "stop_backup_space_gb",
    ],
    "additionalProperties": False,
}
