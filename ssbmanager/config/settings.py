"""Immutable run settings built from the configuration file."""

from dataclasses import dataclass, field
from typing import Any, Dict

from ssbmanager.backup.models import BackupClass, MySQLCredentials, SyncPolicy

DEFAULT_CONFIG_PATH = "/etc/ssb-manager/ssb-manager.yml"
DEFAULT_LOG_FILE = "/var/log/ssb-manager.log"


@dataclass(frozen=True)
class BackupConfig:
    """Everything a backup run needs, read once at start-up."""

    backup_dir: str
    home_dir: str
    min_free_space_gb: int
    stop_backup_space_gb: int
    log_file: str = DEFAULT_LOG_FILE
    include_database: bool = True
    include_site_files: bool = True
    backup_option: SyncPolicy = SyncPolicy.FULL
    mysql: MySQLCredentials = field(default_factory=lambda: MySQLCredentials(user="root"))
    schedule: Dict[BackupClass, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupConfig":
        """
        Build settings from a validated configuration dictionary.

        Raises:
            InvalidSyncPolicyError: If backup_option is unknown
        """
        mysql = data.get("mysql") or {}
        schedule = {
            BackupClass.parse(name): expression
            for name, expression in (data.get("schedule") or {}).items()
        }

        return cls(
            backup_dir=data["backup_dir"].rstrip("/") or "/",
            home_dir=data["home_dir"],
            min_free_space_gb=int(data["min_free_space_gb"]),
            stop_backup_space_gb=int(data["stop_backup_space_gb"]),
            log_file=data.get("log_file") or DEFAULT_LOG_FILE,
            include_database=bool(data.get("include_database", True)),
            include_site_files=bool(data.get("include_site_files", True)),
            backup_option=SyncPolicy.parse(data.get("backup_option", "full")),
            mysql=MySQLCredentials(
                user=mysql.get("user", "root"),
                password=mysql.get("password") or "",
                host=mysql.get("host"),
                port=mysql.get("port"),
            ),
            schedule=schedule,
        )
