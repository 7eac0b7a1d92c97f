"""Backup stages, retention and orchestration for SSB-Manager."""

from .database import DatabaseBackupStage, MySQLClient
from .files import FileBackupStage, RsyncTool
from .models import BackupClass, BackupRunResult, SpaceStatus, SyncPolicy
from .orchestrator import BackupOrchestrator, resolve_destination
from .retention import RetentionManager
from .scheduler import BackupScheduler
from .space import SpaceGuard

__all__ = [
    "BackupClass",
    "BackupOrchestrator",
    "BackupRunResult",
    "BackupScheduler",
    "DatabaseBackupStage",
    "FileBackupStage",
    "MySQLClient",
    "RetentionManager",
    "RsyncTool",
    "SpaceGuard",
    "SpaceStatus",
    "SyncPolicy",
    "resolve_destination",
]
