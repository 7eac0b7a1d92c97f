"""Runs one backup class end to end."""

import logging
import os
from datetime import date
from typing import TYPE_CHECKING, Optional

from ssbmanager.utils.errors import (
    DestinationCreateError,
    PreflightInsufficientSpaceError,
    create_error_suggestions,
)

from .database import DatabaseBackupStage, MySQLClient
from .files import FileBackupStage
from .models import BackupClass, BackupRunResult, SpaceStatus
from .retention import RetentionManager
from .space import SpaceGuard

if TYPE_CHECKING:
    from ssbmanager.config.settings import BackupConfig

logger = logging.getLogger(__name__)

DATABASES_SUBDIR = "databases"
HOME_FILES_SUBDIR = "home_files"


def class_root(backup_dir: str, backup_class: BackupClass) -> str:
    """Directory holding every generation of ``backup_class``."""
    return os.path.join(backup_dir, backup_class.value)


def resolve_destination(backup_dir: str, backup_class: BackupClass, day: date) -> str:
    """
    Generation directory for ``backup_class`` on ``day``.

    Pure: the same inputs always give the same path, so a second run in the
    same day, week or month writes into the same generation.
    """
    return os.path.join(class_root(backup_dir, backup_class), backup_class.generation_name(day))


class BackupOrchestrator:
    """Composes the space checks and the backup stages for one run."""

    def __init__(
        self,
        config: "BackupConfig",
        space_guard: Optional[SpaceGuard] = None,
        retention: Optional[RetentionManager] = None,
        database_stage: Optional[DatabaseBackupStage] = None,
        file_stage: Optional[FileBackupStage] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Settings for the run
            space_guard: Free space checks (defaults to the real filesystem)
            retention: Generation eviction
            database_stage: MySQL dump stage
            file_stage: Home directory sync stage
        """
        self.config = config
        self.space_guard = space_guard or SpaceGuard()
        self.retention = retention or RetentionManager(space_guard=self.space_guard)
        self.database_stage = database_stage or DatabaseBackupStage(MySQLClient(config.mysql))
        self.file_stage = file_stage or FileBackupStage()

    def run(self, backup_class: BackupClass, today: Optional[date] = None) -> BackupRunResult:
        """
        Run a backup of ``backup_class``.

        Not enough space at the start aborts the run before anything is
        written. Running out of generations to evict is only logged. A
        database stage problem never stops the file stage, and the run fails
        only when the destination cannot be created or the file stage fails.

        Args:
            backup_class: daily, weekly or monthly
            today: Date used for the generation name (defaults to today)

        Returns:
            BackupRunResult: Per-phase results and the overall status
        """
        today = today or date.today()
        destination = resolve_destination(self.config.backup_dir, backup_class, today)
        result = BackupRunResult(backup_class=backup_class, destination=destination)

        logger.info(f"Starting {backup_class.value} backup to {destination}")

        # Preflight
        status = self.space_guard.check(self.config.backup_dir, self.config.min_free_space_gb)
        if status == SpaceStatus.INSUFFICIENT:
            logger.error("Not enough space for backup. Aborting.")
            result.error = PreflightInsufficientSpaceError(
                f"Not enough free space on {self.config.backup_dir} "
                f"(need {self.config.min_free_space_gb}GB)",
                suggestions=create_error_suggestions("insufficient_space", path=self.config.backup_dir),
            )
            return result

        # Reclaim, never touching the generation this run writes to
        result.reclaim = self.retention.reclaim(
            class_root(self.config.backup_dir, backup_class),
            self.config.stop_backup_space_gb,
            pattern=backup_class.generation_pattern,
            keep=[os.path.basename(destination)],
        )
        if result.reclaim.exhausted:
            logger.warning("Could not free enough space; continuing with the backup anyway.")

        try:
            os.makedirs(destination, exist_ok=True)
        except OSError as e:
            message = f"Could not create backup destination directory: {destination}"
            logger.error(f"{message} ({e})")
            result.error = DestinationCreateError(
                message,
                details=str(e),
                suggestions=create_error_suggestions("permission_denied", path=destination),
            )
            return result

        if self.config.include_database:
            result.database = self.database_stage.backup(os.path.join(destination, DATABASES_SUBDIR))
            if not result.database.success:
                logger.error("Database backup failed. Continuing with file backup (if enabled).")
            elif result.database.failed:
                logger.warning(f"Database backup completed with failures: {', '.join(result.database.failed)}")
        else:
            logger.info("Database backup disabled, skipping")

        if self.config.include_site_files:
            result.files = self.file_stage.sync(
                self.config.home_dir,
                os.path.join(destination, HOME_FILES_SUBDIR),
                self.config.backup_option,
            )
            if not result.files.success:
                result.error = result.files.error
                logger.error(f"{backup_class.value.capitalize()} backup to {destination} failed.")
                return result
        else:
            logger.info("Site files backup disabled, skipping")

        result.success = True
        logger.info(f"{backup_class.value.capitalize()} backup completed: {destination}")
        return result
