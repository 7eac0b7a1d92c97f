"""Home directory sync stage built on rsync."""

import logging
import os
import subprocess
from typing import List, Optional

from ssbmanager.utils.errors import (
    DestinationCreateError,
    FileSyncError,
    create_error_suggestions,
)

from .models import SyncPolicy, SyncResult

logger = logging.getLogger(__name__)


class RsyncTool:
    """Runs rsync with the flags matching a SyncPolicy."""

    def __init__(self, rsync_bin: str = "rsync"):
        self.rsync_bin = rsync_bin

    def build_command(self, source_dir: str, dest_dir: str, policy: SyncPolicy) -> List[str]:
        """
        Build the rsync command line for ``policy``.

        Trailing slashes make rsync copy the contents of ``source_dir`` rather
        than the directory itself.
        """
        source = source_dir.rstrip("/") + "/"
        dest = dest_dir.rstrip("/") + "/"

        if policy == SyncPolicy.FULL:
            flags = ["-a", "-h", "--delete"]
        elif policy == SyncPolicy.ADDITIVE_ONLY:
            flags = ["-a", "-h", "--ignore-existing"]
        elif policy == SyncPolicy.CHANGED_ONLY:
            # dest is its own comparison base: only new or modified files move
            flags = ["-a", "-u", "-h", f"--compare-dest={os.path.abspath(dest_dir)}"]
        else:
            raise ValueError(f"Unsupported sync policy: {policy}")

        return [self.rsync_bin, *flags, source, dest]

    def sync(self, source_dir: str, dest_dir: str, policy: SyncPolicy) -> int:
        """
        Run rsync and return its exit code.

        Raises:
            FileSyncError: If rsync cannot be started or exits non-zero
        """
        cmd = self.build_command(source_dir, dest_dir, policy)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise FileSyncError(
                f"Could not run {self.rsync_bin}: {e}",
                suggestions=create_error_suggestions("rsync_failed"),
            ) from e

        if result.stdout:
            logger.debug(result.stdout.rstrip())

        if result.returncode != 0:
            raise FileSyncError(
                f"rsync exited with code {result.returncode}",
                details=result.stderr.strip() or None,
                suggestions=create_error_suggestions("rsync_failed"),
            )

        return result.returncode


class FileBackupStage:
    """Copies a source tree into a generation's ``home_files`` directory."""

    DESCRIPTIONS = {
        SyncPolicy.FULL: "Full backup",
        SyncPolicy.ADDITIVE_ONLY: "New files only backup",
        SyncPolicy.CHANGED_ONLY: "Backup based on file updates",
    }

    def __init__(self, tool: Optional[RsyncTool] = None):
        """
        Initialize file stage.

        Args:
            tool: Tree sync collaborator (defaults to rsync on PATH)
        """
        self.tool = tool or RsyncTool()

    def sync(self, source_dir: str, dest_dir: str, policy: SyncPolicy) -> SyncResult:
        """
        Sync ``source_dir`` into ``dest_dir`` according to ``policy``.

        Args:
            source_dir: Tree to back up
            dest_dir: Target directory inside the generation
            policy: FULL mirrors, ADDITIVE_ONLY never overwrites or deletes,
                CHANGED_ONLY copies new and updated files and never deletes

        Returns:
            SyncResult: success flag, rsync exit code and error if any
        """
        result = SyncResult(policy=policy, source_dir=source_dir, dest_dir=dest_dir)

        if not os.path.isdir(source_dir):
            message = f"Source directory does not exist: {source_dir}"
            logger.error(message)
            result.success = False
            result.error = FileSyncError(message)
            return result

        try:
            os.makedirs(dest_dir, exist_ok=True)
        except OSError as e:
            message = f"Could not create site files backup directory: {dest_dir}"
            logger.error(f"{message} ({e})")
            result.success = False
            result.error = DestinationCreateError(
                message,
                details=str(e),
                suggestions=create_error_suggestions("permission_denied", path=dest_dir),
            )
            return result

        logger.info(f"Backing up home directory: {source_dir} to {dest_dir}")
        if policy == SyncPolicy.CHANGED_ONLY:
            logger.warning(
                "'changed_only' copies new and modified files; it does not skip the run when nothing changed."
            )

        description = self.DESCRIPTIONS[policy]
        try:
            result.returncode = self.tool.sync(source_dir, dest_dir, policy)
        except FileSyncError as e:
            logger.error(f"{description} of {source_dir} failed: {e.message}")
            if e.details:
                logger.error(e.details)
            result.success = False
            result.error = e
            return result

        logger.info(f"{description} of {source_dir} completed successfully.")
        return result
