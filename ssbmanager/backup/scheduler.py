"""Cron scheduling instructions for backup runs."""

import os
import shutil
import sys
from typing import Dict, List, Optional

from .models import BackupClass

DEFAULT_SCHEDULES = {
    BackupClass.DAILY: "0 2 * * *",  # Every day at 2 AM
    BackupClass.WEEKLY: "0 3 * * 0",  # Every Sunday at 3 AM
    BackupClass.MONTHLY: "0 4 1 * *",  # First day of every month at 4 AM
}

DESCRIPTIONS = {
    BackupClass.DAILY: "Daily Backup (e.g., every day at 2 AM)",
    BackupClass.WEEKLY: "Weekly Backup (e.g., every Sunday at 3 AM)",
    BackupClass.MONTHLY: "Monthly Backup (e.g., first day of every month at 4 AM)",
}


class BackupScheduler:
    """Builds the crontab lines that run each backup class."""

    def __init__(
        self,
        schedules: Optional[Dict[BackupClass, str]] = None,
        executable: Optional[str] = None,
        log_dir: str = "/var/log",
        config_path: Optional[str] = None,
    ):
        """
        Initialize backup scheduler.

        Args:
            schedules: Cron expression per class (defaults to DEFAULT_SCHEDULES)
            executable: Command cron runs (defaults to the installed ssb-manager)
            log_dir: Directory for the per-class cron output logs
            config_path: Config file passed with --config, if not the default
        """
        self.schedules = dict(DEFAULT_SCHEDULES)
        if schedules:
            self.schedules.update(schedules)
        self.executable = executable or self.find_executable()
        self.log_dir = log_dir
        self.config_path = config_path

    @staticmethod
    def find_executable() -> str:
        """Absolute path of the ssb-manager command."""
        found = shutil.which("ssb-manager")
        if found:
            return os.path.realpath(found)
        return os.path.realpath(sys.argv[0])

    def cron_line(self, backup_class: BackupClass) -> str:
        """Crontab line for one backup class."""
        command = self.executable
        if self.config_path:
            command += f" --config {self.config_path}"
        log_file = os.path.join(self.log_dir, f"ssb-manager-{backup_class.value}.log")
        return f"{self.schedules[backup_class]} {command} {backup_class.value} >> {log_file} 2>&1"

    def cron_entries(self) -> List[str]:
        """Commented crontab block covering every backup class."""
        entries = []
        for backup_class in BackupClass:
            entries.append(f"# {DESCRIPTIONS[backup_class]}")
            entries.append(self.cron_line(backup_class))
            entries.append("")
        return entries[:-1]

    def instructions(self) -> List[str]:
        """Lines printed by ``ssb-manager install``."""
        lines = [
            "--- Setting up Cron Jobs ---",
            "Please add the following lines to your cron table to schedule backups:",
            "Edit cron with: crontab -e",
            "",
        ]
        lines.extend(self.cron_entries())
        return lines
