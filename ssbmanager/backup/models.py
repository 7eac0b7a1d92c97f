"""Backup classes, sync options and the result values passed between stages."""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Pattern

from ssbmanager.utils.errors import (
    BackupError,
    InvalidBackupClassError,
    InvalidSyncPolicyError,
)


class BackupClass(Enum):
    """Backup cadence. Each class has its own generation root."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: str) -> "BackupClass":
        """Turn a command line word into a BackupClass."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidBackupClassError(
                f"Invalid backup type specified: {value}",
                suggestions=["Use one of: daily, weekly, monthly"],
            ) from None

    @property
    def key_format(self) -> str:
        """strftime format of the generation directory name."""
        return _KEY_FORMATS[self]

    @property
    def generation_pattern(self) -> Pattern:
        """Regex a directory name must fully match to count as a generation."""
        return _GENERATION_PATTERNS[self]

    def generation_name(self, day: date) -> str:
        return day.strftime(self.key_format)


# %W is the Monday-based week of the year, same as `date +%Y%W`
_KEY_FORMATS = {
    BackupClass.DAILY: "%Y%m%d",
    BackupClass.WEEKLY: "%Y%W",
    BackupClass.MONTHLY: "%Y%m",
}

_GENERATION_PATTERNS = {
    BackupClass.DAILY: re.compile(r"\d{8}"),
    BackupClass.WEEKLY: re.compile(r"\d{6}"),
    BackupClass.MONTHLY: re.compile(r"\d{6}"),
}


class SyncPolicy(Enum):
    """How the home directory is copied into a generation."""

    FULL = "full"
    ADDITIVE_ONLY = "new_files_only"
    CHANGED_ONLY = "changed_only"

    @classmethod
    def parse(cls, value: str) -> "SyncPolicy":
        """Turn a ``backup_option`` config value into a SyncPolicy."""
        text = str(value).strip().lower()
        if text == "no_file_updates":
            # spelling used by older config files
            return cls.CHANGED_ONLY
        try:
            return cls(text)
        except ValueError:
            raise InvalidSyncPolicyError(
                f"Invalid backup_option: {value}",
                suggestions=["Use one of: full, new_files_only, changed_only"],
            ) from None


class SpaceStatus(Enum):
    """Outcome of a free space check."""

    OK = "ok"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True)
class MySQLCredentials:
    """Login used for the catalog listing and every dump."""

    user: str
    password: str = ""
    host: Optional[str] = None
    port: Optional[int] = None

    def __repr__(self) -> str:
        return f"MySQLCredentials(user={self.user!r}, host={self.host!r}, port={self.port!r})"


@dataclass
class ReclaimResult:
    """What a reclaim pass deleted and where free space ended up."""

    free_gb: int
    removed: List[str] = field(default_factory=list)
    exhausted: bool = False
    errors: List[str] = field(default_factory=list)
    error: Optional[BackupError] = None


@dataclass
class DatabaseDumpResult:
    """Per-database outcome of the database stage."""

    dest_dir: str
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    error: Optional[BackupError] = None

    @property
    def success(self) -> bool:
        """False only when the stage itself could not run."""
        return self.error is None

    @property
    def has_warnings(self) -> bool:
        return bool(self.failed or self.errors)


@dataclass
class SyncResult:
    """Outcome of the file stage."""

    policy: SyncPolicy
    source_dir: str
    dest_dir: str
    success: bool = True
    returncode: Optional[int] = None
    error: Optional[BackupError] = None


@dataclass
class BackupRunResult:
    """Outcome of one backup class run."""

    backup_class: BackupClass
    destination: str
    success: bool = False
    error: Optional[BackupError] = None
    reclaim: Optional[ReclaimResult] = None
    database: Optional[DatabaseDumpResult] = None
    files: Optional[SyncResult] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1
