"""Free space measurement for the backup filesystem."""

import logging
import os
from typing import Callable

from .models import SpaceStatus

logger = logging.getLogger(__name__)

KB_PER_GB = 1024 * 1024


def free_space_kb(path: str) -> int:
    """
    Return the space available to unprivileged users on ``path``'s filesystem, in KB.

    This is the "Available" column of ``df -k``. A path that does not exist
    yet is measured through its nearest existing parent.

    Args:
        path: Any path on the filesystem to measure

    Returns:
        int: Available kilobytes
    """
    path = os.path.abspath(path)
    while not os.path.exists(path):
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent

    stats = os.statvfs(path)
    return stats.f_bavail * stats.f_frsize // 1024


class SpaceGuard:
    """Checks free space against the backup thresholds."""

    def __init__(self, free_space_kb: Callable[[str], int] = free_space_kb):
        """
        Initialize space guard.

        Args:
            free_space_kb: Callable returning available KB for a path
        """
        self._free_space_kb = free_space_kb

    def free_gb(self, path: str) -> int:
        """Free space on ``path`` in whole GB, sub-GB remainders dropped."""
        return self._free_space_kb(path) // KB_PER_GB

    def check(self, path: str, required_gb: int) -> SpaceStatus:
        """
        Compare free space on ``path`` with ``required_gb``.

        Exactly ``required_gb`` free is enough. Nothing is reserved: a later
        measurement may see less space if other processes write meanwhile.

        Args:
            path: Path on the filesystem to check
            required_gb: Minimum free space in GB

        Returns:
            SpaceStatus: OK or INSUFFICIENT
        """
        available_gb = self.free_gb(path)

        if available_gb < required_gb:
            logger.error(
                f"Not enough free space on {path}. Required: {required_gb}GB, Available: {available_gb}GB."
            )
            return SpaceStatus.INSUFFICIENT

        logger.info(f"Free space on {path}: {available_gb}GB. Required: {required_gb}GB.")
        return SpaceStatus.OK
