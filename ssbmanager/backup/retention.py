"""Disk-space driven eviction of old backup generations."""

import logging
import os
import re
import shutil
from typing import Callable, Iterable, List, Optional, Pattern

from ssbmanager.utils.errors import BackupError, ReclaimExhaustedError

from .models import ReclaimResult
from .space import SpaceGuard

logger = logging.getLogger(__name__)

# Matches any daily (8 digit) or weekly/monthly (6 digit) generation name
DEFAULT_GENERATION_PATTERN = r"\d{6}(\d{2})?"


def list_generations(root: str, pattern: Pattern) -> List[str]:
    """
    List generation directory names directly under ``root``, oldest first.

    Generation names are calendar keys, so name order is date order. A
    missing ``root`` has no generations.

    Args:
        root: Class root directory
        pattern: Compiled regex the whole name must match

    Returns:
        List[str]: Sorted directory names
    """
    try:
        entries = os.listdir(root)
    except FileNotFoundError:
        return []

    names = []
    for name in entries:
        path = os.path.join(root, name)
        if pattern.fullmatch(name) and os.path.isdir(path) and not os.path.islink(path):
            names.append(name)
    return sorted(names)


def remove_tree(path: str) -> None:
    """Delete a generation directory and everything below it."""
    shutil.rmtree(path)


class RetentionManager:
    """
    Frees disk space by deleting the oldest generations of a backup class.

    Deletion is greedy and irreversible: generations are removed one at a
    time, oldest first, until free space reaches the target or nothing is
    left to delete.
    """

    def __init__(
        self,
        space_guard: Optional[SpaceGuard] = None,
        lister: Callable[[str, Pattern], List[str]] = list_generations,
        remover: Callable[[str], None] = remove_tree,
    ):
        """
        Initialize retention manager.

        Args:
            space_guard: Free space source (defaults to a real SpaceGuard)
            lister: Returns sorted generation names under a root
            remover: Deletes one generation directory
        """
        self.space_guard = space_guard or SpaceGuard()
        self.lister = lister
        self.remover = remover

    def reclaim(
        self,
        class_root: str,
        min_free_gb: int,
        pattern=DEFAULT_GENERATION_PATTERN,
        keep: Iterable[str] = (),
    ) -> ReclaimResult:
        """
        Delete old generations under ``class_root`` until ``min_free_gb`` is free.

        Args:
            class_root: Directory holding the generations of one class
            min_free_gb: Free space target in GB
            pattern: Regex (string or compiled) a generation name must match
            keep: Generation names that must never be deleted

        Returns:
            ReclaimResult: Deleted names, final free space and whether the
            pool ran out before the target was met
        """
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        protected = set(keep)

        current_gb = self.space_guard.free_gb(class_root)
        result = ReclaimResult(free_gb=current_gb)

        if current_gb >= min_free_gb:
            logger.debug(f"Free space on {class_root} is {current_gb}GB, nothing to reclaim")
            return result

        logger.warning(
            f"Disk space low on {class_root} ({current_gb}GB). Attempting to delete oldest backups."
        )

        while current_gb < min_free_gb:
            candidates = [
                name
                for name in self.lister(class_root, pattern)
                if name not in protected and name not in result.removed
            ]

            if not candidates:
                message = f"No old backups found to delete in {class_root}."
                logger.error(message)
                result.exhausted = True
                result.error = ReclaimExhaustedError(
                    message,
                    details=f"Free space is {current_gb}GB, target is {min_free_gb}GB",
                )
                break

            oldest = os.path.join(class_root, candidates[0])
            logger.info(f"Deleting oldest backup: {oldest}")

            try:
                self.remover(oldest)
            except OSError as e:
                message = f"Failed to delete {oldest}: {e}"
                logger.error(message)
                result.errors.append(message)
                result.error = BackupError(message)
                break

            result.removed.append(candidates[0])
            current_gb = self.space_guard.free_gb(class_root)
            result.free_gb = current_gb
            logger.info(f"Free space after deletion: {current_gb}GB.")

        return result
