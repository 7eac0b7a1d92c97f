"""Tests for generation eviction."""

import os
import re

from helpers import FakeDisk, make_generations

from ssbmanager.backup.models import BackupClass
from ssbmanager.backup.retention import RetentionManager, list_generations
from ssbmanager.backup.space import SpaceGuard
from ssbmanager.utils.errors import ReclaimExhaustedError


def make_manager(disk):
    return RetentionManager(
        space_guard=SpaceGuard(free_space_kb=disk.free_space_kb),
        remover=disk.remove_tree,
    )


class TestListGenerations:
    """Test generation discovery."""

    def test_sorted_oldest_first(self, backup_root):
        """Test that names come back in date order."""
        make_generations(backup_root, ["20240503", "20240501", "20240502"])

        names = list_generations(backup_root, BackupClass.DAILY.generation_pattern)

        assert names == ["20240501", "20240502", "20240503"]

    def test_ignores_non_matching_entries(self, backup_root):
        """Test that only directories with generation names count."""
        make_generations(backup_root, ["20240501", "backup_old", "2024050", "202405011"])
        with open(os.path.join(backup_root, "20240502"), "w") as f:
            f.write("not a directory")

        names = list_generations(backup_root, BackupClass.DAILY.generation_pattern)

        assert names == ["20240501"]

    def test_missing_root_has_no_generations(self, temp_directory):
        """Test that a class root that does not exist lists as empty."""
        missing = os.path.join(temp_directory, "weekly")

        assert list_generations(missing, re.compile(r"\d{6}")) == []


class TestRetentionManager:
    """Test reclaim behaviour."""

    def test_no_deletion_when_space_is_sufficient(self, backup_root):
        """Test that nothing is removed above the threshold."""
        make_generations(backup_root, ["20240501", "20240502"])
        disk = FakeDisk(free_gb=10)

        result = make_manager(disk).reclaim(backup_root, 5)

        assert result.removed == []
        assert not result.exhausted
        assert sorted(os.listdir(backup_root)) == ["20240501", "20240502"]

    def test_deletes_oldest_first(self, backup_root):
        """Test that two deletions remove exactly the two oldest generations."""
        make_generations(backup_root, ["20240501", "20240502", "20240503"])
        disk = FakeDisk(free_gb=1, freed_per_removal_gb=2)

        result = make_manager(disk).reclaim(backup_root, 5)

        assert result.removed == ["20240501", "20240502"]
        assert os.listdir(backup_root) == ["20240503"]
        assert result.free_gb == 5
        assert not result.exhausted

    def test_stops_when_threshold_crossed(self, backup_root):
        """Test the scenario of 4GB free, 5GB target and 2GB per generation."""
        make_generations(backup_root, ["20240501", "20240502", "20240503"])
        disk = FakeDisk(free_gb=4, freed_per_removal_gb=2)

        result = make_manager(disk).reclaim(backup_root, 5)

        assert result.removed == ["20240501"]
        assert result.free_gb == 6
        assert sorted(os.listdir(backup_root)) == ["20240502", "20240503"]

    def test_terminates_when_generations_exhausted(self, backup_root):
        """Test that reclaim stops once every generation is gone."""
        make_generations(backup_root, ["20240501", "20240502", "20240503"])
        disk = FakeDisk(free_gb=0, freed_per_removal_gb=1)

        result = make_manager(disk).reclaim(backup_root, 100)

        assert result.removed == ["20240501", "20240502", "20240503"]
        assert result.exhausted
        assert isinstance(result.error, ReclaimExhaustedError)
        assert os.listdir(backup_root) == []

    def test_iterations_bounded_when_remover_frees_nothing(self, backup_root):
        """Test that a remover that leaves directories behind cannot loop forever."""
        make_generations(backup_root, ["20240501", "20240502"])
        calls = []

        manager = RetentionManager(
            space_guard=SpaceGuard(free_space_kb=lambda path: 0),
            remover=calls.append,
        )
        result = manager.reclaim(backup_root, 5)

        assert len(calls) == 2
        assert result.exhausted

    def test_missing_class_root_exits_immediately(self, temp_directory, caplog):
        """Test that a class root that does not exist is reported, not fatal."""
        missing = os.path.join(temp_directory, "monthly")
        disk = FakeDisk(free_gb=1)

        result = make_manager(disk).reclaim(missing, 5, pattern=BackupClass.MONTHLY.generation_pattern)

        assert result.removed == []
        assert result.exhausted
        assert "No old backups found to delete" in caplog.text

    def test_keep_protects_current_generation(self, backup_root):
        """Test that a protected name is never deleted."""
        make_generations(backup_root, ["20240501", "20240502"])
        disk = FakeDisk(free_gb=0, freed_per_removal_gb=1)

        result = make_manager(disk).reclaim(backup_root, 10, keep=["20240501"])

        assert result.removed == ["20240502"]
        assert os.listdir(backup_root) == ["20240501"]
        assert result.exhausted

    def test_remove_failure_stops_loop(self, backup_root):
        """Test that a failed deletion is recorded and ends the pass."""
        make_generations(backup_root, ["20240501", "20240502"])

        def failing_remover(path):
            raise PermissionError("read-only filesystem")

        manager = RetentionManager(
            space_guard=SpaceGuard(free_space_kb=lambda path: 0),
            remover=failing_remover,
        )
        result = manager.reclaim(backup_root, 5)

        assert result.removed == []
        assert len(result.errors) == 1
        assert "read-only filesystem" in result.errors[0]
        assert sorted(os.listdir(backup_root)) == ["20240501", "20240502"]
