"""Test doubles shared by the backup tests."""

import os
import shutil

from ssbmanager.backup.space import KB_PER_GB
from ssbmanager.utils.errors import DatabaseDumpError, FileSyncError


class FakeDisk:
    """Free space that grows by a fixed amount for every generation removed."""

    def __init__(self, free_gb, freed_per_removal_gb=0):
        self.free_gb = free_gb
        self.freed_per_removal_gb = freed_per_removal_gb
        self.removed = []

    def free_space_kb(self, path):
        return self.free_gb * KB_PER_GB

    def remove_tree(self, path):
        shutil.rmtree(path)
        self.removed.append(os.path.basename(path))
        self.free_gb += self.freed_per_removal_gb


class FakeMySQLClient:
    """Catalog and dump collaborator that writes small SQL files."""

    def __init__(self, databases, failing=()):
        self.databases = list(databases)
        self.failing = set(failing)
        self.dumped = []

    def list_databases(self):
        return list(self.databases)

    def dump(self, name, dest_file):
        self.dumped.append(name)
        if name in self.failing:
            raise DatabaseDumpError(f"Failed to dump database: {name}")
        with open(dest_file, "w", encoding="utf-8") as f:
            f.write(f"-- dump of {name}\n")


class CopyTreeTool:
    """Sync collaborator standing in for rsync in orchestration tests."""

    def __init__(self, returncode=0):
        self.returncode = returncode
        self.calls = []

    def sync(self, source_dir, dest_dir, policy):
        self.calls.append((source_dir, dest_dir, policy))
        if self.returncode != 0:
            raise FileSyncError(f"rsync exited with code {self.returncode}")
        shutil.copytree(source_dir, dest_dir, dirs_exist_ok=True)
        return 0


def make_generations(root, names):
    """Create generation directories, each holding one file."""
    for name in names:
        path = os.path.join(root, name)
        os.makedirs(path)
        with open(os.path.join(path, "marker"), "w", encoding="utf-8") as f:
            f.write(name)


def write_file(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def read_file(path):
    with open(path, encoding="utf-8") as f:
        return f.read()
