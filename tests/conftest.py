"""Pytest configuration and shared fixtures."""

import logging
import os
import shutil
import tempfile

import pytest

from ssbmanager.backup.models import MySQLCredentials, SyncPolicy
from ssbmanager.config.settings import BackupConfig


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    # Cleanup
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolate_filesystem(temp_directory, monkeypatch):
    """Isolate filesystem operations to temporary directory."""
    monkeypatch.chdir(temp_directory)
    monkeypatch.delenv("SSB_MANAGER_CONFIG", raising=False)
    return temp_directory


@pytest.fixture
def backup_root(temp_directory):
    """Empty main backup directory."""
    path = os.path.join(temp_directory, "backups")
    os.makedirs(path)
    return path


@pytest.fixture
def home_dir(temp_directory):
    """Source tree holding a single file, a.txt."""
    path = os.path.join(temp_directory, "home")
    os.makedirs(path)
    with open(os.path.join(path, "a.txt"), "w", encoding="utf-8") as f:
        f.write("hello\n")
    return path


@pytest.fixture
def sample_config_dict(backup_root, home_dir, temp_directory):
    """Configuration as read from YAML."""
    return {
        "backup_dir": backup_root,
        "home_dir": home_dir,
        "log_file": os.path.join(temp_directory, "ssb-manager.log"),
        "min_free_space_gb": 15,
        "stop_backup_space_gb": 5,
        "include_database": True,
        "include_site_files": True,
        "backup_option": "full",
        "mysql": {"user": "backup", "password": "secret"},
    }


@pytest.fixture
def backup_config(backup_root, home_dir, temp_directory):
    """Immutable settings for orchestration tests."""
    return BackupConfig(
        backup_dir=backup_root,
        home_dir=home_dir,
        min_free_space_gb=15,
        stop_backup_space_gb=5,
        log_file=os.path.join(temp_directory, "ssb-manager.log"),
        include_database=True,
        include_site_files=True,
        backup_option=SyncPolicy.FULL,
        mysql=MySQLCredentials(user="backup", password="secret"),
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handlers setup_logging installed during a test."""
    yield
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_ssbmanager", False):
            root_logger.removeHandler(handler)
            handler.close()
