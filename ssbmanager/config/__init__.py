"""Configuration management for SSB-Manager."""

from .manager import ConfigManager
from .schemas import CONFIG_SCHEMA
from .settings import BackupConfig

__all__ = ["BackupConfig", "ConfigManager", "CONFIG_SCHEMA"]
