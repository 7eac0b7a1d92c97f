"""Configuration management for SSB-Manager."""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import Environment, FileSystemLoader

from ssbmanager import __version__
from ssbmanager.backup.scheduler import DEFAULT_SCHEDULES
from ssbmanager.utils.errors import (
    ConfigMissingError,
    ConfigurationError,
    ConfigValidationError,
    create_error_suggestions,
)

from .settings import DEFAULT_CONFIG_PATH, DEFAULT_LOG_FILE, BackupConfig
from .validator import ConfigValidator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SSB_MANAGER_CONFIG"

TEMPLATE_DEFAULTS = {
    "backup_dir": "/var/backups/ssb-manager",
    "home_dir": "/home",
    "log_file": DEFAULT_LOG_FILE,
    "min_free_space_gb": 20,
    "stop_backup_space_gb": 10,
    "include_database": True,
    "include_site_files": True,
    "backup_option": "full",
    "mysql_user": "root",
    "mysql_password": "your_mysql_root_password",
    "mysql_host": None,
    "schedule": {backup_class.value: expr for backup_class, expr in DEFAULT_SCHEDULES.items()},
}


class ConfigManager:
    """Loads, validates and creates the SSB-Manager configuration file."""

    def __init__(self, path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            path: Config file path (defaults to $SSB_MANAGER_CONFIG, then
                /etc/ssb-manager/ssb-manager.yml)
        """
        self.path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
        self.validator = ConfigValidator()

        templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
        self.jinja_env = Environment(loader=FileSystemLoader(templates_dir), trim_blocks=True, lstrip_blocks=True)

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def load_raw(self) -> Dict[str, Any]:
        """
        Read the YAML file without validating it.

        Raises:
            ConfigMissingError: If the file does not exist
            ConfigurationError: If the YAML cannot be parsed
        """
        if not self.exists():
            raise ConfigMissingError(
                f"Configuration file not found: {self.path}",
                suggestions=create_error_suggestions("config_missing", config_path=self.path),
            )

        try:
            with open(self.path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Error parsing YAML file {self.path}",
                details=str(e),
                suggestions=create_error_suggestions("configuration_invalid"),
            ) from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {self.path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigValidationError(["top level of the file must be a mapping"], path=self.path)

        return config

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """Return validation errors for ``config`` (empty if valid)."""
        return self.validator.validate_config(config)

    def load_config(self) -> BackupConfig:
        """
        Load and validate the configuration file.

        Returns:
            BackupConfig: Immutable settings for the run

        Raises:
            ConfigMissingError: If the file does not exist
            ConfigValidationError: If validation fails
        """
        raw = self.load_raw()

        errors = self.validate_config(raw)
        if errors:
            raise ConfigValidationError(errors, path=self.path)

        config = BackupConfig.from_dict(raw)
        logger.debug(f"Loaded configuration from {self.path}")
        return config

    def render_default_config(self, template_vars: Optional[Dict[str, Any]] = None) -> str:
        """
        Render the default configuration file from its template.

        Args:
            template_vars: Values overriding TEMPLATE_DEFAULTS

        Returns:
            str: YAML text
        """
        context = dict(TEMPLATE_DEFAULTS)
        context.update(template_vars or {})
        context["version"] = __version__

        template = self.jinja_env.get_template("ssb-manager.yml.j2")
        return template.render(**context)

    def initialize_config(self, template_vars: Optional[Dict[str, Any]] = None) -> str:
        """
        Write the default configuration file.

        The file holds the MySQL password, so it is readable by its owner only.

        Args:
            template_vars: Values overriding TEMPLATE_DEFAULTS

        Returns:
            str: Path to created configuration file
        """
        content = self.render_default_config(template_vars)

        config_dir = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(config_dir, exist_ok=True)

        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(self.path, 0o600)

        return self.path
