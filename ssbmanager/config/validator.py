"""Configuration validation for SSB-Manager."""

from typing import Any, Dict, List

import jsonschema

from .schemas import CONFIG_SCHEMA


class ConfigValidator:
    """Validates SSB-Manager configuration files."""

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate a loaded configuration.

        Args:
            config: Configuration dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = []

        validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
        for error in sorted(validator.iter_errors(config), key=lambda e: list(e.path)):
            location = ".".join(str(part) for part in error.path)
            if location:
                errors.append(f"{location}: {error.message}")
            else:
                errors.append(error.message)

        if errors:
            return errors

        errors.extend(self._validate_thresholds(config))
        errors.extend(self._validate_mysql(config))
        errors.extend(self._validate_paths(config))

        return errors

    def _validate_thresholds(self, config: Dict[str, Any]) -> List[str]:
        """Eviction must start below the level a backup needs to start."""
        min_free = config["min_free_space_gb"]
        stop = config["stop_backup_space_gb"]

        if stop >= min_free:
            return [
                f"stop_backup_space_gb ({stop}) must be lower than min_free_space_gb ({min_free})"
            ]
        return []

    def _validate_mysql(self, config: Dict[str, Any]) -> List[str]:
        if not config.get("include_database", True):
            return []

        mysql = config.get("mysql") or {}
        if not mysql.get("user"):
            return ["mysql.user is required when include_database is true"]
        return []

    def _validate_paths(self, config: Dict[str, Any]) -> List[str]:
        errors = []
        for key in ("backup_dir", "home_dir"):
            if not config[key].startswith("/"):
                errors.append(f"{key} must be an absolute path: {config[key]}")
        return errors
