"""Error handling utilities for SSB-Manager."""

import sys
import traceback
from typing import List, Optional

import click


class SSBManagerError(Exception):
    """Base exception for SSB-Manager errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(SSBManagerError):
    """Raised when configuration is invalid or missing."""

    pass


class ConfigMissingError(ConfigurationError):
    """Raised when the configuration file does not exist."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str], path: Optional[str] = None):
        self.errors = errors
        self.path = path
        super().__init__(
            f"Configuration validation failed: {'; '.join(errors)}",
            details=format_validation_errors(errors),
            suggestions=create_error_suggestions("configuration_invalid"),
        )


class ValidationError(SSBManagerError):
    """Raised when a value is rejected at the boundary."""

    pass


class InvalidBackupClassError(ValidationError):
    """Raised for a backup class other than daily, weekly or monthly."""

    pass


class InvalidSyncPolicyError(ValidationError):
    """Raised for an unknown file sync option."""

    pass


class BackupError(SSBManagerError):
    """Base class for failures detected while a backup runs."""

    pass


class DestinationCreateError(BackupError):
    """Raised when a backup directory cannot be created."""

    pass


class PreflightInsufficientSpaceError(BackupError):
    """Raised when there is not enough free space to start a backup."""

    pass


class ReclaimExhaustedError(BackupError):
    """Raised when no generation is left to delete and space is still low."""

    pass


class DatabaseDumpError(BackupError):
    """Raised when listing or dumping a database fails."""

    pass


class FileSyncError(BackupError):
    """Raised when the file sync tool fails."""

    pass


class ErrorHandler:
    """Handles and formats errors for user-friendly display."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle and display error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Optional context about when/where error occurred
        """
        if isinstance(error, SSBManagerError):
            self._handle_ssbmanager_error(error, context)
        else:
            self._handle_generic_error(error, context)

    def _handle_ssbmanager_error(self, error: SSBManagerError, context: Optional[str]) -> None:
        """Handle SSB-Manager specific errors."""
        click.echo(f"✗ {error.message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if error.details:
            click.echo(f"Details: {error.details}", err=True)

        if error.suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in error.suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            self._print_traceback(error)

    def _handle_generic_error(self, error: Exception, context: Optional[str]) -> None:
        """Handle generic Python exceptions."""
        error_type = type(error).__name__

        if isinstance(error, FileNotFoundError):
            message = f"File not found: {error}"
            suggestions = [
                "Check that the file path is correct",
                "Ensure the file exists and is readable",
            ]
        elif isinstance(error, PermissionError):
            message = f"Permission denied: {error}"
            suggestions = [
                "Check file/directory permissions",
                "Try running as root (backups usually need it)",
            ]
        else:
            message = f"{error_type}: {error}"
            suggestions = []

        click.echo(f"✗ {message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            self._print_traceback(error)

    def _print_traceback(self, error: Exception) -> None:
        # Run results carry errors that were never raised
        if error.__traceback__ is None:
            return
        click.echo("\nFull traceback:", err=True)
        traceback.print_exception(type(error), error, error.__traceback__)

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Handle error and exit with specified code."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information (``config_path``, ``path``)

    Returns:
        list: List of suggestion strings
    """
    config_path = kwargs.get("config_path", "the configuration file")
    path = kwargs.get("path", "the backup directory")

    suggestions = {
        "config_missing": [
            "Run 'ssb-manager install' to create a default configuration",
            f"Or point --config at an existing file instead of {config_path}",
        ],
        "configuration_invalid": [
            "Check YAML syntax in the configuration file",
            "Verify all required fields are present",
            "stop_backup_space_gb must be lower than min_free_space_gb",
        ],
        "insufficient_space": [
            f"Free up space on the filesystem holding {path}",
            "Delete old generations manually or lower min_free_space_gb",
        ],
        "permission_denied": [
            f"Check permissions on {path}",
            "Run the backup as a user that can write there",
        ],
        "rsync_failed": [
            "Check that rsync is installed and on PATH",
            "Run the rsync command by hand to see its full output",
        ],
        "mysql_failed": [
            "Check the MySQL credentials in the configuration file",
            "Verify that the MySQL server is running",
        ],
    }

    return suggestions.get(error_type, [])


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
