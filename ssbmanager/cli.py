"""Main CLI entry point for SSB-Manager.

``ssb-manager daily|weekly|monthly`` runs one backup class against the
configuration file; ``ssb-manager install`` writes a default configuration
and prints the crontab lines that schedule the three classes. The exit code is
0 on success and non-zero on any failure, so cron mail and monitoring can rely
on it.
"""

import logging
import os
from typing import Optional

import click

from ssbmanager import __version__
from ssbmanager.utils.errors import ErrorHandler, SSBManagerError
from ssbmanager.utils.logging import setup_logging

logger = logging.getLogger(__name__)

USAGE_HINT = "Usage: ssb-manager [daily|weekly|monthly|install]"


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_path",
    envvar="SSB_MANAGER_CONFIG",
    help="Configuration file (default: /etc/ssb-manager/ssb-manager.yml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-file", help="Log to this file instead of the configured log_file")
@click.pass_context
def cli(
    ctx: click.Context, config_path: Optional[str], verbose: bool, log_file: Optional[str]
) -> None:
    """SSB-Manager - scheduled MySQL and home directory backups.

    Each run writes a dated generation under the backup directory and deletes
    the oldest generations of the same class when disk space runs low.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    ctx.obj["log_file"] = log_file
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    # Console only until the configuration names a log file
    setup_logging(verbose=verbose, log_file=log_file)

    if ctx.invoked_subcommand is None:
        click.echo(f"✗ No backup type specified. {USAGE_HINT}", err=True)
        ctx.exit(1)


def _run_backup(ctx: click.Context, backup_type: str) -> None:
    """Load the configuration, run one backup class and exit with its status."""
    from ssbmanager.backup import BackupClass, BackupOrchestrator
    from ssbmanager.config import ConfigManager

    error_handler: ErrorHandler = ctx.obj["error_handler"]

    try:
        backup_class = BackupClass.parse(backup_type)
        config_manager = ConfigManager(ctx.obj["config_path"])
        config = config_manager.load_config()
    except SSBManagerError as e:
        error_handler.exit_with_error(e, context=f"{backup_type} backup")

    setup_logging(verbose=ctx.obj["verbose"], log_file=ctx.obj["log_file"] or config.log_file)
    logger.info(f"SSB-Manager {__version__}: {backup_class.value} backup using {config_manager.path}")

    try:
        os.makedirs(config.backup_dir, exist_ok=True)
    except OSError as e:
        logger.critical(f"Could not create main backup directory: {config.backup_dir}. Exiting. ({e})")
        ctx.exit(1)

    result = BackupOrchestrator(config).run(backup_class)

    if not result.success:
        error_handler.handle_error(result.error, context=f"{backup_class.value} backup")
    elif result.database is not None and result.database.has_warnings:
        click.echo(f"⚠ {backup_class.value} backup completed with database warnings: {result.destination}")
    else:
        click.echo(f"✓ {backup_class.value} backup completed: {result.destination}")

    ctx.exit(result.exit_code)


@cli.command()
@click.pass_context
def daily(ctx: click.Context) -> None:
    """Run the daily backup (generation YYYYMMDD)."""
    _run_backup(ctx, "daily")


@cli.command()
@click.pass_context
def weekly(ctx: click.Context) -> None:
    """Run the weekly backup (generation YYYYWW)."""
    _run_backup(ctx, "weekly")


@cli.command()
@click.pass_context
def monthly(ctx: click.Context) -> None:
    """Run the monthly backup (generation YYYYMM)."""
    _run_backup(ctx, "monthly")


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
@click.pass_context
def install(ctx: click.Context, force: bool) -> None:
    """Create the configuration file and print cron scheduling lines.

    An existing configuration file is kept unless --force is given. No backup
    is run.
    """
    from ssbmanager.backup import BackupScheduler
    from ssbmanager.config import ConfigManager

    error_handler: ErrorHandler = ctx.obj["error_handler"]
    config_manager = ConfigManager(ctx.obj["config_path"])

    click.echo("--- Installing SSB-Manager ---")

    if config_manager.exists() and not force:
        logger.warning(f"Configuration file already exists at {config_manager.path}. Skipping creation.")
    else:
        try:
            config_path = config_manager.initialize_config()
        except OSError as e:
            error_handler.exit_with_error(e, context="install")
        logger.info(f"Configuration file created. Please review and edit {config_path}.")
        logger.info("Remember to change 'your_mysql_root_password' in the config file!")

    scheduler = BackupScheduler(
        schedules=_configured_schedules(config_manager),
        config_path=config_manager.path if ctx.obj["config_path"] else None,
    )

    click.echo("")
    for line in scheduler.instructions():
        click.echo(line)
    click.echo("")
    click.echo("--- Installation Complete ---")
    click.echo(f"Remember to customize {config_manager.path} and set up cron jobs.")


def _configured_schedules(config_manager) -> dict:
    """Cron expressions from the config file, or none if it cannot be read."""
    from ssbmanager.config import BackupConfig

    try:
        raw = config_manager.load_raw()
        errors = config_manager.validate_config(raw)
        if errors:
            logger.warning(f"Using default schedules, {config_manager.path} is invalid: {'; '.join(errors)}")
            return {}
        return BackupConfig.from_dict(raw).schedule
    except SSBManagerError as e:
        logger.warning(f"Using default schedules: {e.message}")
        return {}


if __name__ == "__main__":
    cli()
