"""MySQL dump stage: one consistent ``.sql`` file per user database."""

import logging
import os
import subprocess
from typing import Dict, List

from ssbmanager.utils.errors import (
    DatabaseDumpError,
    DestinationCreateError,
    create_error_suggestions,
)

from .models import DatabaseDumpResult, MySQLCredentials

logger = logging.getLogger(__name__)

# Server-internal schemas, never dumped
SYSTEM_DATABASES = frozenset({"information_schema", "performance_schema", "mysql", "sys"})


class MySQLClient:
    """Thin wrapper around the ``mysql`` and ``mysqldump`` command line tools."""

    def __init__(
        self,
        credentials: MySQLCredentials,
        mysql_bin: str = "mysql",
        mysqldump_bin: str = "mysqldump",
    ):
        """
        Initialize MySQL client.

        Args:
            credentials: Login for the server
            mysql_bin: Path or name of the mysql client
            mysqldump_bin: Path or name of mysqldump
        """
        self.credentials = credentials
        self.mysql_bin = mysql_bin
        self.mysqldump_bin = mysqldump_bin

    def _connection_args(self) -> List[str]:
        args = [f"--user={self.credentials.user}"]
        if self.credentials.host:
            args.append(f"--host={self.credentials.host}")
        if self.credentials.port:
            args.append(f"--port={self.credentials.port}")
        return args

    def _env(self) -> Dict[str, str]:
        # Keeps the password out of the process list
        env = os.environ.copy()
        env.pop("MYSQL_PWD", None)
        if self.credentials.password:
            env["MYSQL_PWD"] = self.credentials.password
        return env

    def list_databases(self) -> List[str]:
        """
        List every database on the server, in server order.

        Raises:
            DatabaseDumpError: If the catalog cannot be read
        """
        cmd = [self.mysql_bin, *self._connection_args(), "-N", "-B", "-e", "SHOW DATABASES"]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=self._env())
        except OSError as e:
            raise DatabaseDumpError(
                f"Could not run {self.mysql_bin}: {e}",
                suggestions=create_error_suggestions("mysql_failed"),
            ) from e

        if result.returncode != 0:
            raise DatabaseDumpError(
                "Could not list MySQL databases",
                details=result.stderr.strip() or f"exit code {result.returncode}",
                suggestions=create_error_suggestions("mysql_failed"),
            )

        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def dump(self, name: str, dest_file: str) -> None:
        """
        Dump one database to ``dest_file`` inside a single transaction.

        Raises:
            DatabaseDumpError: If mysqldump fails or cannot be started
        """
        cmd = [self.mysqldump_bin, *self._connection_args(), "--single-transaction", name]

        try:
            with open(dest_file, "w", encoding="utf-8") as out:
                result = subprocess.run(cmd, stdout=out, stderr=subprocess.PIPE, text=True, env=self._env())
        except OSError as e:
            raise DatabaseDumpError(f"Failed to dump database {name}: {e}") from e

        if result.returncode != 0:
            raise DatabaseDumpError(
                f"Failed to dump database: {name}",
                details=result.stderr.strip() or f"exit code {result.returncode}",
            )


def filter_user_databases(names: List[str]) -> List[str]:
    """Drop the server's own schemas, keeping the listing order."""
    return [name for name in names if name not in SYSTEM_DATABASES]


class DatabaseBackupStage:
    """Dumps every user database into a generation's ``databases`` directory."""

    def __init__(self, client: MySQLClient):
        """
        Initialize database stage.

        Args:
            client: Catalog and dump collaborator
        """
        self.client = client

    def backup(self, dest_dir: str) -> DatabaseDumpResult:
        """
        Dump all user databases into ``dest_dir``.

        Each database is attempted exactly once and a failed dump does not
        stop the others. Only a ``dest_dir`` that cannot be created fails the
        stage as a whole.

        Args:
            dest_dir: Directory receiving ``<db>.sql`` files

        Returns:
            DatabaseDumpResult: Succeeded and failed database names
        """
        result = DatabaseDumpResult(dest_dir=dest_dir)

        try:
            os.makedirs(dest_dir, exist_ok=True)
        except OSError as e:
            message = f"Could not create database backup directory: {dest_dir}"
            logger.error(f"{message} ({e})")
            result.error = DestinationCreateError(
                message,
                details=str(e),
                suggestions=create_error_suggestions("permission_denied", path=dest_dir),
            )
            return result

        logger.info("Backing up MySQL databases...")

        try:
            databases = filter_user_databases(self.client.list_databases())
        except DatabaseDumpError as e:
            logger.error(f"{e.message}: {e.details}" if e.details else e.message)
            result.errors.append(e.message)
            return result

        if not databases:
            logger.warning("No user databases found to back up")

        for name in databases:
            dest_file = os.path.join(dest_dir, f"{name}.sql")
            logger.info(f"Dumping database: {name}")

            try:
                self.client.dump(name, dest_file)
            except DatabaseDumpError as e:
                logger.error(f"{e.message}: {e.details}" if e.details else e.message)
                result.failed.append(name)
                result.errors.append(e.message)
                self._discard_partial(dest_file)
                continue

            logger.info(f"Successfully dumped {name} to {dest_file}")
            result.succeeded.append(name)

        logger.info(
            f"Database backup finished: {len(result.succeeded)} dumped, {len(result.failed)} failed"
        )
        return result

    def _discard_partial(self, dest_file: str) -> None:
        """Remove what a failed dump left behind."""
        try:
            os.remove(dest_file)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial dump {dest_file}: {e}")
