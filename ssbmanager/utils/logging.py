"""Logging configuration for SSB-Manager."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration for the CLI.

    Every message goes to stdout and, when ``log_file`` is given, is appended
    to that file as well. A log file that cannot be opened only produces a
    warning; the run carries on with console logging.

    Args:
        verbose: Enable verbose/debug logging
        log_file: Optional log file path
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Errors inside handlers must never abort a backup
    logging.raiseExceptions = False

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # setup_logging may run twice (CLI start, then again once the config
    # names a log file), so replace the handlers installed last time
    for handler in list(root_logger.handlers):
        if getattr(handler, "_ssbmanager", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler._ssbmanager = True
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_dir = os.path.dirname(os.path.abspath(log_file))
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            root_logger.warning(f"Cannot open log file {log_file}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler._ssbmanager = True
            root_logger.addHandler(file_handler)
