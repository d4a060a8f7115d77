"""
Centralized logging configuration for the climate report package.

Every module logs through ``create_logger(__name__)``: coloured console
output, plus a plain-text file when a log directory or file is given.
Fatal report errors go through ``log_exception``, which names the
failing stage and points at the input most likely to be at fault.
"""

import logging
import os
import sys
from typing import Optional, Union

import colorlog

from climate_report.exceptions import (
    ConfigurationError,
    MalformedYearLabel,
    ReshapeError,
    SchemaValidationError,
    SourceFileError,
)

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CONSOLE_FORMAT = "%(log_color)s[%(levelname)s]%(reset)s %(blue)s[%(name)s]%(reset)s %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Checked in order, first match wins
ERROR_HINTS = (
    (MalformedYearLabel, "Rename or drop the non-year column in the indicator CSV header"),
    (SchemaValidationError, "Compare the CSV headers and country codes with the expected layout"),
    (SourceFileError, "Check INDICATORS_CSV / COUNTRIES_CSV or the --indicators/--countries paths"),
    (ConfigurationError, "Review YEAR_START, YEAR_END, MAP_YEAR and TABLE_YEARS in the environment"),
    (ReshapeError, "Check that the selected records are not empty"),
)


def create_logger(
    name: Optional[str] = None,
    log_level: Union[int, str] = DEFAULT_LOG_LEVEL,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
):
    """
    Create a color-coded logger with optional file logging.

    :param name: Name of the logger (typically __name__)
    :param log_level: Logging level (default: LOG_LEVEL env var or INFO)
    :param log_dir: Directory to store log files (optional)
    :param log_file: Specific log file name (optional)
    :return: Configured logger instance
    """
    logger = colorlog.getLogger(name or "climate_report")
    logger.setLevel(log_level)
    logger.propagate = False

    # Re-creating a logger replaces its handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LOG_COLORS)
    )
    logger.addHandler(console_handler)

    if log_dir or log_file:
        logger.addHandler(_file_handler(name, log_level, log_dir, log_file))

    return logger


def _file_handler(
    name: Optional[str],
    log_level: Union[int, str],
    log_dir: Optional[str],
    log_file: Optional[str],
) -> logging.Handler:
    path = log_file or f"{name or 'climate_report'}.log"
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        path = os.path.join(log_dir, path)

    handler = logging.FileHandler(path)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def log_exception(logger, e, context=None):
    """
    Log a fatal error with its context and a hint for the failing input.

    :param logger: Logger instance
    :param e: Exception object
    :param context: Optional mapping of context fields (e.g. stage, path)
    """
    logger.critical(f"Error Type: {type(e).__name__}")
    logger.critical(f"Error Details: {str(e)}")

    for key, value in (context or {}).items():
        logger.critical(f"Context {key}: {value}")

    for error_type, hint in ERROR_HINTS:
        if isinstance(e, error_type):
            logger.critical(f"Hint: {hint}")
            break
