"""
Logging Configuration Module.

All reader modules log under the ``invoice_reader`` namespace. The CLI
configures that namespace once from the ``logging.*`` settings; a library
caller that never does gets the stdlib default (warnings to stderr).

Console output has colored level names; the optional log file is plain
text with rotation.

Usage:
    from invoice_reader.utils.logger import setup_logger_from_config, get_logger

    setup_logger_from_config()
    logger = get_logger(__name__)
    logger.info("Parsed invoice text: 7 lines, 2 items")
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

import colorama
from colorama import Fore, Style

colorama.init()

ROOT_LOGGER_NAME = "invoice_reader"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class ColoredFormatter(logging.Formatter):
    """
    Console formatter that colors the level name.

    Only ``levelname`` is wrapped in color codes, so the message itself
    (OCR lines, file names) stays readable when piped to a file.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _file_handler(
    log_file: Union[str, Path],
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int
) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    level: Union[str, int] = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the ``invoice_reader`` logger.

    Calling it again replaces the previous handlers (closing them first),
    so a test or a second CLI run never logs twice.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level.
        log_format: Record format. Defaults to DEFAULT_FORMAT.
        date_format: Timestamp format. Defaults to DEFAULT_DATE_FORMAT.
        log_file: Rotating log file path. If None, file logging is disabled.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        colorize: Color level names on the console.

    Returns:
        The configured ``invoice_reader`` logger.

    Example:
        >>> setup_logger(level="DEBUG", log_file="logs/reader.log")
    """
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT
    numeric_level = _resolve_level(level)

    reader_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(reader_logger.handlers):
        reader_logger.removeHandler(handler)
        handler.close()

    formatter_class = ColoredFormatter if colorize else logging.Formatter
    reader_logger.addHandler(
        _console_handler(numeric_level, formatter_class(log_format, datefmt=date_format))
    )

    if log_file:
        reader_logger.addHandler(_file_handler(
            log_file,
            numeric_level,
            logging.Formatter(log_format, datefmt=date_format),
            max_bytes,
            backup_count
        ))

    reader_logger.setLevel(numeric_level)
    reader_logger.propagate = False

    reader_logger.debug(f"Logging initialized at {logging.getLevelName(numeric_level)}")
    return reader_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger under the ``invoice_reader`` namespace.

    Example:
        >>> get_logger("invoice_reader.text_parser.parser").name
        'invoice_reader.text_parser.parser'
        >>> get_logger("main").name
        'invoice_reader.main'
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger_from_config() -> logging.Logger:
    """Configure logging from the ``logging.*`` settings."""
    from config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_file = get_config("logging.file.path")

    return setup_logger(
        level=get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", DEFAULT_MAX_BYTES),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )


def set_level(level: Union[str, int]) -> None:
    """
    Change the level of the reader's logger and all of its handlers.

    Used by the CLI ``--debug`` and ``--quiet`` flags after configuration
    has been applied.
    """
    numeric_level = _resolve_level(level)
    reader_logger = logging.getLogger(ROOT_LOGGER_NAME)
    reader_logger.setLevel(numeric_level)
    for handler in reader_logger.handlers:
        handler.setLevel(numeric_level)
