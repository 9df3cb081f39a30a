"""
Logging setup shared by all AtomCloud modules.

    from logging_config import get_logger
    logger = get_logger(__name__)

The console level comes from the ATOMCLOUD_LOG_LEVEL environment variable
(DEBUG, INFO, WARNING, ERROR, CRITICAL) and defaults to INFO. Level names are
coloured with colorama when printed to the console.
"""

from __future__ import annotations
import logging
import os
import sys
from datetime import datetime
from typing import Optional

from colorama import Fore, Style, just_fix_windows_console

_loggers: dict = {}

_DEFAULT_FORMAT = "%(asctime)s | %(name)-18s | %(levelname)-8s | %(message)s"
_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_LEVEL = logging.INFO

_LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

_handlers_configured = False
_file_handler: Optional[logging.FileHandler] = None


class ColorFormatter(logging.Formatter):
    """Formatter that wraps the level name in a colorama colour."""

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain:<8}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def parse_level(name: str | None, default: int = _DEFAULT_LEVEL) -> int:
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else default


def _configure_root_handler() -> None:
    global _handlers_configured

    if _handlers_configured:
        return

    just_fix_windows_console()
    level = parse_level(os.environ.get("ATOMCLOUD_LOG_LEVEL"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColorFormatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT))

    if not root_logger.handlers:
        root_logger.addHandler(console_handler)

    _handlers_configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a module, configuring the root handler on first use.

    Parameters
    ----------
    name : str
        Module name, typically __name__.
    """
    if name not in _loggers:
        _configure_root_handler()
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]


def set_log_level(level: int) -> None:
    """Set the level of the root logger and all of its handlers."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def enable_file_logging(filename: Optional[str] = None, level: int = logging.DEBUG) -> str:
    """
    Also write log records to a file, DEBUG by default.

    Returns the path of the log file; a timestamped name is generated when
    `filename` is not given.
    """
    global _file_handler

    if filename is None:
        filename = f"atomcloud_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    disable_file_logging()

    _file_handler = logging.FileHandler(filename, encoding="utf-8")
    _file_handler.setLevel(level)
    _file_handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(_file_handler)
    if root_logger.level > level:
        root_logger.setLevel(level)

    return filename


def disable_file_logging() -> None:
    global _file_handler

    if _file_handler is not None:
        root_logger = logging.getLogger()
        root_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None


def silence_logger(name: str) -> None:
    logging.getLogger(name).setLevel(logging.WARNING)


# pyvista/vtk are chatty at INFO
silence_logger("pyvista")
silence_logger("matplotlib")
