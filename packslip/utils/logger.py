"""
Logging setup for the pack slip pipeline.

All loggers live under the ``packslip`` namespace so one call configures
every module. Console output is colored by level when stdout is a
terminal; a rotating log file can be added from settings.yaml.

Usage:
    from packslip.utils.logger import setup_logger_from_config, get_logger

    setup_logger_from_config()          # once, at startup
    logger = get_logger(__name__)
    logger.info("Parsed 12 line items")
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

import colorama
from colorama import Fore, Style

colorama.just_fix_windows_console()

LOGGER_NAMESPACE = "packslip"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class ColoredFormatter(logging.Formatter):
    """Wraps each console line in the color of its level."""
    
    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }
    
    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, '')
        return f"{color}{super().format(record)}{Style.RESET_ALL}"


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def _console_handler(fmt: str, datefmt: str, colorize: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    use_color = colorize and getattr(sys.stdout, "isatty", lambda: False)()
    formatter_cls = ColoredFormatter if use_color else logging.Formatter
    handler.setFormatter(formatter_cls(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: Union[str, Path], fmt: str, datefmt: str,
                  max_bytes: int, backup_count: int) -> logging.Handler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_logger(
    level: Union[str, int] = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the ``packslip`` logger.
    
    Calling it again replaces the previous handlers, so it is safe to call
    once per CLI run and again from tests.
    
    Args:
        level: Level name or number.
        log_format: logging format string.
        date_format: strftime format for ``%(asctime)s``.
        log_file: Rotating log file; no file logging when None.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        colorize: Color console lines when stdout is a terminal.
    
    Returns:
        The ``packslip`` logger.
    """
    fmt = log_format or DEFAULT_FORMAT
    datefmt = date_format or DEFAULT_DATE_FORMAT
    
    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    
    app_logger.addHandler(_console_handler(fmt, datefmt, colorize))
    if log_file:
        app_logger.addHandler(_file_handler(log_file, fmt, datefmt, max_bytes, backup_count))
    
    set_level(level)
    app_logger.propagate = False
    
    app_logger.debug(f"Logging initialized at {logging.getLevelName(app_logger.level)}")
    return app_logger


def set_level(level: Union[str, int]) -> None:
    """Change the level of the ``packslip`` logger and its handlers."""
    value = _to_level(level)
    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.setLevel(value)
    for handler in app_logger.handlers:
        handler.setLevel(value)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger inside the ``packslip`` namespace.
    
    Module names already under ``packslip`` are used as they are; anything
    else (``__main__``, ``main``) is nested below it.
    """
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def setup_logger_from_config() -> logging.Logger:
    """Configure logging from the ``logging`` section of settings.yaml."""
    from config import ConfigurationManager
    
    settings = ConfigurationManager().section("logging")
    file_settings = settings.get("file") or {}
    console_settings = settings.get("console") or {}
    
    log_file = file_settings.get("path") if file_settings.get("enabled") else None
    
    try:
        return setup_logger(
            level=settings.get("level", "INFO"),
            log_format=settings.get("format"),
            date_format=settings.get("date_format"),
            log_file=log_file,
            max_bytes=file_settings.get("max_bytes", DEFAULT_MAX_BYTES),
            backup_count=file_settings.get("backup_count", 5),
            colorize=console_settings.get("colorize", True)
        )
    except (ValueError, OSError) as e:
        print(f"Warning: invalid logging settings, using defaults: {e}", file=sys.stderr)
        return setup_logger()
