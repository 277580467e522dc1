"""
Logging configuration and utilities for Station Tracks
Provides colored console output and file logging with separation between user and technical messages
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Optional
import colorama
from colorama import Fore, Back, Style

from ..config.settings import get_settings


# Initialize colorama for Windows compatibility
colorama.init()

FILE_FORMAT = '%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)-20s | %(message)s'

# Third-party loggers that would otherwise flood the file log
EXTERNAL_LIBS = [
    'aiohttp', 'aiohttp.access', 'aiohttp.client', 'aiohttp.internal',
    'aiohttp.websocket', 'asyncio', 'urllib3',
]


class ConsoleMessageFilter(logging.Filter):
    """Filter to allow only user-facing messages to console"""

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True

        if getattr(record, 'console_output', False):
            return True

        if record.name.endswith('.console') or record.name.endswith('.user'):
            return True

        return False


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colored output for console"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize colored formatter

        Args:
            fmt: Log format string
            use_colors: Whether to use colored output
        """
        super().__init__()
        self.use_colors = use_colors
        self.fmt = fmt or '%(message)s'

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors"""
        formatter = logging.Formatter(self.fmt)
        if self.use_colors and record.levelname in self.COLORS:
            # Copy so other handlers still see the plain level name
            record_copy = logging.makeLogRecord(record.__dict__)
            record_copy.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{Style.RESET_ALL}"
            if record.levelno >= logging.WARNING:
                record_copy.msg = f"{self.COLORS[record.levelname]}{record.getMessage()}{Style.RESET_ALL}"
                record_copy.args = None
            return formatter.format(record_copy)
        return formatter.format(record)


def parse_size(size_str: str) -> int:
    """
    Parse size string to bytes

    Args:
        size_str: Size string like "10MB", "1GB", "500KB"

    Returns:
        Size in bytes
    """
    size_str = size_str.upper().strip()

    multipliers = {
        'B': 1,
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
        'TB': 1024 ** 4,
    }

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([KMGT]?B)$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    number, unit = match.groups()
    return int(float(number) * multipliers[unit])


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3,
    verbose: bool = False
) -> None:
    """
    Setup application logging configuration with separated console/file output

    Args:
        level: Logging level for the file log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None to disable file logging)
        console_output: Enable console logging
        colored_output: Enable colored console output
        max_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep
        verbose: Show every record on the console, DEBUG included, not only user-facing ones
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Only touch the package logger so host applications keep their own handlers
    package_logger = logging.getLogger('station_tracks')
    package_logger.setLevel(logging.DEBUG)
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)

    # Console handler - only user-facing messages (WARNING+ or explicitly marked) unless verbose
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        if verbose:
            console_fmt = '%(levelname)s %(name)s: %(message)s'
        else:
            console_handler.addFilter(ConsoleMessageFilter())
            console_fmt = '%(message)s'
        console_handler.setFormatter(ColoredFormatter(fmt=console_fmt, use_colors=colored_output))
        package_logger.addHandler(console_handler)

    # File handler with full detail logging
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=parse_size(max_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        package_logger.addHandler(file_handler)

    for lib in EXTERNAL_LIBS:
        logging.getLogger(lib).setLevel(logging.WARNING)

    logger = logging.getLogger('station_tracks.logging')
    logger.info(f"Logging initialized - Level: {level}, Console: {console_output}, Verbose: {verbose}, File: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for a module

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance with a `console_info` method for user-facing INFO messages
    """
    logger = logging.getLogger(name)

    def console_info(message: str):
        """Log message that should appear on console for user"""
        logger.info(message, extra={'console_output': True})

    logger.console_info = console_info

    return logger


def configure_from_settings(verbose: bool = False) -> None:
    """
    Configure logging from application settings

    Args:
        verbose: Also show debug and info records on the console
    """
    settings = get_settings()

    log_file_path = None
    if settings.logging.file:
        if Path(settings.logging.file).is_absolute():
            log_file_path = settings.logging.file
        else:
            log_file_path = settings.get_config_directory() / settings.logging.file

    setup_logging(
        level=settings.logging.level,
        log_file=str(log_file_path) if log_file_path else None,
        console_output=settings.logging.console_output,
        colored_output=settings.logging.colored_output,
        max_size=settings.logging.max_size,
        backup_count=settings.logging.backup_count,
        verbose=verbose
    )
