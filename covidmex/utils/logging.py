"""
Centralized Logging Configuration.

This module provides the package logging setup with:
- Console output with colored formatting
- Optional file logging
- Log levels configurable via settings / environment
"""
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from covidmex.config.settings import settings


# ANSI color codes for console output
class LogColors:
    """ANSI escape codes for colored console output."""
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors based on log level."""

    LEVEL_COLORS = {
        logging.DEBUG: LogColors.GRAY,
        logging.INFO: LogColors.GREEN,
        logging.WARNING: LogColors.YELLOW,
        logging.ERROR: LogColors.RED,
        logging.CRITICAL: LogColors.RED + LogColors.BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so other handlers keep the plain level and name
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, LogColors.RESET)
        record.levelname = f"{color}{record.levelname:8}{LogColors.RESET}"
        record.name = f"{LogColors.CYAN}{record.name}{LogColors.RESET}"

        return super().format(record)


def setup_logging(
    level: Optional[int] = None,
    log_to_file: Optional[bool] = None,
    log_dir: Optional[str] = None
) -> logging.Logger:
    """
    Configure package-wide logging.

    Args:
        level: Logging level (default: settings.log_level)
        log_to_file: Whether to also log to file (default: settings.log_to_file)
        log_dir: Directory for log files (default: settings.log_dir)

    Returns:
        Configured root logger of the package
    """
    if level is None:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if log_to_file is None:
        log_to_file = settings.log_to_file
    log_dir = log_dir or settings.log_dir

    logger = logging.getLogger("covidmex")

    # Clear any existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(
        '%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    if log_to_file:
        try:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)

            log_filename = f"covidmex_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            file_handler = logging.FileHandler(
                log_path / log_filename,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)  # Always capture DEBUG in file
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)

            logger.debug(f"Log file created: {log_path / log_filename}")
        except OSError as e:
            logger.warning(f"Could not create log file: {e}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Args:
        name: Module or component name (e.g., 'sources.http', 'workflows')

    Returns:
        Logger instance with hierarchical naming

    Example:
        >>> logger = get_logger("sources.http")
        >>> logger.info("Downloading report...")
    """
    return logging.getLogger(f"covidmex.{name}")


# Initialize the package logger on module import
_root_logger = setup_logging()
