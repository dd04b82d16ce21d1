"""
Logging utilities for the MA-EYES work-log tool.

Everything is logged to stderr so that stdout stays free for command output
such as the ``put --dry-run`` plan.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = 'kousu'


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name for terminal output.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
            )

        formatted = super().format(record)

        # Other handlers must see the plain level name
        record.levelname = levelname

        return formatted


def resolve_level(verbose: int = 0, quiet: bool = False) -> int:
    """
    Map the -v/-q command line flags to a logging level.

    Args:
        verbose: Number of -v flags given
        quiet: Whether -q was given

    Returns:
        ERROR when quiet, DEBUG when verbose, INFO otherwise
    """
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.INFO


def setup_logging(verbose: int = 0, quiet: bool = False, use_colors: bool = True) -> logging.Logger:
    """
    Set up the application logger.

    Args:
        verbose: Number of -v flags given
        quiet: Only report errors
        use_colors: Use colored level names when stderr is a terminal

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    level = resolve_level(verbose, quiet)
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if use_colors and sys.stderr.isatty():
        formatter = ColoredFormatter(fmt='%(levelname)-8s | %(message)s')
    else:
        formatter = logging.Formatter(fmt='%(levelname)-8s | %(message)s')

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger() -> logging.Logger:
    """
    Get the application logger.

    Returns:
        Logger instance
    """
    return logging.getLogger(LOGGER_NAME)


def log_section(title: str, logger: Optional[logging.Logger] = None):
    """
    Log a section header for better readability.

    Args:
        title: Section title
        logger: Logger instance (uses default if None)
    """
    if logger is None:
        logger = get_logger()

    logger.info("")
    logger.info("=" * 60)
    logger.info(f"  {title}")
    logger.info("=" * 60)


def log_step(step: str, logger: Optional[logging.Logger] = None):
    """
    Log a processing step.

    Args:
        step: Step description
        logger: Logger instance (uses default if None)
    """
    if logger is None:
        logger = get_logger()

    logger.info(f"→ {step}")


def log_error(error: str, logger: Optional[logging.Logger] = None):
    """
    Log an error message with consistent formatting.

    Args:
        error: Error message
        logger: Logger instance (uses default if None)
    """
    if logger is None:
        logger = get_logger()

    logger.error(f"✗ {error}")


def log_success(message: str, logger: Optional[logging.Logger] = None):
    if logger is None:
        logger = get_logger()

    logger.info(f"✓ {message}")


def log_warning(warning: str, logger: Optional[logging.Logger] = None):
    if logger is None:
        logger = get_logger()

    logger.warning(f"⚠ {warning}")
