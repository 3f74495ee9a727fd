"""
Logging utility for TwoViewReconstruction

Library modules only request loggers through get_logger(); they never attach
handlers on import. Handlers are attached once by the application through
configure_root_logger() (or setup_logger() for a custom logger), and every
"TwoViewReconstruction.<module>" logger propagates to that root.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "TwoViewReconstruction"

# Format: [2025-10-31 10:15:30] [INFO] [TwoViewReconstruction.selection] Message
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

Level = Union[str, int]


def _resolve_level(level: Level) -> int:
    """Numeric logging level from a name ('debug', 'INFO', ...) or a number"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return resolved


def _is_console_handler(handler: logging.Handler) -> bool:
    # FileHandler is a StreamHandler subclass
    return (isinstance(handler, logging.StreamHandler)
            and not isinstance(handler, logging.FileHandler))


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Level = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    force: bool = False
) -> logging.Logger:
    """
    Setup logger with file and/or console output

    Args:
        name: Logger name
        level: Logging level name (DEBUG, INFO, ...) or number
        log_file: Optional path to log file
        console: Whether to output to stdout
        force: Replace (and close) existing handlers instead of keeping them

    Returns:
        Configured logger

    Example:
        >>> logger = setup_logger('TwoViewReconstruction', level='DEBUG', log_file='two_view.log')
        >>> logger.info("Reconstruction started")
    """
    logger = logging.getLogger(name)

    if logger.handlers and not force:
        return logger

    logger.setLevel(_resolve_level(level))
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='a')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger of one package module, a child of the package root logger

    Example:
        >>> logger = get_logger("triangulation")
        >>> logger.name
        'TwoViewReconstruction.triangulation'
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_root_logger(level: Level = "INFO", log_file: Optional[str] = None,
                          console: bool = True) -> logging.Logger:
    """
    (Re)configure the package root logger; module loggers inherit its level
    and handlers.

    Args:
        level: Logging level name or number
        log_file: Optional path to log file
        console: Whether to output to stdout

    Returns:
        The root package logger
    """
    return setup_logger(
        name=ROOT_LOGGER_NAME,
        level=level,
        log_file=log_file,
        console=console,
        force=True
    )


def disable_console_logging() -> int:
    """
    Remove console handlers from the package root logger, keeping file output.

    Returns:
        Number of handlers removed
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    removed = 0
    for handler in logger.handlers[:]:
        if _is_console_handler(handler):
            logger.removeHandler(handler)
            removed += 1
    return removed


def set_level(level: Level) -> int:
    """
    Change the package logging level at runtime.

    Returns:
        The previous level of the root package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    previous = logger.level
    logger.setLevel(_resolve_level(level))
    return previous
