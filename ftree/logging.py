"""Package-wide logging for ftree.

All modules log through children of the ``ftree`` logger obtained with
``get_logger(__name__)``. The package logger owns the only handler; children
stay at NOTSET and inherit its level. The initial level comes from the
``FTREE_LOG_LEVEL`` environment variable when set (a level name such as
``DEBUG`` or a number), otherwise INFO.
"""

import logging
import os
import sys
from typing import Optional, Union

PACKAGE_LOGGER_NAME = "ftree"
LOG_LEVEL_ENV = "FTREE_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LevelLike = Union[int, str]

_configured = False


def resolve_level(level: Optional[LevelLike]) -> int:
    """Turn a level name or number into a logging level.

    ``None`` falls back to ``FTREE_LOG_LEVEL``, then INFO.

    Raises:
        ValueError: Unknown level name.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def setup_root_logger(
    level: Optional[LevelLike] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach the package handler to the ``ftree`` logger once.

    Later calls do nothing until ``reset_logging()``.

    Args:
        level: Level name or number; see ``resolve_level``.
        format_string: Record format, ``DEFAULT_FORMAT`` if omitted.
        handler: Destination; a stderr stream handler if omitted.
    """
    global _configured
    if _configured:
        return

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(resolve_level(level))

    # Analysis output belongs to the caller; diagnostics go to stderr
    handler = handler or logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(handler)

    # Propagate so pytest's caplog sees package records
    package_logger.propagate = True
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger that defers to the ``ftree`` logger's level."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: LevelLike) -> None:
    """Change the level of the package logger and its handler."""
    setup_root_logger()
    resolved = resolve_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(resolved)
    for handler in package_logger.handlers:
        handler.setLevel(resolved)


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    """Return to INFO."""
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the package handler and level so setup runs again (for tests)."""
    global _configured
    _configured = False
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
