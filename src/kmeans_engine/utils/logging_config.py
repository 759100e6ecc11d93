"""
Logging setup shared by all kmeans_engine modules.

Modules create their logger with ``get_logger(__name__)``; applications call
``setup_logging`` once to attach a handler to the package logger.
"""

import logging
from typing import Optional, Union

PACKAGE_LOGGER = "kmeans_engine"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package logger."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: Optional[Union[int, str]] = None,
    fmt: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger with a single stream handler.

    Calling this more than once replaces the level and format instead of
    stacking handlers.

    Args:
        level: Logging level (int or name such as ``"DEBUG"``); defaults to
            ``KMEANS_LOG_LEVEL`` from the environment config
        fmt: Optional format string; defaults to ``DEFAULT_FORMAT``

    Returns:
        The configured package logger
    """
    if level is None:
        from ..config import get_config

        level = get_config().log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    handler = next(
        (h for h in logger.handlers if getattr(h, "_kmeans_engine", False)), None
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler._kmeans_engine = True
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    return logger
