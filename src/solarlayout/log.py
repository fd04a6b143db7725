"""
Logging setup for scripts.

Library modules only create loggers (``logging.getLogger(__name__)``); handlers are configured
here by whatever runs the engine.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}',
}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_style: str = "detailed",
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        log_file: Optional file to log to in addition to stdout
        format_style: simple, detailed or json

    Returns:
        The root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    log_format = _FORMATS.get(format_style, _FORMATS["detailed"])

    handlers = []
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, format=log_format, handlers=handlers, force=True)
    return logging.getLogger()
