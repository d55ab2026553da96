"""Central logging configuration."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path

LOG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "maketools" / "logs"
LOG_FILE = LOG_DIR / "maketools.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOGGING_LEVELS = {
    "Normal": logging.INFO,
    "Verbose": logging.DEBUG,
    "Debug": logging.DEBUG,
}

_extension_handler: logging.FileHandler | None = None


def configure_logging(level: int = logging.INFO) -> None:
    """Configure both console and rotating file logging."""

    LOG_DIR.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=512_000, backupCount=5)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not root_logger.handlers:
        root_logger.addHandler(console_handler)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Return a module-level logger with standard configuration."""

    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        configure_logging()
    return logger


def level_for_setting(value: str | None) -> int:
    """Map the ``loggingLevel`` setting to a :mod:`logging` level."""

    if not value:
        return logging.INFO
    level = LOGGING_LEVELS.get(value)
    if level is None:
        logging.getLogger(__name__).warning("Unknown logging level '%s', using Normal", value)
        return logging.INFO
    return level


def apply_logging_level(value: str | None) -> int:
    level = level_for_setting(value)
    logging.getLogger().setLevel(level)
    return level


def set_extension_log(path: Path | None, truncate: bool = False) -> logging.FileHandler | None:
    """Mirror every record into ``path``, replacing any previous extension log.

    Passing ``None`` detaches the current extension log handler.
    """

    global _extension_handler
    root_logger = logging.getLogger()
    if _extension_handler is not None:
        root_logger.removeHandler(_extension_handler)
        _extension_handler.close()
        _extension_handler = None
    if path is None:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="w" if truncate else "a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    _extension_handler = handler
    return handler
