"""
Centralized logging configuration for sealbid.

All subsystem loggers hang off the `sealbid` logger:

    sealbid.storage.*, sealbid.repository, sealbid.resolution,
    sealbid.session, sealbid.backend.*, sealbid.service, sealbid.app

Modules call get_logger() at import time. The first call installs a default
INFO console handler; an explicit setup_logging() (the CLI calls it after
reading --debug and the config) always replaces the level and handlers.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

ROOT_LOGGER = "sealbid"
LOG_FILE_NAME = "sealbid.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class _StderrHandler(colorlog.StreamHandler):
    """Console handler bound to the current sys.stderr at emit time."""

    def __init__(self, level: int):
        super().__init__()
        self.setLevel(level)
        self.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
            datefmt=DATE_FORMAT,
            log_colors=LOG_COLORS,
        ))

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        # The stream is always the current sys.stderr
        pass


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
        datefmt=DATE_FORMAT,
    ))
    return handler


class SealbidLogger:
    """Owns the handlers of the `sealbid` logger."""

    _configured = False
    _log_file: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
    ) -> logging.Logger:
        """
        (Re)configure sealbid logging.

        Existing handlers are closed and replaced, so a later call with a
        different level or file setting takes effect.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_dir: Directory for the log file. If None, uses ./logs
            log_to_file: Whether to also write sealbid.log

        Returns:
            The `sealbid` root logger
        """
        root_logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        root_logger.setLevel(level)
        root_logger.addHandler(_StderrHandler(level))

        cls._log_file = None
        if log_to_file:
            directory = Path(log_dir) if log_dir else Path("logs")
            directory.mkdir(parents=True, exist_ok=True)
            cls._log_file = directory / LOG_FILE_NAME
            root_logger.addHandler(_file_handler(cls._log_file, level))

        cls._configured = True
        return root_logger

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger for a subsystem, installing defaults on first use.

        Args:
            name: Subsystem name (e.g., 'store', 'session', 'resolution')
        """
        if not cls._configured:
            cls.setup()
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")

    @classmethod
    def log_file(cls) -> Optional[Path]:
        """Path of the active log file, if file logging is on."""
        return cls._log_file


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific subsystem"""
    return SealbidLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
) -> logging.Logger:
    """Configure sealbid logging, replacing any earlier configuration"""
    return SealbidLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file)
