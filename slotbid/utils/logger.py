"""
Logging for slotbid.

Every module logs through a `slotbid.<subsystem>` logger. Handlers live on
the `slotbid` parent only, so one call to `setup_logging` reconfigures the
whole engine. When nothing has been configured, the first `get_logger` call
installs a colored stderr handler at the level named by SLOTBID_LOG_LEVEL
(WARNING if unset), so library use stays quiet by default.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Union

import colorlog

ROOT_NAME = "slotbid"
LEVEL_ENV = "SLOTBID_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING
LOG_FILE_NAME = "slotbid.log"

SUBSYSTEMS = ("engine", "ledger", "allocator", "cli")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(name)-18s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)-18s %(message)s"
LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

LevelLike = Union[int, str]


def resolve_level(value: LevelLike) -> int:
    """
    Turn a level name ("debug", "INFO") or number into a logging level.

    Raises:
        ValueError: unknown level name
    """
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {value!r}")
    return level


def level_from_env(default: int = DEFAULT_LEVEL) -> int:
    """Level named by SLOTBID_LOG_LEVEL, or `default` when unset."""
    raw = os.environ.get(LEVEL_ENV, "")
    if not raw.strip():
        return default
    return resolve_level(raw)


class SlotbidLogger:
    """Owns the handlers attached to the `slotbid` logger."""

    _configured = False
    log_file: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: Optional[LevelLike] = None,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        subsystem_levels: Optional[Dict[str, LevelLike]] = None,
    ):
        """
        Attach console (and optionally file) handlers; no-op once configured.

        Args:
            level: Engine-wide level; None reads SLOTBID_LOG_LEVEL
            log_dir: Directory for slotbid.log, ./logs when None
            log_to_file: Whether to also write to slotbid.log
            subsystem_levels: Per-subsystem overrides, e.g. {"allocator": "DEBUG"}
        """
        if cls._configured:
            return

        root = logging.getLogger(ROOT_NAME)
        root.setLevel(level_from_env() if level is None else resolve_level(level))
        root.handlers.clear()
        root.addHandler(cls._console_handler())

        if log_to_file:
            directory = Path(log_dir) if log_dir else Path("logs")
            directory.mkdir(parents=True, exist_ok=True)
            cls.log_file = directory / LOG_FILE_NAME
            root.addHandler(cls._file_handler(cls.log_file))

        for name, sub_level in (subsystem_levels or {}).items():
            logging.getLogger(f"{ROOT_NAME}.{name}").setLevel(resolve_level(sub_level))

        cls._configured = True

    @staticmethod
    def _console_handler() -> logging.Handler:
        handler = colorlog.StreamHandler(sys.stderr)
        handler.setFormatter(colorlog.ColoredFormatter(
            CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LEVEL_COLORS,
        ))
        return handler

    @staticmethod
    def _file_handler(path: Path) -> logging.Handler:
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        return handler

    @classmethod
    def reset(cls):
        """Close handlers and drop overrides so setup() can run again."""
        root = logging.getLogger(ROOT_NAME)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)
        for name in SUBSYSTEMS:
            logging.getLogger(f"{ROOT_NAME}.{name}").setLevel(logging.NOTSET)
        cls._configured = False
        cls.log_file = None

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._configured:
            try:
                cls.setup()
            except ValueError as e:
                cls.setup(level=DEFAULT_LEVEL)
                logging.getLogger(ROOT_NAME).warning(f"{LEVEL_ENV} ignored: {e}")
        return logging.getLogger(f"{ROOT_NAME}.{name}")


def get_logger(name: str) -> logging.Logger:
    """Logger for one subsystem, e.g. get_logger("ledger")."""
    return SlotbidLogger.get_logger(name)


def setup_logging(
    level: Optional[LevelLike] = None,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
    subsystem_levels: Optional[Dict[str, LevelLike]] = None,
):
    """Replace the current logging configuration."""
    SlotbidLogger.reset()
    SlotbidLogger.setup(
        level=level,
        log_dir=log_dir,
        log_to_file=log_to_file,
        subsystem_levels=subsystem_levels,
    )
