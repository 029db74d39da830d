"""Logging setup for cascade_thinking.

Stdout carries the MCP stdio protocol, so everything here logs to stderr
and, optionally, to a dated file.

Environment:
    CASCADE_LOG_LEVEL: Level name for the ``cascade_thinking`` logger (default INFO).
    CASCADE_LOG_DIR: Directory for ``cascade-{date}.log`` files.
    DISABLE_THOUGHT_LOGGING: ``true`` (any case) silences the rendered thought boxes.
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

LOGGER_NAME = "cascade_thinking"
THOUGHT_LOGGER_NAME = "cascade_thinking.thoughts"
EVENT_LOGGER_NAME = "cascade_thinking.events"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def thought_logging_disabled() -> bool:
    """Only the literal ``true`` (case-insensitive) disables thought boxes."""
    return os.environ.get("DISABLE_THOUGHT_LOGGING", "").lower() == "true"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get("CASCADE_LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        return logging.INFO
    return resolved


def setup_cascade_logging(
    level: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure the ``cascade_thinking`` logger.

    Safe to call more than once; handlers are only added the first time.

    Args:
        level: Level name; falls back to CASCADE_LOG_LEVEL, then INFO.
        log_dir: Also write to ``{log_dir}/cascade-{date}.log``. Falls back
            to CASCADE_LOG_DIR when not given.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))

    formatter = logging.Formatter(LOG_FORMAT)

    has_stream = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
    if not has_stream:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    log_dir = log_dir or os.environ.get("CASCADE_LOG_DIR")
    has_file = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    if log_dir and not has_file:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        file_handler = logging.FileHandler(directory / f"cascade-{date}.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_thought_event(action: str, **fields: Any) -> None:
    """Write one ``action | key=value ...`` line to the event logger."""
    details = ", ".join(f"{key}={value}" for key, value in fields.items() if value is not None)
    logging.getLogger(EVENT_LOGGER_NAME).debug(f"{action} | {details}")
