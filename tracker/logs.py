"""Logging setup for the habit tracker entry points."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tracker.workspace import Settings, workspace_root

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(
    settings: Settings,
    root: Path | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """Configure the ``tracker`` logger from *settings*.

    Installs a console handler (unless *console* is false, e.g. under a TUI
    that owns the terminal) and a rotating file handler when
    ``settings.log_file`` is set. Calling it again replaces earlier handlers.
    """
    if root is None:
        root = workspace_root()

    logger = logging.getLogger("tracker")
    logger.setLevel(settings.log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if settings.log_file:
        log_file = Path(settings.log_file)
        if not log_file.is_absolute():
            log_file = root / log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger
