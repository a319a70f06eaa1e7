"""Logging utilities for the exercise content pipeline."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.config import settings

LOG_FILE = settings.log_file


def init_logging(log_file: Optional[Path] = None) -> None:
    """Initialize logging with console and rotating file handler."""
    logger.setLevel(settings.log_level)
    if logger.handlers:
        return

    log_path = Path(log_file) if log_file is not None else LOG_FILE
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    # File handler with UTF-8 encoding (content is full of Unicode math)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
        errors="replace",
    )
    file_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)


logger = logging.getLogger("exercise_content")
