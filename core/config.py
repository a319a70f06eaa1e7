"""Configuration management for the exercise content pipeline."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _get_base_dir() -> Path:
    """Project root (the directory holding ``core/``)."""
    return Path(__file__).resolve().parents[1]


# Load .env from project root before any field default is evaluated
_env_path = _get_base_dir() / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


@dataclass
class Settings:
    """Pipeline settings."""

    base_dir: Path = _get_base_dir()
    log_level: str = os.getenv("CONTENT_LOG_LEVEL", "INFO")
    log_file: Path = Path(
        os.getenv("CONTENT_LOG_FILE", str(base_dir / "exercise_content.log"))
    )
    # Label used in diagnostics when a batch is filtered without one
    default_batch_label: str = os.getenv("CONTENT_BATCH_LABEL", "unknown")


settings = Settings()
