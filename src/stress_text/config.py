"""Runtime settings read from the environment (and an optional ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_STORE_DIR = "~/.stress_text"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for the CLI and application composition root."""

    store_dir: Path
    log_level: str = "WARNING"
    max_features: int = 100
    retrain_threshold: int = 10


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_settings(dotenv_path: Optional[str | Path] = None) -> Settings:
    """Build :class:`Settings` from ``.env`` and the process environment.

    Variables already set in the environment take precedence over ``.env``.

    Raises:
        ValueError: If a numeric variable is not a positive integer.
    """
    load_dotenv(dotenv_path)

    return Settings(
        store_dir=Path(os.getenv("STRESS_TEXT_STORE_DIR") or DEFAULT_STORE_DIR).expanduser(),
        log_level=(os.getenv("STRESS_TEXT_LOG_LEVEL") or "WARNING").upper(),
        max_features=_int_env("STRESS_TEXT_MAX_FEATURES", 100),
        retrain_threshold=_int_env("STRESS_TEXT_RETRAIN_THRESHOLD", 10),
    )
