"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    app_env: str
    log_level: str
    worker_count: int
    data_dir: str | None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def get_settings() -> Settings:
    return Settings(
        app_env=os.getenv("APP_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        worker_count=_int_env("ETF_ANALYZER_WORKERS", os.cpu_count() or 1),
        data_dir=os.getenv("ETF_ANALYZER_DATA_DIR") or None,
    )


settings = get_settings()
