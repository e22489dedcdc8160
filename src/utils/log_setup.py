"""Process-wide logging configuration for entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", verbose: bool = False) -> None:
    resolved = logging.DEBUG if verbose else getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)
