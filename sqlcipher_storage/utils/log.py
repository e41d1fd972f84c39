"""Logging setup for scripts and host processes."""

from __future__ import annotations

import logging
from typing import Optional


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler at ``level`` (default from settings)."""
    if level is None:
        from sqlcipher_storage.config import get_settings
        level = get_settings().LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
