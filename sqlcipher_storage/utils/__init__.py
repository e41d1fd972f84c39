"""Logging helpers."""

from sqlcipher_storage.utils.redact import redact
from sqlcipher_storage.utils.log import configure_logging

__all__ = ["redact", "configure_logging"]
