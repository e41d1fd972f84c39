"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "sqlcipher: needs the sqlcipher3 driver for real encryption")
