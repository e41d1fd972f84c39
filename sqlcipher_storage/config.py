"""
Configuration settings for sqlcipher-storage.
Reads from environment variables (and ``.env`` when present).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Load .env from repo root (if present)
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(_REPO_ROOT / ".env")


class StorageSettings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
    )

    # Paths
    STORAGE_ROOT: Path = Field(
        default=_REPO_ROOT / "data" / "databases",
        validation_alias="STORAGE_ROOT",
    )
    ASSETS_DIR: Path = Field(
        default=_REPO_ROOT / "assets",
        validation_alias="ASSETS_DIR",
    )

    # Driver module: "sqlite3" (no encryption) or "sqlcipher3"
    SQLITE_DRIVER: str = Field(default="sqlite3", validation_alias="SQLITE_DRIVER")

    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Ensure the storage root exists
        self.STORAGE_ROOT.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> StorageSettings:
    return StorageSettings()


def get_repo_root() -> Path:
    return _REPO_ROOT
