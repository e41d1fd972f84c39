"""Filesystem collaborator — resolves logical database names under one root."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from sqlcipher_storage.errors import FileMissing, OpenError

logger = logging.getLogger(__name__)


class LocalFilesystem:
    """Storage-root directory holding every database file by logical name."""

    def __init__(self, root: Path | str, assets_dir: Optional[Path | str] = None):
        self.root = Path(root)
        self.assets_dir = Path(assets_dir) if assets_dir is not None else None

    def resolve(self, name: str) -> Path:
        return self.root / name

    def exists(self, path: Path | str) -> bool:
        return Path(path).is_file()

    def delete_file(self, path: Path | str) -> bool:
        """Delete ``path``; returns False if the OS refused."""
        try:
            Path(path).unlink()
        except OSError as exc:
            logger.error(f"Failed to delete {Path(path).name}: {exc}")
            return False
        # Journal side files left by WAL or rollback mode
        for suffix in ("-journal", "-wal", "-shm"):
            Path(f"{path}{suffix}").unlink(missing_ok=True)
        return True

    # -- pre-populated assets --------------------------------------------------

    @staticmethod
    def is_bundled(location: str) -> bool:
        """True when ``location`` names a file under the assets dir."""
        return location == "1" or location.startswith("~")

    def asset_path(self, name: str, location: str) -> Path:
        """Map an ``assetFilename`` value onto a source file.

        ``"1"`` means ``www/<name>`` and a leading ``~`` or ``~/`` is dropped,
        both under the assets dir. Any other location is an external file
        relative to the storage root.
        """
        if not self.is_bundled(location):
            return self.root / location.lstrip("/")
        if self.assets_dir is None:
            raise FileMissing("No assets directory configured")
        if location == "1":
            relative = f"www/{name}"
        elif location.startswith("~/"):
            relative = location[2:]
        else:
            relative = location[1:]
        return self.assets_dir / relative

    def copy_asset(self, name: str, location: str, dest: Path | str) -> Path:
        source = self.asset_path(name, location)
        if not source.is_file():
            raise FileMissing(f"{source} not found")
        dest = Path(dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, dest)
        except OSError as exc:
            raise OpenError(f"Failed to copy {source.name}: {exc}") from exc
        logger.info(f"Copied pre-populated database {source.name} to {dest.name}")
        return dest
