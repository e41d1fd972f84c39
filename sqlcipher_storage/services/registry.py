"""Database registry — logical name to open handle and remembered key.

The registry is an explicit context object: the host bridge builds one at
module init and tears it down on destroy. Every mutating call runs under a
single lock so the handle map and the remembered entries never diverge.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional

from sqlcipher_storage.db.database import DatabaseHandle
from sqlcipher_storage.errors import (
    DatabaseNotFound, DeleteError, FileMissing, NotFound, OpenError, StorageError,
)
from sqlcipher_storage.services.filesystem import LocalFilesystem

logger = logging.getLogger(__name__)


class KeyProvider:
    """Opaque re-open capability holding the passphrase, or no passphrase."""

    __slots__ = ("_fetch",)

    def __init__(self, fetch: Callable[[], Optional[str]]):
        self._fetch = fetch

    @classmethod
    def of(cls, key: Optional[str]) -> "KeyProvider":
        return cls(lambda: key)

    @property
    def has_key(self) -> bool:
        return self._fetch() is not None

    def __call__(self) -> Optional[str]:
        return self._fetch()

    def __repr__(self) -> str:
        return f"KeyProvider(keyed={self.has_key})"


@dataclass
class _Entry:
    """What ``reopen_all`` needs to bring a database back."""

    provider: KeyProvider
    path: Path
    read_only: bool = False

    def connect(self, driver: Optional[ModuleType]) -> DatabaseHandle:
        return DatabaseHandle(self.path, self.provider(), driver=driver, read_only=self.read_only)


class DatabaseRegistry:
    """Process-wide set of open databases, keyed by logical name."""

    def __init__(self, fs: LocalFilesystem, driver: Optional[ModuleType] = None):
        self.fs = fs
        self._driver = driver
        self._handles: dict[str, DatabaseHandle] = {}
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    # -- queries ---------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def names(self) -> list[str]:
        """Every remembered name, open or awaiting resume."""
        with self._lock:
            return list(self._entries)

    def is_open(self, name: str) -> bool:
        return name in self._handles

    def get(self, name: str) -> DatabaseHandle:
        handle = self._handles.get(name)
        if handle is None:
            raise DatabaseNotFound(f"Database {name} is not open")
        return handle

    # -- mutations -------------------------------------------------------------

    def open(
        self,
        name: str,
        key: Optional[str] | KeyProvider = None,
        path: Optional[Path | str] = None,
        read_only: bool = False,
    ) -> DatabaseHandle:
        """Open ``name`` and remember how to re-open it.

        An existing entry under the same name is replaced only after the new
        handle opened successfully; the previous handle is then closed.
        """
        provider = key if isinstance(key, KeyProvider) else KeyProvider.of(key)
        entry = _Entry(
            provider=provider,
            path=Path(path) if path is not None else self.fs.resolve(name),
            read_only=read_only,
        )
        with self._lock:
            handle = entry.connect(self._driver)
            previous = self._handles.get(name)
            self._handles[name] = handle
            self._entries[name] = entry
            if previous is not None:
                logger.warning(f"Database {name} re-opened; closing previous handle")
                previous.close()
        return handle

    def close(self, name: str) -> None:
        with self._lock:
            handle = self._handles.get(name)
            if handle is None:
                raise NotFound(f"Database {name} is not open")
            del self._handles[name]
            self._entries.pop(name, None)
            handle.close()

    def delete(self, name: str) -> None:
        """Close ``name`` if registered, then delete its backing file."""
        with self._lock:
            handle = self._handles.pop(name, None)
            entry = self._entries.pop(name, None)
            # A read-only entry points at an external file that is not ours to delete
            if entry is not None and not entry.read_only:
                path = entry.path
            else:
                path = self.fs.resolve(name)
            if handle is not None:
                handle.close()
        if not self.fs.exists(path):
            raise FileMissing(f"{path} not found")
        if not self.fs.delete_file(path):
            raise DeleteError(f"couldn't delete database {name}")
        logger.info(f"Deleted database {name}")

    def close_all(self, forget: bool = False) -> None:
        """Close every open handle once; keep keys for resume unless ``forget``."""
        with self._lock:
            handles, self._handles = self._handles, {}
            if forget:
                self._entries.clear()
            for name, handle in handles.items():
                try:
                    handle.close()
                except StorageError as exc:
                    logger.error(f"Failed to close database {name}: {exc}")

    def reopen_all(self) -> list[str]:
        """Re-open every remembered database after a resume.

        Entries whose backing file vanished are dropped. Entries that fail to
        open stay remembered but closed. Both are reported together in one
        error after every other entry was re-opened: :class:`FileMissing` when
        any file vanished, :class:`OpenError` otherwise.
        """
        reopened: list[str] = []
        missing: list[str] = []
        failed: list[str] = []
        with self._lock:
            for name, entry in list(self._entries.items()):
                stale = self._handles.pop(name, None)
                if stale is not None:
                    stale.close()
                if not self.fs.exists(entry.path):
                    logger.warning(f"Cannot re-open {name}: {entry.path} not found")
                    missing.append(name)
                    del self._entries[name]
                    continue
                try:
                    self._handles[name] = entry.connect(self._driver)
                except StorageError as exc:
                    logger.error(f"Cannot re-open {name}: {exc.message}")
                    failed.append(name)
                    continue
                reopened.append(name)
        logger.info(f"Re-opened {len(reopened)} database(s)")
        if missing or failed:
            problems = []
            if missing:
                problems.append(f"{', '.join(missing)} not found")
            if failed:
                problems.append(f"failed to re-open {', '.join(failed)}")
            error = FileMissing if missing else OpenError
            raise error("; ".join(problems))
        return reopened
