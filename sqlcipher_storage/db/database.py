"""Database handle — one driver connection with optional passphrase keying."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Sequence

from sqlcipher_storage.db.statement import run_statement
from sqlcipher_storage.errors import IntegrityError, OpenError, StepError
from sqlcipher_storage.models.value import Value

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = "sqlite3"
INTEGRITY_PROBE = "select count(*) from sqlite_master"
CIPHER_PROBE = "PRAGMA cipher_version"


def load_driver(name: Optional[str] = None) -> ModuleType:
    """Import the DB-API module used as the storage engine."""
    name = name or DEFAULT_DRIVER
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        raise OpenError(f"SQLite driver module '{name}' is not installed") from exc


def _quote_literal(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


class DatabaseHandle:
    """
    Owns one open driver connection.

    The connection runs in autocommit mode so transaction statements sent in
    a batch (``BEGIN``/``COMMIT``/``ROLLBACK``) take effect as written.
    ``total_changes`` and ``last_insert_rowid`` are read live on every access.
    """

    def __init__(
        self,
        path: Path | str,
        key: Optional[str] = None,
        driver: Optional[ModuleType] = None,
        read_only: bool = False,
    ):
        self.path = Path(path)
        self.read_only = read_only
        self._driver = driver or load_driver()
        self._conn: Optional[Any] = None
        self._open(key)

    # -- connection lifecycle --------------------------------------------------

    def _connect(self) -> Any:
        if self.read_only:
            # mode=ro never creates the file
            target = f"{self.path.resolve().as_uri()}?mode=ro"
            return self._driver.connect(
                target, uri=True, isolation_level=None, check_same_thread=False
            )
        return self._driver.connect(
            str(self.path), isolation_level=None, check_same_thread=False
        )

    def _open(self, key: Optional[str]) -> None:
        try:
            conn = self._connect()
        except self._driver.Error as exc:
            raise OpenError.from_driver(exc, f"Failed to open {self.path.name}") from exc

        if key is not None:
            try:
                conn.execute(f"PRAGMA key = {_quote_literal(key)}")
                cipher = conn.execute(CIPHER_PROBE).fetchone()
            except self._driver.Error as exc:
                conn.close()
                raise OpenError.from_driver(exc, "Failed to open database") from exc
            if not cipher or not cipher[0]:
                # Plain SQLite ignores PRAGMA key and would store the data unencrypted
                conn.close()
                raise OpenError(
                    f"SQLite driver '{self._driver.__name__}' has no cipher support; "
                    "install sqlcipher-storage[sqlcipher] and set SQLITE_DRIVER=sqlcipher3"
                )
            try:
                conn.execute(INTEGRITY_PROBE).fetchall()
            except self._driver.Error as exc:
                conn.close()
                raise IntegrityError.from_driver(exc, "Failed to validate database") from exc

        self._conn = conn
        logger.info(
            f"Opened database {self.path.name} (keyed={key is not None}, read_only={self.read_only})"
        )

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            try:
                conn.close()
            except self._driver.Error as exc:
                raise OpenError.from_driver(exc, f"Failed to close {self.path.name}") from exc
            logger.info(f"Closed database {self.path.name}")

    def _connection(self) -> Any:
        if self._conn is None:
            raise StepError("database has been closed")
        return self._conn

    # -- execution -------------------------------------------------------------

    def execute_one(self, sql: str, params: Sequence[Value] = ()) -> list[dict[str, Value]]:
        """Prepare, bind and run ``sql`` to completion, returning its rows."""
        return run_statement(self._connection(), self._driver, sql, params)

    def verify_key(self) -> None:
        """Re-run the integrity probe against the live connection."""
        try:
            self._connection().execute(INTEGRITY_PROBE).fetchall()
        except self._driver.Error as exc:
            raise IntegrityError.from_driver(exc, "Failed to validate database") from exc

    # -- live counters ---------------------------------------------------------

    @property
    def total_changes(self) -> int:
        return self._connection().total_changes

    @property
    def last_insert_rowid(self) -> int:
        try:
            row = self._connection().execute("select last_insert_rowid()").fetchone()
        except self._driver.Error as exc:
            raise StepError.from_driver(exc) from exc
        return int(row[0])

    def sqlite_version(self) -> str:
        try:
            row = self._connection().execute(
                "select sqlite_version() || ' (' || sqlite_source_id() || ')'"
            ).fetchone()
        except self._driver.Error as exc:
            raise StepError.from_driver(exc) from exc
        return row[0]

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"DatabaseHandle({self.path.name!r}, {state})"
