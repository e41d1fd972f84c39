"""Prepared statement — bind, step to completion, release the cursor once."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from sqlcipher_storage.errors import BindError, StepError
from sqlcipher_storage.models.value import Value
from sqlcipher_storage.utils.redact import redact

logger = logging.getLogger(__name__)


class PreparedStatement:
    """
    Owns one driver cursor compiled against an open connection.

    Lifecycle: ``bind()`` at most once, then ``run_to_completion()``, which
    finalizes the cursor whether it reaches Done or fails. Use as a context
    manager to guarantee release when the statement is abandoned early.
    """

    def __init__(self, conn: Any, sql: str, driver: Any):
        self.sql = sql
        self._driver = driver
        try:
            self._cursor = conn.cursor()
        except driver.Error as exc:
            raise StepError.from_driver(exc, "Failed to prepare statement") from exc
        self._bound: Optional[tuple] = None
        self._columns: Optional[list[str]] = None
        self._finalized = False

    # -- lifecycle -------------------------------------------------------------

    def __enter__(self) -> "PreparedStatement":
        return self

    def __exit__(self, *exc_info) -> None:
        self.finalize()

    @property
    def finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> None:
        """Release the cursor. Later calls are no-ops."""
        if self._finalized:
            return
        self._finalized = True
        try:
            self._cursor.close()
        except self._driver.Error as exc:
            logger.warning(f"Cursor close failed: {exc}")

    def _check_usable(self) -> None:
        if self._finalized:
            raise StepError("Statement has been finalized")

    # -- binding ---------------------------------------------------------------

    def bind(self, params: Sequence[Value]) -> None:
        """Bind ``params[i]`` to placeholder ``i + 1``."""
        self._check_usable()
        if self._bound is not None:
            raise BindError("Statement parameters already bound")
        self._bound = tuple(Value.from_external(p).to_native() for p in params)

    # -- execution -------------------------------------------------------------

    @property
    def column_count(self) -> int:
        """Number of result columns; zero until the first step."""
        return len(self._columns or ())

    def run_to_completion(self) -> list[dict[str, Value]]:
        """Step until Done and return every row, finalizing on all paths."""
        try:
            self._check_usable()
            self._execute()
            rows: list[dict[str, Value]] = []
            while True:
                row = self._step()
                if row is None:
                    break
                rows.append(self._materialize(row))
            return rows
        finally:
            self.finalize()

    def _execute(self) -> None:
        bound = self._bound if self._bound is not None else ()
        logger.debug(f"Executing: {redact(self.sql)}")
        try:
            self._cursor.execute(self.sql, bound)
        except (self._driver.InterfaceError, self._driver.ProgrammingError) as exc:
            # Parameter-count and parameter-type rejections from the driver.
            if "binding" in str(exc).lower():
                raise BindError.from_driver(exc, "Failed to bind parameter") from exc
            raise StepError.from_driver(exc) from exc
        except self._driver.Error as exc:
            raise StepError.from_driver(exc) from exc
        except OverflowError as exc:
            raise BindError(f"Failed to bind parameter: {exc}") from exc
        except UnicodeEncodeError as exc:
            # Lone surrogates cannot be encoded as UTF-8, in the SQL or a parameter
            if exc.object == self.sql:
                raise StepError(f"Failed to prepare statement: {exc}") from exc
            raise BindError(f"Failed to bind parameter: {exc}") from exc
        description = self._cursor.description or ()
        self._columns = [col[0] for col in description]

    def _step(self) -> Optional[Sequence[Any]]:
        try:
            return self._cursor.fetchone()
        except self._driver.Error as exc:
            raise StepError.from_driver(exc) from exc

    def _materialize(self, row: Sequence[Any]) -> dict[str, Value]:
        columns = self._columns or []
        return {name: Value.from_column(cell) for name, cell in zip(columns, row)}


def run_statement(conn: Any, driver: Any, sql: str, params: Sequence[Value]) -> list[dict[str, Value]]:
    """Prepare, bind and run ``sql`` in one scope."""
    with PreparedStatement(conn, sql, driver) as stmt:
        stmt.bind(params)
        return stmt.run_to_completion()


__all__ = ["PreparedStatement", "run_statement"]
