"""Batch request and outcome models, with their wire encodings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from sqlcipher_storage.errors import FAILURE_CODE, StepError
from sqlcipher_storage.models.value import Value, row_to_external


class OutcomeType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ExecuteRequest:
    """One statement of a batch, correlated to its outcome by ``qid``.

    ``params`` holds host values; conversion to :class:`Value` happens per
    request so an unsupported shape only fails that request.
    """

    qid: str
    sql: str
    params: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ExecuteRequest":
        """Decode a wire entry without validating it.

        ``sql`` is kept as sent; :meth:`checked_sql` rejects non-text SQL when
        the request runs.
        """
        qid = raw.get("qid")
        sql = raw.get("sql")
        params = raw.get("params")
        return cls(
            qid="" if qid is None else str(qid),
            sql="" if sql is None else sql,
            params=params if params is not None else [],
        )

    def checked_sql(self) -> str:
        if not isinstance(self.sql, str):
            raise StepError(f"SQL must be text, got {type(self.sql).__name__}")
        return self.sql


@dataclass
class SuccessOutcome:
    qid: str
    rows_affected: int
    rows: list[dict[str, Value]] = field(default_factory=list)
    insert_id: int = 0

    @property
    def type(self) -> OutcomeType:
        return OutcomeType.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "qid": self.qid,
            "result": {
                "rowsAffected": self.rows_affected,
                "rows": [row_to_external(r) for r in self.rows],
                "insertId": self.insert_id,
            },
        }


@dataclass
class FailureOutcome:
    qid: str
    message: str
    code: int = FAILURE_CODE

    @property
    def type(self) -> OutcomeType:
        return OutcomeType.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "qid": self.qid,
            "result": {"code": self.code, "message": self.message},
        }


Outcome = Union[SuccessOutcome, FailureOutcome]
