"""Batch executor — runs ordered statements against one database.

Each request is executed independently by :func:`run_request`, which returns
an outcome instead of raising; one request failing never aborts the batch.
``rows_affected`` is the change-counter delta caused by that request alone,
even though every write shares the connection's cumulative counter.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlcipher_storage.db.database import DatabaseHandle
from sqlcipher_storage.errors import StorageError
from sqlcipher_storage.models.batch import ExecuteRequest, FailureOutcome, Outcome, SuccessOutcome
from sqlcipher_storage.models.value import to_values
from sqlcipher_storage.services.registry import DatabaseRegistry
from sqlcipher_storage.utils.redact import redact

logger = logging.getLogger(__name__)


def run_request(handle: DatabaseHandle, request: ExecuteRequest) -> Outcome:
    """Execute one request and convert any storage error into a failure."""
    try:
        sql = request.checked_sql()
        params = to_values(request.params)
        before = handle.total_changes
        rows = handle.execute_one(sql, params)
        rows_affected = handle.total_changes - before
        insert_id = handle.last_insert_rowid
    except StorageError as exc:
        logger.warning(f"Query {request.qid} failed: {redact(exc.message)}")
        return FailureOutcome(qid=request.qid, message=exc.message)
    return SuccessOutcome(
        qid=request.qid,
        rows_affected=rows_affected,
        rows=rows,
        insert_id=insert_id,
    )


class BatchExecutor:
    """Maps batches onto the databases held by a registry."""

    def __init__(self, registry: DatabaseRegistry):
        self._registry = registry

    def execute_batch(
        self, db_name: str, requests: Iterable[ExecuteRequest | dict[str, Any]]
    ) -> list[Outcome]:
        """Run ``requests`` in order against ``db_name``.

        Raises ``DatabaseNotFound`` before any request runs when the database
        is not open. Returns exactly one outcome per request, in order.
        """
        handle = self._registry.get(db_name)
        outcomes: list[Outcome] = []
        for request in requests:
            if not isinstance(request, ExecuteRequest):
                request = ExecuteRequest.from_dict(request)
            outcomes.append(run_request(handle, request))
        failed = sum(1 for o in outcomes if isinstance(o, FailureOutcome))
        logger.debug(f"Batch on {db_name}: {len(outcomes)} statement(s), {failed} failed")
        return outcomes
