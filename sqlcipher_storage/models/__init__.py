"""Value and batch models shared by the storage core and the host bridge."""

from sqlcipher_storage.models.value import Value, ValueKind, to_values
from sqlcipher_storage.models.batch import (
    ExecuteRequest, FailureOutcome, Outcome, OutcomeType, SuccessOutcome,
)

__all__ = [
    "Value", "ValueKind", "to_values",
    "ExecuteRequest", "FailureOutcome", "Outcome", "OutcomeType", "SuccessOutcome",
]
