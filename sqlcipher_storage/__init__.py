"""sqlcipher-storage — named, optionally encrypted SQLite databases driven by SQL batches."""

from sqlcipher_storage.bridge import BridgeReply, SQLiteBridge
from sqlcipher_storage.db import DatabaseHandle, PreparedStatement
from sqlcipher_storage.models import ExecuteRequest, FailureOutcome, SuccessOutcome, Value
from sqlcipher_storage.services import BatchExecutor, DatabaseRegistry, KeyProvider, LocalFilesystem

__all__ = [
    "BridgeReply", "SQLiteBridge",
    "DatabaseHandle", "PreparedStatement",
    "ExecuteRequest", "FailureOutcome", "SuccessOutcome", "Value",
    "BatchExecutor", "DatabaseRegistry", "KeyProvider", "LocalFilesystem",
]
