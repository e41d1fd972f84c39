"""Error taxonomy for the storage core.

Driver exceptions (the ``sqlite3.Error`` family) are translated into these
types at the statement/handle seam and never escape past it.
"""

from __future__ import annotations

from typing import Optional

# Fixed code reported for per-statement failures inside a batch.
FAILURE_CODE = -1


class StorageError(Exception):
    """Base class for every error raised by the storage core."""

    def __init__(self, message: str, code: Optional[int] = None, name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.name = name

    @classmethod
    def from_driver(cls, exc: Exception, context: str = "") -> "StorageError":
        """Wrap a driver exception, keeping its extended error code when exposed."""
        detail = str(exc) or exc.__class__.__name__
        message = f"{context}: {detail}" if context else detail
        return cls(
            message,
            code=getattr(exc, "sqlite_errorcode", None),
            name=getattr(exc, "sqlite_errorname", None),
        )


class OpenError(StorageError):
    """Connection could not be established."""


class IntegrityError(OpenError):
    """Passphrase validation probe failed."""


class BindError(StorageError):
    """Parameter binding rejected by the driver."""


class UnsupportedParameterType(BindError):
    """A parameter has a shape the value model cannot represent."""


class StepError(StorageError):
    """Execution failed mid-statement."""


class NotFound(StorageError):
    """Operation referenced an unregistered logical database name."""


class DatabaseNotFound(NotFound):
    """Batch targeted a database that is not open."""


class FileMissing(StorageError):
    """Expected backing file is absent."""


class DeleteError(StorageError):
    """The filesystem refused to delete a database file."""


class UnknownAction(StorageError):
    """The bridge was asked for an action it does not dispatch."""
