"""Database layer — SQLite connection handles and prepared statements."""

from sqlcipher_storage.db.database import DatabaseHandle, load_driver
from sqlcipher_storage.db.statement import PreparedStatement, run_statement

__all__ = ["DatabaseHandle", "load_driver", "PreparedStatement", "run_statement"]
