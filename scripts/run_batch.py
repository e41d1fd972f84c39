#!/usr/bin/env python3
"""Open a database through the bridge and run SQL statements as one batch.

Usage:
    python scripts/run_batch.py notes.db "create table t(x)" "insert into t values(1)"
    python scripts/run_batch.py notes.db --key s3cret "select * from t"
    python scripts/run_batch.py notes.db --delete
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlcipher_storage.bridge import SQLiteBridge
from sqlcipher_storage.utils import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Run SQL statements against a named database")
    parser.add_argument("name", help="Logical database name under STORAGE_ROOT")
    parser.add_argument("sql", nargs="*", help="Statements, executed in order")
    parser.add_argument("--key", help="Passphrase (use --ask-key to avoid shell history)")
    parser.add_argument("--ask-key", action="store_true", help="Prompt for the passphrase")
    parser.add_argument("--delete", action="store_true", help="Delete the database and exit")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(args.log_level)
    bridge = SQLiteBridge()

    if args.delete:
        reply = bridge.execute("delete", {"path": args.name})
        print(json.dumps(reply.to_dict(), indent=2))
        return 0 if reply.ok else 1

    key = getpass.getpass("Passphrase: ") if args.ask_key else args.key
    reply = bridge.execute("open", {"name": args.name, "key": key})
    if not reply.ok:
        print(json.dumps(reply.to_dict(), indent=2))
        return 1

    try:
        reply = bridge.execute("backgroundExecuteSqlBatch", {
            "dbargs": {"dbname": args.name},
            "executes": [
                {"qid": str(i), "sql": sql, "params": []}
                for i, sql in enumerate(args.sql, start=1)
            ],
        })
        print(json.dumps(reply.to_dict(), indent=2))
    finally:
        bridge.on_destroy()
    return 0 if reply.ok else 1


if __name__ == "__main__":
    sys.exit(main())
