"""Unit tests for the DB layer — prepared statements and database handles.

Every test uses a fresh temporary directory so tests are isolated and leave
no artefacts on disk.
"""

from __future__ import annotations

import sqlite3
import tempfile
import unittest
from pathlib import Path

from sqlcipher_storage.db.database import DatabaseHandle, load_driver
from sqlcipher_storage.db.statement import PreparedStatement
from sqlcipher_storage.errors import (
    BindError, OpenError, StepError, UnsupportedParameterType,
)
from sqlcipher_storage.models.value import Value


class _TempDirCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()


# ===========================================================================
# 1. Prepared statement
# ===========================================================================

class TestPreparedStatement(_TempDirCase):
    def setUp(self):
        super().setUp()
        self.conn = sqlite3.connect(str(self.root / "s.db"), isolation_level=None)

    def tearDown(self):
        self.conn.close()
        super().tearDown()

    def _stmt(self, sql: str) -> PreparedStatement:
        return PreparedStatement(self.conn, sql, sqlite3)

    def test_finalized_after_success(self):
        stmt = self._stmt("select 1 as one")
        stmt.bind([])
        rows = stmt.run_to_completion()
        self.assertEqual(rows, [{"one": Value.integer(1)}])
        self.assertTrue(stmt.finalized)
        self.assertEqual(stmt.column_count, 1)

    def test_finalized_after_error(self):
        stmt = self._stmt("select * from missing_table")
        stmt.bind([])
        with self.assertRaises(StepError):
            stmt.run_to_completion()
        self.assertTrue(stmt.finalized)

    def test_finalized_by_context_manager(self):
        with self._stmt("select 1") as stmt:
            stmt.bind([])
        self.assertTrue(stmt.finalized)

    def test_unusable_after_finalize(self):
        stmt = self._stmt("select 1")
        stmt.finalize()
        stmt.finalize()
        with self.assertRaises(StepError):
            stmt.run_to_completion()

    def test_bind_only_once(self):
        stmt = self._stmt("select ?")
        stmt.bind([Value.integer(1)])
        with self.assertRaises(BindError):
            stmt.bind([Value.integer(2)])
        stmt.finalize()

    def test_unsupported_shape_fails_before_execution(self):
        stmt = self._stmt("select ?")
        with self.assertRaises(UnsupportedParameterType):
            stmt.bind([[1, 2]])
        stmt.finalize()

    def test_parameter_count_mismatch_is_bind_error(self):
        stmt = self._stmt("select ?, ?")
        stmt.bind([Value.integer(1)])
        with self.assertRaises(BindError):
            stmt.run_to_completion()
        self.assertTrue(stmt.finalized)

    def test_rows_in_step_order(self):
        self.conn.execute("create table t(x)")
        self.conn.executemany("insert into t values (?)", [(3,), (1,), (2,)])
        stmt = self._stmt("select x from t order by rowid")
        stmt.bind([])
        rows = stmt.run_to_completion()
        self.assertEqual([r["x"].data for r in rows], [3, 1, 2])

    def test_runtime_type_not_declared_type(self):
        self.conn.execute("create table t(x integer)")
        self.conn.execute("insert into t values ('text in int column')")
        stmt = self._stmt("select x from t")
        stmt.bind([])
        self.assertEqual(stmt.run_to_completion(), [{"x": Value.text("text in int column")}])

    def test_empty_result(self):
        stmt = self._stmt("select 1 where 0")
        stmt.bind([])
        self.assertEqual(stmt.run_to_completion(), [])

    def test_unencodable_parameter_is_bind_error(self):
        stmt = self._stmt("select ? as v")
        stmt.bind([Value.text("\ud800")])
        with self.assertRaises(BindError):
            stmt.run_to_completion()
        self.assertTrue(stmt.finalized)

    def test_unencodable_sql_is_step_error(self):
        stmt = self._stmt("select '\ud800'")
        stmt.bind([])
        with self.assertRaises(StepError):
            stmt.run_to_completion()
        self.assertTrue(stmt.finalized)
        self.assertEqual(stmt.run_to_completion(), [])


# ===========================================================================
# 2. Database handle
# ===========================================================================

class TestDatabaseHandle(_TempDirCase):
    def setUp(self):
        super().setUp()
        self.db = DatabaseHandle(self.root / "h.db")

    def tearDown(self):
        self.db.close()
        super().tearDown()

    def test_round_trip_every_variant(self):
        cases = [
            (Value.integer(2 ** 62), Value.integer(2 ** 62)),
            (Value.float_(1.5), Value.float_(1.5)),
            (Value.text("héllo"), Value.text("héllo")),
            (Value.null(), Value.null()),
            (Value.boolean(True), Value.integer(1)),
            (Value.boolean(False), Value.integer(0)),
        ]
        for given, expected in cases:
            with self.subTest(given=given):
                rows = self.db.execute_one("select ? as v", [given])
                self.assertEqual(rows, [{"v": expected}])

    def test_blob_reads_as_null(self):
        rows = self.db.execute_one("select x'0102' as b")
        self.assertEqual(rows, [{"b": Value.null()}])

    def test_total_changes_is_live(self):
        self.db.execute_one("create table t(x)")
        before = self.db.total_changes
        self.db.execute_one("insert into t values (1), (2)")
        self.assertEqual(self.db.total_changes - before, 2)

    def test_last_insert_rowid_survives_reads(self):
        self.db.execute_one("create table t(x)")
        self.db.execute_one("insert into t values (?)", [Value.text("a")])
        self.db.execute_one("insert into t values (?)", [Value.text("b")])
        self.db.execute_one("select * from t")
        self.assertEqual(self.db.last_insert_rowid, 2)

    def test_step_error_carries_driver_message(self):
        with self.assertRaises(StepError) as ctx:
            self.db.execute_one("select abs(?)", [Value.integer(-(2 ** 63))])
        self.assertIn("overflow", ctx.exception.message)

    def test_explicit_transactions_in_autocommit(self):
        self.db.execute_one("create table t(x)")
        self.db.execute_one("begin")
        self.db.execute_one("insert into t values (1)")
        self.db.execute_one("rollback")
        self.assertEqual(self.db.execute_one("select count(*) as n from t"), [{"n": Value.integer(0)}])

    def test_closed_handle_rejects_execution(self):
        self.db.close()
        self.assertFalse(self.db.is_open)
        with self.assertRaises(StepError):
            self.db.execute_one("select 1")

    def test_sqlite_version_reported(self):
        self.assertTrue(self.db.sqlite_version().startswith("3."))

    def test_verify_key_on_plain_database(self):
        self.db.verify_key()


class TestDatabaseOpen(_TempDirCase):
    def test_unreachable_path_is_open_error(self):
        with self.assertRaises(OpenError):
            DatabaseHandle(self.root / "no" / "such" / "dir" / "x.db")

    def test_keyed_open_of_non_database_file_fails(self):
        path = self.root / "garbage.db"
        path.write_bytes(b"this is definitely not a sqlite database file" * 100)
        with self.assertRaises(OpenError):
            DatabaseHandle(path, key="secret")

    def test_key_without_cipher_support_is_refused(self):
        path = self.root / "k.db"
        with self.assertRaises(OpenError) as ctx:
            DatabaseHandle(path, key="it's", driver=sqlite3)
        self.assertIn("cipher", ctx.exception.message)
        self.assertNotIn("it's", ctx.exception.message)
        # Nothing was written in plaintext
        self.assertEqual(path.read_bytes() if path.exists() else b"", b"")

    def test_read_only_open(self):
        path = self.root / "ro.db"
        conn = sqlite3.connect(str(path))
        conn.execute("create table t(x)")
        conn.execute("insert into t values (1)")
        conn.commit()
        conn.close()
        db = DatabaseHandle(path, read_only=True)
        try:
            self.assertEqual(db.execute_one("select x from t"), [{"x": Value.integer(1)}])
            with self.assertRaises(StepError) as ctx:
                db.execute_one("insert into t values (2)")
            self.assertIn("readonly", ctx.exception.message)
        finally:
            db.close()

    def test_read_only_never_creates_file(self):
        path = self.root / "absent.db"
        with self.assertRaises(OpenError):
            DatabaseHandle(path, read_only=True)
        self.assertFalse(path.exists())

    def test_missing_driver_is_open_error(self):
        with self.assertRaises(OpenError):
            load_driver("no_such_sqlite_driver_module")


if __name__ == "__main__":
    unittest.main()
