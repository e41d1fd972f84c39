"""Unit tests for configuration and log redaction."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from sqlcipher_storage.config import StorageSettings
from sqlcipher_storage.utils.redact import redact


class TestRedact(unittest.TestCase):
    def test_pragma_key_masked(self):
        out = redact("PRAGMA key = 'hunter2'")
        self.assertNotIn("hunter2", out)
        self.assertIn("[PASSPHRASE]", out)

    def test_escaped_quote_masked(self):
        out = redact("pragma rekey='it''s a secret'")
        self.assertNotIn("secret", out)

    def test_hex_key_masked(self):
        self.assertNotIn("deadbeef", redact("PRAGMA key = x'deadbeef'"))

    def test_plain_sql_untouched(self):
        sql = "select * from t where k = 'hunter2'"
        self.assertEqual(redact(sql), sql)


class TestStorageSettings(unittest.TestCase):
    def test_environment_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "store"
            env = {"STORAGE_ROOT": str(root), "SQLITE_DRIVER": "sqlcipher3", "LOG_LEVEL": "DEBUG"}
            with patch.dict(os.environ, env):
                settings = StorageSettings()
            self.assertEqual(settings.STORAGE_ROOT, root)
            self.assertEqual(settings.SQLITE_DRIVER, "sqlcipher3")
            self.assertEqual(settings.LOG_LEVEL, "DEBUG")
            self.assertTrue(root.is_dir())

    def test_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {}, clear=False):
                os.environ.pop("SQLITE_DRIVER", None)
                settings = StorageSettings(STORAGE_ROOT=Path(tmp))
            self.assertEqual(settings.SQLITE_DRIVER, "sqlite3")


if __name__ == "__main__":
    unittest.main()
