import importlib
import os
import unittest
from unittest.mock import MagicMock, patch

import psycopg

from _test_utils import add_src_to_path

add_src_to_path()

db_pool = importlib.import_module("orderlist.web_portal.db_pool")


class DummyConnection:
    def __init__(self):
        self.autocommit = True
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class TestDbPoolSettings(unittest.TestCase):
    def test_pool_sizes_keep_max_above_min(self) -> None:
        with patch.dict(os.environ, {"WEB_DB_POOL_MIN": "5", "WEB_DB_POOL_MAX": "2"}, clear=True):
            self.assertEqual(db_pool._db_pool_sizes(), (5, 5))
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(db_pool._db_pool_sizes(), (1, 8))

    def test_pool_timeout_minimum(self) -> None:
        with patch.dict(os.environ, {"WEB_DB_POOL_TIMEOUT": "0"}, clear=True):
            self.assertEqual(db_pool._db_pool_timeout(), 0.1)

    def test_pool_disabled(self) -> None:
        with patch.dict(os.environ, {"WEB_DB_POOL_ENABLE": "0"}, clear=True):
            self.assertIsNone(db_pool._get_db_pool("postgresql://x"))
        self.assertIsNone(db_pool._get_db_pool(None))


class TestGetDbPool(unittest.TestCase):
    def tearDown(self) -> None:
        db_pool._DB_POOL = None

    def test_pool_created_once(self) -> None:
        with patch.dict(os.environ, {}, clear=True), patch.object(
            db_pool, "ConnectionPool"
        ) as pool_cls:
            first = db_pool._get_db_pool("postgresql://x")
            second = db_pool._get_db_pool("postgresql://x")
        self.assertIs(first, second)
        pool_cls.assert_called_once()

    def test_pool_init_failure_falls_back(self) -> None:
        with patch.dict(os.environ, {}, clear=True), patch.object(
            db_pool, "ConnectionPool", side_effect=psycopg.OperationalError("no")
        ):
            with self.assertLogs(db_pool.logger, level="WARNING"):
                self.assertIsNone(db_pool._get_db_pool("postgresql://x"))

    def test_close_db_pool(self) -> None:
        pool = MagicMock()
        db_pool._DB_POOL = pool
        db_pool.close_db_pool()
        pool.close.assert_called_once()
        self.assertIsNone(db_pool._DB_POOL)
        db_pool.close_db_pool()


class TestDbConnection(unittest.TestCase):
    def test_requires_database_url(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                with db_pool.db_connection():
                    pass

    def test_direct_connection_commits_and_closes(self) -> None:
        conn = DummyConnection()
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://x"}, clear=True), patch.object(
            db_pool.psycopg, "connect", return_value=conn
        ) as connect:
            with db_pool.db_connection(connect_timeout=3, force_direct=True) as active:
                self.assertIs(active, conn)
                self.assertFalse(active.autocommit)
        connect.assert_called_once_with("postgresql://x", connect_timeout=3)
        self.assertTrue(conn.committed)
        self.assertTrue(conn.closed)
        self.assertTrue(conn.autocommit)

    def test_direct_connection_rolls_back_on_error(self) -> None:
        conn = DummyConnection()
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://x"}, clear=True), patch.object(
            db_pool.psycopg, "connect", return_value=conn
        ):
            with self.assertRaises(ValueError):
                with db_pool.db_connection(force_direct=True):
                    raise ValueError("boom")
        self.assertTrue(conn.rolled_back)
        self.assertFalse(conn.committed)
        self.assertTrue(conn.closed)

    def test_pool_timeout_becomes_storage_error(self) -> None:
        pool = MagicMock()
        pool.connection.side_effect = db_pool.PoolTimeout("busy")
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://x"}, clear=True), patch.object(
            db_pool, "_get_db_pool", return_value=pool
        ):
            with self.assertRaises(db_pool.StorageError) as ctx, self.assertLogs(
                db_pool.logger, level="WARNING"
            ):
                with db_pool.db_connection():
                    pass
        self.assertIn("exhausted", str(ctx.exception))
        self.assertEqual(ctx.exception.stage, "connect")
        self.assertIsInstance(ctx.exception, RuntimeError)


if __name__ == "__main__":
    unittest.main()
