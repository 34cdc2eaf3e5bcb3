"""Tests for DatabasePool lifecycle, acquisition limits and transaction handling"""

import psycopg2
import pytest
from unittest.mock import MagicMock, patch

from db.connection import DatabasePool
from db.errors import BackendUnavailableError, PoolNotInitializedError


@pytest.fixture
def pg_pool():
    """Patch psycopg2's ThreadedConnectionPool and hand back (DatabasePool, inner pool, connection)."""
    with patch("db.connection.pool.ThreadedConnectionPool") as pool_cls:
        inner = pool_cls.return_value
        conn = MagicMock()
        conn.closed = 0
        inner.getconn.return_value = conn
        db = DatabasePool(dsn="postgresql://test", min_conn=1, max_conn=2, timeout=0.05)
        db.open()
        yield db, inner, conn
        db.close()


class TestLifecycle:

    def test_use_before_open(self):
        db = DatabasePool(dsn="postgresql://test")
        assert not db.is_open
        with pytest.raises(PoolNotInitializedError):
            with db.cursor():
                pass

    def test_open_is_idempotent(self, pg_pool):
        db, _, _ = pg_pool
        with patch("db.connection.pool.ThreadedConnectionPool") as second:
            db.open()
        second.assert_not_called()
        assert db.is_open

    def test_unreachable_database(self):
        with patch("db.connection.pool.ThreadedConnectionPool", side_effect=psycopg2.OperationalError("refused")):
            db = DatabasePool(dsn="postgresql://test")
            with pytest.raises(BackendUnavailableError):
                db.open()
        assert not db.is_open

    def test_close(self, pg_pool):
        db, inner, _ = pg_pool
        db.close()
        inner.closeall.assert_called_once()
        assert not db.is_open


class TestAcquisition:

    def test_exhausted_pool_times_out(self, pg_pool):
        db, _, _ = pg_pool
        with db.connection(), db.connection():
            with pytest.raises(BackendUnavailableError):
                with db.connection():
                    pass

    def test_slot_released_after_use(self, pg_pool):
        db, inner, conn = pg_pool
        for _ in range(5):
            with db.connection():
                pass
        assert inner.putconn.call_count == 5

    def test_getconn_failure(self, pg_pool):
        db, inner, _ = pg_pool
        inner.getconn.side_effect = psycopg2.pool.PoolError("connection pool exhausted")
        with pytest.raises(BackendUnavailableError):
            with db.connection():
                pass
        inner.getconn.side_effect = None
        with db.connection(), db.connection():
            pass

    def test_broken_connection_discarded(self, pg_pool):
        db, inner, conn = pg_pool
        with db.connection():
            conn.closed = 2
        inner.putconn.assert_called_once_with(conn, close=True)


class TestCursor:

    def test_commit(self, pg_pool):
        db, _, conn = pg_pool
        with db.cursor(commit=True) as cur:
            cur.execute("INSERT INTO t VALUES (%s);", (1,))
        conn.commit.assert_called_once()
        conn.rollback.assert_not_called()

    def test_reads_roll_back(self, pg_pool):
        db, _, conn = pg_pool
        with db.cursor():
            pass
        conn.commit.assert_not_called()
        conn.rollback.assert_called_once()

    def test_error_rolls_back_and_propagates(self, pg_pool):
        db, inner, conn = pg_pool
        with pytest.raises(ValueError):
            with db.cursor(commit=True):
                raise ValueError("boom")
        conn.commit.assert_not_called()
        conn.rollback.assert_called_once()
        inner.putconn.assert_called_once_with(conn, close=False)
