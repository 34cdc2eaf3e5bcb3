"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.

`DatabasePool` is created once at startup, opened explicitly, and handed to
every repository. It wraps psycopg2's ThreadedConnectionPool with a bounded
semaphore so that callers block (up to a timeout) for a free slot instead of
failing immediately when every connection is checked out.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2 import pool, extras

from config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN, DB_POOL_TIMEOUT_SECONDS
from db.errors import BackendUnavailableError, PoolNotInitializedError
from utils.logger import get_logger

logger = get_logger(__name__)


class DatabasePool:
    """
    Process-wide handle to a fixed-size pool of PostgreSQL connections.

    Usage:
        db = DatabasePool()
        db.open()
        with db.cursor(commit=True) as cur:
            cur.execute("INSERT ...", params)
        db.close()
    """

    def __init__(
        self,
        dsn: str = DATABASE_URL,
        min_conn: int = DB_POOL_MIN,
        max_conn: int = DB_POOL_MAX,
        timeout: float = DB_POOL_TIMEOUT_SECONDS,
    ):
        self.dsn = dsn
        self.min_conn = min_conn
        self.max_conn = max_conn
        self.timeout = timeout
        self._pool: Optional[pool.ThreadedConnectionPool] = None
        self._slots = threading.BoundedSemaphore(max_conn)

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        """
        Initialize the database connection pool.

        Raises:
            BackendUnavailableError: If the database is unreachable.
        """
        if self._pool is not None:
            return
        try:
            self._pool = pool.ThreadedConnectionPool(self.min_conn, self.max_conn, self.dsn)
            logger.info(
                f"Database connection pool initialized (min={self.min_conn}, max={self.max_conn})."
            )
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise BackendUnavailableError("Database is unreachable") from e

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database connection pool closed.")

    @contextmanager
    def connection(self) -> Iterator["psycopg2.extensions.connection"]:
        """
        Borrow a connection for the duration of the ``with`` block.

        Blocks until a slot frees or ``timeout`` elapses.

        Raises:
            PoolNotInitializedError: If `open()` has not been called.
            BackendUnavailableError: On acquisition timeout or connection failure.
        """
        if self._pool is None:
            raise PoolNotInitializedError("Database pool not initialized. Call open() first.")
        if not self._slots.acquire(timeout=self.timeout):
            logger.error(f"Timed out after {self.timeout}s waiting for a database connection")
            raise BackendUnavailableError("Timed out waiting for a database connection")
        try:
            try:
                conn = self._pool.getconn()
            except (pool.PoolError, psycopg2.OperationalError) as e:
                logger.error(f"Failed to acquire database connection: {e}")
                raise BackendUnavailableError("Could not acquire a database connection") from e
            try:
                yield conn
            finally:
                # Broken connections are discarded rather than returned for reuse
                self._pool.putconn(conn, close=bool(conn.closed))
        finally:
            self._slots.release()

    @contextmanager
    def cursor(self, commit: bool = False) -> Iterator["extras.RealDictCursor"]:
        """
        Yield a dict-row cursor on a pooled connection.

        Args:
            commit: Commit when the block exits cleanly. Reads leave this off
                and the transaction is rolled back on release.
        """
        with self.connection() as conn:
            try:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    yield cur
                if commit:
                    conn.commit()
                else:
                    conn.rollback()
            except Exception:
                if not conn.closed:
                    conn.rollback()
                raise
