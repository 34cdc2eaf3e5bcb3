"""
db/errors.py
------------
Exceptions raised by the database layer.

Repositories let these (and psycopg2's own errors) propagate; the service
layer turns them into result envelopes.
"""


class DatabaseError(Exception):
    """Base class for failures originating in the database layer."""


class PoolNotInitializedError(DatabaseError):
    """The pool was used before `DatabasePool.open()` or after `close()`."""


class BackendUnavailableError(DatabaseError):
    """No connection could be obtained: pool exhausted past the timeout, or the server is unreachable."""
