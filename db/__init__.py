"""
db/ - Database Layer
====================
The PostgreSQL connection pool, the idempotent schema (tables, indexes and
SQL functions), and the error types raised when the database cannot serve
a request. Nothing here knows about services or envelopes.
"""
