"""
PostgreSQL client backed by a psycopg connection pool.

Only the experiment store talks to the database; the descriptor path never
does.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from torii.logging_utils import perf

LOGGER = logging.getLogger(__name__)


class DatabaseClient:
    """Thin wrapper around a psycopg connection pool."""

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 4,
        connection_config: Optional[Dict[str, Any]] = None,
    ) -> None:
        if min_size < 1 or max_size < 1 or min_size > max_size:
            raise ValueError("Pool size must be positive and min_size <= max_size.")

        self._pool = ConnectionPool(
            conninfo=dsn,
            min_size=min_size,
            max_size=max_size,
            kwargs=connection_config or {},
        )
        LOGGER.debug("Database pool ready (min=%s max=%s)", min_size, max_size)

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection, None, None]:
        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Generator[psycopg.Connection, None, None]:
        with self.connection() as conn:
            with conn.transaction():
                yield conn

    @perf("db.execute", tags={"component": "db"})
    def execute(self, query: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Run a write statement in its own transaction."""
        with self.transaction() as conn:
            with conn.cursor() as cur:
                LOGGER.debug("Executing query: %s params=%s", query, params)
                cur.execute(query, params or {})

    @perf("db.fetch_all", tags={"component": "db"})
    def fetch_all(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params or {})
                return cur.fetchall()

    @perf("db.fetch_one", tags={"component": "db"})
    def fetch_one(self, query: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Run a statement and return its first row, or None.

        Goes through a transaction so ``INSERT ... RETURNING`` is committed.
        """
        with self.transaction() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params or {})
                return cur.fetchone()

    def close(self) -> None:
        LOGGER.debug("Closing database pool")
        self._pool.close()

    def __enter__(self) -> "DatabaseClient":
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.close()


__all__ = ["DatabaseClient"]
