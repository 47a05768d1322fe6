"""Query executors consumed by :class:`~src.server.session.store.SessionStore`.

Statements are written with qmark (``?``) placeholders and parameters are always
bound by the driver, never interpolated into the SQL text.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Protocol, Sequence, runtime_checkable

from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

Params = Sequence[Any]


@runtime_checkable
class QueryExecutor(Protocol):
    async def execute(self, sql: str, params: Params = ()) -> int:
        """Run a statement and return the affected row count (``-1`` if unknown)."""
        ...

    async def fetch_all(self, sql: str, params: Params = ()) -> list[tuple[Any, ...]]:
        """Run a query and return its rows as tuples of raw column values."""
        ...


class SQLiteExecutor:
    """Runs each statement on a short-lived sqlite3 connection in a worker thread."""

    def __init__(self, db_path: str, *, timeout: float = 5.0) -> None:
        path = Path(db_path)
        if db_path == ":memory:":
            raise ValueError("SQLiteExecutor needs a file path; in-memory databases are per-connection")
        if not path.is_absolute():
            path = Path.cwd() / path
        if path.suffix != ".db":
            path = path.with_suffix(".db")
        self._db_path = str(path)
        self._timeout = timeout
        self._prepare()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _prepare(self) -> None:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        with closing(sqlite3.connect(self._db_path, timeout=self._timeout)) as connection:
            connection.execute("PRAGMA journal_mode = WAL;")
        logger.debug("SQLite executor ready at %s", self._db_path)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path, timeout=self._timeout)

    def _execute(self, sql: str, params: Params) -> int:
        with closing(self._connect()) as connection:
            with connection:
                cursor = connection.execute(sql, tuple(params))
                return cursor.rowcount

    def _fetch_all(self, sql: str, params: Params) -> list[tuple[Any, ...]]:
        with closing(self._connect()) as connection:
            cursor = connection.execute(sql, tuple(params))
            return [tuple(row) for row in cursor.fetchall()]

    async def open(self) -> None:  # pragma: no cover - compatibility placeholder
        return None

    async def close(self) -> None:  # pragma: no cover - compatibility placeholder
        return None

    async def execute(self, sql: str, params: Params = ()) -> int:
        return await asyncio.to_thread(self._execute, sql, params)

    async def fetch_all(self, sql: str, params: Params = ()) -> list[tuple[Any, ...]]:
        return await asyncio.to_thread(self._fetch_all, sql, params)


class PostgresExecutor:
    """Executor backed by a psycopg async connection pool."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    @staticmethod
    def to_format_style(sql: str) -> str:
        return sql.replace("%", "%%").replace("?", "%s")

    async def execute(self, sql: str, params: Params = ()) -> int:
        async with self._pool.connection() as connection:
            async with connection.cursor() as cursor:
                await cursor.execute(self.to_format_style(sql), tuple(params))
                return cursor.rowcount

    async def fetch_all(self, sql: str, params: Params = ()) -> list[tuple[Any, ...]]:
        async with self._pool.connection() as connection:
            async with connection.cursor() as cursor:
                await cursor.execute(self.to_format_style(sql), tuple(params))
                rows = await cursor.fetchall()
                return [tuple(row) for row in rows]

    async def open(self) -> None:
        await self._pool.open()

    async def close(self) -> None:
        await self._pool.close()
