from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import Depends
from psycopg_pool import AsyncConnectionPool

from src.config.loader import get_int_env, get_optional_str_env, get_str_env

from .executor import PostgresExecutor, SQLiteExecutor
from .store import DEFAULT_TTL_SECONDS, SessionStore

logger = logging.getLogger(__name__)

_SESSION_STORE: Optional[SessionStore] = None


def build_executor() -> Union[SQLiteExecutor, PostgresExecutor]:
    """Pick the database executor from configuration; PostgreSQL wins when configured."""
    database_url = get_optional_str_env("SESSION_DATABASE_URL")
    if database_url:
        logger.info("Using PostgreSQL session database")
        return PostgresExecutor(AsyncConnectionPool(database_url, open=False))

    executor = SQLiteExecutor(get_str_env("SESSION_DB_PATH", "sessions.db"))
    logger.info("Using SQLite session database at %s", executor.db_path)
    return executor


async def initialise_session_store() -> SessionStore:
    """Create session store instance using configuration."""
    global _SESSION_STORE
    if _SESSION_STORE is not None:
        return _SESSION_STORE

    executor = build_executor()
    await executor.open()
    store = SessionStore(executor, ttl=get_int_env("SESSION_TTL_SECONDS", DEFAULT_TTL_SECONDS))
    _SESSION_STORE = store
    logger.info("Initialised session store with TTL %ss", store.ttl)
    return store


def set_session_store(store: Optional[SessionStore]) -> None:
    global _SESSION_STORE
    _SESSION_STORE = store


def get_session_store(_: SessionStore = Depends(initialise_session_store)) -> SessionStore:
    if _SESSION_STORE is None:
        raise RuntimeError("Session store has not been initialised")
    return _SESSION_STORE
