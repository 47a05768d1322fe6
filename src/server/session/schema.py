from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from .executor import QueryExecutor

logger = logging.getLogger(__name__)


_SESSIONS_DDL = """
CREATE TABLE IF NOT EXISTS sessions (
    sid TEXT PRIMARY KEY,
    expires BIGINT,
    data TEXT,
    created_at BIGINT
);
"""

_EXPIRES_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_sessions_expires ON sessions (expires);"

SCHEMA_STATEMENTS = (_SESSIONS_DDL, _EXPIRES_INDEX_DDL)


def _is_already_exists(exc: BaseException) -> bool:
    return "already exists" in str(exc).lower()


def _is_stale(task: asyncio.Task) -> bool:
    # A task left behind by a closed event loop can never finish.
    return task.done() or task.get_loop().is_closed()


class SchemaInitializer:
    """Creates the sessions table and its expiry index at most once per process.

    ``start`` is safe to call from many stores at once: the in-flight marker is
    checked and set under a single lock, so only one attempt is ever scheduled.
    Failures are logged and clear the marker, letting the next caller retry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._initialized = False
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight is not None and not _is_stale(self._in_flight)

    def start(self, executor: QueryExecutor) -> Optional[asyncio.Task]:
        """Schedule initialisation on the running loop unless done or already pending."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        with self._lock:
            if self._initialized:
                return None
            if self._in_flight is not None and not _is_stale(self._in_flight):
                return self._in_flight
            self._in_flight = None
            if loop is None:
                # Deferred until the first operation runs inside an event loop.
                return None
            task = loop.create_task(self._run(executor), name="session-schema-init")
            self._in_flight = task
            return task

    async def wait(self, executor: QueryExecutor) -> bool:
        """Start initialisation if needed and await it when it runs on this loop."""
        if self._initialized:
            return True
        task = self.start(executor)
        if task is not None and task.get_loop() is asyncio.get_running_loop():
            await asyncio.shield(task)
        return self._initialized

    def reset(self) -> None:
        with self._lock:
            self._initialized = False
            self._in_flight = None

    async def _run(self, executor: QueryExecutor) -> bool:
        try:
            for statement in SCHEMA_STATEMENTS:
                try:
                    await executor.execute(statement)
                except Exception as exc:
                    if not _is_already_exists(exc):
                        raise
                    logger.debug("Schema object already exists: %s", exc)
        except Exception as exc:  # noqa: BLE001 - initialisation must never escape to callers
            logger.error("Failed to initialise SQL session store: %s", exc)
            self._finish(succeeded=False)
            return False

        self._finish(succeeded=True)
        logger.info("SQL session store initialised")
        return True

    def _finish(self, *, succeeded: bool) -> None:
        with self._lock:
            if self._in_flight is asyncio.current_task():
                self._in_flight = None
            if succeeded:
                self._initialized = True


schema_initializer = SchemaInitializer()
