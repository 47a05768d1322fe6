from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from src.server.session.executor import SQLiteExecutor
from src.server.session.schema import SchemaInitializer, schema_initializer
from src.server.session.store import SessionStore

T0 = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingExecutor:
    """Executor that records statements and fails on configured SQL fragments."""

    def __init__(self) -> None:
        self.statements: list[str] = []
        self.failures: dict[str, Exception] = {}

    def fail_on(self, fragment: str, exc: Exception) -> None:
        self.failures[fragment] = exc

    def count(self, fragment: str) -> int:
        return sum(1 for statement in self.statements if fragment in statement)

    async def _record(self, sql: str) -> None:
        self.statements.append(sql)
        await asyncio.sleep(0)
        for fragment, exc in self.failures.items():
            if fragment in sql:
                raise exc

    async def execute(self, sql: str, params: Any = ()) -> int:
        await self._record(sql)
        return 0

    async def fetch_all(self, sql: str, params: Any = ()) -> list[tuple[Any, ...]]:
        await self._record(sql)
        return []


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def initializer() -> SchemaInitializer:
    return SchemaInitializer()


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def sqlite_executor(tmp_path) -> SQLiteExecutor:
    return SQLiteExecutor(str(tmp_path / "sessions.db"))


@pytest.fixture
def make_store(sqlite_executor, initializer, clock):
    def _make(executor: Optional[Any] = None, **kwargs: Any) -> SessionStore:
        kwargs.setdefault("initializer", initializer)
        kwargs.setdefault("clock", clock)
        return SessionStore(executor or sqlite_executor, **kwargs)

    return _make


@pytest.fixture
def store(make_store) -> SessionStore:
    return make_store()


@pytest.fixture(autouse=True)
def _reset_process_schema_guard():
    schema_initializer.reset()
    yield
    schema_initializer.reset()
