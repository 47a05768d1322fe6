from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Mapping, Optional

from .errors import SessionStoreError, StoreConfigurationError
from .executor import QueryExecutor
from .models import SessionRecord
from .schema import SchemaInitializer, schema_initializer

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 86400

Clock = Callable[[], int]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _cookie_max_age(session: Mapping[str, Any]) -> Optional[float]:
    cookie = session.get("cookie")
    if not isinstance(cookie, Mapping):
        return None
    max_age = cookie.get("maxAge", cookie.get("max_age"))
    # bool is an int subclass but never a meaningful max-age.
    if isinstance(max_age, bool) or not isinstance(max_age, (int, float)):
        return None
    return max_age


class SessionStore:
    """SQL-backed store for serialized web sessions with time-based expiry.

    Every operation is a coroutine issuing a single statement through the
    injected executor. Database failures are raised as ``SessionStoreError``
    with the driver exception attached as ``__cause__``. Expired rows read as
    absent until ``prune`` removes them.
    """

    def __init__(
        self,
        executor: Optional[QueryExecutor],
        *,
        ttl: int = DEFAULT_TTL_SECONDS,
        initializer: Optional[SchemaInitializer] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if executor is None:
            raise StoreConfigurationError("SessionStore: database executor required")
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
            raise StoreConfigurationError(f"SessionStore: ttl must be a positive number, got {ttl!r}")

        self._executor = executor
        self._ttl = ttl
        self._initializer = initializer or schema_initializer
        self._clock = clock or _now_ms

        self._initializer.start(executor)

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def executor(self) -> QueryExecutor:
        return self._executor

    async def init(self) -> bool:
        """Wait for schema initialisation; returns whether the schema is in place."""
        return await self._initializer.wait(self._executor)

    async def close(self) -> None:
        close = getattr(self._executor, "close", None)
        if close is not None:
            await close()

    async def get(self, sid: str) -> Optional[dict[str, Any]]:
        await self.init()
        try:
            rows = await self._executor.fetch_all(
                "SELECT data FROM sessions WHERE sid = ? AND expires > ?",
                (sid, self._clock()),
            )
            if not rows:
                return None
            return json.loads(rows[0][0])
        except Exception as exc:
            raise SessionStoreError(f"Failed to load session {sid}", operation="get") from exc

    async def set(self, sid: str, session: Mapping[str, Any]) -> None:
        await self.init()
        try:
            now = self._clock()
            data = json.dumps(session)
            await self._executor.execute(
                "INSERT INTO sessions (sid, expires, data, created_at) VALUES (?, ?, ?, ?)"
                " ON CONFLICT (sid) DO UPDATE SET expires = excluded.expires, data = excluded.data",
                (sid, self._expires_at(session, now), data, now),
            )
        except Exception as exc:
            raise SessionStoreError(f"Failed to save session {sid}", operation="set") from exc

    async def touch(self, sid: str, session: Mapping[str, Any]) -> None:
        await self.init()
        try:
            await self._executor.execute(
                "UPDATE sessions SET expires = ? WHERE sid = ?",
                (self._expires_at(session, self._clock()), sid),
            )
        except Exception as exc:
            raise SessionStoreError(f"Failed to touch session {sid}", operation="touch") from exc

    async def destroy(self, sid: str) -> None:
        await self.init()
        try:
            await self._executor.execute("DELETE FROM sessions WHERE sid = ?", (sid,))
        except Exception as exc:
            raise SessionStoreError(f"Failed to destroy session {sid}", operation="destroy") from exc

    async def clear(self) -> None:
        await self.init()
        try:
            await self._executor.execute("DELETE FROM sessions")
        except Exception as exc:
            raise SessionStoreError("Failed to clear sessions", operation="clear") from exc

    async def length(self) -> int:
        """Count stored rows, including expired rows that have not been pruned."""
        await self.init()
        try:
            rows = await self._executor.fetch_all("SELECT COUNT(*) FROM sessions")
        except Exception as exc:
            raise SessionStoreError("Failed to count sessions", operation="length") from exc
        return _to_count(rows)

    async def live_length(self) -> int:
        """Count rows whose expiry is still in the future."""
        await self.init()
        try:
            rows = await self._executor.fetch_all(
                "SELECT COUNT(*) FROM sessions WHERE expires > ?",
                (self._clock(),),
            )
        except Exception as exc:
            raise SessionStoreError("Failed to count live sessions", operation="live_length") from exc
        return _to_count(rows)

    async def get_record(self, sid: str) -> Optional[SessionRecord]:
        """Return the raw row for ``sid`` whether or not it has expired."""
        await self.init()
        try:
            rows = await self._executor.fetch_all(
                "SELECT sid, expires, data, created_at FROM sessions WHERE sid = ?",
                (sid,),
            )
        except Exception as exc:
            raise SessionStoreError(f"Failed to load record {sid}", operation="get_record") from exc
        if not rows:
            return None
        row_sid, expires, data, created_at = rows[0]
        return SessionRecord(sid=row_sid, expires=int(expires), data=data, created_at=int(created_at))

    async def prune(self) -> None:
        await self.init()
        try:
            removed = await self._executor.execute(
                "DELETE FROM sessions WHERE expires < ?",
                (self._clock(),),
            )
        except Exception as exc:  # noqa: BLE001 - nobody awaits housekeeping results
            logger.error("Failed to prune expired sessions: %s", exc)
            return
        logger.info("Pruned expired sessions (%s removed)", max(removed, 0))

    def _expires_at(self, session: Mapping[str, Any], now: int) -> int:
        max_age = _cookie_max_age(session)
        if max_age is None:
            return now + int(self._ttl * 1000)
        return now + int(max_age)


def _to_count(rows: list[tuple[Any, ...]]) -> int:
    if not rows or rows[0][0] is None:
        return 0
    return int(rows[0][0])
