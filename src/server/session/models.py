from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SessionRecord:
    sid: str
    expires: int
    data: str
    created_at: int

    def is_expired(self, now_ms: int) -> bool:
        return self.expires <= now_ms
