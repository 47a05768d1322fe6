from __future__ import annotations

from typing import Optional


class SessionStoreError(Exception):
    """Raised when a session store operation fails."""

    def __init__(self, message: str, *, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


class StoreConfigurationError(SessionStoreError):
    """Raised synchronously when a store is constructed with invalid options."""
