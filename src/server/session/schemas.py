from __future__ import annotations

from pydantic import BaseModel, Field


class SessionStatsResponse(BaseModel):
    stored: int = Field(description="Rows in the sessions table, including expired rows not yet pruned.")
    live: int = Field(description="Rows whose expiry is still in the future.")


class OperationResponse(BaseModel):
    success: bool
