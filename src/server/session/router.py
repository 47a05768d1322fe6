from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from .dependencies import get_session_store
from .errors import SessionStoreError
from .schemas import OperationResponse, SessionStatsResponse
from .store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

STORE_UNAVAILABLE_DETAIL = "Session store unavailable"


def _unavailable(exc: SessionStoreError) -> HTTPException:
    logger.error("Session store %s failed: %s", exc.operation or "operation", exc.__cause__ or exc)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE_DETAIL)


@router.get("/stats", response_model=SessionStatsResponse)
async def session_stats(store: SessionStore = Depends(get_session_store)) -> SessionStatsResponse:
    try:
        stored = await store.length()
        live = await store.live_length()
    except SessionStoreError as exc:
        raise _unavailable(exc) from exc
    return SessionStatsResponse(stored=stored, live=live)


@router.post("/prune", response_model=OperationResponse)
async def prune_sessions(store: SessionStore = Depends(get_session_store)) -> OperationResponse:
    await store.prune()
    return OperationResponse(success=True)


@router.delete("", response_model=OperationResponse)
async def clear_sessions(store: SessionStore = Depends(get_session_store)) -> OperationResponse:
    try:
        await store.clear()
    except SessionStoreError as exc:
        raise _unavailable(exc) from exc
    return OperationResponse(success=True)


@router.delete("/{sid}", response_model=OperationResponse)
async def destroy_session(sid: str, store: SessionStore = Depends(get_session_store)) -> OperationResponse:
    try:
        await store.destroy(sid)
    except SessionStoreError as exc:
        raise _unavailable(exc) from exc
    return OperationResponse(success=True)
