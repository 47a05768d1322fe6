from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .store import SessionStore

logger = logging.getLogger(__name__)


async def run_prune_loop(store: SessionStore, interval_seconds: float) -> None:
    """Prune expired sessions every ``interval_seconds`` until cancelled."""
    logger.info("Session prune loop started (every %ss)", interval_seconds)
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            await store.prune()
    finally:
        logger.info("Session prune loop stopped")


def start_prune_task(store: SessionStore, interval_seconds: float) -> Optional[asyncio.Task]:
    if interval_seconds <= 0:
        logger.info("Session pruning disabled")
        return None
    return asyncio.create_task(run_prune_loop(store, interval_seconds), name="session-prune")


async def stop_prune_task(task: Optional[asyncio.Task]) -> None:
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
