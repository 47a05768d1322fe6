# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from src.config.loader import get_bool_env, get_int_env, get_str_env
from src.server.session.dependencies import initialise_session_store, set_session_store
from src.server.session.pruning import start_prune_task, stop_prune_task
from src.server.session.router import router as session_router

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_PRUNE_INTERVAL_SECONDS = 900


@asynccontextmanager
async def lifespan(_: FastAPI):
    session_store = await initialise_session_store()
    if not await session_store.init():
        logger.warning("Session schema is not ready; store operations will fail until it is created")
    set_session_store(session_store)

    if get_bool_env("SESSION_PRUNE_ON_STARTUP", True):
        await session_store.prune()
    prune_task = start_prune_task(
        session_store,
        get_int_env("SESSION_PRUNE_INTERVAL_SECONDS", DEFAULT_PRUNE_INTERVAL_SECONDS),
    )
    try:
        yield
    finally:
        await stop_prune_task(prune_task)
        await session_store.close()
        set_session_store(None)


def create_app() -> FastAPI:
    application = FastAPI(
        title="SQL Session Store",
        description="Administrative API for the SQL-backed session store",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.include_router(session_router)
    return application


app = create_app()


def serve() -> None:
    """Entry-point for the ``sql-session-store`` console script."""
    import uvicorn

    logging.basicConfig(
        level=get_str_env("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "src.server.app:app",
        host=get_str_env("HOST", "127.0.0.1"),
        port=get_int_env("PORT", 8000),
        log_level="info",
    )
