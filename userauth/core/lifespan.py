"""Application lifespan: startup and shutdown.

Single place for startup/shutdown logic. Used by main.py; no business logic
here, only wiring of infrastructure (logging, ledger sweep task, DB engine dispose).
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from userauth.core.config import get_settings
from userauth.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def sweep_expired_tokens() -> int:
    """Delete expired ledger rows in a transaction of their own. Returns rows removed."""
    from userauth.infrastructure.persistence.database import get_session_factory
    from userauth.infrastructure.persistence.repositories import TokenLedger

    session_factory = get_session_factory()
    async with session_factory() as session:
        async with session.begin():
            return await TokenLedger(session).cleanup_expired()


async def run_token_cleanup(interval_seconds: int) -> None:
    """Sweep the ledger every interval_seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await sweep_expired_tokens()
        except Exception:
            # Keep the loop alive; the next tick retries.
            logger.exception("Token ledger cleanup failed")


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, ledger cleanup task (if enabled). Shutdown: cleanup
    task cancel, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()

    if settings.token_cleanup_interval_seconds > 0:
        app.state.token_cleanup_task = asyncio.create_task(
            run_token_cleanup(settings.token_cleanup_interval_seconds)
        )
        logger.info(
            "Token ledger cleanup every %d seconds",
            settings.token_cleanup_interval_seconds,
        )
    else:
        app.state.token_cleanup_task = None

    yield

    # ---- Shutdown ----
    cleanup_task = getattr(app.state, "token_cleanup_task", None)
    if cleanup_task is not None:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        logger.info("Token ledger cleanup task stopped")

    from userauth.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
