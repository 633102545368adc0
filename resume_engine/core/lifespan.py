import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from resume_engine.core.config import settings
from resume_engine.core.resume_store import close_connections
from resume_engine.services.resume_service import build_resume_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    service = getattr(app.state, "resume_service", None)
    if service is None:
        service = build_resume_service()
        app.state.resume_service = service

    stop_event = asyncio.Event()
    interval = max(1, settings.store_purge_interval_seconds)

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = service.purge_expired()
                if any(deleted.values()):
                    logger.info("store_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover - keep the loop alive
                logger.warning("store_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    close_connections()
