"""Background sweep of expired sessions and aged-out page views."""

from __future__ import annotations

import asyncio
import logging

from starlette.concurrency import run_in_threadpool

from tutsin.core.config import settings
from tutsin.services import analytics_service, session_service
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)


def sweep_once(storage: Storage) -> None:
    session_service.cleanup_all_expired_sessions(storage)
    analytics_service.purge_old_page_views(storage, settings.PAGE_VIEW_RETENTION_DAYS)


async def session_sweep_loop(storage: Storage, interval_seconds: int) -> None:
    """Run ``sweep_once`` every ``interval_seconds`` until cancelled."""
    logger.info("Session sweeper starting (interval: %ss)", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await run_in_threadpool(sweep_once, storage)
        except Exception:
            # Keep sweeping; a failed pass is retried on the next tick.
            logger.exception("Session sweep failed")


def main() -> None:
    """Run the sweeper as a standalone process."""
    from tutsin.core.structured_logging import configure_logging
    from tutsin.storage import get_storage

    configure_logging(settings.LOG_LEVEL)
    try:
        asyncio.run(session_sweep_loop(get_storage(), settings.SESSION_SWEEP_INTERVAL_SECONDS))
    except KeyboardInterrupt:
        logger.info("Session sweeper shutting down")


if __name__ == "__main__":
    main()
