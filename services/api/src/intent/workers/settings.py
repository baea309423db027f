"""arq worker for scheduled maintenance.

Import path for arq CLI: arq intent.workers.settings.WorkerSettings
"""

from __future__ import annotations

import logging

from arq import cron
from arq.connections import RedisSettings

from intent.config import get_settings
from intent.database import close_db, get_session, init_db
from intent.maintenance.nonce_cleanup import cleanup_expired_nonces

logger = logging.getLogger(__name__)


async def startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize the database on worker startup."""
    settings = get_settings()
    await init_db(settings.database_url)
    logger.info("Maintenance worker started")


async def shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Dispose of the database engine on worker shutdown."""
    await close_db()
    logger.info("Maintenance worker shut down")


async def cleanup_nonces(ctx: dict) -> int:  # type: ignore[type-arg]
    """Periodic task to delete expired sign-in nonces."""
    async for session in get_session():
        report = await cleanup_expired_nonces(session)
        return report.deleted
    return 0


def _cleanup_minutes() -> set[int]:
    """Minutes of the hour at which the cleanup cron fires."""
    interval = max(1, min(get_settings().nonce_cleanup_interval_minutes, 60))
    return set(range(0, 60, interval))


class WorkerSettings:
    """arq worker settings for maintenance jobs."""

    functions = [cleanup_nonces]
    cron_jobs = [
        cron(cleanup_nonces, minute=_cleanup_minutes(), run_at_startup=True),
    ]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(get_settings().redis_url)
    max_jobs = 4
