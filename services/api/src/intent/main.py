"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from intent.badges.router import router as badges_router
from intent.badges.seed import seed_badges
from intent.config import get_settings
from intent.database import close_db, get_session, init_db
from intent.health.router import router as health_router
from intent.maintenance.router import router as maintenance_router
from intent.middleware import setup_middleware
from intent.redis_client import close_redis, init_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.redis_url:
        await init_redis(settings.redis_url)

    # Seed badge definitions (idempotent)
    if settings.seed_badges_on_startup:
        try:
            async for db in get_session():
                await seed_badges(db)
                break
        except SQLAlchemyError:
            logger.warning("Badge seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="INTENT Badge Service",
        description="Badge evaluation and proof-of-activity progress for the INTENT platform",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(badges_router)
    app.include_router(maintenance_router)

    return app


app = create_app()
