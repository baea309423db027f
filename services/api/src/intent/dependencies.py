"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from intent.database import get_session as _get_session
from intent.redis_client import get_redis_or_none as _get_redis_or_none

get_db = _get_session


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client (None when Redis is not configured) as a FastAPI dependency."""
    yield _get_redis_or_none()
