"""Deterministic cleanup of expired wallet sign-in nonces."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from intent.db.models import SiweNonce

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    deleted: int
    remaining: int
    cleaned_at: datetime


async def cleanup_expired_nonces(db: AsyncSession, now: datetime | None = None) -> CleanupReport:
    """Delete every nonce that expired before ``now`` and report what is left."""
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(
        delete(SiweNonce).where(SiweNonce.expires_at < now).returning(SiweNonce.nonce)
    )
    deleted = len(result.scalars().all())
    await db.commit()

    remaining = (await db.execute(select(func.count()).select_from(SiweNonce))).scalar_one()
    logger.info("Cleaned up %d expired nonces (%d remaining)", deleted, remaining)
    return CleanupReport(deleted=deleted, remaining=remaining, cleaned_at=now)
