"""Progress store access — lazy creation and locked reads."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intent.badges.session import WalletSession
from intent.db.models import UserBadgeProgress

logger = logging.getLogger(__name__)


async def get_progress(db: AsyncSession, user_id: uuid.UUID) -> UserBadgeProgress | None:
    """Fetch a user's progress row, if any."""
    result = await db.execute(
        select(UserBadgeProgress).where(UserBadgeProgress.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_progress(
    db: AsyncSession,
    session: WalletSession,
    for_update: bool = False,
) -> UserBadgeProgress:
    """Get the user's progress row, creating a zeroed one on first activity.

    With ``for_update`` the row is locked until the caller commits, so two
    events for the same user apply their counter updates one after the other
    (PostgreSQL; a no-op on SQLite).
    """
    stmt = select(UserBadgeProgress).where(UserBadgeProgress.user_id == session.user_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    progress = result.scalar_one_or_none()
    if progress is None:
        progress = UserBadgeProgress(
            user_id=session.user_id,
            wallet_address=session.wallet_address,
            total_transactions=0,
            unique_protocols=0,
            protocols_interacted=[],
            consecutive_days=0,
            last_active_date=None,
            max_consecutive_days=0,
            social_shares=0,
            total_engagement=0,
            voice_state=0,
            intent_score=0.0,
            current_identity_badge=None,
        )
        db.add(progress)
        await db.flush()
        logger.info("Created badge progress for user %s (wallet %s)", session.user_id, session.wallet_address)
    return progress
