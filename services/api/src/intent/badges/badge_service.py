"""Badge catalog and unlock persistence with duplicate prevention and notification."""

from __future__ import annotations

import json
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intent.badges.schemas import BadgeView, UnlockView
from intent.badges.session import WalletSession
from intent.db.models import Badge, BadgeUnlock

logger = logging.getLogger(__name__)


async def list_active_badges(db: AsyncSession) -> list[BadgeView]:
    """Active catalog ordered by layer, then progression order (unordered last)."""
    result = await db.execute(
        select(Badge)
        .where(Badge.is_active.is_(True))
        .order_by(
            Badge.layer,
            Badge.progression_order.is_(None),
            Badge.progression_order,
            Badge.slug,
        )
    )
    return [BadgeView.model_validate(b) for b in result.scalars()]


async def get_badge_by_slug(db: AsyncSession, slug: str) -> BadgeView | None:
    """Fetch a badge definition by slug."""
    result = await db.execute(select(Badge).where(Badge.slug == slug))
    badge = result.scalar_one_or_none()
    return BadgeView.model_validate(badge) if badge is not None else None


async def get_unlocked_badge_ids(db: AsyncSession, user_id: uuid.UUID) -> set[uuid.UUID]:
    """Badge ids the user has already unlocked."""
    result = await db.execute(
        select(BadgeUnlock.badge_id).where(BadgeUnlock.user_id == user_id)
    )
    return set(result.scalars())


async def list_user_unlocks(db: AsyncSession, user_id: uuid.UUID) -> list[UnlockView]:
    """User's unlocks with their badge, newest first."""
    result = await db.execute(
        select(BadgeUnlock)
        .where(BadgeUnlock.user_id == user_id)
        .order_by(BadgeUnlock.unlocked_at.desc())
    )
    return [UnlockView.model_validate(u) for u in result.unique().scalars()]


async def record_unlock(
    db: AsyncSession,
    redis: object,
    session: WalletSession,
    badge: BadgeView,
    trigger_event: str,
    trigger_tx_hash: str | None = None,
    channel: str = "pubsub:badge_unlocked",
) -> bool:
    """Insert one unlock row and commit it on its own.

    Returns True if stored. Any datastore failure (including losing a race on
    the UNIQUE(user_id, badge_id) constraint) is rolled back and logged, and
    the caller moves on to the next badge.
    """
    unlock = BadgeUnlock(
        user_id=session.user_id,
        wallet_address=session.wallet_address,
        badge_id=badge.id,
        trigger_event=trigger_event,
        trigger_tx_hash=trigger_tx_hash,
        proof_data={},
        is_displayed=True,
    )
    db.add(unlock)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.warning(
            "Failed to unlock badge %s for user %s", badge.slug, session.user_id, exc_info=True
        )
        return False

    logger.info("Unlocked badge %s for wallet %s", badge.name, session.wallet_address)
    await _emit_badge_unlocked(redis, session, badge, trigger_event, channel)
    return True


async def update_unlock_display(
    db: AsyncSession,
    user_id: uuid.UUID,
    unlock_id: uuid.UUID,
    changes: dict[str, object],
) -> UnlockView | None:
    """Apply display preference changes to one of the user's unlocks."""
    result = await db.execute(
        select(BadgeUnlock).where(
            BadgeUnlock.id == unlock_id,
            BadgeUnlock.user_id == user_id,
        )
    )
    unlock = result.unique().scalar_one_or_none()
    if unlock is None:
        return None

    if "is_displayed" in changes and changes["is_displayed"] is not None:
        unlock.is_displayed = bool(changes["is_displayed"])
    if "display_order" in changes:
        unlock.display_order = changes["display_order"]  # type: ignore[assignment]

    await db.commit()
    return UnlockView.model_validate(unlock)


async def _emit_badge_unlocked(
    redis: object,
    session: WalletSession,
    badge: BadgeView,
    trigger_event: str,
    channel: str,
) -> None:
    """Push the unlock to subscribers via Redis pub/sub."""
    if redis is None:
        return
    try:
        await redis.publish(  # type: ignore[attr-defined]
            channel,
            json.dumps({
                "user_id": str(session.user_id),
                "wallet_address": session.wallet_address,
                "badge_slug": badge.slug,
                "badge_name": badge.name,
                "layer": badge.layer,
                "rarity": badge.rarity,
                "trigger_event": trigger_event,
            }),
        )
    except Exception:
        logger.warning("Failed to publish badge_unlocked notification", exc_info=True)
