"""Badge API endpoints — event evaluation plus catalog, progress and unlock reads."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from intent.badges import rules
from intent.badges.badge_service import (
    get_badge_by_slug,
    get_unlocked_badge_ids,
    list_active_badges,
    list_user_unlocks,
    update_unlock_display,
)
from intent.badges.engine import BadgeEngine
from intent.badges.progress_service import get_progress
from intent.badges.schemas import (
    AllBadgesResponse,
    BadgeEventRequest,
    BadgeEventResponse,
    BadgeView,
    NextBadgesResponse,
    ProfileBadgesResponse,
    ProgressSnapshot,
    ProgressSummary,
    UnlockDisplayUpdate,
    UnlockView,
    UserUnlocksResponse,
)
from intent.badges.session import InvalidSessionError, WalletSession
from intent.config import get_settings
from intent.dependencies import get_db, get_redis_dep

router = APIRouter(prefix="/api/v1", tags=["Badges"])


# ── Event evaluation ──


@router.post("/badge-service", response_model=BadgeEventResponse)
async def process_badge_event(
    body: BadgeEventRequest,
    db: AsyncSession = Depends(get_db),
    redis: object = Depends(get_redis_dep),
):
    """Apply a wallet activity event and return any badges it unlocked."""
    try:
        session = WalletSession.from_request(body.user_id, body.wallet_address)
    except InvalidSessionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None

    engine = BadgeEngine(db, redis, channel=get_settings().badge_pubsub_channel)
    result = await engine.process(body.action, session, body.event_data)

    return BadgeEventResponse(
        new_unlocks=result.new_unlocks,
        intent_score=result.intent_score,
        current_identity_badge=result.current_identity_badge,
        progress=ProgressSummary(
            total_transactions=result.total_transactions,
            unique_protocols=result.unique_protocols,
            consecutive_days=result.consecutive_days,
        ),
    )


# ── Catalog ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges(db: AsyncSession = Depends(get_db)):
    """Get all active badge definitions."""
    return AllBadgesResponse(badges=await list_active_badges(db))


@router.get("/badges/{slug}", response_model=BadgeView)
async def get_badge(slug: str, db: AsyncSession = Depends(get_db)):
    """Get a single badge definition."""
    badge = await get_badge_by_slug(db, slug)
    if badge is None:
        raise HTTPException(status_code=404, detail="Badge not found")
    return badge


# ── Per-user views ──


@router.get("/users/{user_id}/badge-progress", response_model=ProgressSnapshot)
async def get_badge_progress(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get a user's badge counters, score and identity tier."""
    progress = await get_progress(db, user_id)
    if progress is None:
        raise HTTPException(status_code=404, detail="No badge progress for user")
    return ProgressSnapshot.model_validate(progress)


@router.get("/users/{user_id}/badge-progress/next", response_model=NextBadgesResponse)
async def get_next_badges(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get the three locked badges the user is closest to."""
    progress = await get_progress(db, user_id)
    if progress is None:
        return NextBadgesResponse(entries=[])

    badges = await list_active_badges(db)
    unlocked_ids = await get_unlocked_badge_ids(db, user_id)
    entries = rules.next_badge_progress(badges, ProgressSnapshot.model_validate(progress), unlocked_ids)
    return NextBadgesResponse(entries=entries)


@router.get("/users/{user_id}/badge-unlocks", response_model=UserUnlocksResponse)
async def get_badge_unlocks(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get a user's unlocked badges, newest first."""
    unlocks = await list_user_unlocks(db, user_id)
    return UserUnlocksResponse(unlocks=unlocks, total_unlocked=len(unlocks))


@router.get("/users/{user_id}/profile-badges", response_model=ProfileBadgesResponse)
async def get_profile_badges(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get a user's unlocks grouped by layer for the profile page."""
    badges = await list_active_badges(db)
    unlocks = await list_user_unlocks(db, user_id)
    return ProfileBadgesResponse(**rules.group_profile_badges(badges, unlocks))


@router.patch("/users/{user_id}/badge-unlocks/{unlock_id}", response_model=UnlockView)
async def update_badge_unlock(
    user_id: uuid.UUID,
    unlock_id: uuid.UUID,
    body: UnlockDisplayUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update display preferences (shown / order) of one unlocked badge.

    Only checks that the unlock belongs to ``user_id``. Callers must authenticate
    the wallet owner upstream (the gateway); this service does not.
    """
    changes = body.model_dump(include=body.model_fields_set)
    unlock = await update_unlock_display(db, user_id, unlock_id, changes)
    if unlock is None:
        raise HTTPException(status_code=404, detail="Badge unlock not found")
    return unlock
