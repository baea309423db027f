"""Badge rules — criteria checks, streaks, voice state and intent score.

Everything here is a pure function of the transfer objects, so the engine
and the read endpoints share one definition of what a badge requires.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from intent.badges.schemas import BadgeProgressEntry, BadgeView, ProgressSnapshot, UnlockView

# (counter, denominator, cap); each contribution is capped before summing.
SCORE_WEIGHTS: list[tuple[str, int, float]] = [
    ("total_transactions", 50, 2.0),
    ("unique_protocols", 5, 2.0),
    ("consecutive_days", 10, 3.0),
    ("max_consecutive_days", 15, 2.0),
    ("social_shares", 10, 1.0),
]
MAX_INTENT_SCORE = 10.0

# Criteria keys the engine enforces. Anything else in a badge's criteria is
# catalog metadata with no evaluation logic yet.
EVALUATED_CRITERIA = frozenset({
    "min_transactions",
    "min_consecutive_days",
    "min_protocols",
    "verified_on_chain",
})

# Order matters: the first key present drives the "next badge" progress bar.
PROGRESS_CRITERIA: list[tuple[str, str, str]] = [
    ("min_transactions", "total_transactions", "transactions"),
    ("min_consecutive_days", "consecutive_days", "consecutive days"),
    ("min_protocols", "unique_protocols", "protocols"),
]

MAX_DISPLAYED_EVENT_BADGES = 3


# --- Score ---


def calculate_intent_score(progress: ProgressSnapshot) -> float:
    """Intent score in [0, 10], rounded to two decimals."""
    score = 0.0
    for counter, denominator, cap in SCORE_WEIGHTS:
        score += min(getattr(progress, counter) / denominator, cap)
    return round(min(score, MAX_INTENT_SCORE), 2)


def calculate_voice_state(social_shares: int, total_engagement: int) -> int:
    """Voice badge state 0-3 from share count and accumulated engagement."""
    if social_shares >= 10 and total_engagement >= 100:
        return 3
    if social_shares >= 5:
        return 2
    if social_shares >= 1:
        return 1
    return 0


# --- Streaks ---


def utc_today(now: datetime | None = None) -> date:
    """Calendar day in UTC used for streak bookkeeping."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


def next_consecutive_days(last_active: date | None, today: date, current: int) -> int:
    """Streak length after activity on ``today``.

    Same day keeps the streak, the following day extends it, any gap
    (or no history) restarts it at 1.
    """
    if last_active == today:
        return current
    if last_active == today - timedelta(days=1):
        return current + 1
    return 1


# --- Criteria ---


def within_event_window(badge: BadgeView, now: datetime) -> bool:
    """True when the badge has no window, or ``now`` falls inside it (inclusive)."""
    if badge.event_window_start is None or badge.event_window_end is None:
        return True
    return badge.event_window_start <= now <= badge.event_window_end


def meets_criteria(badge: BadgeView, progress: ProgressSnapshot, now: datetime) -> bool:
    """Check every enforced criterion (logical AND). Falsy thresholds are skipped."""
    criteria = badge.criteria

    min_transactions = criteria.get("min_transactions")
    if min_transactions and progress.total_transactions < min_transactions:
        return False

    min_consecutive = criteria.get("min_consecutive_days")
    if min_consecutive and progress.consecutive_days < min_consecutive:
        return False

    min_protocols = criteria.get("min_protocols")
    if min_protocols and progress.unique_protocols < min_protocols:
        return False

    if criteria.get("verified_on_chain") and progress.total_transactions < 1:
        return False

    return within_event_window(badge, now)


def unimplemented_criteria(badge: BadgeView) -> set[str]:
    """Criteria keys present on the badge that no rule evaluates."""
    return set(badge.criteria) - EVALUATED_CRITERIA


# --- Identity tier ---


def current_identity_badge(
    badges: Iterable[BadgeView],
    unlocked_ids: set[uuid.UUID],
    new_slugs: Iterable[str] = (),
) -> str | None:
    """Slug of the highest-order identity progression badge the user holds."""
    new = set(new_slugs)
    tiers = sorted(
        (b for b in badges if b.layer == "identity" and b.is_progression),
        key=lambda b: b.progression_order or 0,
        reverse=True,
    )
    for badge in tiers:
        if badge.id in unlocked_ids or badge.slug in new:
            return badge.slug
    return None


# --- Client-facing views ---


def next_badge_progress(
    badges: Iterable[BadgeView],
    progress: ProgressSnapshot,
    unlocked_ids: set[uuid.UUID],
    limit: int = 3,
) -> list[BadgeProgressEntry]:
    """Locked badges with a numeric target, closest to completion first."""
    entries: list[BadgeProgressEntry] = []
    for badge in badges:
        if badge.id in unlocked_ids:
            continue
        for key, counter, label in PROGRESS_CRITERIA:
            target = badge.criteria.get(key)
            if not target:
                continue
            current = getattr(progress, counter)
            entries.append(BadgeProgressEntry(
                badge=badge,
                current_value=current,
                target_value=target,
                percentage=min(current / target * 100, 100.0),
                description=f"{current}/{target} {label}",
            ))
            break

    entries.sort(key=lambda e: e.percentage, reverse=True)
    return entries[:limit]


def group_profile_badges(
    badges: Iterable[BadgeView],
    unlocks: list[UnlockView],
) -> dict[str, UnlockView | list[UnlockView] | None]:
    """Arrange a user's unlocks the way the profile page shows them."""
    by_badge = {u.badge_id: u for u in unlocks}

    identity = None
    for badge in sorted(
        (b for b in badges if b.layer == "identity"),
        key=lambda b: b.progression_order or 0,
        reverse=True,
    ):
        if badge.id in by_badge:
            identity = by_badge[badge.id]
            break

    proof = [u for u in unlocks if u.badge is not None and u.badge.layer == "proof"]
    event = sorted(
        (u for u in unlocks if u.badge is not None and u.badge.layer == "event" and u.is_displayed),
        key=lambda u: u.display_order or 0,
    )[:MAX_DISPLAYED_EVENT_BADGES]
    social = next((u for u in unlocks if u.badge is not None and u.badge.layer == "social"), None)

    return {"identity": identity, "proof": proof, "event": event, "social": social}
