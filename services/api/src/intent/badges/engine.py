"""Badge evaluation engine — applies a client event and unlocks earned badges."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession

from intent.badges import rules
from intent.badges.badge_service import get_unlocked_badge_ids, list_active_badges, record_unlock
from intent.badges.progress_service import get_or_create_progress, get_progress
from intent.badges.schemas import EventData, ProgressSnapshot
from intent.badges.session import WalletSession
from intent.db.models import UserBadgeProgress

logger = logging.getLogger(__name__)

TRANSACTION = "transaction"
SOCIAL_SHARE = "social_share"
# Declared by the client but carry no counter updates yet.
RESERVED_ACTIONS = frozenset({"daily_check", "event_window"})


@dataclass
class EvaluationResult:
    """Outcome of one event: what unlocked and where the user now stands."""

    new_unlocks: list[str] = field(default_factory=list)
    intent_score: float = 0.0
    current_identity_badge: str | None = None
    total_transactions: int = 0
    unique_protocols: int = 0
    consecutive_days: int = 0


class BadgeEngine:
    """Evaluates badge criteria for wallet activity events."""

    def __init__(
        self,
        db: AsyncSession,
        redis: object = None,
        channel: str = "pubsub:badge_unlocked",
        now: datetime | None = None,
    ) -> None:
        self.db = db
        self.redis = redis
        self.channel = channel
        self._now = now

    def now(self) -> datetime:
        return self._now or datetime.now(timezone.utc)

    async def process(
        self,
        action: str,
        session: WalletSession,
        event_data: EventData | dict[str, object] | None = None,
    ) -> EvaluationResult:
        """Apply one event, unlock every newly satisfied badge, refresh score and tier."""
        if not isinstance(event_data, EventData):
            event_data = EventData.model_validate(event_data or {})
        logger.info("Processing %s for wallet %s", action, session.wallet_address)

        progress = await get_or_create_progress(self.db, session, for_update=True)

        if action == TRANSACTION:
            self._apply_transaction(progress, event_data)
        elif action == SOCIAL_SHARE:
            self._apply_social_share(progress, event_data)
        elif action not in RESERVED_ACTIONS:
            logger.warning("Unknown badge action %r for user %s", action, session.user_id)

        snapshot = ProgressSnapshot.model_validate(progress)
        await self.db.commit()

        badges = await list_active_badges(self.db)
        unlocked_ids = await get_unlocked_badge_ids(self.db, session.user_id)
        now = self.now()

        new_unlocks: list[str] = []
        for badge in badges:
            if badge.id in unlocked_ids:
                continue
            if not rules.meets_criteria(badge, snapshot, now):
                continue
            if await record_unlock(
                self.db,
                self.redis,
                session,
                badge,
                trigger_event=action,
                trigger_tx_hash=event_data.tx_hash or None,
                channel=self.channel,
            ):
                new_unlocks.append(badge.slug)
                skipped = rules.unimplemented_criteria(badge)
                if skipped:
                    logger.debug("Badge %s unlocked without evaluating %s", badge.slug, sorted(skipped))

        intent_score = rules.calculate_intent_score(snapshot)
        identity = rules.current_identity_badge(badges, unlocked_ids, new_unlocks)
        await self._store_summary(session, intent_score, identity)

        return EvaluationResult(
            new_unlocks=new_unlocks,
            intent_score=intent_score,
            current_identity_badge=identity,
            total_transactions=snapshot.total_transactions,
            unique_protocols=snapshot.unique_protocols,
            consecutive_days=snapshot.consecutive_days,
        )

    def _apply_transaction(self, progress: UserBadgeProgress, event_data: EventData) -> None:
        """Count the transaction, track the protocol and roll the daily streak."""
        protocols = list(progress.protocols_interacted or [])
        protocol = event_data.protocol
        if protocol and protocol not in protocols:
            protocols.append(protocol)

        today = rules.utc_today(self.now())
        streak = rules.next_consecutive_days(
            progress.last_active_date, today, progress.consecutive_days or 0
        )

        progress.total_transactions = (progress.total_transactions or 0) + 1
        progress.protocols_interacted = protocols
        progress.unique_protocols = len(protocols)
        progress.consecutive_days = streak
        progress.max_consecutive_days = max(progress.max_consecutive_days or 0, streak)
        progress.last_active_date = today

    def _apply_social_share(self, progress: UserBadgeProgress, event_data: EventData) -> None:
        """Count the share and recompute the voice state from the new totals."""
        engagement = event_data.engagement or 0
        progress.social_shares = (progress.social_shares or 0) + 1
        progress.total_engagement = (progress.total_engagement or 0) + engagement
        progress.voice_state = rules.calculate_voice_state(
            progress.social_shares, progress.total_engagement
        )

    async def _store_summary(
        self, session: WalletSession, intent_score: float, identity: str | None
    ) -> None:
        """Persist score and identity tier. Re-reads the row: a failed unlock expires it."""
        progress = await get_progress(self.db, session.user_id)
        if progress is None:
            return
        progress.intent_score = intent_score
        progress.current_identity_badge = identity
        await self.db.commit()
