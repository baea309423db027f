"""ORM models for the badge schema.

Production runs on PostgreSQL (JSONB, TEXT[]); the JSON/list columns fall
back to plain JSON on other backends so the test suite can run on SQLite.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from intent.db.base import Base

JsonDocument = JSON().with_variant(JSONB(), "postgresql")
TextList = JSON().with_variant(ARRAY(Text), "postgresql")


# ---------------------------------------------------------------------------
# Badge catalog
# ---------------------------------------------------------------------------


class Badge(Base):
    """Badge definitions — the launch catalog is seeded on startup."""

    __tablename__ = "badges"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    layer: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    rarity: Mapped[str] = mapped_column(String(16), nullable=False)
    visual_config: Mapped[dict[str, Any]] = mapped_column(JsonDocument, nullable=False, default=dict)
    criteria: Mapped[dict[str, Any]] = mapped_column(JsonDocument, nullable=False, default=dict)
    is_progression: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    progression_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    event_window_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    event_window_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


# ---------------------------------------------------------------------------
# Per-user progress and unlocks
# ---------------------------------------------------------------------------


class UserBadgeProgress(Base):
    """Denormalized badge counters — single row per user."""

    __tablename__ = "user_badge_progress"
    __table_args__ = (UniqueConstraint("user_id", name="unique_user_progress"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    wallet_address: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    # Identity badge progress
    total_transactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_protocols: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    protocols_interacted: Mapped[list[str]] = mapped_column(TextList, nullable=False, default=list)
    consecutive_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    max_consecutive_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Social badge progress (Voice)
    social_shares: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_engagement: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    voice_state: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Computed
    intent_score: Mapped[float] = mapped_column(Numeric(4, 2, asdecimal=False), nullable=False, default=0.0)
    current_identity_badge: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class BadgeUnlock(Base):
    """Badges unlocked by users — UNIQUE(user_id, badge_id) prevents duplicates."""

    __tablename__ = "badge_unlocks"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="unique_user_badge"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    wallet_address: Mapped[str] = mapped_column(Text, nullable=False)
    badge_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True
    )

    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    trigger_tx_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger_event: Mapped[str | None] = mapped_column(Text, nullable=True)
    proof_data: Mapped[dict[str, Any]] = mapped_column(JsonDocument, nullable=True, default=dict)

    # Display preferences (event badges)
    is_displayed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    badge: Mapped[Badge] = relationship("Badge", lazy="joined")


class BadgeEvent(Base):
    """Queued badge events. Declared for the client; the engine does not read it."""

    __tablename__ = "badge_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    wallet_address: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    event_data: Mapped[dict[str, Any]] = mapped_column(JsonDocument, nullable=False, default=dict)
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


# ---------------------------------------------------------------------------
# Wallet sign-in nonces
# ---------------------------------------------------------------------------


class SiweNonce(Base):
    """One-time sign-in-with-ethereum nonces, pruned once expired."""

    __tablename__ = "siwe_nonces"

    nonce: Mapped[str] = mapped_column(String(64), primary_key=True)
    wallet_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
