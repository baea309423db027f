"""Pydantic models for the badge endpoints and the engine's transfer objects.

Wire models serialize with camelCase aliases, matching what the web client
already reads from the badge service.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

BadgeLayer = Literal["identity", "proof", "event", "social"]
BadgeRarity = Literal["common", "uncommon", "rare", "epic", "legendary"]
EventAction = Literal["transaction", "social_share", "daily_check", "event_window"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes from the store as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# --- Transfer objects (validated row shapes) ---


class BadgeView(CamelModel):
    id: uuid.UUID
    slug: str
    name: str
    description: str
    layer: BadgeLayer
    rarity: BadgeRarity
    visual_config: dict[str, Any] = {}
    criteria: dict[str, Any] = {}
    is_progression: bool = False
    progression_order: int | None = None
    is_active: bool = True
    event_window_start: datetime | None = None
    event_window_end: datetime | None = None

    @field_validator("visual_config", "criteria", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or {}

    @field_validator("event_window_start", "event_window_end")
    @classmethod
    def _window_in_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class ProgressSnapshot(CamelModel):
    user_id: uuid.UUID
    wallet_address: str
    total_transactions: int = 0
    unique_protocols: int = 0
    protocols_interacted: list[str] = []
    consecutive_days: int = 0
    last_active_date: date | None = None
    max_consecutive_days: int = 0
    social_shares: int = 0
    total_engagement: int = 0
    voice_state: int = Field(default=0, ge=0, le=3)
    intent_score: float = 0.0
    current_identity_badge: str | None = None

    @field_validator("protocols_interacted", mode="before")
    @classmethod
    def _none_as_empty_list(cls, value: Any) -> Any:
        return value or []


class UnlockView(CamelModel):
    id: uuid.UUID
    badge_id: uuid.UUID
    badge: BadgeView | None = None
    unlocked_at: datetime
    trigger_tx_hash: str | None = None
    trigger_event: str | None = None
    proof_data: dict[str, Any] | None = None
    is_displayed: bool = True
    display_order: int | None = None

    @field_validator("unlocked_at")
    @classmethod
    def _unlocked_in_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)  # type: ignore[return-value]


# --- Badge service (event evaluation) ---


class EventData(CamelModel):
    """Optional event payload. Unknown keys are ignored."""

    protocol: str | None = None
    tx_hash: str | None = None
    engagement: int | None = None


class BadgeEventRequest(CamelModel):
    """Incoming client event. userId/walletAddress are checked by the router for a 400."""

    action: str = ""
    user_id: str | None = None
    wallet_address: str | None = None
    event_data: EventData | None = None


class ProgressSummary(CamelModel):
    total_transactions: int
    unique_protocols: int
    consecutive_days: int


class BadgeEventResponse(CamelModel):
    success: bool = True
    new_unlocks: list[str]
    intent_score: float
    current_identity_badge: str | None
    progress: ProgressSummary


# --- Catalog / progress reads ---


class AllBadgesResponse(CamelModel):
    badges: list[BadgeView]


class UserUnlocksResponse(CamelModel):
    unlocks: list[UnlockView]
    total_unlocked: int


class ProfileBadgesResponse(CamelModel):
    identity: UnlockView | None = None
    proof: list[UnlockView] = []
    event: list[UnlockView] = []
    social: UnlockView | None = None


class BadgeProgressEntry(CamelModel):
    badge: BadgeView
    current_value: int
    target_value: int
    percentage: float
    description: str


class NextBadgesResponse(CamelModel):
    entries: list[BadgeProgressEntry]


class UnlockDisplayUpdate(CamelModel):
    is_displayed: bool | None = None
    display_order: int | None = None
