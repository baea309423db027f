"""Badge seed data — the launch catalog across the four layers."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from intent.db.models import Badge

logger = logging.getLogger(__name__)

LAUNCH_AT = datetime(2026, 2, 2, 3, 47, 53, tzinfo=timezone.utc)

BADGE_SEED_DATA: list[dict[str, Any]] = [
    # Layer 1: Identity (progression)
    {
        "slug": "newcomer",
        "name": "Newcomer",
        "description": "Entry badge for connecting wallet and making your first transaction on Arc",
        "layer": "identity",
        "rarity": "common",
        "is_progression": True,
        "progression_order": 1,
        "criteria": {"min_transactions": 1},
        "visual_config": {"nodes": 3, "glow": "minimal", "pattern": "arch-trapezoid"},
    },
    {
        "slug": "active",
        "name": "Active",
        "description": "Awarded for 7 consecutive days of activity across 3+ dApps",
        "layer": "identity",
        "rarity": "rare",
        "is_progression": True,
        "progression_order": 2,
        "criteria": {"min_consecutive_days": 7, "min_protocols": 3},
        "visual_config": {"nodes": 5, "glow": "medium", "pattern": "complex-topology"},
    },
    {
        "slug": "legend",
        "name": "Legend",
        "description": "The highest tier - 30 consecutive days, 10+ dApps, 100+ transactions",
        "layer": "identity",
        "rarity": "legendary",
        "is_progression": True,
        "progression_order": 3,
        "criteria": {"min_consecutive_days": 30, "min_protocols": 10, "min_transactions": 100},
        "visual_config": {"nodes": 10, "glow": "maximum", "pattern": "mandala"},
    },
    # Layer 2: Proof (independent)
    {
        "slug": "on-chain",
        "name": "On-Chain Verified",
        "description": "Proof that your wallet activity is verified on the blockchain",
        "layer": "proof",
        "rarity": "common",
        "criteria": {"verified_on_chain": True},
        "visual_config": {"style": "verification-mark", "pattern": "arch-integrated"},
    },
    {
        "slug": "multi-protocol",
        "name": "Multi-Protocol User",
        "description": "Interacted with 5+ different verified protocols",
        "layer": "proof",
        "rarity": "rare",
        "criteria": {"min_protocols": 5},
        "visual_config": {"nodes": 5, "style": "interconnected", "pattern": "protocol-diversity"},
    },
    {
        "slug": "consistent",
        "name": "Consistent Contributor",
        "description": "14 consecutive days of activity without skipping",
        "layer": "proof",
        "rarity": "epic",
        "criteria": {"min_consecutive_days": 14},
        "visual_config": {"nodes": 7, "style": "timeline", "pattern": "connected-nodes"},
    },
    # Layer 3: Event (time-limited)
    {
        "slug": "genesis-og",
        "name": "Genesis Member",
        "description": "Connected wallet within 24 hours of INTENT launch - founding member status",
        "layer": "event",
        "rarity": "legendary",
        "criteria": {"first_24h_launch": True},
        "visual_config": {"nodes": 10, "glow": "maximum", "accent": "gold", "pattern": "unique"},
        "event_window_start": LAUNCH_AT,
        "event_window_end": LAUNCH_AT + timedelta(hours=24),
    },
    {
        "slug": "arcflow-witness",
        "name": "ArcFlow Witness",
        "description": "Early adopter of ArcFlow protocol within 7 days of launch",
        "layer": "event",
        "rarity": "rare",
        "criteria": {"protocol": "arcflow", "within_days": 7},
        "visual_config": {"style": "protocol-icon", "pattern": "arch-integrated"},
        "event_window_start": LAUNCH_AT,
        "event_window_end": LAUNCH_AT + timedelta(days=7),
    },
    {
        "slug": "arc-mainnet",
        "name": "Arc Mainnet Pioneer",
        "description": "Active on Arc within 24 hours of mainnet launch",
        "layer": "event",
        "rarity": "legendary",
        "criteria": {"mainnet_first_24h": True},
        "visual_config": {"nodes": 10, "glow": "maximum", "pattern": "mainnet-specific"},
    },
    # Layer 4: Social (single badge with states)
    {
        "slug": "voice",
        "name": "Voice",
        "description": "Proof of humanity through social sharing - evolves with engagement",
        "layer": "social",
        "rarity": "uncommon",
        "criteria": {
            "state_1": {"shares": 1},
            "state_2": {"shares": 5},
            "state_3": {"shares": 10, "engagement": 100},
        },
        "visual_config": {"nodes_by_state": [3, 5, 7], "glow_by_state": ["basic", "medium", "full"]},
    },
]

_DEFAULTS: dict[str, Any] = {
    "is_progression": False,
    "progression_order": None,
    "is_active": True,
    "event_window_start": None,
    "event_window_end": None,
}


# Definition columns refreshed on every seed. is_active is left to admins.
_CONTENT_COLUMNS = (
    "name",
    "description",
    "layer",
    "rarity",
    "visual_config",
    "criteria",
    "is_progression",
    "progression_order",
    "event_window_start",
    "event_window_end",
)


def _insert_for(db: AsyncSession):  # noqa: ANN202
    """Dialect insert with ON CONFLICT support (SQLite in tests, PostgreSQL otherwise)."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def seed_badges(db: AsyncSession) -> int:
    """Upsert the launch badge definitions by slug. Returns number of badges seeded."""
    insert = _insert_for(db)
    seeded = 0
    for badge_data in BADGE_SEED_DATA:
        stmt = insert(Badge).values(**{**_DEFAULTS, **badge_data})
        stmt = stmt.on_conflict_do_update(
            index_elements=["slug"],
            set_={column: stmt.excluded[column] for column in _CONTENT_COLUMNS},
        )
        await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
