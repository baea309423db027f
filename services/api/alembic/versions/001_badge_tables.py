"""Badge system tables.

Creates badges, user_badge_progress, badge_unlocks, badge_events and
siwe_nonces for the badge engine.

Revision ID: 001_badge_tables
Revises:
Create Date: 2026-02-02
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_badge_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            slug TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            description TEXT NOT NULL,
            layer VARCHAR(16) NOT NULL CHECK (layer IN ('identity', 'proof', 'event', 'social')),
            rarity VARCHAR(16) NOT NULL CHECK (rarity IN ('common', 'uncommon', 'rare', 'epic', 'legendary')),
            visual_config JSONB NOT NULL DEFAULT '{}',
            criteria JSONB NOT NULL DEFAULT '{}',
            is_progression BOOLEAN NOT NULL DEFAULT false,
            progression_order INTEGER,
            is_active BOOLEAN NOT NULL DEFAULT true,
            event_window_start TIMESTAMPTZ,
            event_window_end TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_badges_layer ON badges(layer)")
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_badges_active
        ON badges(is_active) WHERE is_active = true
    """)

    # --- User Badge Progress ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badge_progress (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            wallet_address TEXT NOT NULL,
            total_transactions INTEGER NOT NULL DEFAULT 0,
            unique_protocols INTEGER NOT NULL DEFAULT 0,
            protocols_interacted TEXT[] NOT NULL DEFAULT '{}',
            consecutive_days INTEGER NOT NULL DEFAULT 0,
            last_active_date DATE,
            max_consecutive_days INTEGER NOT NULL DEFAULT 0,
            social_shares INTEGER NOT NULL DEFAULT 0,
            total_engagement INTEGER NOT NULL DEFAULT 0,
            voice_state INTEGER NOT NULL DEFAULT 0 CHECK (voice_state BETWEEN 0 AND 3),
            intent_score NUMERIC(4,2) NOT NULL DEFAULT 0.00,
            current_identity_badge TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT unique_user_progress UNIQUE (user_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_user_badge_progress_wallet_address
        ON user_badge_progress(wallet_address)
    """)

    # --- Badge Unlocks ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badge_unlocks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            wallet_address TEXT NOT NULL,
            badge_id UUID NOT NULL REFERENCES badges(id) ON DELETE CASCADE,
            unlocked_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            trigger_tx_hash TEXT,
            trigger_event TEXT,
            proof_data JSONB DEFAULT '{}',
            is_displayed BOOLEAN NOT NULL DEFAULT true,
            display_order INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT unique_user_badge UNIQUE (user_id, badge_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_badge_unlocks_user_id ON badge_unlocks(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_badge_unlocks_badge_id ON badge_unlocks(badge_id)")

    # --- Badge Events (queue, not consumed by the engine) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badge_events (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            wallet_address TEXT NOT NULL,
            event_type VARCHAR(32) NOT NULL
                CHECK (event_type IN ('transaction', 'daily_check', 'social_share', 'event_window')),
            event_data JSONB NOT NULL DEFAULT '{}',
            processed BOOLEAN NOT NULL DEFAULT false,
            processed_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_badge_events_unprocessed
        ON badge_events(processed) WHERE processed = false
    """)

    # --- SIWE Nonces ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS siwe_nonces (
            nonce VARCHAR(64) PRIMARY KEY,
            wallet_address TEXT,
            expires_at TIMESTAMPTZ NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_siwe_nonces_expires_at ON siwe_nonces(expires_at)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS siwe_nonces CASCADE")
    op.execute("DROP TABLE IF EXISTS badge_events CASCADE")
    op.execute("DROP TABLE IF EXISTS badge_unlocks CASCADE")
    op.execute("DROP TABLE IF EXISTS user_badge_progress CASCADE")
    op.execute("DROP TABLE IF EXISTS badges CASCADE")
