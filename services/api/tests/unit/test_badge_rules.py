"""Badge rule tests — criteria, event windows, streaks, voice state and identity tiers."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

from intent.badges.rules import (
    calculate_voice_state,
    current_identity_badge,
    group_profile_badges,
    meets_criteria,
    next_badge_progress,
    next_consecutive_days,
    unimplemented_criteria,
    utc_today,
    within_event_window,
)
from intent.badges.schemas import BadgeView, ProgressSnapshot, UnlockView

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def _badge(slug: str = "b", layer: str = "proof", criteria: dict | None = None, **kw) -> BadgeView:
    return BadgeView(
        id=uuid.uuid4(),
        slug=slug,
        name=slug.title(),
        description="",
        layer=layer,
        rarity="common",
        criteria=criteria or {},
        **kw,
    )


def _progress(**counters) -> ProgressSnapshot:
    return ProgressSnapshot(user_id=uuid.uuid4(), wallet_address="0xabc", **counters)


def _unlock(badge: BadgeView, **kw) -> UnlockView:
    return UnlockView(id=uuid.uuid4(), badge_id=badge.id, badge=badge, unlocked_at=NOW, **kw)


class TestCriteria:
    """Test AND semantics over the enforced criteria keys."""

    def test_min_transactions_met(self):
        badge = _badge(criteria={"min_transactions": 1})
        assert meets_criteria(badge, _progress(total_transactions=1), NOW) is True

    def test_min_transactions_not_met(self):
        badge = _badge(criteria={"min_transactions": 100})
        assert meets_criteria(badge, _progress(total_transactions=99), NOW) is False

    def test_all_keys_must_hold(self):
        badge = _badge(criteria={"min_consecutive_days": 7, "min_protocols": 3})
        assert meets_criteria(badge, _progress(consecutive_days=7, unique_protocols=2), NOW) is False
        assert meets_criteria(badge, _progress(consecutive_days=6, unique_protocols=3), NOW) is False
        assert meets_criteria(badge, _progress(consecutive_days=7, unique_protocols=3), NOW) is True

    def test_streak_uses_current_not_max(self):
        badge = _badge(criteria={"min_consecutive_days": 14})
        progress = _progress(consecutive_days=2, max_consecutive_days=20)
        assert meets_criteria(badge, progress, NOW) is False

    def test_verified_on_chain_needs_a_transaction(self):
        badge = _badge(criteria={"verified_on_chain": True})
        assert meets_criteria(badge, _progress(), NOW) is False
        assert meets_criteria(badge, _progress(total_transactions=1), NOW) is True

    def test_zero_threshold_is_ignored(self):
        badge = _badge(criteria={"min_transactions": 0})
        assert meets_criteria(badge, _progress(), NOW) is True

    def test_unimplemented_keys_neither_grant_nor_block(self):
        badge = _badge(layer="social", criteria={"state_1": {"shares": 1}, "state_3": {"shares": 10}})
        assert meets_criteria(badge, _progress(), NOW) is True

    def test_unimplemented_keys_are_reported(self):
        badge = _badge(criteria={"protocol": "arcflow", "within_days": 7, "min_protocols": 1})
        assert unimplemented_criteria(badge) == {"protocol", "within_days"}

    def test_enforced_keys_not_reported(self):
        badge = _badge(criteria={"min_transactions": 1, "verified_on_chain": True})
        assert unimplemented_criteria(badge) == set()


class TestEventWindow:
    """Test time-limited badges."""

    def test_no_window_always_open(self):
        assert within_event_window(_badge(), NOW) is True

    def test_half_open_window_is_ignored(self):
        badge = _badge(event_window_start=NOW + timedelta(days=1))
        assert within_event_window(badge, NOW) is True

    def test_inside_window(self):
        badge = _badge(event_window_start=NOW - timedelta(hours=1), event_window_end=NOW + timedelta(hours=1))
        assert within_event_window(badge, NOW) is True

    def test_boundaries_inclusive(self):
        badge = _badge(event_window_start=NOW, event_window_end=NOW + timedelta(hours=24))
        assert within_event_window(badge, NOW) is True
        assert within_event_window(badge, NOW + timedelta(hours=24)) is True

    def test_past_window_blocks_even_when_criteria_met(self):
        badge = _badge(
            layer="event",
            criteria={"min_transactions": 1},
            event_window_start=NOW - timedelta(days=10),
            event_window_end=NOW - timedelta(days=3),
        )
        assert meets_criteria(badge, _progress(total_transactions=500), NOW) is False

    def test_future_window_blocks(self):
        badge = _badge(event_window_start=NOW + timedelta(days=1), event_window_end=NOW + timedelta(days=2))
        assert meets_criteria(badge, _progress(total_transactions=1), NOW) is False

    def test_naive_window_treated_as_utc(self):
        badge = _badge(
            event_window_start=datetime(2026, 3, 10, 11, 0, 0),
            event_window_end=datetime(2026, 3, 10, 13, 0, 0),
        )
        assert badge.event_window_start.tzinfo is timezone.utc
        assert within_event_window(badge, NOW) is True


class TestStreak:
    """Test daily streak rollover."""

    def test_same_day_unchanged(self):
        today = date(2026, 3, 10)
        assert next_consecutive_days(today, today, 4) == 4

    def test_yesterday_increments(self):
        assert next_consecutive_days(date(2026, 3, 9), date(2026, 3, 10), 4) == 5

    def test_gap_resets_to_one(self):
        assert next_consecutive_days(date(2026, 3, 7), date(2026, 3, 10), 4) == 1

    def test_first_activity_starts_at_one(self):
        assert next_consecutive_days(None, date(2026, 3, 10), 0) == 1

    def test_month_boundary(self):
        assert next_consecutive_days(date(2026, 2, 28), date(2026, 3, 1), 2) == 3

    def test_year_boundary(self):
        assert next_consecutive_days(date(2025, 12, 31), date(2026, 1, 1), 9) == 10

    def test_utc_today_converts_offsets(self):
        late_evening_ny = datetime(2026, 3, 10, 22, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert utc_today(late_evening_ny) == date(2026, 3, 11)


class TestVoiceState:
    """Test social share voice tiers."""

    def test_no_shares(self):
        assert calculate_voice_state(0, 0) == 0

    def test_first_share(self):
        assert calculate_voice_state(1, 0) == 1

    def test_five_shares(self):
        assert calculate_voice_state(5, 110) == 2

    def test_engagement_alone_not_enough_for_three(self):
        assert calculate_voice_state(9, 10_000) == 2

    def test_ten_shares_without_engagement(self):
        assert calculate_voice_state(10, 99) == 2

    def test_full_voice(self):
        assert calculate_voice_state(10, 100) == 3


class TestIdentityTier:
    """Test highest-tier-wins identity selection."""

    def setup_method(self):
        self.newcomer = _badge("newcomer", "identity", is_progression=True, progression_order=1)
        self.active = _badge("active", "identity", is_progression=True, progression_order=2)
        self.legend = _badge("legend", "identity", is_progression=True, progression_order=3)
        self.proof = _badge("on-chain", "proof")
        self.badges = [self.newcomer, self.proof, self.legend, self.active]

    def test_none_unlocked(self):
        assert current_identity_badge(self.badges, set()) is None

    def test_only_non_identity_unlocked(self):
        assert current_identity_badge(self.badges, {self.proof.id}, ["on-chain"]) is None

    def test_existing_unlock(self):
        assert current_identity_badge(self.badges, {self.newcomer.id}) == "newcomer"

    def test_new_unlock_counts(self):
        assert current_identity_badge(self.badges, set(), ["newcomer"]) == "newcomer"

    def test_highest_tier_wins(self):
        unlocked = {self.newcomer.id, self.active.id}
        assert current_identity_badge(self.badges, unlocked, ["legend"]) == "legend"

    def test_not_additive_lower_tier_after_higher(self):
        assert current_identity_badge(self.badges, {self.active.id}, ["newcomer"]) == "active"

    def test_non_progression_identity_ignored(self):
        flat = _badge("flat", "identity", is_progression=False, progression_order=9)
        assert current_identity_badge([*self.badges, flat], {flat.id}) is None


class TestNextBadgeProgress:
    """Test progress bars toward locked badges."""

    def test_closest_first_top_three(self):
        badges = [
            _badge("newcomer", criteria={"min_transactions": 1}),
            _badge("consistent", criteria={"min_consecutive_days": 14}),
            _badge("multi", criteria={"min_protocols": 5}),
            _badge("legend", criteria={"min_consecutive_days": 30, "min_transactions": 100}),
            _badge("voice", criteria={"state_1": {"shares": 1}}),
        ]
        progress = _progress(total_transactions=50, consecutive_days=7, unique_protocols=4)
        entries = next_badge_progress(badges, progress, set())

        assert [e.badge.slug for e in entries] == ["newcomer", "multi", "consistent"]
        assert entries[0].percentage == 100.0
        assert entries[1].description == "4/5 protocols"
        assert entries[2].description == "7/14 consecutive days"

    def test_transactions_key_takes_precedence(self):
        legend = _badge("legend", criteria={"min_consecutive_days": 30, "min_transactions": 100})
        entries = next_badge_progress([legend], _progress(total_transactions=25, consecutive_days=29), set())
        assert entries[0].description == "25/100 transactions"
        assert entries[0].percentage == 25.0

    def test_unlocked_badges_skipped(self):
        badge = _badge("newcomer", criteria={"min_transactions": 1})
        assert next_badge_progress([badge], _progress(), {badge.id}) == []


class TestProfileGrouping:
    """Test the profile page arrangement of unlocks."""

    def test_groups_by_layer(self):
        newcomer = _badge("newcomer", "identity", is_progression=True, progression_order=1)
        active = _badge("active", "identity", is_progression=True, progression_order=2)
        on_chain = _badge("on-chain", "proof")
        multi = _badge("multi-protocol", "proof")
        voice = _badge("voice", "social")
        events = [_badge(f"event-{i}", "event") for i in range(5)]

        unlocks = [
            _unlock(newcomer),
            _unlock(active),
            _unlock(on_chain),
            _unlock(multi),
            _unlock(voice),
            _unlock(events[0], display_order=3),
            _unlock(events[1], display_order=1),
            _unlock(events[2], is_displayed=False, display_order=0),
            _unlock(events[3], display_order=2),
            _unlock(events[4], display_order=4),
        ]
        grouped = group_profile_badges([newcomer, active, on_chain, multi, voice, *events], unlocks)

        assert grouped["identity"].badge.slug == "active"
        assert {u.badge.slug for u in grouped["proof"]} == {"on-chain", "multi-protocol"}
        assert [u.badge.slug for u in grouped["event"]] == ["event-1", "event-3", "event-0"]
        assert grouped["social"].badge.slug == "voice"

    def test_empty_profile(self):
        grouped = group_profile_badges([], [])
        assert grouped == {"identity": None, "proof": [], "event": [], "social": None}
