"""Intent score tests — caps, bounds and monotonicity."""

from __future__ import annotations

import uuid

import pytest

from intent.badges.rules import calculate_intent_score
from intent.badges.schemas import ProgressSnapshot


def _progress(**counters: int) -> ProgressSnapshot:
    return ProgressSnapshot(user_id=uuid.uuid4(), wallet_address="0xabc", **counters)


class TestIntentScore:
    """Test the weighted 0-10 intent score."""

    def test_fresh_user_scores_zero(self):
        assert calculate_intent_score(_progress()) == 0.0

    def test_single_transaction_day(self):
        # 1/50 + 1/5 + 1/10 + 1/15 = 0.02 + 0.2 + 0.1 + 0.0667
        score = calculate_intent_score(_progress(
            total_transactions=1, unique_protocols=1, consecutive_days=1, max_consecutive_days=1,
        ))
        assert score == 0.39

    def test_transactions_capped_at_two(self):
        assert calculate_intent_score(_progress(total_transactions=10_000)) == 2.0

    def test_protocols_capped_at_two(self):
        assert calculate_intent_score(_progress(unique_protocols=50)) == 2.0

    def test_consecutive_days_capped_at_three(self):
        assert calculate_intent_score(_progress(consecutive_days=365)) == 3.0

    def test_max_consecutive_capped_at_two(self):
        assert calculate_intent_score(_progress(max_consecutive_days=365)) == 2.0

    def test_social_shares_capped_at_one(self):
        assert calculate_intent_score(_progress(social_shares=500)) == 1.0

    def test_everything_maxed_is_ten(self):
        score = calculate_intent_score(_progress(
            total_transactions=100,
            unique_protocols=10,
            consecutive_days=30,
            max_consecutive_days=30,
            social_shares=10,
        ))
        assert score == 10.0

    def test_two_decimal_rounding(self):
        # 7/15 = 0.4666...
        assert calculate_intent_score(_progress(max_consecutive_days=7)) == 0.47

    @pytest.mark.parametrize(
        "counter",
        ["total_transactions", "unique_protocols", "consecutive_days", "max_consecutive_days", "social_shares"],
    )
    def test_non_decreasing_in_each_counter(self, counter):
        base = {
            "total_transactions": 12,
            "unique_protocols": 2,
            "consecutive_days": 4,
            "max_consecutive_days": 6,
            "social_shares": 3,
        }
        previous = calculate_intent_score(_progress(**base))
        for value in range(base[counter], base[counter] + 200, 7):
            score = calculate_intent_score(_progress(**{**base, counter: value}))
            assert 0.0 <= score <= 10.0
            assert score >= previous
            previous = score
