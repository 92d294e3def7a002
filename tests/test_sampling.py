"""Tests for the random-value primitives.

Validates:
- Uniform helpers reject empty input
- Count skew favors the low end
- Appointment dates stay in bounds and are pushed away from recent years
- Future offsets concentrate near zero
"""

import math
import statistics
from collections import Counter
from datetime import date, datetime, timedelta, timezone

import pytest

from clinicseed.data.sampling import Sampler
from clinicseed.errors import EmptyInputError

# =============================================================================
# Configuration for Tests
# =============================================================================

NUM_DRAWS = 10_000
UPPER = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
LOWER = datetime(1940, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def sampler():
    return Sampler.seeded(1234)


# =============================================================================
# Uniform Helpers
# =============================================================================


class TestUniformHelpers:
    """Tests for the uniform draws."""

    def test_uniform_choice_empty_raises(self, sampler):
        with pytest.raises(EmptyInputError):
            sampler.uniform_choice([])

    def test_empty_input_is_value_error(self, sampler):
        with pytest.raises(ValueError):
            sampler.uniform_choice(())

    def test_uniform_choice_returns_member(self, sampler):
        options = ["a", "b", "c"]
        assert {sampler.uniform_choice(options) for _ in range(200)} == set(options)

    def test_uniform_int_inclusive(self, sampler):
        values = {sampler.uniform_int(0, 3) for _ in range(500)}
        assert values == {0, 1, 2, 3}

    def test_uniform_date_bounds(self, sampler):
        start, end = date(2020, 1, 1), date(2020, 1, 10)
        for _ in range(500):
            assert start <= sampler.uniform_date(start, end) <= end

    def test_uniform_date_rejects_reversed_range(self, sampler):
        with pytest.raises(ValueError):
            sampler.uniform_date(date(2020, 1, 2), date(2020, 1, 1))

    def test_weighted_choice_distribution(self, sampler):
        weights = {"Paid": 0.60, "Pending": 0.25, "Due": 0.15}
        counts = Counter(sampler.weighted_choice(weights) for _ in range(NUM_DRAWS))
        for option, weight in weights.items():
            assert abs(counts[option] / NUM_DRAWS - weight) < 0.03

    def test_weighted_choice_empty_raises(self, sampler):
        with pytest.raises(EmptyInputError):
            sampler.weighted_choice({})

    def test_seeded_samplers_repeat(self):
        a, b = Sampler.seeded(99), Sampler.seeded(99)
        assert [a.uniform_int(0, 1000) for _ in range(20)] == [b.uniform_int(0, 1000) for _ in range(20)]

    def test_new_id_unique_hex(self, sampler):
        ids = {sampler.new_id() for _ in range(1000)}
        assert len(ids) == 1000
        assert all(len(i) == 32 for i in ids)


# =============================================================================
# Skewed Counts
# =============================================================================


class TestSkewedCount:
    """Tests for counts biased toward the minimum."""

    def test_within_bounds(self, sampler):
        for _ in range(NUM_DRAWS):
            assert 1 <= sampler.skewed_count(1, 10) <= 10

    def test_mean_below_uniform_mean(self, sampler):
        mean = statistics.mean(sampler.skewed_count(1, 10) for _ in range(NUM_DRAWS))
        assert mean < 5.5

    def test_larger_exponent_skews_harder(self, sampler):
        mild = statistics.mean(sampler.skewed_count(1, 10, 1.6) for _ in range(NUM_DRAWS))
        strong = statistics.mean(sampler.skewed_count(1, 10, 3.0) for _ in range(NUM_DRAWS))
        assert strong < mild

    def test_degenerate_range(self, sampler):
        assert sampler.skewed_count(3, 3) == 3

    def test_reversed_range_raises(self, sampler):
        with pytest.raises(ValueError):
            sampler.skewed_count(5, 1)


# =============================================================================
# Recency-Biased Dates
# =============================================================================


def share_after_penalty_year(span_days: int, days_to_penalty_end: float, exponent: float) -> float:
    """Probability that one unpenalized draw lands after the penalty year."""
    return min(1.0, ((math.floor(days_to_penalty_end) + 1) / span_days) ** (1 / exponent))


class TestRecencyBiasedDate:
    """Tests for appointment-date sampling."""

    def test_within_bounds(self, sampler):
        for _ in range(2000):
            value = sampler.recency_biased_date(LOWER, UPPER)
            assert LOWER <= value <= UPPER

    def test_reversed_bounds_raise(self, sampler):
        with pytest.raises(ValueError):
            sampler.recency_biased_date(UPPER, LOWER)

    def test_penalty_share_matches_expectation(self, sampler):
        """Post-1980 share follows the accept/retry process, not the raw draw."""
        # Retries give each rejected draw another chance, so the net post-1980 share
        # lands near 34% for a 1940 lower bound even though each attempt accepts 20%.
        exponent, accept, attempts = 2.2, 0.2, 5
        span_days = math.floor((UPPER - LOWER).total_seconds() / 86400)
        days_to_penalty_end = (UPPER - datetime(1981, 1, 1, tzinfo=timezone.utc)).total_seconds() / 86400
        p_recent = share_after_penalty_year(span_days, days_to_penalty_end, exponent)

        retry = p_recent * (1 - accept)
        expected = accept * p_recent * (1 - retry**attempts) / (1 - retry)

        draws = [sampler.recency_biased_date(LOWER, UPPER) for _ in range(NUM_DRAWS)]
        share = sum(d.year > 1980 for d in draws) / NUM_DRAWS

        assert abs(share - expected) < 0.025
        assert share < p_recent

    def test_no_penalty_favors_recent_dates(self, sampler):
        draws = [sampler.recency_biased_date(LOWER, UPPER, penalty_accept_probability=1.0) for _ in range(NUM_DRAWS)]
        recent = sum(d >= UPPER - timedelta(days=365 * 10) for d in draws) / NUM_DRAWS
        # A uniform draw would put ~12% in the last decade
        assert recent > 0.3

    def test_fallback_is_one_second_after_lower(self):
        """Exhausted attempts return lower + 1s."""

        class FixedRandom:
            def random(self):
                return 0.5

        # 0.5 ** 50 rounds days_back to 0, so every candidate is post-penalty and rejected
        sampler = Sampler(FixedRandom())
        value = sampler.recency_biased_date(LOWER, UPPER, exponent=50, penalty_accept_probability=0.0)
        assert value == LOWER + timedelta(seconds=1)

    def test_single_day_window(self, sampler):
        lower = datetime(2026, 10, 18, tzinfo=timezone.utc)
        for _ in range(500):
            value = sampler.recency_biased_date(lower, UPPER)
            assert lower <= value <= UPPER

    def test_degenerate_window(self, sampler):
        assert sampler.recency_biased_date(UPPER, UPPER) == UPPER


# =============================================================================
# Future Offsets
# =============================================================================


class TestBiasedFutureOffset:
    """Tests for near-term-biased day offsets."""

    def test_within_bounds(self, sampler):
        for _ in range(NUM_DRAWS):
            assert 0 <= sampler.biased_future_offset(1095) < 1095

    def test_concentrated_near_zero(self, sampler):
        mean = statistics.mean(sampler.biased_future_offset(1095) for _ in range(NUM_DRAWS))
        assert mean < 1095 * 0.35

    def test_exponent_outside_unit_interval_raises(self, sampler):
        with pytest.raises(ValueError):
            sampler.biased_future_offset(100, 1.5)
        with pytest.raises(ValueError):
            sampler.biased_future_offset(100, 0)

    def test_zero_window(self, sampler):
        assert sampler.biased_future_offset(0) == 0
