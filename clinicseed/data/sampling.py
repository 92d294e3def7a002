"""Random-value primitives used by the entity generator.

Every non-uniform draw in the seeder goes through a ``Sampler`` so the
statistical behavior can be audited and reproduced from one seeded source.
"""

import math
import random
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from typing import Any, Optional, TypeVar

from clinicseed.errors import EmptyInputError

T = TypeVar("T")

# Recency bias and penalty-year tuning for appointment dates
RECENCY_EXPONENT = 2.2
PENALTY_YEAR = 1980
PENALTY_ACCEPT_PROBABILITY = 0.2
PENALTY_MAX_ATTEMPTS = 5

# Count skew (>1 favors the low end)
COUNT_SKEW_EXPONENT = 1.6

# Future offsets (<1 concentrates mass near zero)
FUTURE_OFFSET_EXPONENT = 0.4


class Sampler:
    """Weighted and biased random draws over an injectable random source."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    def seeded(cls, seed: Optional[int]) -> "Sampler":
        return cls(random.Random(seed))

    # -------------------------------------------------------------------------
    # Uniform helpers
    # -------------------------------------------------------------------------

    def uniform_choice(self, sequence: Sequence[T]) -> T:
        """Return one element uniformly at random."""
        if not sequence:
            raise EmptyInputError("cannot choose from an empty sequence")
        return sequence[self.rng.randrange(len(sequence))]

    def uniform_int(self, low: int, high: int) -> int:
        """Integer in [low, high], both inclusive."""
        return self.rng.randint(low, high)

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self.rng.random() < probability

    def uniform_date(self, start: date, end: date) -> date:
        """Calendar date uniformly between start and end, inclusive."""
        if end < start:
            raise ValueError(f"end {end} precedes start {start}")
        return start + timedelta(days=self.rng.randint(0, (end - start).days))

    def uniform_datetime(self, start: datetime, end: datetime) -> datetime:
        """Instant uniformly between start and end."""
        if end < start:
            raise ValueError(f"end {end} precedes start {start}")
        return start + (end - start) * self.rng.random()

    def weighted_choice(self, options: dict) -> Any:
        """Select an option based on weighted probabilities.

        Walks the cumulative weights with a single roll, so ``{"a": 0.6,
        "b": 0.25, "c": 0.15}`` means roll < 0.60 -> a, < 0.85 -> b, else c.
        """
        if not options:
            raise EmptyInputError("cannot choose from empty options")
        total = sum(options.values())
        roll = self.rng.random() * total
        cumulative = 0.0
        for item, weight in options.items():
            cumulative += weight
            if roll < cumulative:
                return item
        return item

    def new_id(self) -> str:
        """Random UUID4 hex drawn from this sampler's source."""
        return uuid.UUID(int=self.rng.getrandbits(128), version=4).hex

    # -------------------------------------------------------------------------
    # Biased helpers
    # -------------------------------------------------------------------------

    def skewed_count(self, minimum: int, maximum: int, skew_exponent: float = COUNT_SKEW_EXPONENT) -> int:
        """Integer in [minimum, maximum] biased toward minimum.

        A uniform [0, 1) draw is raised to ``skew_exponent`` before scaling,
        so larger exponents push harder toward the low end.
        """
        if maximum < minimum:
            raise ValueError(f"maximum {maximum} is below minimum {minimum}")
        skewed = self.rng.random() ** skew_exponent
        count = math.floor(skewed * (maximum - minimum + 1)) + minimum
        return min(max(count, minimum), maximum)

    def recency_biased_date(
        self,
        lower_bound: datetime,
        upper_bound: datetime,
        exponent: float = RECENCY_EXPONENT,
        penalty_year: int = PENALTY_YEAR,
        penalty_accept_probability: float = PENALTY_ACCEPT_PROBABILITY,
        max_attempts: int = PENALTY_MAX_ATTEMPTS,
    ) -> datetime:
        """Datetime in [lower_bound, upper_bound] biased toward upper_bound.

        Each attempt draws ``days_back = floor(span_days * u ** exponent)``
        back from upper_bound. Candidates before lower_bound are discarded.
        A candidate whose year is after ``penalty_year`` survives only if a
        second coin flip lands within ``penalty_accept_probability``;
        candidates in or before the penalty year are accepted immediately.
        Once ``max_attempts`` are spent the result is one second after
        lower_bound.
        """
        if upper_bound < lower_bound:
            raise ValueError(f"upper bound {upper_bound} precedes lower bound {lower_bound}")

        span_days = max(1, math.floor((upper_bound - lower_bound).total_seconds() / 86400))
        fallback = lower_bound + timedelta(seconds=1)

        for _ in range(max_attempts):
            days_back = math.floor(span_days * self.rng.random() ** exponent)
            candidate = upper_bound - timedelta(days=days_back)
            if candidate < lower_bound:
                continue
            if candidate.year > penalty_year:
                if self.rng.random() <= penalty_accept_probability:
                    return candidate
                continue
            return candidate

        return min(fallback, upper_bound)

    def biased_future_offset(self, max_days: int, exponent: float = FUTURE_OFFSET_EXPONENT) -> int:
        """Day offset in [0, max_days) concentrated near zero.

        ``exponent`` must lie in (0, 1); the draw is ``u ** (1 / exponent)``,
        so 0.4 puts roughly half the mass in the first fifth of the window.
        """
        if not 0 < exponent < 1:
            raise ValueError(f"exponent must be in (0, 1), got {exponent}")
        if max_days <= 0:
            return 0
        return math.floor(max_days * self.rng.random() ** (1 / exponent))
