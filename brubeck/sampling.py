"""Sampling decisions and count rescaling for sampled counters."""

import math
import random
from typing import Protocol


class RandomSource(Protocol):
    """Protocol for anything that hands out uniform floats in [0, 1)."""

    def random(self) -> float:  # pragma: no cover
        """Return the next uniform float in [0, 1)."""
        ...


# The `random` module functions share one generator that is safe to use from
# several threads.
DEFAULT_RANDOM_SOURCE: RandomSource = random


def sampled(sample_rate: float, rng: RandomSource = DEFAULT_RANDOM_SOURCE) -> bool:
    """Return True if a stat observed at `sample_rate` should be sent."""
    if sample_rate >= 1.0:
        return True
    if sample_rate <= 0.0:
        return False
    return rng.random() <= sample_rate


def rescale_count(count: int, sample_rate: float, rng: RandomSource = DEFAULT_RANDOM_SOURCE) -> int:
    """Inflate `count` by the inverse of `sample_rate` for a sampled stat that is
    about to be sent.

    `count / sample_rate` is rarely a whole number, so either its floor or its
    ceiling is returned, picking the ceiling with a probability equal to the
    fractional part. That keeps the expected result equal to
    `count / sample_rate`, which is what the aggregator needs to recover the
    unsampled total. Truncating instead would bias every sample low.

    The random draw here is independent of the one made by `sampled()`.

    A count that cannot be inflated to a finite float (tiny rates, huge counts
    or a NaN rate) is returned unchanged.
    """
    if sample_rate >= 1.0 or sample_rate <= 0.0:
        return count

    try:
        ideal = count / sample_rate
    except OverflowError:
        return count
    if not math.isfinite(ideal):
        return count

    split_threshold = ideal % 1
    if rng.random() >= split_threshold:
        return math.floor(ideal)
    return math.ceil(ideal)
