"""Randomised reconnect delay."""

from __future__ import annotations

from typing import Callable

RandomSource = Callable[[], float]


def compute_backoff(
    attempts: int,
    rng: RandomSource,
    *,
    base_delay_ms: float = 2000,
    max_multiplier: int = 5,
) -> float:
    """Return a reconnect delay in milliseconds.

    The delay is uniform in ``[0, base_delay_ms * min(attempts + 1, max_multiplier))``
    when ``rng`` yields values in ``[0, 1)``.
    """

    max_delay = base_delay_ms * min(attempts + 1, max_multiplier)
    return max_delay * rng()
