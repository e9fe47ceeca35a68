"""Random selection helpers for draw rounds."""

from __future__ import annotations

import random
from typing import Optional, Sequence

_DEFAULT_RNG = random.Random()


def sample_without_replacement(
    pool: Sequence[str],
    count: int,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Draw up to ``count`` names from ``pool`` without replacement.

    Each draw picks a uniformly random index into a shrinking working copy
    of ``pool``, removes that entry and records it, so results come back in
    draw order and never repeat an index.

    Parameters
    ----------
    pool : Sequence[str]
        Eligible names. Not modified.
    count : int
        Requested number of draws. Values above ``len(pool)`` are clamped;
        non-positive values draw nothing.
    rng : Optional[random.Random], default: None
        Source of randomness. The module-level generator is used when
        omitted.

    Returns
    -------
    list[str]
        ``min(count, len(pool))`` names in the order they were drawn.
    """

    rng = rng or _DEFAULT_RNG
    available = list(pool)
    drawn: list[str] = []
    for _ in range(min(count, len(available))):
        index = rng.randrange(len(available))
        drawn.append(available.pop(index))
    return drawn


def rolling_sample(
    pool: Sequence[str],
    limit: int,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Pick ``min(limit, len(pool))`` names with replacement for the animation.

    Purely cosmetic; the result never feeds into winner selection.
    """

    if not pool or limit <= 0:
        return []
    rng = rng or _DEFAULT_RNG
    return [pool[rng.randrange(len(pool))] for _ in range(min(limit, len(pool)))]


__all__ = ["rolling_sample", "sample_without_replacement"]
