"""Seeded linear congruential generator shared by the simulator and diagnostics."""

from __future__ import annotations

from typing import Final

LCG_MULTIPLIER: Final[int] = 1664525
LCG_INCREMENT: Final[int] = 1013904223
LCG_MODULUS: Final[int] = 2**32
LCG_DIVISOR: Final[int] = LCG_MODULUS - 1


def coerce_seed(seed: int) -> int:
    """Return the initial generator state for ``seed`` (never zero)."""

    state = int(seed) % LCG_MODULUS
    return state or 1


class LcgRandom:
    """Reproducible uniform stream (Numerical Recipes LCG constants).

    Two instances built from the same seed yield identical sequences; a stream is
    restarted by constructing a new instance.
    """

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._state = coerce_seed(seed)

    @property
    def seed(self) -> int:
        """Return the seed the generator was constructed from."""

        return self._seed

    @property
    def state(self) -> int:
        """Return the current 32-bit generator state."""

        return self._state

    def random(self) -> float:
        """Advance the generator and return the next draw."""

        self._state = (LCG_MULTIPLIER * self._state + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_DIVISOR

    def __repr__(self) -> str:
        return f"LcgRandom(seed={self._seed}, state={self._state})"
