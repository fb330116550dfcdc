"""Pluggable random sources that draw bounded integers.

Two interchangeable backends are registered by name:

- ``mt19937``: the standard library Mersenne Twister (``random.Random``).
- ``pcg64``: NumPy's ``Generator`` on the PCG64 bit generator.

Both satisfy the same contract: uniform integers in an inclusive range,
deterministic for a fixed seed, and no state shared between instances. A
source is cheap enough to construct once per trial.
"""

from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Capability interface: draw uniform bounded integers."""

    def integers(self, low: int, high: int, size: int) -> List[int]:
        """Return ``size`` uniform integers in ``[low, high]`` (inclusive)."""
        ...


class MersenneTwisterSource:
    """Random source backed by ``random.Random``."""

    name = "mt19937"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def integers(self, low: int, high: int, size: int) -> List[int]:
        if low > high:
            raise ValueError(f"Empty draw range: low={low} > high={high}")
        return self._rng.choices(range(low, high + 1), k=size)


class PCG64Source:
    """Random source backed by ``numpy.random.Generator(PCG64)``."""

    name = "pcg64"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = np.random.Generator(np.random.PCG64(seed))

    def integers(self, low: int, high: int, size: int) -> List[int]:
        if low > high:
            raise ValueError(f"Empty draw range: low={low} > high={high}")
        return self._rng.integers(low, high, size=size, endpoint=True).tolist()


RANDOM_SOURCES: Dict[str, Callable[[Optional[int]], RandomSource]] = {
    MersenneTwisterSource.name: MersenneTwisterSource,
    PCG64Source.name: PCG64Source,
}

DEFAULT_RANDOM_SOURCE = MersenneTwisterSource.name


def create_random_source(name: str, seed: Optional[int] = None) -> RandomSource:
    """Build a fresh random source by registered name.

    Args:
        name: One of ``RANDOM_SOURCES``.
        seed: Seed for the new instance; None seeds from OS entropy.

    Returns:
        A new, unshared random source.

    Raises:
        ValueError: If ``name`` is not registered.
    """
    try:
        factory = RANDOM_SOURCES[name]
    except KeyError as exc:
        raise ValueError(
            f"Unknown random source '{name}'. "
            f"Available: {', '.join(sorted(RANDOM_SOURCES))}"
        ) from exc
    return factory(seed)
