"""Pattern and ordered pattern-pair enumeration.

The 8 patterns are every length-3 word over ``{D, U}`` in lexicographic order.
Ordered pairs of distinct patterns are enumerated row-major with the diagonal
skipped, which gives a dense index space of ``n * (n - 1)`` pairs. The
bijection ``pair_index``/``pair_from_index`` lets counters live in a flat
array instead of a map keyed by pairs.
"""

from __future__ import annotations

from itertools import product
from typing import NamedTuple, Sequence, Tuple

ALPHABET: Tuple[str, str] = ("D", "U")
PATTERN_LENGTH = 3


class PatternPair(NamedTuple):
    """Ordered pair of distinct patterns; ``first`` wins if it occurs strictly earlier."""

    first: str
    second: str


def enumerate_patterns(
    alphabet: Sequence[str] = ALPHABET, length: int = PATTERN_LENGTH
) -> Tuple[str, ...]:
    """Return all words of ``length`` over ``alphabet`` in lexicographic order."""
    if length < 1:
        raise ValueError(f"Pattern length must be positive, got {length}")
    return tuple("".join(chars) for chars in product(sorted(alphabet), repeat=length))


def enumerate_pairs(patterns: Sequence[str]) -> Tuple[PatternPair, ...]:
    """Return ordered pairs of distinct patterns, row-major, diagonal skipped."""
    return tuple(
        PatternPair(a, b)
        for i, a in enumerate(patterns)
        for j, b in enumerate(patterns)
        if i != j
    )


def pair_count(num_patterns: int) -> int:
    """Number of ordered distinct pairs over ``num_patterns`` patterns."""
    return num_patterns * (num_patterns - 1)


def pair_index(i: int, j: int, num_patterns: int) -> int:
    """Map pattern indices ``(i, j)``, ``i != j``, to a dense pair index.

    Raises:
        ValueError: If ``i == j`` or an index is out of range.
    """
    if not (0 <= i < num_patterns and 0 <= j < num_patterns):
        raise ValueError(
            f"Pattern index out of range: ({i}, {j}) for {num_patterns} patterns"
        )
    if i == j:
        raise ValueError(f"Pair ({i}, {j}) is on the diagonal")
    return i * (num_patterns - 1) + (j if j < i else j - 1)


def pair_from_index(index: int, num_patterns: int) -> Tuple[int, int]:
    """Inverse of ``pair_index``."""
    if not 0 <= index < pair_count(num_patterns):
        raise ValueError(
            f"Pair index {index} out of range for {num_patterns} patterns"
        )
    i, rem = divmod(index, num_patterns - 1)
    j = rem if rem < i else rem + 1
    return i, j


PATTERNS: Tuple[str, ...] = enumerate_patterns()
PATTERN_PAIRS: Tuple[PatternPair, ...] = enumerate_pairs(PATTERNS)
