"""Random sequence generation and first-occurrence lookup."""

from __future__ import annotations

from patternrace.random_source import RandomSource

# A fair coin from a die roll: 4..6 is "U", 1..3 is "D"
DRAW_LOW = 1
DRAW_HIGH = 6
UP_THRESHOLD = 3


def generate_sequence(source: RandomSource, length: int) -> str:
    """Draw a sequence of ``length`` symbols, each independently "U" or "D".

    Args:
        source: Random source; only its internal state is advanced.
        length: Number of symbols, must be positive.

    Returns:
        The generated sequence.

    Raises:
        ValueError: If ``length`` is not positive.
    """
    if length <= 0:
        raise ValueError(f"Sequence length must be positive, got {length}")
    draws = source.integers(DRAW_LOW, DRAW_HIGH, length)
    return "".join("U" if d > UP_THRESHOLD else "D" for d in draws)


def locate(pattern: str, sequence: str) -> int:
    """Return the end position of the first occurrence of ``pattern``.

    The end position is the number of symbols observed until the pattern
    completed (start index plus pattern length). When the pattern does not
    occur, the sentinel ``len(sequence)`` is returned.

    Raises:
        ValueError: If ``pattern`` is empty.
    """
    if not pattern:
        raise ValueError("Pattern must not be empty")
    start = sequence.find(pattern)
    if start < 0:
        return len(sequence)
    return start + len(pattern)
