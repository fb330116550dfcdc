"""Single-trial evaluation: first occurrences and pairwise wins."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Sequence, Tuple

from patternrace.config import ExperimentConfig
from patternrace.patterns import (
    PATTERNS,
    PatternPair,
    enumerate_pairs,
    pair_count,
    pair_from_index,
)
from patternrace.sequence import generate_sequence, locate
from patternrace.utils.seed_manager import SeedManager


@lru_cache(maxsize=None)
def pair_positions(num_patterns: int) -> Tuple[Tuple[int, int], ...]:
    """Pattern index pairs in dense pair-index order."""
    return tuple(
        pair_from_index(k, num_patterns) for k in range(pair_count(num_patterns))
    )


@dataclass(frozen=True)
class TrialResult:
    """Outcome of one trial.

    Attributes:
        patterns: Patterns in evaluation order.
        positions: First-occurrence end position per pattern (sentinel if absent).
        wins: One flag per ordered pair, in ``enumerate_pairs(patterns)`` order.
    """

    patterns: Tuple[str, ...]
    positions: Tuple[int, ...]
    wins: Tuple[bool, ...]

    def expectations(self) -> Dict[str, int]:
        """Trial expectation result keyed by pattern."""
        return dict(zip(self.patterns, self.positions))

    def wins_by_pair(self) -> Dict[PatternPair, bool]:
        """Trial win result keyed by ordered pattern pair."""
        return dict(zip(enumerate_pairs(self.patterns), self.wins))

    def strict_orderings(self) -> int:
        """Number of ordered pairs whose first pattern strictly won."""
        return sum(self.wins)


def evaluate_sequence(
    sequence: str, patterns: Sequence[str] = PATTERNS
) -> TrialResult:
    """Evaluate one sequence against every pattern and ordered pair.

    The expectation pass locates each pattern once. The win pass reuses those
    positions: pair (A, B) is a win iff A's position is strictly smaller than
    B's, so ties (both absent included) are not wins for either side.
    """
    patterns = tuple(patterns)
    positions = tuple(locate(p, sequence) for p in patterns)
    wins = tuple(positions[i] < positions[j] for i, j in pair_positions(len(patterns)))
    return TrialResult(patterns=patterns, positions=positions, wins=wins)


def run_trial(
    index: int, config: ExperimentConfig, seed_manager: SeedManager
) -> TrialResult:
    """Run trial ``index``: fresh random source, one sequence, full evaluation."""
    source = seed_manager.create_random_source(config.random_backend, "trial", index)
    sequence = generate_sequence(source, config.sequence_length)
    return evaluate_sequence(sequence, config.patterns)
