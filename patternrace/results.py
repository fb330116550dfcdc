"""Aggregate results of one experiment run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from patternrace.patterns import PatternPair


@dataclass
class ExperimentResults:
    """Final statistics of a run.

    Sums and counts are stored raw; averages and percentages are derived on
    read and never written back.

    Attributes:
        trials: Number of trials (N).
        sequence_length: Symbols per sequence (L), also the "not found" value.
        patterns: Patterns in report order.
        expectation_sums: Pattern -> sum of first-occurrence positions.
        win_counts: Ordered pair -> trials won by the first pattern.
        metadata: Execution details collected by the runner.
    """

    trials: int
    sequence_length: int
    patterns: Tuple[str, ...]
    expectation_sums: Dict[str, int]
    win_counts: Dict[PatternPair, int]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def average_position(self, pattern: str) -> float:
        """Mean number of symbols observed until ``pattern`` first completed."""
        return self.expectation_sums[pattern] / self.trials

    def win_probability(self, first: str, second: str) -> float:
        """Fraction of trials in which ``first`` occurred strictly before ``second``.

        Raises:
            ValueError: If both patterns are the same.
            KeyError: If either pattern is unknown.
        """
        if first == second:
            raise ValueError(f"No win rate for a pattern against itself: {first}")
        return self.win_counts[PatternPair(first, second)] / self.trials

    def win_percentage(self, first: str, second: str) -> float:
        """``win_probability`` in percent."""
        return self.win_probability(first, second) * 100.0

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "trials": self.trials,
            "sequence_length": self.sequence_length,
            "patterns": list(self.patterns),
            "expectations": {
                p: {
                    "sum": self.expectation_sums[p],
                    "average": self.average_position(p),
                }
                for p in self.patterns
            },
            "win_rates": [
                {
                    "first": pair.first,
                    "second": pair.second,
                    "wins": count,
                    "percentage": count / self.trials * 100.0,
                }
                for pair, count in self.win_counts.items()
            ],
            "metadata": dict(self.metadata),
        }
