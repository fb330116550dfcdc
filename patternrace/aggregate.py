"""Reduction of per-trial results into aggregate statistics.

Expectation: per-pattern sums of first-occurrence positions.

Win rate: per-ordered-pair win counts held by ``WinCounter``, a dense array of
counters indexed by pair index. All keys exist (at zero) from construction on,
so concurrent updates never race on key insertion; each update is serialized
by a lock. ``aggregate_win_counts`` reduces row shards on a thread pool and
merges each shard's count vector into one shared counter.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Sequence

import numpy as np

from patternrace.logging import get_logger
from patternrace.patterns import PatternPair, pair_count, pair_from_index, pair_index
from patternrace.trial import TrialResult

logger = get_logger(__name__)


def sum_expectations(
    positions: np.ndarray, patterns: Sequence[str]
) -> Dict[str, int]:
    """Sum first-occurrence positions per pattern over all trials.

    Args:
        positions: ``[N, P]`` array, one row per trial, columns in pattern order.
        patterns: Pattern names for the columns.

    Returns:
        Pattern -> sum of positions, for every pattern.

    Raises:
        ValueError: If the array shape does not match the patterns.
    """
    if positions.ndim != 2 or positions.shape[1] != len(patterns):
        raise ValueError(
            f"positions shape {positions.shape} does not match {len(patterns)} patterns"
        )
    totals = positions.sum(axis=0, dtype=np.uint64)
    return {pattern: int(total) for pattern, total in zip(patterns, totals)}


class WinCounter:
    """Thread-safe win counters for every ordered pair of distinct patterns.

    Attributes:
        patterns: Patterns the pair space is built from.
        pairs: Ordered pairs in dense index order.
    """

    def __init__(self, patterns: Sequence[str]) -> None:
        self.patterns = tuple(patterns)
        n = len(self.patterns)
        self.pairs = tuple(
            PatternPair(self.patterns[i], self.patterns[j])
            for i, j in (pair_from_index(k, n) for k in range(pair_count(n)))
        )
        self._pattern_index = {p: i for i, p in enumerate(self.patterns)}
        # Pre-registered: every pair starts at zero
        self._counts = np.zeros(len(self.pairs), dtype=np.int64)
        self._lock = threading.Lock()

    def slot(self, pair: PatternPair) -> int:
        """Dense counter index of an ordered pair of distinct known patterns.

        Raises:
            KeyError: If a pattern is unknown or the pair is on the diagonal.
        """
        first, second = pair
        i = self._pattern_index[first]
        j = self._pattern_index[second]
        if i == j:
            raise KeyError(pair)
        return pair_index(i, j, len(self.patterns))

    def increment(self, pair: PatternPair, amount: int = 1) -> None:
        """Atomically add ``amount`` to one pair's counter.

        Raises:
            KeyError: If ``pair`` is not an ordered pair of distinct known patterns.
        """
        k = self.slot(pair)
        with self._lock:
            self._counts[k] += amount

    def add_counts(self, counts: np.ndarray) -> None:
        """Atomically add a full count vector in pair-index order."""
        counts = np.asarray(counts, dtype=np.int64)
        if counts.shape != self._counts.shape:
            raise ValueError(
                f"Count vector shape {counts.shape} != {self._counts.shape}"
            )
        with self._lock:
            self._counts += counts

    def add_trial(self, result: TrialResult) -> None:
        """Count every pair the trial's first pattern won."""
        if result.patterns != self.patterns:
            raise ValueError("Trial was evaluated against a different pattern set")
        self.add_counts(np.asarray(result.wins, dtype=np.int64))

    def count(self, pair: PatternPair) -> int:
        """Current count for one pair."""
        k = self.slot(pair)
        with self._lock:
            return int(self._counts[k])

    def as_dict(self) -> Dict[PatternPair, int]:
        """Snapshot of all counters keyed by pair."""
        with self._lock:
            snapshot = self._counts.copy()
        return {pair: int(c) for pair, c in zip(self.pairs, snapshot)}


def aggregate_win_counts(
    wins: np.ndarray, patterns: Sequence[str], shards: int = 1
) -> Dict[PatternPair, int]:
    """Count per-pair wins over all trials.

    Args:
        wins: ``[N, P*(P-1)]`` boolean array in pair-index order.
        patterns: Patterns the pairs are built from.
        shards: Row shards reduced concurrently; 1 reduces in the caller.

    Returns:
        Ordered pair -> number of trials in which its first pattern won.
    """
    counter = WinCounter(patterns)
    if wins.ndim != 2 or wins.shape[1] != len(counter.pairs):
        raise ValueError(
            f"wins shape {wins.shape} does not match {len(counter.pairs)} pairs"
        )
    if shards < 1:
        raise ValueError(f"shards must be positive, got {shards}")

    def reduce_shard(block: np.ndarray) -> None:
        counter.add_counts(block.sum(axis=0, dtype=np.int64))

    blocks = [b for b in np.array_split(wins, shards) if b.shape[0] > 0]
    if len(blocks) > 1:
        logger.debug(f"Reducing win flags in {len(blocks)} shards")
        with ThreadPoolExecutor(max_workers=len(blocks)) as executor:
            futures = [executor.submit(reduce_shard, block) for block in blocks]
            for future in as_completed(futures):
                future.result()
    else:
        for block in blocks:
            reduce_shard(block)

    return counter.as_dict()
