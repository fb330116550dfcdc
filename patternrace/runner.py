"""Parallel trial runner.

Executes N independent trials and stores each trial's result in its own slot
of two pre-sized arrays: ``positions[N, P]`` (first-occurrence end positions)
and ``wins[N, P*(P-1)]`` (pairwise win flags). Trials are grouped into
contiguous chunks; a worker runs a whole chunk and hands back one block, which
the parent copies into rows ``[start:stop]``. Blocks never overlap, so the
collection step needs no locking and completion order does not matter.

Every trial builds its own random source from a seed derived from the master
seed and the trial index. Results are therefore identical for serial and
parallel execution, and for any chunk size.

Parallelism: for a single worker or a single chunk, serial execution avoids
process start-up and IPC overhead. Otherwise a ``ProcessPoolExecutor`` runs
the chunks; the configuration is shipped once per worker via the initializer.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from patternrace.config import ConfigurationError, ExperimentConfig
from patternrace.logging import (
    LOG_LEVEL_ENV,
    apply_level_from_environment,
    export_level_to_environment,
    get_logger,
)
from patternrace.patterns import pair_count
from patternrace.trial import run_trial
from patternrace.utils.seed_manager import SeedManager

logger = get_logger(__name__)

# Upper bound on trials per task; keeps blocks small and progress granular
MAX_CHUNK_SIZE = 10_000

ChunkResult = Tuple[int, np.ndarray, np.ndarray]

# Per-process state, set by _worker_init in pool workers only
_worker_config: "ExperimentConfig | None" = None
_worker_seed_manager: "SeedManager | None" = None


@dataclass
class TrialBatch:
    """Per-trial results of one run, one row per trial index.

    Attributes:
        patterns: Patterns in column order of ``positions``.
        sequence_length: Symbols per sequence (L), also the "not found" value.
        positions: ``uint32[N, P]`` first-occurrence end positions.
        wins: ``bool[N, P*(P-1)]`` win flags in dense pair-index order.
        metadata: Execution details (seed, parallelism, timing, ...).
    """

    patterns: Tuple[str, ...]
    sequence_length: int
    positions: np.ndarray
    wins: np.ndarray
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def trials(self) -> int:
        """Number of trials (rows)."""
        return int(self.positions.shape[0])


def chunk_ranges(trials: int, chunk_size: int) -> List[Tuple[int, int]]:
    """Split ``range(trials)`` into contiguous ``(start, stop)`` chunks."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [
        (start, min(start + chunk_size, trials))
        for start in range(0, trials, chunk_size)
    ]


def auto_chunk_size(trials: int, workers: int) -> int:
    """Pick trials per task: about four tasks per worker, capped."""
    return max(1, min(MAX_CHUNK_SIZE, trials // (workers * 4)))


def evaluate_chunk(
    bounds: Tuple[int, int], config: ExperimentConfig, seed_manager: SeedManager
) -> ChunkResult:
    """Run trials ``start..stop-1`` and return their result block.

    Args:
        bounds: ``(start, stop)`` trial indices.
        config: Validated experiment configuration.
        seed_manager: Source of per-trial seeds.

    Returns:
        Tuple of (start, positions block, wins block).
    """
    start, stop = bounds
    num_patterns = len(config.patterns)
    positions = np.empty((stop - start, num_patterns), dtype=np.uint32)
    wins = np.empty((stop - start, pair_count(num_patterns)), dtype=bool)

    for row, index in enumerate(range(start, stop)):
        result = run_trial(index, config, seed_manager)
        positions[row] = result.positions
        wins[row] = result.wins

    return start, positions, wins


def _worker_init(config: ExperimentConfig, master_seed: int) -> None:
    """Initialize a worker process with the run configuration.

    Called once per worker process via ProcessPoolExecutor's initializer.

    Args:
        config: Validated experiment configuration.
        master_seed: Master seed all trial seeds derive from.
    """
    global _worker_config, _worker_seed_manager

    _worker_config = config
    _worker_seed_manager = SeedManager(master_seed)

    # Respect parent-requested log level if provided
    apply_level_from_environment()

    worker_logger = get_logger(f"{__name__}.worker")
    worker_logger.debug(f"Worker {os.getpid()} initialized")


def _run_chunk(bounds: Tuple[int, int]) -> ChunkResult:
    """Pool task: evaluate one chunk with the worker's configuration."""
    if _worker_config is None or _worker_seed_manager is None:
        raise RuntimeError("Worker not initialized with experiment configuration")
    return evaluate_chunk(bounds, _worker_config, _worker_seed_manager)


class TrialRunner:
    """Runs a fixed number of independent trials, serially or in parallel.

    The master seed is fixed at construction: the configured seed, or a fresh
    one (logged) when none is configured. Repeated ``run`` calls on the same
    runner therefore evaluate identical trials.

    Attributes:
        config: Validated experiment configuration.
        master_seed: Seed every trial seed derives from.
        seed_manager: Per-trial seed source built from ``master_seed``.
    """

    def __init__(self, config: ExperimentConfig) -> None:
        """Initialize the runner.

        Args:
            config: Experiment configuration; validated here.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        self.config = config.validate()
        if config.seed is not None:
            self.master_seed: int = config.seed
        else:
            self.master_seed = SeedManager.fresh_master_seed()
            logger.info(f"No seed configured; using master seed {self.master_seed}")
        self.seed_manager = SeedManager(self.master_seed)

    def run(self, parallelism: Optional[int] = None) -> TrialBatch:
        """Execute all trials and collect them into a ``TrialBatch``.

        Args:
            parallelism: Worker processes; overrides the configured value.

        Returns:
            Slot-indexed per-trial results with execution metadata.
        """
        config = self.config
        workers = (
            parallelism if parallelism is not None else config.effective_parallelism()
        )
        if workers < 1:
            raise ConfigurationError(f"parallelism must be >= 1, got {workers}")

        chunk_size = config.chunk_size or auto_chunk_size(config.trials, workers)
        chunks = chunk_ranges(config.trials, chunk_size)

        num_patterns = len(config.patterns)
        positions = np.empty((config.trials, num_patterns), dtype=np.uint32)
        wins = np.empty((config.trials, pair_count(num_patterns)), dtype=bool)

        use_parallel = workers > 1 and len(chunks) > 1
        effective_workers = min(workers, len(chunks)) if use_parallel else 1
        mode = f"parallel, {effective_workers} workers" if use_parallel else "serial"
        logger.info(
            f"Running {config.trials:,} trials ({mode}, "
            f"{len(chunks)} chunks of up to {chunk_size})"
        )
        logger.debug(
            f"Trial parameters: length={config.sequence_length}, "
            f"backend={config.random_backend}, seed={self.master_seed}"
        )

        start_time = time.time()
        if use_parallel:
            blocks = self._run_parallel(chunks, workers)
        else:
            blocks = self._run_serial(chunks)

        filled = 0
        for start, pos_block, win_block in self._with_progress(blocks, len(chunks)):
            stop = start + pos_block.shape[0]
            positions[start:stop] = pos_block
            wins[start:stop] = win_block
            filled += stop - start

        elapsed_time = time.time() - start_time
        if filled != config.trials:
            raise RuntimeError(
                f"Trial collection incomplete: {filled} of {config.trials} slots filled"
            )

        logger.info(f"Trial phase completed in {elapsed_time:.2f} seconds")
        logger.debug(
            f"Average time per trial: {elapsed_time / config.trials * 1e6:.1f} us"
        )

        return TrialBatch(
            patterns=tuple(config.patterns),
            sequence_length=config.sequence_length,
            positions=positions,
            wins=wins,
            metadata={
                "trials": config.trials,
                "sequence_length": config.sequence_length,
                "parallelism": effective_workers,
                "chunk_size": chunk_size,
                "chunks": len(chunks),
                "seed": self.master_seed,
                "random_backend": config.random_backend,
                "execution_time": elapsed_time,
            },
        )

    def _run_parallel(
        self, chunks: List[Tuple[int, int]], parallelism: int
    ) -> Iterator[ChunkResult]:
        """Run chunks on a process pool, yielding blocks as they arrive.

        The parent's log level is published in the environment for the workers
        while the pool is alive; the previous value is restored afterwards.

        Args:
            chunks: ``(start, stop)`` trial ranges.
            parallelism: Requested worker processes.

        Yields:
            ``(start, positions, wins)`` per chunk.
        """
        workers = min(parallelism, len(chunks))

        previous_level = os.environ.get(LOG_LEVEL_ENV)
        export_level_to_environment()
        try:
            with ProcessPoolExecutor(
                max_workers=workers,
                initializer=_worker_init,
                initargs=(self.config, self.master_seed),
            ) as pool:
                logger.debug(f"ProcessPoolExecutor created with {workers} workers")
                yield from pool.map(_run_chunk, chunks)
        finally:
            if previous_level is None:
                os.environ.pop(LOG_LEVEL_ENV, None)
            else:
                os.environ[LOG_LEVEL_ENV] = previous_level

    def _run_serial(self, chunks: List[Tuple[int, int]]) -> Iterator[ChunkResult]:
        """Run chunks in the current process with this runner's own state.

        Args:
            chunks: ``(start, stop)`` trial ranges.

        Yields:
            ``(start, positions, wins)`` per chunk.
        """
        for bounds in chunks:
            yield evaluate_chunk(bounds, self.config, self.seed_manager)

    @staticmethod
    def _with_progress(
        blocks: Iterable[ChunkResult], total: int
    ) -> Iterator[ChunkResult]:
        """Pass blocks through, logging roughly every 10% of chunks."""
        step = max(1, total // 10)
        for done, block in enumerate(blocks, start=1):
            yield block
            if total >= 10 and done % step == 0:
                logger.info(f"Trial progress: {done}/{total} chunks completed")
