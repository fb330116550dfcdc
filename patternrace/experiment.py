"""One end-to-end experiment run: trials, aggregation, checkpoints."""

from __future__ import annotations

from typing import Optional

from patternrace.aggregate import aggregate_win_counts, sum_expectations
from patternrace.config import ExperimentConfig
from patternrace.logging import get_logger
from patternrace.profiling import CheckpointRecorder
from patternrace.results import ExperimentResults
from patternrace.runner import TrialBatch, TrialRunner

logger = get_logger(__name__)


def aggregate_batch(batch: TrialBatch, shards: int = 1) -> ExperimentResults:
    """Reduce per-trial results into final statistics.

    Args:
        batch: Slot-indexed trial results.
        shards: Row shards for the concurrent win-count reduction.

    Returns:
        Expectation sums and win counts with the batch metadata.
    """
    expectation_sums = sum_expectations(batch.positions, batch.patterns)
    win_counts = aggregate_win_counts(batch.wins, batch.patterns, shards=shards)
    return ExperimentResults(
        trials=batch.trials,
        sequence_length=batch.sequence_length,
        patterns=batch.patterns,
        expectation_sums=expectation_sums,
        win_counts=win_counts,
        metadata=dict(batch.metadata),
    )


def run_experiment(
    config: ExperimentConfig,
    parallelism: Optional[int] = None,
    recorder: Optional[CheckpointRecorder] = None,
    compare_serial: bool = False,
) -> ExperimentResults:
    """Run all trials and aggregate them.

    Checkpoints recorded: "start", "serial run complete" (only with
    ``compare_serial``), "parallel run complete", "aggregation complete".

    Args:
        config: Experiment configuration; validated before any trial runs.
        parallelism: Worker processes; overrides the configured value.
        recorder: Checkpoint collaborator; a private one is used if None.
        compare_serial: Also run the whole batch serially first, for timing.

    Returns:
        Final statistics.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    config.validate()
    if recorder is None:
        recorder = CheckpointRecorder()

    recorder.checkpoint("start")
    runner = TrialRunner(config)

    if compare_serial:
        logger.info("Running serial pass for comparison")
        runner.run(parallelism=1)
        recorder.checkpoint("serial run complete")

    batch = runner.run(parallelism)
    recorder.checkpoint("parallel run complete")

    shards = int(batch.metadata.get("parallelism", 1))
    results = aggregate_batch(batch, shards=shards)
    recorder.checkpoint("aggregation complete")

    logger.info(
        f"Aggregated {results.trials:,} trials over {len(results.patterns)} patterns "
        f"and {len(results.win_counts)} ordered pairs"
    )
    return results
