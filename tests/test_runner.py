"""Tests for the parallel trial runner."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from patternrace.config import ConfigurationError, ExperimentConfig
from patternrace.logging import LOG_LEVEL_ENV
from patternrace.patterns import PATTERNS
from patternrace.runner import (
    MAX_CHUNK_SIZE,
    TrialBatch,
    TrialRunner,
    _run_chunk,
    auto_chunk_size,
    chunk_ranges,
    evaluate_chunk,
)
from patternrace.trial import run_trial
from patternrace.utils.seed_manager import SeedManager


class TestChunking:
    """Trial range chunking."""

    def test_chunk_ranges_cover_all_trials_without_overlap(self):
        chunks = chunk_ranges(10, 4)
        assert chunks == [(0, 4), (4, 8), (8, 10)]

    def test_single_chunk(self):
        assert chunk_ranges(5, 100) == [(0, 5)]

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            chunk_ranges(10, 0)

    def test_auto_chunk_size_bounds(self):
        assert auto_chunk_size(1, 8) == 1
        assert auto_chunk_size(1_000, 4) == 62
        assert auto_chunk_size(10_000_000, 2) == MAX_CHUNK_SIZE


class TestTrialRunner:
    """End-to-end runner behavior."""

    def test_batch_shapes_and_dtypes(self, small_config):
        batch = TrialRunner(small_config).run()
        assert isinstance(batch, TrialBatch)
        assert batch.trials == 300
        assert batch.patterns == PATTERNS
        assert batch.positions.shape == (300, 8)
        assert batch.positions.dtype == np.uint32
        assert batch.wins.shape == (300, 56)
        assert batch.wins.dtype == bool

    def test_positions_within_bounds(self, small_config):
        batch = TrialRunner(small_config).run()
        assert batch.positions.min() >= 3
        assert batch.positions.max() <= small_config.sequence_length

    def test_slots_match_individual_trials(self, small_config):
        """Row i holds exactly the result of trial i."""
        batch = TrialRunner(small_config).run()
        seed_mgr = SeedManager(small_config.seed)
        for index in (0, 63, 64, 299):
            result = run_trial(index, small_config, seed_mgr)
            assert tuple(batch.positions[index]) == result.positions
            assert tuple(batch.wins[index]) == result.wins

    def test_metadata(self, small_config):
        batch = TrialRunner(small_config).run()
        meta = batch.metadata
        assert meta["trials"] == 300
        assert meta["sequence_length"] == 100
        assert meta["parallelism"] == 1
        assert meta["chunk_size"] == 64
        assert meta["chunks"] == 5
        assert meta["seed"] == 123
        assert meta["random_backend"] == "mt19937"
        assert meta["execution_time"] >= 0

    def test_serial_and_parallel_results_are_identical(self, small_config):
        """Work distribution does not change any trial."""
        serial = TrialRunner(small_config).run(parallelism=1)
        parallel = TrialRunner(small_config).run(parallelism=2)
        assert parallel.metadata["parallelism"] == 2
        np.testing.assert_array_equal(serial.positions, parallel.positions)
        np.testing.assert_array_equal(serial.wins, parallel.wins)

    def test_chunk_size_does_not_change_results(self, small_config):
        a = TrialRunner(small_config).run()
        b = TrialRunner(small_config.with_overrides(chunk_size=7)).run()
        np.testing.assert_array_equal(a.positions, b.positions)
        np.testing.assert_array_equal(a.wins, b.wins)

    def test_backend_selection(self, small_config):
        a = TrialRunner(small_config).run()
        b = TrialRunner(small_config.with_overrides(random_backend="pcg64")).run()
        assert b.metadata["random_backend"] == "pcg64"
        assert not np.array_equal(a.positions, b.positions)

    def test_single_chunk_runs_serially_even_with_workers(self, small_config):
        config = small_config.with_overrides(chunk_size=1000)
        batch = TrialRunner(config).run(parallelism=4)
        assert batch.metadata["chunks"] == 1
        assert batch.metadata["parallelism"] == 1

    def test_fresh_seed_when_unseeded(self, caplog):
        config = ExperimentConfig(trials=10, parallelism=1)
        with caplog.at_level(logging.INFO, logger="patternrace.runner"):
            runner = TrialRunner(config)
        batch = runner.run()
        assert batch.metadata["seed"] == runner.master_seed
        assert f"using master seed {runner.master_seed}" in caplog.text

    def test_unseeded_runner_repeats_the_same_trials(self):
        """The fresh seed is drawn once per runner, not once per run."""
        runner = TrialRunner(ExperimentConfig(trials=30, parallelism=1))
        first = runner.run()
        second = runner.run()
        assert first.metadata["seed"] == second.metadata["seed"]
        np.testing.assert_array_equal(first.positions, second.positions)

    def test_invalid_parallelism_rejected(self, small_config):
        with pytest.raises(ConfigurationError):
            TrialRunner(small_config).run(parallelism=0)

    def test_invalid_config_rejected_before_running(self):
        with pytest.raises(ConfigurationError):
            TrialRunner(ExperimentConfig(trials=0))

    def test_serial_path_leaves_worker_state_untouched(self, small_config):
        TrialRunner(small_config).run(parallelism=1)
        with pytest.raises(RuntimeError, match="not initialized"):
            _run_chunk((0, 1))

    def test_serial_runs_in_threads_do_not_interfere(self, small_config):
        """Concurrent serial runs each use their own configuration and seed."""
        configs = [small_config, small_config.with_overrides(seed=456)]
        expected = [TrialRunner(c).run(parallelism=1) for c in configs]

        with ThreadPoolExecutor(max_workers=2) as executor:
            batches = list(
                executor.map(lambda c: TrialRunner(c).run(parallelism=1), configs)
            )

        for got, want in zip(batches, expected):
            np.testing.assert_array_equal(got.positions, want.positions)
            np.testing.assert_array_equal(got.wins, want.wins)

    def test_evaluate_chunk_matches_runner_rows(self, small_config):
        runner = TrialRunner(small_config)
        batch = runner.run()
        start, positions, wins = evaluate_chunk(
            (10, 20), small_config, runner.seed_manager
        )
        assert start == 10
        np.testing.assert_array_equal(positions, batch.positions[10:20])
        np.testing.assert_array_equal(wins, batch.wins[10:20])

    def test_batch_carries_sequence_length(self, small_config):
        config = small_config.with_overrides(sequence_length=40)
        batch = TrialRunner(config).run()
        assert batch.sequence_length == 40
        assert batch.positions.max() <= 40

    def test_parallel_run_restores_log_level_environment(
        self, small_config, monkeypatch
    ):
        monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
        TrialRunner(small_config).run(parallelism=2)
        assert os.environ[LOG_LEVEL_ENV] == "ERROR"

        monkeypatch.delenv(LOG_LEVEL_ENV)
        TrialRunner(small_config).run(parallelism=2)
        assert LOG_LEVEL_ENV not in os.environ
