"""Global pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from patternrace.config import ExperimentConfig


@pytest.fixture
def small_config() -> ExperimentConfig:
    """A fast, reproducible configuration for unit tests."""
    return ExperimentConfig(trials=300, seed=123, parallelism=1, chunk_size=64)
