"""Tests for experiment configuration."""

from __future__ import annotations

import pytest

from patternrace.config import (
    DEFAULT_SEQUENCE_LENGTH,
    DEFAULT_TRIALS,
    ConfigurationError,
    ExperimentConfig,
)
from patternrace.patterns import PATTERNS


class TestDefaults:
    def test_default_values(self):
        config = ExperimentConfig()
        assert config.trials == DEFAULT_TRIALS == 1_000_000
        assert config.sequence_length == DEFAULT_SEQUENCE_LENGTH == 100
        assert config.seed is None
        assert config.parallelism is None
        assert config.random_backend == "mt19937"
        assert config.chunk_size is None
        assert config.patterns == PATTERNS

    def test_defaults_validate(self):
        config = ExperimentConfig()
        assert config.validate() is config

    def test_effective_parallelism(self, monkeypatch):
        assert ExperimentConfig(parallelism=3).effective_parallelism() == 3
        monkeypatch.setattr("patternrace.config.os.cpu_count", lambda: None)
        assert ExperimentConfig().effective_parallelism() == 1


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"trials": 0},
            {"trials": -5},
            {"trials": 1.5},
            {"trials": True},
            {"sequence_length": 0},
            {"sequence_length": 2},
            {"seed": -1},
            {"parallelism": 0},
            {"chunk_size": 0},
            {"random_backend": "xorshift"},
            {"patterns": ()},
            {"patterns": ("UUU", "UUU")},
            {"patterns": ("UXU",)},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            ExperimentConfig(**kwargs).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            ExperimentConfig(trials=0).validate()

    def test_length_equal_to_pattern_length_is_valid(self):
        ExperimentConfig(sequence_length=3).validate()


class TestOverrides:
    def test_none_values_are_ignored(self):
        config = ExperimentConfig(trials=10).with_overrides(trials=None, seed=4)
        assert config.trials == 10
        assert config.seed == 4

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            ExperimentConfig().with_overrides(workers=2)

    def test_base_config_unchanged(self):
        base = ExperimentConfig()
        base.with_overrides(trials=5)
        assert base.trials == DEFAULT_TRIALS


class TestLoading:
    def test_from_yaml(self):
        config = ExperimentConfig.from_yaml(
            """
trials: 5000
sequence_length: 50
seed: 7
parallelism: 2
random_backend: pcg64
chunk_size: 100
"""
        )
        assert config.trials == 5000
        assert config.sequence_length == 50
        assert config.seed == 7
        assert config.parallelism == 2
        assert config.random_backend == "pcg64"
        assert config.chunk_size == 100

    def test_empty_document_gives_defaults(self):
        assert ExperimentConfig.from_yaml("") == ExperimentConfig()

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Unrecognized"):
            ExperimentConfig.from_yaml("trials: 5\npatterns: [UU]\n")

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            ExperimentConfig.from_yaml("- 1\n- 2\n")

    def test_malformed_yaml_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ExperimentConfig.from_yaml("trials: [1, 2\n")

    def test_invalid_value_rejected(self):
        with pytest.raises(ConfigurationError):
            ExperimentConfig.from_yaml("trials: many\n")

    def test_to_dict_round_trips_file_keys(self):
        config = ExperimentConfig(trials=9, seed=3, random_backend="pcg64")
        data = config.to_dict()
        assert "patterns" not in data
        assert ExperimentConfig.from_dict(data) == config
