"""Configuration for patternrace experiments."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from patternrace.patterns import ALPHABET, PATTERNS
from patternrace.random_source import DEFAULT_RANDOM_SOURCE, RANDOM_SOURCES

DEFAULT_TRIALS = 1_000_000
DEFAULT_SEQUENCE_LENGTH = 100

# Keys accepted in a YAML/dict configuration. Patterns are fixed.
_FILE_KEYS = (
    "trials",
    "sequence_length",
    "seed",
    "parallelism",
    "random_backend",
    "chunk_size",
)


class ConfigurationError(ValueError):
    """Raised when an experiment configuration violates an invariant.

    Detected at startup, before any trial runs.
    """


def _require_int(name: str, value: Any, minimum: int) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"'{name}' must be an integer, got {type(value).__name__}"
        )
    if value < minimum:
        raise ConfigurationError(f"'{name}' must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class ExperimentConfig:
    """Parameters of one experiment run.

    Attributes:
        trials: Number of independent trials (N).
        sequence_length: Symbols per generated sequence (L); also the
            "not found" sentinel.
        seed: Master seed. None draws a fresh one at run time.
        parallelism: Worker processes for the trial phase. None uses the CPU count.
        random_backend: Registered random source name.
        chunk_size: Trials per worker task. None picks one automatically.
        patterns: Patterns under study. Not exposed through files or the CLI.
    """

    trials: int = DEFAULT_TRIALS
    sequence_length: int = DEFAULT_SEQUENCE_LENGTH
    seed: Optional[int] = None
    parallelism: Optional[int] = None
    random_backend: str = DEFAULT_RANDOM_SOURCE
    chunk_size: Optional[int] = None
    patterns: Tuple[str, ...] = PATTERNS

    def validate(self) -> "ExperimentConfig":
        """Check every invariant; return self so calls can be chained.

        Raises:
            ConfigurationError: On the first violated invariant.
        """
        _require_int("trials", self.trials, 1)
        _require_int("sequence_length", self.sequence_length, 1)
        if self.seed is not None:
            _require_int("seed", self.seed, 0)
        if self.parallelism is not None:
            _require_int("parallelism", self.parallelism, 1)
        if self.chunk_size is not None:
            _require_int("chunk_size", self.chunk_size, 1)

        if self.random_backend not in RANDOM_SOURCES:
            raise ConfigurationError(
                f"Unknown random_backend '{self.random_backend}'. "
                f"Available: {', '.join(sorted(RANDOM_SOURCES))}"
            )

        if not self.patterns:
            raise ConfigurationError("Pattern set must not be empty")
        if len(set(self.patterns)) != len(self.patterns):
            raise ConfigurationError("Pattern set contains duplicates")
        for pattern in self.patterns:
            if not pattern or set(pattern) - set(ALPHABET):
                raise ConfigurationError(
                    f"Pattern '{pattern}' must be a non-empty word over "
                    f"{{{', '.join(ALPHABET)}}}"
                )
        longest = max(len(p) for p in self.patterns)
        if self.sequence_length < longest:
            raise ConfigurationError(
                f"sequence_length={self.sequence_length} is shorter than the "
                f"longest pattern ({longest})"
            )
        return self

    def effective_parallelism(self) -> int:
        """Worker count to use, resolving None to the CPU count."""
        if self.parallelism is not None:
            return self.parallelism
        return os.cpu_count() or 1

    def with_overrides(self, **overrides: Any) -> "ExperimentConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the file-level settings."""
        return {key: getattr(self, key) for key in _FILE_KEYS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ExperimentConfig":
        """Build and validate a configuration from a mapping.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        keys = {str(k) for k in data}
        unknown = keys - set(_FILE_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Unrecognized configuration keys: {', '.join(sorted(unknown))}"
            )
        return cls(**{str(k): v for k, v in data.items()}).validate()

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ExperimentConfig":
        """Parse a YAML document into a validated configuration."""
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML configuration: {exc}") from exc
        return cls.from_dict(data)
