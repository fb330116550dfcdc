"""patternrace: Monte Carlo study of U/D pattern races.

Repeatedly generates random length-100 sequences over ``{U, D}`` and
estimates, for the 8 length-3 patterns:

- the expected number of symbols observed until each pattern first completes;
- for every ordered pair of distinct patterns, the probability that the first
  one appears strictly before the second.

Trials run in parallel worker processes, each with its own random source
seeded from a master seed, and are reduced into aggregate statistics.

Example:
    from patternrace import ExperimentConfig, run_experiment, render_report

    results = run_experiment(ExperimentConfig(trials=10_000, seed=1))
    print(render_report(results))
"""

from __future__ import annotations

from patternrace import cli, logging
from patternrace._version import __version__
from patternrace.aggregate import WinCounter, aggregate_win_counts, sum_expectations
from patternrace.config import ConfigurationError, ExperimentConfig
from patternrace.experiment import aggregate_batch, run_experiment
from patternrace.patterns import PATTERN_PAIRS, PATTERNS, PatternPair
from patternrace.report import render_report, win_matrix_frame
from patternrace.results import ExperimentResults
from patternrace.runner import TrialBatch, TrialRunner
from patternrace.sequence import generate_sequence, locate
from patternrace.trial import TrialResult, evaluate_sequence

__all__ = [
    # Version
    "__version__",
    # Model
    "PATTERNS",
    "PATTERN_PAIRS",
    "PatternPair",
    "ExperimentConfig",
    "ConfigurationError",
    # Core
    "generate_sequence",
    "locate",
    "evaluate_sequence",
    "TrialResult",
    "TrialRunner",
    "TrialBatch",
    "sum_expectations",
    "aggregate_win_counts",
    "WinCounter",
    # Execution
    "run_experiment",
    "aggregate_batch",
    # Results
    "ExperimentResults",
    "render_report",
    "win_matrix_frame",
    # Utilities
    "cli",
    "logging",
]
