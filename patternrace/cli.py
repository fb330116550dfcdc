"""Command-line interface for patternrace."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from patternrace.config import ConfigurationError, ExperimentConfig
from patternrace.experiment import run_experiment
from patternrace.logging import get_logger, set_global_log_level
from patternrace.profiling import CheckpointRecorder, CheckpointReporter
from patternrace.random_source import RANDOM_SOURCES
from patternrace.report import render_report

logger = get_logger(__name__)


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s"; 75.2 -> "1m 15.2s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _load_config(path: Optional[Path], overrides: Dict[str, Any]) -> ExperimentConfig:
    """Build the run configuration from an optional YAML file plus CLI overrides.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigurationError: If the result is invalid.
    """
    if path is not None:
        logger.info(f"Loading configuration from: {path}")
        config = ExperimentConfig.from_yaml(path.read_text())
    else:
        config = ExperimentConfig()
    return config.with_overrides(**overrides).validate()


def _run(
    config_path: Optional[Path],
    overrides: Dict[str, Any],
    compare_serial: bool,
    results_path: Optional[Path],
    stdout: bool,
) -> None:
    """Run an experiment, print the report and the checkpoint summary.

    Args:
        config_path: Optional YAML configuration file.
        overrides: Non-None values replace file/default settings.
        compare_serial: Also time a serial pass of the same trials.
        results_path: Where to write JSON results, if given.
        stdout: Print JSON results to stdout.
    """
    _start_time = perf_counter()

    try:
        config = _load_config(config_path, overrides)
        recorder = CheckpointRecorder()

        results = run_experiment(
            config, recorder=recorder, compare_serial=compare_serial
        )

        print(render_report(results))
        recorder.checkpoint("report rendered")

        if results_path is not None or stdout:
            json_str = json.dumps(results.to_dict(), indent=2, default=str)
            if results_path is not None:
                results_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info(f"Writing results to: {results_path}")
                results_path.write_text(json_str)
                print(f"✅ Results written to: {results_path}")
            if stdout:
                print(json_str)

        print("\n" + CheckpointReporter(recorder).generate_report())

        _elapsed = perf_counter() - _start_time
        logger.info(
            f"Experiment completed successfully in {_format_duration(_elapsed)}"
        )

    except FileNotFoundError as e:
        logger.error(f"Configuration file not found: {e.filename}")
        print(f"❌ ERROR: Configuration file not found: {e.filename}")
        sys.exit(1)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"❌ ERROR: Invalid configuration: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to run experiment: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Failed to run experiment: {type(e).__name__}: {e}")
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``patternrace`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="patternrace",
        description=(
            "Estimate first-occurrence expectations and pairwise win rates of "
            "length-3 U/D patterns by Monte Carlo simulation."
        ),
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{run}",
        help="Available commands",
    )

    run_parser = subparsers.add_parser("run", help="Run the experiment")
    run_parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="YAML configuration file (keys: trials, sequence_length, seed, "
        "parallelism, random_backend, chunk_size)",
    )
    run_parser.add_argument(
        "--trials", "-n", type=int, default=None, help="Number of trials"
    )
    run_parser.add_argument(
        "--length", type=int, default=None, help="Symbols per generated sequence"
    )
    run_parser.add_argument(
        "--seed", type=int, default=None, help="Master seed for reproducible runs"
    )
    run_parser.add_argument(
        "--parallelism",
        "-p",
        type=int,
        default=None,
        help="Worker processes (default: CPU count)",
    )
    run_parser.add_argument(
        "--backend",
        choices=sorted(RANDOM_SOURCES),
        default=None,
        help="Random source implementation",
    )
    run_parser.add_argument(
        "--chunk-size", type=int, default=None, help="Trials per worker task"
    )
    run_parser.add_argument(
        "--compare-serial",
        action="store_true",
        help="Also run the trials serially and report both timings",
    )
    run_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help="Export results to this JSON file",
    )
    run_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print JSON results to stdout",
    )

    effective_args = sys.argv[1:] if argv is None else argv

    # If no arguments are provided, show help and exit cleanly
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "run":
        _run(
            config_path=args.config,
            overrides={
                "trials": args.trials,
                "sequence_length": args.length,
                "seed": args.seed,
                "parallelism": args.parallelism,
                "random_backend": args.backend,
                "chunk_size": args.chunk_size,
            },
            compare_serial=args.compare_serial,
            results_path=args.results,
            stdout=args.stdout,
        )


if __name__ == "__main__":
    main()
