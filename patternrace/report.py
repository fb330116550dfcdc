"""Text report of experiment results."""

from __future__ import annotations

import math
from typing import Any, List, Optional

import numpy as np
import pandas as pd

from patternrace.results import ExperimentResults


def format_table(
    headers: List[str],
    rows: List[List[str]],
    min_width: int = 5,
    align_right: Optional[List[bool]] = None,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers.
        rows: Data rows.
        min_width: Minimum column width.
        align_right: Per-column flag; right-align numeric columns.

    Returns:
        Formatted table string, or "" when there are no rows.
    """
    if not rows:
        return ""
    if align_right is None:
        align_right = [False] * len(headers)

    all_data = [headers] + rows
    col_widths = []
    for col_idx in range(len(headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[Any]) -> str:
        cells = []
        for i, item in enumerate(row_data):
            if align_right[i]:
                cells.append(f"{str(item):>{col_widths[i]}}")
            else:
                cells.append(f"{str(item):<{col_widths[i]}}")
        return "   " + " | ".join(cells)

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def win_matrix_frame(results: ExperimentResults) -> pd.DataFrame:
    """Win percentages as a square frame.

    Row is the first pattern, column the second; cell (A, B) is the percentage
    of trials in which A occurred strictly before B. The diagonal is NaN.
    """
    patterns = list(results.patterns)
    if not results.win_counts:
        return pd.DataFrame(np.nan, index=patterns, columns=patterns)
    df = pd.DataFrame(
        [
            {
                "first": pair.first,
                "second": pair.second,
                "percentage": count / results.trials * 100.0,
            }
            for pair, count in results.win_counts.items()
        ]
    )
    matrix = df.pivot_table(
        index="first", columns="second", values="percentage", aggfunc="sum"
    )
    # pivot_table sorts labels and has no diagonal cells; reindex restores both
    matrix = matrix.reindex(index=patterns, columns=patterns)
    matrix.index.name = None
    matrix.columns.name = None
    return matrix


def format_expectations(results: ExperimentResults) -> str:
    """One row per pattern with its average first-occurrence position."""
    rows = [
        [pattern, f"{results.average_position(pattern):.1f}"]
        for pattern in results.patterns
    ]
    return format_table(
        ["Pattern", "Expected position"], rows, align_right=[False, True]
    )


def format_win_matrix(results: ExperimentResults) -> str:
    """Win percentage matrix with one decimal place and a blank diagonal."""
    matrix = win_matrix_frame(results)
    headers = [""] + list(matrix.columns)
    rows: List[List[str]] = []
    for first, series in matrix.iterrows():
        cells = [str(first)]
        for value in series:
            cells.append("" if math.isnan(value) else f"{value:.1f}")
        rows.append(cells)
    return format_table(
        headers, rows, align_right=[False] + [True] * len(matrix.columns)
    )


def render_report(results: ExperimentResults) -> str:
    """Full text report: expectations, then the win matrix."""
    lines = [
        "=" * 60,
        "PATTERN RACE RESULTS",
        "=" * 60,
        f"Trials: {results.trials:,}   Sequence length: {results.sequence_length}",
        "",
        "1. EXPECTED POSITION OF FIRST OCCURRENCE",
        "-" * 40,
        format_expectations(results),
        "",
        "2. WIN RATE (%): ROW PATTERN APPEARS BEFORE COLUMN PATTERN",
        "-" * 40,
        format_win_matrix(results),
    ]
    return "\n".join(lines)
