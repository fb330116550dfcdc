"""Plain-text summary of recorded checkpoints."""

from __future__ import annotations

from typing import List

from patternrace.profiling.profiler import CheckpointRecorder


class CheckpointReporter:
    """Render phase timings from a ``CheckpointRecorder``."""

    def __init__(self, recorder: CheckpointRecorder):
        self.recorder = recorder

    def generate_report(self) -> str:
        """Return the timing table, or a notice when nothing was timed."""
        phases = self.recorder.phases()
        if not phases:
            return "No checkpoint timings recorded."

        total = self.recorder.total_time
        headers = ["Phase", "Location", "Elapsed", "Cumulative", "% Total"]
        rows: List[List[str]] = []
        for phase in phases:
            share = (phase.elapsed / total * 100.0) if total > 0 else 0.0
            rows.append(
                [
                    phase.name,
                    phase.location,
                    f"{phase.elapsed:.3f}s",
                    f"{phase.cumulative:.3f}s",
                    f"{share:.1f}%",
                ]
            )

        col_widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                col_widths[i] = max(col_widths[i], len(cell))

        separator = "  "
        header_line = separator.join(
            h.ljust(col_widths[i]) for i, h in enumerate(headers)
        )
        lines = ["CHECKPOINT TIMINGS", "-" * len(header_line), header_line]
        lines.append("-" * len(header_line))
        for row in rows:
            lines.append(
                separator.join(cell.ljust(col_widths[i]) for i, cell in enumerate(row))
            )
        lines.append("-" * len(header_line))
        lines.append(f"Total: {total:.3f}s")
        return "\n".join(lines)
