"""Checkpoint timing for experiment phases.

A ``CheckpointRecorder`` collects named markers with the source location
that emitted them. Consecutive markers delimit phases; the time between them
is the phase's wall-clock duration.
"""

from __future__ import annotations

import inspect
import os
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from patternrace.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Checkpoint:
    """A named marker.

    Attributes:
        name: Marker label, e.g. "parallel run complete".
        location: ``file:line`` of the call site.
        timestamp: Clock reading in seconds.
    """

    name: str
    location: str
    timestamp: float


@dataclass(frozen=True)
class PhaseTiming:
    """Time spent between two consecutive checkpoints.

    Attributes:
        name: Name of the checkpoint that closed the phase.
        location: Location of that checkpoint.
        elapsed: Seconds since the previous checkpoint.
        cumulative: Seconds since the first checkpoint.
    """

    name: str
    location: str
    elapsed: float
    cumulative: float


class CheckpointRecorder:
    """Records checkpoints and derives phase timings."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        """Initialize the recorder.

        Args:
            clock: Monotonic clock in seconds; injectable for tests.
        """
        self._clock = clock
        self._checkpoints: List[Checkpoint] = []

    def checkpoint(self, name: str, line: Optional[int] = None) -> Checkpoint:
        """Record a marker tagged with the caller's source location.

        Args:
            name: Marker label.
            line: Explicit line number; defaults to the caller's line.

        Returns:
            The recorded checkpoint.
        """
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        if caller is not None:
            filename = os.path.basename(caller.f_code.co_filename)
            lineno = line if line is not None else caller.f_lineno
        else:
            filename, lineno = "<unknown>", line if line is not None else 0
        del frame, caller

        cp = Checkpoint(
            name=name, location=f"{filename}:{lineno}", timestamp=self._clock()
        )
        self._checkpoints.append(cp)
        logger.debug(f"Checkpoint '{name}' at {cp.location}")
        return cp

    @property
    def checkpoints(self) -> List[Checkpoint]:
        """Recorded checkpoints in call order."""
        return list(self._checkpoints)

    def phases(self) -> List[PhaseTiming]:
        """Phase timings between consecutive checkpoints."""
        if not self._checkpoints:
            return []
        origin = self._checkpoints[0].timestamp
        timings = []
        for prev, cur in zip(self._checkpoints, self._checkpoints[1:]):
            timings.append(
                PhaseTiming(
                    name=cur.name,
                    location=cur.location,
                    elapsed=cur.timestamp - prev.timestamp,
                    cumulative=cur.timestamp - origin,
                )
            )
        return timings

    @property
    def total_time(self) -> float:
        """Seconds between the first and last checkpoint."""
        if len(self._checkpoints) < 2:
            return 0.0
        return self._checkpoints[-1].timestamp - self._checkpoints[0].timestamp
