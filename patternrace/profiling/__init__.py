"""Timing instrumentation for experiment runs.

- ``CheckpointRecorder``: named phase markers with source locations.
- ``CheckpointReporter``: text summary of phase timings.
"""

from .profiler import (
    Checkpoint as Checkpoint,
)
from .profiler import (
    CheckpointRecorder as CheckpointRecorder,
)
from .profiler import (
    PhaseTiming as PhaseTiming,
)
from .reporter import (
    CheckpointReporter as CheckpointReporter,
)

__all__ = [
    "Checkpoint",
    "CheckpointRecorder",
    "CheckpointReporter",
    "PhaseTiming",
]
