"""Process level data collected during one sampling cycle."""

from dataclasses import dataclass
from typing import Dict


@dataclass
class ProcessData:
    """Aggregated utilization for every running process sharing a name.

    Both percentages are additive: each PID reported under the same image
    name adds its share onto the existing record.
    """

    name: str
    cpu_percent: float = 0.0
    memory_percent: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for JSON output."""
        return {
            "cpu_percent": self.cpu_percent,
            "memory_percent": self.memory_percent,
        }


@dataclass(frozen=True)
class MetricSample:
    """Single metric handed to the monitoring pipeline."""

    path: str
    value: int


# Mapping of process name to its aggregated record
ProcessTable = Dict[str, ProcessData]
