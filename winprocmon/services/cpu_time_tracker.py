"""CpuTimeTracker - two generations of cumulative CPU time per process name.

wmic reports CPU time consumed since each process started. Utilization over
a fetch window is the growth of that counter between two consecutive
fetches, so the tracker keeps the previous fetch around and compares the
current one against it.
"""

from typing import Dict

# wmic reports user and kernel time in 100 ns ticks
TICKS_PER_MILLISECOND = 10000


def ticks_to_ms(ticks: int) -> int:
    """Convert 100 ns ticks to whole milliseconds."""
    return ticks // TICKS_PER_MILLISECOND


class CpuTimeTracker:
    """Holds the previous and current CPU time generations.

    One instance lives as long as the collector. Not thread safe: fetches
    must be strictly serialized by the caller.
    """

    def __init__(self):
        self.previous: Dict[str, int] = {}
        self.current: Dict[str, int] = {}

    def add_sample(self, name: str, cpu_time_ms: int) -> None:
        """Accumulate CPU time for ``name`` into the current generation.

        Several PIDs sharing an image name are summed under that name.
        """
        self.current[name] = self.current.get(name, 0) + cpu_time_ms

    def compute_deltas(self) -> Dict[str, int]:
        """CPU milliseconds consumed per name since the previous generation.

        Only names present in both generations are returned. A first
        sighting has no baseline and yields nothing.
        """
        return {
            name: cpu_time - self.previous[name]
            for name, cpu_time in self.current.items()
            if name in self.previous
        }

    def rotate(self) -> None:
        """Promote the current generation and start an empty one."""
        self.previous = self.current
        self.current = {}
