"""ProcessMetricsCollector - runs sampling cycles and publishes metrics.

A cycle is: clear the process table, refresh total memory, parse the
process listing (which ends with the CPU delta computation). The CPU
generations live in the parser and carry over from one cycle to the next.

Cycles must not overlap. ``collect_cycle`` holds no lock; the scheduler
calling it is responsible for serializing calls on one collector.
"""

import time
from typing import Callable, Iterator, List, Optional

from ..models.monitor_configuration import MonitorConfiguration
from ..models.process_data import MetricSample, ProcessData, ProcessTable
from ..utils.logging import ContextLogger, get_logger
from .windows_parser import WindowsParser

CPU_METRIC_NAME = "CPU Utilization in Percent"
MEMORY_METRIC_NAME = "Memory Utilization in Percent"
TOTAL_MEMORY_METRIC_NAME = "Total Memory Size MB"


class ProcessMetricsCollector:
    """Owns the parser and produces one process table per cycle."""

    def __init__(
        self,
        config: MonitorConfiguration,
        parser: Optional[WindowsParser] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize the collector.

        Args:
            config: Monitor configuration
            parser: Parser to drive; a WindowsParser by default
            sleep: Function used to wait between cycles
        """
        self.config = config
        self.parser = parser or WindowsParser(config)
        self._sleep = sleep or time.sleep
        self.cycle_count = 0
        self.logger = get_logger(__name__)
        self.logger.add_context(service="metrics_collector")

    @property
    def processes(self) -> ProcessTable:
        """Process table of the last completed cycle."""
        return self.parser.processes

    def collect_cycle(self) -> ProcessTable:
        """Run one sampling cycle.

        CPU utilization is added onto the records, so the table is cleared
        first; only the CPU time generations survive between cycles.

        Returns:
            Mapping of process name to its aggregated utilization

        Raises:
            ProcessMonitorException: If any refresh step fails
        """
        self.cycle_count += 1
        with ContextLogger(self.logger, cycle=self.cycle_count):
            self.parser.reset_processes()
            self.parser.retrieve_memory_metrics()
            self.parser.parse_processes()
            self.logger.debug(
                "Sampling cycle completed",
                process_count=len(self.parser.processes),
                total_memory_mb=self.parser.total_mem_size_mb,
            )
        return self.parser.processes

    def run(self, cycles: int) -> Iterator[ProcessTable]:
        """Run ``cycles`` cycles spaced by the fetch window.

        The first cycle only establishes the CPU baseline, so its CPU
        values are always 0.

        Yields:
            The process table after each cycle
        """
        delay = self.config.get_fetch_delay_seconds()
        for index in range(cycles):
            if index:
                self._sleep(delay)
            yield self.collect_cycle()

    def get_metric_prefix(self) -> str:
        """Metric path prefix including the process group."""
        return f"{self.config.metric_prefix}{self.parser.process_group_name}|"

    def get_metrics(self) -> List[MetricSample]:
        """Flatten the current process table into metric samples.

        Values are rounded to whole numbers.
        """
        prefix = self.get_metric_prefix()
        samples = [
            MetricSample(
                f"{prefix}{TOTAL_MEMORY_METRIC_NAME}",
                int(self.parser.total_mem_size_mb),
            )
        ]
        for name in sorted(self.parser.processes):
            record = self.parser.processes[name]
            samples.append(
                MetricSample(
                    f"{prefix}{name}|{CPU_METRIC_NAME}", round(record.cpu_percent)
                )
            )
            samples.append(
                MetricSample(
                    f"{prefix}{name}|{MEMORY_METRIC_NAME}", round(record.memory_percent)
                )
            )
        return samples

    def top_processes(self, limit: int = 10, by: str = "cpu") -> List[ProcessData]:
        """Largest consumers of the current table, by ``cpu`` or ``memory``."""
        if by not in ("cpu", "memory"):
            raise ValueError(f"Unknown sort key: {by}")
        attribute = "cpu_percent" if by == "cpu" else "memory_percent"
        records = sorted(
            self.parser.processes.values(),
            key=lambda record: (-getattr(record, attribute), record.name),
        )
        return records[:limit]
