"""Base class for OS specific process listing parsers."""

from abc import ABC, abstractmethod
from typing import Optional

from ..lib.command_runner import run_command
from ..models.monitor_configuration import MonitorConfiguration
from ..models.process_data import ProcessTable


class Parser(ABC):
    """Shared state of a process parser.

    Subclasses fill ``processes`` from the OS utilities and keep
    ``total_mem_size_mb`` current for memory percentage calculations.
    """

    process_group_name: str = "Processes"

    def __init__(self, config: MonitorConfiguration, command_runner=None):
        """Initialize the parser.

        Args:
            config: Monitor configuration
            command_runner: Callable taking a command line and returning a
                CommandOutput; defaults to spawning the real command
        """
        self.config = config
        self.run_command = command_runner or run_command
        self.processes: ProcessTable = {}
        self._total_mem_size_mb: Optional[int] = None

    @property
    def total_mem_size_mb(self) -> int:
        """Total physical memory in MB, 0 until first retrieved."""
        return self._total_mem_size_mb or 0

    @total_mem_size_mb.setter
    def total_mem_size_mb(self, value: int) -> None:
        self._total_mem_size_mb = value

    def reset_processes(self) -> None:
        """Start a new cycle with an empty process table."""
        self.processes = {}

    @abstractmethod
    def retrieve_memory_metrics(self) -> None:
        """Refresh the total physical memory size."""

    @abstractmethod
    def parse_processes(self) -> None:
        """Populate ``processes`` with CPU and memory utilization."""
