"""Shared fixtures: canned tasklist/wmic output and a fake command runner."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from winprocmon.lib.command_runner import CommandOutput  # noqa: E402
from winprocmon.models.monitor_configuration import MonitorConfiguration  # noqa: E402

TOTAL_MEMORY_COMMAND = "wmic OS get TotalVisibleMemorySize"
TASKLIST_COMMAND = "tasklist /fo csv"
WMIC_CPU_COMMAND = (
    "wmic process get name,processid,usermodetime,kernelmodetime /format:csv"
)

TASKLIST_HEADER = '"Image Name","PID","Session Name","Session#","Mem Usage"'
WMIC_HEADER = "Node,KernelModeTime,Name,ProcessId,UserModeTime"


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: multi-component scenarios")


def total_memory_output(total_kb: int) -> List[str]:
    """Lines printed by ``wmic OS get TotalVisibleMemorySize``."""
    return ["TotalVisibleMemorySize  ", "", f"{total_kb}  ", "", ""]


def tasklist_output(rows: Sequence[tuple], header: str = TASKLIST_HEADER) -> List[str]:
    """Build ``tasklist /fo csv`` lines from (name, pid, mem usage) rows."""
    lines = [header]
    for name, pid, mem_usage in rows:
        lines.append(f'"{name}","{pid}","Console","1","{mem_usage}"')
    return lines


def wmic_cpu_output(rows: Sequence[tuple], header: str = WMIC_HEADER) -> List[str]:
    """Build ``wmic process ... /format:csv`` lines.

    Rows are (name, pid, user ticks, kernel ticks); wmic precedes the
    header with a blank line.
    """
    lines = ["", header]
    for name, pid, user_ticks, kernel_ticks in rows:
        lines.append(f"HOST,{kernel_ticks},{name},{pid},{user_ticks}")
    return lines


class FakeCommandRunner:
    """Returns queued CommandOutputs per command line and records calls."""

    def __init__(self):
        self.responses: Dict[str, List[CommandOutput]] = {}
        self.calls: List[str] = []

    def add(self, command: str, stdout=(), stderr=()) -> None:
        self.responses.setdefault(command, []).append(
            CommandOutput(
                command=command,
                stdout_lines=list(stdout),
                stderr_lines=list(stderr),
            )
        )

    def add_cycle(
        self,
        processes: Sequence[tuple],
        cpu_rows: Sequence[tuple],
        total_kb: int = 1024000,
        cpu_command: str = WMIC_CPU_COMMAND,
    ) -> None:
        """Queue the three command outputs of one sampling cycle."""
        self.add(TOTAL_MEMORY_COMMAND, total_memory_output(total_kb))
        self.add(TASKLIST_COMMAND, tasklist_output(processes))
        self.add(cpu_command, wmic_cpu_output(cpu_rows))

    def __call__(self, command: str) -> CommandOutput:
        self.calls.append(command)
        queue = self.responses.get(command)
        if not queue:
            raise AssertionError(f"Unexpected command: {command}")
        return queue.pop(0)


@pytest.fixture
def fake_runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def config() -> MonitorConfiguration:
    return MonitorConfiguration(report_interval_secs=60, fetches_per_interval=4)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers the CLI attaches so they never outlive a test."""
    yield
    package_logger = logging.getLogger("winprocmon")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
