"""WindowsParser - process utilization from tasklist and wmic.

Memory comes from ``tasklist /fo csv`` as an absolute working set, turned
into a share of ``TotalVisibleMemorySize``. CPU comes from the cumulative
user and kernel times reported by ``wmic process``; utilization is the
growth of those counters between two fetches over the fetch window.

Processes are keyed by image name only. Every PID running the same
executable is merged into one record, for memory and for CPU, and the PID
reported by wmic is parsed but not used for matching. Two unrelated
processes sharing an executable name are therefore reported as one.
"""

import re
from typing import List, Optional

from ..exceptions import (
    CommandExecutionError,
    HeaderFormatError,
    ProcessMonitorException,
    ValueParseError,
)
from ..lib.command_runner import CommandOutput
from ..models.monitor_configuration import MonitorConfiguration
from ..models.process_data import ProcessData
from ..utils.logging import get_logger
from .cpu_time_tracker import CpuTimeTracker, ticks_to_ms
from .header_parser import require_columns
from .parser import Parser

TOTAL_MEMORY_COMMAND = "wmic OS get TotalVisibleMemorySize"
TASKLIST_COMMAND = "tasklist /fo csv"
WMIC_CPU_COMMAND = (
    "wmic process get name,processid,usermodetime,kernelmodetime /format:"
)

# Lines preceding the value in the TotalVisibleMemorySize output
TOTAL_MEMORY_SKIP_LINES = 2

TASKLIST_NAME = "Image Name"
TASKLIST_PID = "PID"
TASKLIST_MEMORY = "Mem Usage"

WMIC_NAME = "name"
WMIC_USER_MODE_TIME = "usermodetime"
WMIC_KERNEL_MODE_TIME = "kernelmodetime"
WMIC_PROCESS_ID = "processid"

# Node,KernelModeTime,Name,ProcessId,UserModeTime
MIN_WMIC_FIELDS = 5

INVALID_XSL_FORMAT = "invalid xsl format"

_NON_DIGITS = re.compile(r"\D")


class WindowsParser(Parser):
    """Parser for the Windows reporting utilities."""

    process_group_name = "Windows Processes"

    def __init__(self, config: MonitorConfiguration, command_runner=None):
        """Initialize the Windows parser.

        Args:
            config: Monitor configuration (filters, csv template, sampling)
            command_runner: Optional replacement for ``run_command``
        """
        super().__init__(config, command_runner)
        self.cpu_times = CpuTimeTracker()
        self.logger = get_logger(__name__)
        self.logger.add_context(service="windows_parser")

    def retrieve_memory_metrics(self) -> None:
        """Refresh total physical memory from ``TotalVisibleMemorySize``.

        Raises:
            CommandExecutionError: If wmic cannot be run
            ValueParseError: If the reported size is not a positive number
        """
        output = self._execute(TOTAL_MEMORY_COMMAND)
        lines = output.stdout_lines[TOTAL_MEMORY_SKIP_LINES:]
        value = lines[0].strip() if lines else None

        try:
            total_kb = int(value)
        except (TypeError, ValueError) as e:
            message = "Unable to retrieve total physical memory size (not a number)"
            self.logger.error(message, command=output.command, value=value)
            raise ValueParseError(
                message,
                details={"command": output.command, "value": value},
                cause=e,
            ) from e

        total_mb = total_kb // 1024
        if total_mb <= 0:
            message = "Total physical memory size reported as 0 MB"
            self.logger.error(message, command=output.command, value=value)
            raise ValueParseError(
                message, details={"command": output.command, "value": value}
            )

        self.total_mem_size_mb = total_mb
        self.logger.debug("Total physical memory refreshed", total_mb=total_mb)

    def parse_processes(self) -> None:
        """Parse ``tasklist`` into the process table, then update CPU usage.

        Raises:
            ProcessMonitorException: If total memory has not been retrieved
            CommandExecutionError: If a command cannot be run
            HeaderFormatError: If a listing lacks a required column
            ValueParseError: If a row holds a malformed value
        """
        total_mb = self.total_mem_size_mb
        if total_mb <= 0:
            message = "Total physical memory size unknown; retrieve memory metrics first"
            self.logger.error(message, command=TASKLIST_COMMAND)
            raise ProcessMonitorException(
                message,
                details={"command": TASKLIST_COMMAND},
            )

        output = self._execute(TASKLIST_COMMAND)
        lines = iter(output.stdout_lines)
        positions = self._require_columns(
            next(lines, None),
            (TASKLIST_NAME, TASKLIST_PID, TASKLIST_MEMORY),
            output.command,
            case_sensitive=True,
            strip_quotes=True,
        )
        pos_name = positions[TASKLIST_NAME]
        pos_pid = positions[TASKLIST_PID]
        pos_mem = positions[TASKLIST_MEMORY]

        for line in lines:
            if not line.strip():
                continue
            words = line.split('","')
            words[0] = words[0].replace('"', "")
            words[-1] = words[-1].replace('"', "")

            try:
                pid = int(words[pos_pid])
                name = words[pos_name]
                memory_kb = float(_NON_DIGITS.sub("", words[pos_mem]))
            except (IndexError, ValueError) as e:
                self.logger.error(
                    "Malformed process row", command=output.command, row=line
                )
                raise ValueParseError(
                    f"Unable to parse output of {output.command}: {e}",
                    details={"command": output.command, "row": line},
                    cause=e,
                ) from e

            memory_percent = (memory_kb / 1024) / total_mb * 100

            if self.config.is_excluded(name, pid):
                continue

            record = self.processes.get(name)
            if record is not None:
                record.memory_percent += memory_percent
            else:
                self.processes[name] = ProcessData(
                    name=name, cpu_percent=0.0, memory_percent=memory_percent
                )

        self.calc_cpu_time()

    def calc_cpu_time(self) -> None:
        """Add CPU utilization since the previous fetch to the process table.

        When wmic cannot find the csv format template it prints nothing to
        stdout; that case is logged and CPU values stay untouched.

        Raises:
            CommandExecutionError: If wmic cannot be run
            HeaderFormatError: If the output lacks a required column
            ValueParseError: If a well-formed row holds a non-numeric time
        """
        output = self._execute(self.get_command())

        if output.is_empty:
            error_line = output.stderr_lines[0] if output.stderr_lines else ""
            if INVALID_XSL_FORMAT in error_line.lower():
                self.logger.warning(
                    self._missing_template_message(error_line),
                    command=output.command,
                )
                return
            message = f"No output from '{output.command}'"
            self.logger.error(message, command=output.command, stderr=error_line)
            raise HeaderFormatError(
                message,
                details={"command": output.command, "stderr": output.stderr_text},
            )

        header_index = self._find_header(output.stdout_lines)
        header = (
            output.stdout_lines[header_index] if header_index is not None else None
        )
        positions = self._require_columns(
            header,
            (WMIC_NAME, WMIC_USER_MODE_TIME, WMIC_KERNEL_MODE_TIME, WMIC_PROCESS_ID),
            output.command,
            case_sensitive=False,
        )

        samples = {}
        for line in output.stdout_lines[header_index + 1:]:
            # trailing empty fields do not count towards the minimum
            words = line.strip().rstrip(",").split(",")
            if len(words) < MIN_WMIC_FIELDS:
                continue

            name = words[positions[WMIC_NAME]]
            try:
                user_mode_ms = ticks_to_ms(int(words[positions[WMIC_USER_MODE_TIME]]))
                kernel_mode_ms = ticks_to_ms(
                    int(words[positions[WMIC_KERNEL_MODE_TIME]])
                )
                int(words[positions[WMIC_PROCESS_ID]])
            except (IndexError, ValueError) as e:
                self.logger.error(
                    "Malformed CPU time row", command=output.command, row=line
                )
                raise ValueParseError(
                    f"Unable to parse output of {output.command}: {e}",
                    details={"command": output.command, "row": line},
                    cause=e,
                ) from e

            # only processes seen by tasklist are tracked
            if name in self.processes:
                samples[name] = samples.get(name, 0) + user_mode_ms + kernel_mode_ms

        # nothing reaches the tracker unless every row parsed
        for name, cpu_time_ms in samples.items():
            self.cpu_times.add_sample(name, cpu_time_ms)

        window_ms = self.config.get_window_ms()
        for name, delta in self.cpu_times.compute_deltas().items():
            record = self.processes.get(name)
            if record is not None:
                record.cpu_percent += delta / window_ms * 100

        self.cpu_times.rotate()

    def get_command(self) -> str:
        """wmic command line for the configured csv format template."""
        if self.config.is_default_csv_file_path():
            return WMIC_CPU_COMMAND + self.config.csv_file_path
        return f'{WMIC_CPU_COMMAND}"{self.config.csv_file_path}"'

    def _execute(self, command: str) -> CommandOutput:
        self.logger.debug("Executing command", command=command)
        try:
            return self.run_command(command)
        except CommandExecutionError as e:
            self.logger.error(e.message, command=command)
            raise

    def _require_columns(self, header, required, command, **kwargs):
        try:
            return require_columns(header, required, command, **kwargs)
        except HeaderFormatError as e:
            self.logger.error(e.message, **e.details)
            raise

    @staticmethod
    def _find_header(lines: List[str]) -> Optional[int]:
        # wmic usually emits a blank line before the header
        for index, line in enumerate(lines):
            if line.strip():
                return index
        return None

    def _missing_template_message(self, error_line: str) -> str:
        parts = [error_line.strip()]
        if self.config.is_default_csv_file_path():
            parts.append(
                "csv.xsl not found in C:\\Windows\\System32 or "
                "C:\\Windows\\SysWOW64 respectively."
            )
        else:
            parts.append(f"{self.config.csv_file_path} not found.")
        parts.append(
            "Cannot process information for CPU usage (value 0 will be reported)."
        )
        return " ".join(parts)
