"""MonitorConfiguration model for the Windows process monitor.

Represents the settings consumed by the collector: exclusion lists, the
wmic output template and the sampling parameters, plus logging options.
"""

from typing import Dict, List, Optional, Any, Set
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from enum import Enum
import os


# Template name wmic resolves from C:\Windows\System32\wbem
DEFAULT_CSV_FILE_PATH = "csv"

DEFAULT_METRIC_PREFIX = "Custom Metrics|Process Monitor|"


class LogLevel(str, Enum):
    """Available log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class MonitorConfiguration(BaseModel):
    """Model representing process monitor settings."""

    # Version and metadata
    config_version: str = Field(default="1.0.0")
    last_modified: Optional[str] = Field(default=None)
    config_file: Optional[str] = Field(default=None)

    # Logging configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_file_path: Optional[str] = Field(default=None)
    max_log_size_mb: int = Field(default=5, ge=1, le=1000)
    backup_count: int = Field(default=5, ge=0, le=10)

    # Process filters
    exclude_processes: Set[str] = Field(default_factory=set)
    exclude_pids: Set[int] = Field(default_factory=set)

    # wmic output template
    csv_file_path: str = Field(default=DEFAULT_CSV_FILE_PATH)

    # Sampling
    report_interval_secs: int = Field(default=60, ge=1, le=3600)
    fetches_per_interval: int = Field(default=2, ge=1, le=60)

    # Metric naming
    metric_prefix: str = Field(default=DEFAULT_METRIC_PREFIX)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("log_level", mode="before")
    def normalize_log_level(cls, value: Any) -> LogLevel:
        """Ensure log level values resolve to LogLevel enum members."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, str):
            try:
                return LogLevel(value.upper())
            except ValueError as exc:
                raise ValueError(f"Invalid log level: {value}") from exc
        raise ValueError("Log level must be a string or LogLevel enum")

    @field_validator("exclude_processes", mode="before")
    def normalize_exclude_processes(cls, v: Any) -> Set[str]:
        """Strip names and drop blanks from the process exclusion list."""
        if v is None:
            return set()
        return {name.strip() for name in v if name and name.strip()}

    @field_validator("exclude_pids")
    def validate_exclude_pids(cls, v: Set[int]) -> Set[int]:
        """PIDs are never negative."""
        for pid in v:
            if pid < 0:
                raise ValueError(f"Invalid PID in exclusion list: {pid}")
        return v

    @field_validator("csv_file_path")
    def validate_csv_file_path(cls, v: str) -> str:
        """Template path cannot be blank."""
        if not v or not v.strip():
            raise ValueError("CSV format file path cannot be empty")
        return v.strip()

    @field_validator("metric_prefix")
    def normalize_metric_prefix(cls, v: str) -> str:
        """Metric prefix always ends with a path separator."""
        if v and not v.endswith("|"):
            return v + "|"
        return v

    @model_validator(mode="after")
    def validate_sampling_window(self) -> "MonitorConfiguration":
        """Reject intervals that would produce a zero millisecond window."""
        if self.report_interval_secs // self.fetches_per_interval < 1:
            raise ValueError(
                "Report interval must be at least one second per fetch "
                f"({self.report_interval_secs}s / {self.fetches_per_interval} fetches)"
            )
        return self

    def is_default_csv_file_path(self) -> bool:
        """Check whether the built-in wmic csv template is configured."""
        return self.csv_file_path == DEFAULT_CSV_FILE_PATH

    def get_window_ms(self) -> int:
        """Wall-clock milliseconds one fetch is assumed to cover.

        Interval is divided by fetches as integers first, then scaled.
        """
        return (self.report_interval_secs // self.fetches_per_interval) * 1000

    def get_fetch_delay_seconds(self) -> float:
        """Seconds to sleep between consecutive fetches."""
        return self.get_window_ms() / 1000

    def get_log_file_path(self) -> Optional[str]:
        """Get the resolved log file path, or None for console-only logging."""
        if self.log_file_path:
            return os.path.expandvars(os.path.expanduser(self.log_file_path))
        return None

    def is_excluded(self, name: str, pid: int) -> bool:
        """Check whether a process is filtered out by name or PID."""
        return name in self.exclude_processes or pid in self.exclude_pids

    @classmethod
    def create_default(cls) -> "MonitorConfiguration":
        """Create a default configuration instance."""
        return cls()

    def to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        import json
        from datetime import datetime

        # Update metadata
        self.last_modified = datetime.now().isoformat()
        self.config_file = file_path

        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        data = self.model_dump(mode="json")
        data["exclude_processes"] = sorted(self.exclude_processes)
        data["exclude_pids"] = sorted(self.exclude_pids)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def __str__(self) -> str:
        """String representation of the configuration."""
        return (
            f"MonitorConfiguration("
            f"interval={self.report_interval_secs}s, "
            f"fetches={self.fetches_per_interval}, "
            f"csv_file_path={self.csv_file_path}, "
            f"excluded={len(self.exclude_processes) + len(self.exclude_pids)}"
            f")"
        )

    @staticmethod
    def _merge_dict(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge helper for configuration dictionaries."""
        result = base.copy()
        for key, value in overrides.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = MonitorConfiguration._merge_dict(result[key], value)
            else:
                result[key] = value
        return result

    @classmethod
    def from_file(cls, file_path: str) -> "MonitorConfiguration":
        """Load configuration from JSON file with default merge."""
        import json

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be an object: {file_path}")

        default_dict = cls.create_default().model_dump(mode="json")
        merged = cls._merge_dict(default_dict, data)
        merged["config_file"] = file_path

        return cls(**merged)

    def describe(self) -> List[str]:
        """Human readable summary lines used by the CLI."""
        return [
            f"Version: {self.config_version}",
            f"Log Level: {self.log_level.value}",
            f"Log File: {self.get_log_file_path() or '(console only)'}",
            f"Report Interval: {self.report_interval_secs}s",
            f"Fetches Per Interval: {self.fetches_per_interval}",
            f"CSV Format File: {self.csv_file_path}",
            f"Metric Prefix: {self.metric_prefix}",
            f"Excluded Processes: {', '.join(sorted(self.exclude_processes)) or '-'}",
            f"Excluded PIDs: {', '.join(str(p) for p in sorted(self.exclude_pids)) or '-'}",
        ]
