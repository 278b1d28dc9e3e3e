"""Data models for the Windows process monitor."""

from .monitor_configuration import DEFAULT_CSV_FILE_PATH, MonitorConfiguration
from .process_data import MetricSample, ProcessData, ProcessTable

__all__ = [
    "DEFAULT_CSV_FILE_PATH",
    "MonitorConfiguration",
    "MetricSample",
    "ProcessData",
    "ProcessTable",
]
