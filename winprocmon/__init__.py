"""Per-process CPU and memory utilization for Windows hosts."""

__version__ = "1.0.0"
