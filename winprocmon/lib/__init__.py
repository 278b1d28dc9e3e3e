"""Low-level helpers: external command execution and log files."""
