"""ConfigManager service for configuration management.

Handles loading and saving the monitor configuration with support for
environment variable overrides.
"""

import os
import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..exceptions import ConfigurationException
from ..models.monitor_configuration import MonitorConfiguration


def _parse_list(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigManager:
    """Service for managing monitor configuration."""

    def __init__(self, config_file: Optional[str] = None):
        """Initialize the config manager."""
        self.config_file = config_file
        self.current_config: Optional[MonitorConfiguration] = None
        self._lock = threading.RLock()

        # Environment variable mapping
        self.env_var_mapping = {
            "WINPROCMON_LOG_LEVEL": ("log_level", str),
            "WINPROCMON_LOG_FILE": ("log_file_path", str),
            "WINPROCMON_REPORT_INTERVAL": ("report_interval_secs", int),
            "WINPROCMON_FETCHES_PER_INTERVAL": ("fetches_per_interval", int),
            "WINPROCMON_CSV_FILE_PATH": ("csv_file_path", str),
            "WINPROCMON_EXCLUDE_PROCESSES": ("exclude_processes", _parse_list),
        }

    def load_default_config(self) -> MonitorConfiguration:
        """Load default configuration."""
        with self._lock:
            self.current_config = MonitorConfiguration.create_default()
            return self.current_config

    def load_config(self, file_path: Optional[str] = None) -> MonitorConfiguration:
        """
        Load configuration from file.

        Args:
            file_path: Path to configuration file

        Returns:
            MonitorConfiguration instance, defaults if no file is configured

        Raises:
            ConfigurationException: If the file is missing or invalid
        """
        config_path = file_path or self.config_file

        if not config_path:
            return self.load_default_config()

        if not os.path.exists(config_path):
            raise ConfigurationException(
                f"Configuration file not found: {config_path}",
                details={"config_file": config_path},
            )

        with self._lock:
            try:
                self.current_config = MonitorConfiguration.from_file(config_path)
            except (OSError, ValueError, ValidationError) as e:
                raise ConfigurationException(
                    f"Invalid configuration file: {config_path}",
                    details={"config_file": config_path, "error": str(e)},
                    cause=e,
                ) from e

            self.config_file = config_path
            return self.current_config

    def load_config_with_env_override(
        self, file_path: Optional[str] = None
    ) -> MonitorConfiguration:
        """
        Load configuration with environment variable overrides.

        Args:
            file_path: Optional configuration file to start from

        Returns:
            MonitorConfiguration with environment overrides applied

        Raises:
            ConfigurationException: If the file or an override is invalid
        """
        config = self.load_config(file_path)
        overrides: Dict[str, Any] = {}

        for env_var, (field_name, value_type) in self.env_var_mapping.items():
            env_value = os.environ.get(env_var)
            if env_value is None:
                continue
            try:
                overrides[field_name] = value_type(env_value)
            except ValueError as e:
                raise ConfigurationException(
                    f"Invalid value for {env_var}: {env_value}",
                    details={"env_var": env_var},
                    cause=e,
                ) from e

        if overrides:
            data = config.model_dump()
            data.update(overrides)
            try:
                config = MonitorConfiguration(**data)
            except ValidationError as e:
                raise ConfigurationException(
                    "Invalid environment override",
                    details={"overrides": sorted(overrides), "error": str(e)},
                    cause=e,
                ) from e

        with self._lock:
            self.current_config = config
        return config

    def save_config(
        self, config: MonitorConfiguration, file_path: Optional[str] = None
    ) -> str:
        """
        Save configuration to file.

        Args:
            config: Configuration to save
            file_path: Target file path

        Returns:
            Path the configuration was written to
        """
        target_path = file_path or self.config_file

        if not target_path:
            raise ValueError("No configuration file path specified")

        with self._lock:
            try:
                config.to_file(target_path)
            except OSError as e:
                raise ConfigurationException(
                    f"Error saving config to {target_path}",
                    details={"config_file": target_path},
                    cause=e,
                ) from e
            self.current_config = config
            self.config_file = target_path
            return target_path

    def get_current_config(self) -> Optional[MonitorConfiguration]:
        """Get currently loaded configuration."""
        with self._lock:
            return self.current_config

    def __str__(self) -> str:
        """String representation of the config manager."""
        config_file = os.path.basename(self.config_file) if self.config_file else "None"
        has_config = self.current_config is not None

        return f"ConfigManager(" f"file={config_file}, " f"loaded={has_config}" f")"
