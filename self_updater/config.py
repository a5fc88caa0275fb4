"""
Configuration management for the self-updater.
"""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .utils.logging import get_logger
from .utils.paths import get_base_dir
from .utils.validators import URLValidator

CONFIG_ENV_VAR = "SELF_UPDATER_CONFIG"
CONFIG_FILE_NAME = "updater.json"
MIN_GRACE_PERIOD_SECONDS = 5
VERSION_COMPARISONS = ("exact", "semantic")


def _coerce(value: Any, expected: type) -> Any:
    """Convert a JSON value to the type of a field default, or raise TypeError/ValueError."""
    if expected is bool:
        if isinstance(value, bool):
            return value
        raise TypeError(value)
    if isinstance(value, bool):
        raise TypeError(value)
    if expected is int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(value)
        if isinstance(value, (int, float, str)):
            return int(value)
        raise TypeError(value)
    if not isinstance(value, expected):
        raise TypeError(value)
    return value


@dataclass
class UpdateConfig:
    """Configuration for the remote update check."""
    check_on_startup: bool = True
    manifest_url: str = "http://example.com/update_info.json"
    request_timeout: int = 30  # seconds, manifest fetch
    download_timeout: int = 600  # seconds, whole package download
    version_comparison: str = "exact"  # "exact" or "semantic"


@dataclass
class StagingConfig:
    """Names of the artifacts staged beside the updater executable."""
    package_name: str = "update.zip"
    args_file_name: str = "tempArgs.txt"
    script_stem: str = "update"
    updater_executable: str = "Updater.exe"
    grace_period_seconds: int = MIN_GRACE_PERIOD_SECONDS


@dataclass
class LaunchConfig:
    """Configuration for starting the main application."""
    main_executable: str = "Software.exe"
    idle_seconds: int = 60
    wait_for_acknowledgment: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file_path: str = "update.log"  # relative paths resolve beside the executable
    max_file_size: int = 5 * 1024 * 1024
    backup_count: int = 3
    log_to_console: bool = True


class Config:
    """Main configuration class."""

    def __init__(self):
        self.updates = UpdateConfig()
        self.staging = StagingConfig()
        self.launch = LaunchConfig()
        self.logging = LoggingConfig()

        self.source: Optional[Path] = None
        self.load_warnings: List[str] = []

        self.logger = get_logger(__name__)

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> 'Config':
        """Load configuration from a JSON file, falling back to defaults."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        config_file = Path(config_path)
        config = cls()

        if config_file.exists():
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)

                config._update_from_dict(data)
                config.source = config_file
                config.logger.info(f"Config loaded from {config_file}")

            except (OSError, ValueError) as e:
                config = cls()
                config._warn(f"Failed to load config from {config_file}: {e}; using defaults")
        else:
            config.logger.debug(f"No config file at {config_file}, using defaults")

        return config

    def save_to_file(self, config_path: Optional[str] = None):
        """Save configuration to file."""
        if config_path is None:
            config_path = self.get_default_config_path()

        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2)

            self.logger.info(f"Config saved to {config_file}")

        except OSError as e:
            self.logger.error(f"Failed to save config to {config_file}: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'updates': asdict(self.updates),
            'staging': asdict(self.staging),
            'launch': asdict(self.launch),
            'logging': asdict(self.logging),
        }

    def _update_from_dict(self, data: Dict[str, Any]):
        """Update configuration from dictionary."""
        if not isinstance(data, dict):
            raise ValueError("Config root must be a JSON object")

        for section in ('updates', 'staging', 'launch', 'logging'):
            if isinstance(data.get(section), dict):
                self._update_dataclass(getattr(self, section), data[section])

    def _update_dataclass(self, instance, data: Dict[str, Any]):
        """Update a dataclass instance from dictionary, keeping each field's type."""
        for key, value in data.items():
            if not hasattr(instance, key):
                continue
            expected = type(getattr(instance, key))
            try:
                setattr(instance, key, _coerce(value, expected))
            except (TypeError, ValueError):
                self._warn(f"Ignoring {type(instance).__name__}.{key}={value!r}: "
                           f"expected {expected.__name__}")

    def _warn(self, message: str):
        self.load_warnings.append(message)
        self.logger.warning(message)

    @staticmethod
    def get_default_config_path() -> str:
        """Config path from the environment, else updater.json beside the executable."""
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return env_path
        return str(get_base_dir() / CONFIG_FILE_NAME)

    def get_log_file_path(self) -> Path:
        log_path = Path(self.logging.file_path)
        if not log_path.is_absolute():
            log_path = get_base_dir() / log_path
        return log_path

    def validate(self) -> bool:
        """Validate configuration values, auto-fixing the ones that have a safe default."""
        errors = []
        fixed_values = []

        if self.staging.grace_period_seconds < MIN_GRACE_PERIOD_SECONDS:
            self.staging.grace_period_seconds = MIN_GRACE_PERIOD_SECONDS
            fixed_values.append(f"grace_period_seconds raised to {MIN_GRACE_PERIOD_SECONDS}")

        if self.updates.request_timeout <= 0:
            self.updates.request_timeout = UpdateConfig.request_timeout
            fixed_values.append(f"request_timeout reset to {UpdateConfig.request_timeout}")

        if self.updates.download_timeout <= 0:
            self.updates.download_timeout = UpdateConfig.download_timeout
            fixed_values.append(f"download_timeout reset to {UpdateConfig.download_timeout}")

        if self.updates.version_comparison not in VERSION_COMPARISONS:
            fixed_values.append(
                f"unknown version_comparison '{self.updates.version_comparison}' replaced by 'exact'")
            self.updates.version_comparison = "exact"

        if self.launch.idle_seconds < 0:
            self.launch.idle_seconds = 0
            fixed_values.append("idle_seconds raised to 0")

        valid_url, url_error = URLValidator().validate(self.updates.manifest_url)
        if not valid_url:
            errors.append(f"manifest_url: {url_error}")

        if not self.launch.main_executable.strip():
            errors.append("main_executable cannot be empty")

        for fix in fixed_values:
            self.logger.info(f"Config auto-fix: {fix}")

        for error in errors:
            self.logger.error(f"Config validation error: {error}")

        return not errors
