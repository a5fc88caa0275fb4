"""
Utility modules and helper functions.
"""

from .logging import (PerformanceLogger, TimedContext, get_log_file_path,
                      get_logger, setup_logging, shutdown_logging)
from .paths import get_base_dir, get_relaunch_command, is_frozen
from .validators import URLValidator, ValidationError, VersionValidator

__all__ = [
    "get_logger", "setup_logging", "shutdown_logging", "get_log_file_path",
    "PerformanceLogger", "TimedContext",
    "get_base_dir", "get_relaunch_command", "is_frozen",
    "URLValidator", "VersionValidator", "ValidationError",
]
