"""
Logging utility for the self-updater.

Provides a centralized way to configure and obtain loggers. Every record is
appended to the persistent update log and mirrored to standard output.
"""
import logging
import logging.handlers
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

# --- Global Log Settings (Defaults, can be overridden by Config) ---
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "update.log"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_FILE_SIZE_MB = 5
LOG_BACKUP_COUNT = 3
SESSION_SEPARATOR = "=" * 40

_logging_configured = False


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    max_bytes: int = MAX_LOG_FILE_SIZE_MB * 1024 * 1024,
    backup_count: int = LOG_BACKUP_COUNT,
    log_to_console: bool = True,
):
    """
    Configures root logging with an append-mode file handler and a console mirror.
    Call once at process start; pair with shutdown_logging() on every exit path.
    """
    global _logging_configured

    log_level_upper = level.upper()
    numeric_level = getattr(logging, log_level_upper, logging.INFO)
    formatter = logging.Formatter(log_format, date_format)
    root_logger = logging.getLogger()

    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    if log_file:
        log_file_path = Path(log_file)
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            # mode="a" keeps previous sessions; StreamHandler flushes per record
            file_handler = logging.handlers.RotatingFileHandler(
                log_file_path,
                mode="a",
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(
                f"ERROR: Failed to set up file logging for {log_file_path}: {e}",
                file=sys.stderr,
            )
            log_to_console = True

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    noisy_libraries = {
        "aiohttp": logging.WARNING,
        "asyncio": logging.INFO,
    }
    for lib_name, lib_level in noisy_libraries.items():
        logging.getLogger(lib_name).setLevel(lib_level)

    _logging_configured = True

    logger = logging.getLogger(__name__)
    logger.info(SESSION_SEPARATOR)
    logger.info(f"Log started: {datetime.now():%Y-%m-%d %H:%M:%S}")
    logger.info(SESSION_SEPARATOR)
    logger.debug(f"Python Version: {sys.version.split()[0]}, Platform: {sys.platform}")


def shutdown_logging():
    """Flush and close every root handler. Safe to call more than once."""
    global _logging_configured

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
        finally:
            handler.close()
            root_logger.removeHandler(handler)
    _logging_configured = False


def is_logging_configured() -> bool:
    return _logging_configured


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Returns a logger instance with the specified name.
    If name is None, returns the root logger.
    """
    return logging.getLogger(name)


def get_log_file_path() -> Optional[str]:
    """Returns the absolute path to the currently configured log file, if any."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return handler.baseFilename
    return None


class PerformanceLogger:
    """Simple utility to log execution times of code blocks."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger(f"{__name__}.Performance")
        self.timings: Dict[str, float] = {}
        self._start_times: Dict[str, float] = {}

    def start(self, block_name: str):
        """Start timing a block."""
        self._start_times[block_name] = time.perf_counter()

    def stop(self, block_name: str, log_message: Optional[str] = None) -> float:
        """Stop timing a block and log the duration."""
        if block_name not in self._start_times:
            self.logger.warning(f"Timer for '{block_name}' was not started.")
            return -1.0

        duration = time.perf_counter() - self._start_times.pop(block_name)
        self.timings[block_name] = duration

        if log_message:
            self.logger.info(f"{log_message} - Duration: {duration:.2f} seconds")
        else:
            self.logger.info(f"'{block_name}' finished in {duration:.2f} seconds")
        return duration

    def time_block(self, block_name: str) -> "TimedContext":
        """Context manager for timing a block of code."""
        return TimedContext(self, block_name)

    def get_last_duration(self, block_name: str) -> Optional[float]:
        return self.timings.get(block_name)


class TimedContext:
    """Context manager for use with PerformanceLogger."""

    def __init__(self, perf_logger: PerformanceLogger, block_name: str):
        self.perf_logger = perf_logger
        self.block_name = block_name

    def __enter__(self):
        self.perf_logger.start(self.block_name)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any):
        self.perf_logger.stop(self.block_name)
        return False
