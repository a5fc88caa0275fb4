"""
Error taxonomy for the updater.

Every error carries the process exit code the CLI reports for it.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    UNEXPECTED = 1
    USAGE = 2
    FILE_PATH_INVALID = 3
    TARGET_PATH_INVALID = 4
    INSUFFICIENT_DISK_SPACE = 5
    ARCHIVE_INVALID = 6
    LAUNCH_FAILED = 7


class UpdaterError(Exception):
    """Base class for all updater errors."""
    exit_code = ExitCode.UNEXPECTED


class UsageError(UpdaterError):
    """Command line arguments are missing or malformed."""
    exit_code = ExitCode.USAGE


class ExtractionError(UpdaterError):
    """An extraction precondition failed; nothing was written."""
    pass


class FilePathInvalid(ExtractionError):
    exit_code = ExitCode.FILE_PATH_INVALID


class TargetPathInvalid(ExtractionError):
    exit_code = ExitCode.TARGET_PATH_INVALID


class InsufficientDiskSpace(ExtractionError):
    exit_code = ExitCode.INSUFFICIENT_DISK_SPACE


class ArchiveInvalid(ExtractionError):
    exit_code = ExitCode.ARCHIVE_INVALID


class StageError(UpdaterError):
    """Downloading or staging a new release failed; no update was performed."""
    pass


class LaunchError(UpdaterError):
    """The main application could not be started."""
    exit_code = ExitCode.LAUNCH_FAILED
