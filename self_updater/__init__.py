"""
Self-Updater - application launcher that replaces itself and the main application.
"""

__version__ = "1.0.0.0"  # compared verbatim against the remote manifest
__author__ = "Updater Team"
__email__ = "updater@example.com"


def get_info() -> dict:
    """Returns basic application information."""
    return {
        "name": "Self-Updater",
        "version": __version__,
        "description": "Checks for a new release, stages it, and relaunches the main application.",
        "author": __author__,
        "email": __email__,
    }


from .core.exceptions import (ExitCode, FilePathInvalid, InsufficientDiskSpace,
                              LaunchError, StageError, TargetPathInvalid,
                              UpdaterError)
from .core.extractor import ArchiveExtractor
from .core.models import (ExtractionJob, ExtractionReport, StagedUpdate,
                          UpdateDecision, UpdateManifest)

__all__ = [
    "__version__",
    "get_info",
    "UpdateManifest", "UpdateDecision", "StagedUpdate", "ExtractionJob", "ExtractionReport",
    "ArchiveExtractor",
    "UpdaterError", "FilePathInvalid", "TargetPathInvalid", "InsufficientDiskSpace",
    "StageError", "LaunchError", "ExitCode",
]
