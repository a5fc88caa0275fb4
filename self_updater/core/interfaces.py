from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

from .models import ExtractionReport, UpdateDecision

PathLike = Union[str, Path]
ProgressCallback = Callable[[float], None]


class UpdateChecker(ABC):
    """Abstract base class for update checkers."""

    @abstractmethod
    async def check_for_update(self) -> UpdateDecision:
        """Check for updates. Must never raise; failures mean no update."""
        pass


class PackageExtractor(ABC):
    """Abstract base class for applying a package archive to a directory."""

    @abstractmethod
    def extract(self, archive_path: PathLike, destination_dir: PathLike,
                progress_callback: Optional[ProgressCallback] = None) -> ExtractionReport:
        """Extract the archive into the destination directory."""
        pass
