"""
Data models for the update flow.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..updates.handoff import HandoffPlan


@dataclass
class UpdateManifest:
    """Remote description of the latest release."""
    version: str
    download_url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UpdateManifest':
        """Build a manifest from the remote JSON document.

        Raises:
            ValueError: if the document is not an object or lacks
                ``version`` / ``updateUrl`` strings.
        """
        if not isinstance(data, dict):
            raise ValueError("Manifest must be a JSON object")

        version = data.get("version")
        download_url = data.get("updateUrl")
        if not isinstance(version, str) or not version:
            raise ValueError("Manifest is missing 'version'")
        if not isinstance(download_url, str) or not download_url:
            raise ValueError("Manifest is missing 'updateUrl'")

        return cls(version=version, download_url=download_url)

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "updateUrl": self.download_url}


@dataclass
class UpdateDecision:
    """Outcome of an update check."""
    available: bool
    download_url: Optional[str] = None
    latest_version: Optional[str] = None

    @classmethod
    def no_update(cls) -> 'UpdateDecision':
        return cls(available=False)

    @classmethod
    def update(cls, manifest: UpdateManifest) -> 'UpdateDecision':
        return cls(available=True, download_url=manifest.download_url,
                   latest_version=manifest.version)

    def __bool__(self) -> bool:
        return self.available


@dataclass
class StagedUpdate:
    """Artifacts left beside the executable for the hand-off process."""
    package_path: Path
    args_path: Path
    script_path: Path
    arguments: List[str]
    plan: Optional['HandoffPlan'] = None


@dataclass
class ExtractionJob:
    """Progress tracker for a single extraction run."""
    total_entries: int
    processed_entries: int = 0

    def advance(self) -> None:
        if self.processed_entries < self.total_entries:
            self.processed_entries += 1

    @property
    def percent(self) -> float:
        """Progress as a percentage, clamped to [0, 100]."""
        if self.total_entries <= 0:
            return 100.0
        progress = self.processed_entries / self.total_entries * 100
        return max(0.0, min(100.0, progress))


@dataclass
class ExtractionReport:
    """Summary of an extraction run."""
    total_entries: int
    processed_entries: int = 0
    directories: int = 0
    skipped_locked: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skipped_locked) + len(self.failed)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
