"""
Applies a package archive to an install directory, entry by entry.
"""

import logging
import os
import shutil
import zipfile
from typing import Optional

import psutil

from ..utils.logging import PerformanceLogger, get_logger
from .exceptions import (ArchiveInvalid, FilePathInvalid,
                         InsufficientDiskSpace, TargetPathInvalid)
from .interfaces import PackageExtractor, PathLike, ProgressCallback
from .models import ExtractionJob, ExtractionReport

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

try:
    import msvcrt
except ImportError:  # POSIX
    msvcrt = None

# Worst-case decompression ratio assumed when checking free space.
DISK_SPACE_MULTIPLIER = 2
COPY_BUFFER_SIZE = 64 * 1024


def has_enough_disk_space(destination_dir: PathLike, archive_path: PathLike) -> bool:
    """True when free space at the destination volume exceeds twice the archive size."""
    available = psutil.disk_usage(str(destination_dir)).free
    required = os.path.getsize(archive_path) * DISK_SPACE_MULTIPLIER
    return available > required


def is_file_locked(file_path: PathLike) -> bool:
    """Return True if another process holds the file open exclusively.

    Missing files are never locked. A failed read/write open (a sharing
    violation on Windows) counts as locked, as does a lock someone else holds:
    an advisory ``flock`` on POSIX, a byte-range lock on Windows. On Windows a
    handle that would block the delete also counts.
    """
    if not os.path.isfile(file_path):
        return False
    try:
        with open(file_path, "r+b") as f:
            if fcntl is not None:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            elif msvcrt is not None:
                msvcrt.locking(f.fileno(), msvcrt.LK_NBLCK, 1)
                f.seek(0)
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
        if msvcrt is not None:
            # Renaming in place fails while another handle denies delete sharing
            os.replace(file_path, file_path)
        return False
    except OSError:
        return True


class ArchiveExtractor(PackageExtractor):
    """Extracts zip packages with overwrite, directory creation and lock-skip semantics."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger(__name__)
        self.perf = PerformanceLogger(self.logger)

    def check_preconditions(self, archive_path: PathLike, destination_dir: PathLike):
        """Raise the matching ExtractionError before anything is written."""
        if not os.path.isfile(archive_path):
            raise FilePathInvalid(f"Invalid archive path: {archive_path}")

        if not os.path.isdir(destination_dir):
            raise TargetPathInvalid(f"Invalid main application path: {destination_dir}")

        if not has_enough_disk_space(destination_dir, archive_path):
            raise InsufficientDiskSpace(
                f"Not enough disk space in {destination_dir} to extract {archive_path}")

    def extract(self, archive_path: PathLike, destination_dir: PathLike,
                progress_callback: Optional[ProgressCallback] = None) -> ExtractionReport:
        """
        Extract every archive entry into destination_dir.

        Per-entry problems (locked files, write errors, unsafe names) are
        logged and skipped; only precondition failures raise.

        Args:
            archive_path: Zip package to apply
            destination_dir: Existing install directory, mutated in place
            progress_callback: Receives a percentage in [0, 100]

        Returns:
            ExtractionReport with total and processed entry counts
        """
        self.check_preconditions(archive_path, destination_dir)
        report_progress = progress_callback or self._log_progress

        self.logger.info(f"Archive: {archive_path}")
        self.logger.info(f"Destination: {destination_dir}")

        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveInvalid(f"Cannot open archive {archive_path}: {e}") from e

        with archive, self.perf.time_block("extract"):
            entries = archive.infolist()
            job = ExtractionJob(total_entries=len(entries))
            report = ExtractionReport(total_entries=job.total_entries)
            root = os.path.abspath(destination_dir)

            for entry in entries:
                try:
                    if self._extract_entry(archive, entry, root, report):
                        job.advance()
                        report_progress(job.percent)
                except Exception as e:
                    self.logger.error(f"Error extracting {entry.filename}: {e}")
                    report.failed.append(entry.filename)

            report.processed_entries = job.processed_entries

        self.logger.info("Extraction complete!")
        self.logger.info(f"Files extracted: {report.processed_entries} of {report.total_entries} entries")
        if report.skipped:
            self.logger.warning(f"Entries left unchanged: {report.skipped} "
                                f"({len(report.skipped_locked)} locked, {len(report.failed)} failed)")
        self.logger.info(f"Extraction report: {report.to_dict()}")

        report_progress(100.0)
        return report

    def _extract_entry(self, archive: zipfile.ZipFile, entry: zipfile.ZipInfo,
                       root: str, report: ExtractionReport) -> bool:
        """Apply one entry. Returns True only when file bytes were written."""
        destination_path = self._resolve_destination(root, entry.filename)
        self.logger.info(f"Extracting: {destination_path}")

        is_directory = entry.is_dir() or not os.path.basename(entry.filename.replace("\\", "/"))
        if is_directory:
            os.makedirs(destination_path, exist_ok=True)
            report.directories += 1
            return False

        os.makedirs(os.path.dirname(destination_path), exist_ok=True)

        if is_file_locked(destination_path):
            self.logger.warning(f"File is locked, skipped: {destination_path}")
            report.skipped_locked.append(entry.filename)
            return False

        if os.path.exists(destination_path):
            os.remove(destination_path)

        with archive.open(entry) as source, open(destination_path, "wb") as target:
            shutil.copyfileobj(source, target, COPY_BUFFER_SIZE)

        return True

    @staticmethod
    def _resolve_destination(root: str, entry_name: str) -> str:
        relative = entry_name.replace("\\", "/").lstrip("/")
        destination_path = os.path.normpath(os.path.join(root, *relative.split("/")))
        if os.path.commonpath([root, destination_path]) != root:
            raise ValueError(f"Entry escapes the destination directory: {entry_name}")
        return destination_path

    def _log_progress(self, percent: float):
        self.logger.info(f"Progress: {percent:.2f}%")
