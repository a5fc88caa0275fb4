"""
Stages a downloaded release and hands the replacement off to a detached process.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

import aiohttp

from ..config import StagingConfig
from ..core.exceptions import StageError
from ..core.models import StagedUpdate, UpdateDecision
from ..utils.logging import get_logger
from ..utils.paths import get_base_dir, get_relaunch_command
from .downloader import UpdateDownloader
from .handoff import RELAUNCH_UPDATER, build_plan, default_script_kind, render_script, write_script
from .launcher import launch_detached, script_command


def write_args_file(args_path: Path, arguments: Sequence[str]) -> Path:
    """One argument per line, durable before returning.

    Undecodable command line bytes (held as surrogates) are written back
    unchanged with ``surrogateescape``.
    """
    with open(args_path, "w", encoding="utf-8", errors="surrogateescape", newline="\n") as f:
        for argument in arguments:
            f.write(f"{argument}\n")
        f.flush()
        os.fsync(f.fileno())
    return args_path


class UpdateStager:
    """Downloads a release next to the updater and launches the hand-off script."""

    def __init__(self, config: Optional[StagingConfig] = None,
                 downloader: Optional[UpdateDownloader] = None,
                 base_dir: Optional[Path] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or StagingConfig()
        self.downloader = downloader or UpdateDownloader()
        self.base_dir = Path(base_dir) if base_dir else get_base_dir()
        self.logger = logger or get_logger(__name__)
        self.script_kind = default_script_kind()

    @property
    def package_path(self) -> Path:
        return self.base_dir / self.config.package_name

    @property
    def args_path(self) -> Path:
        return self.base_dir / self.config.args_file_name

    @property
    def script_path(self) -> Path:
        return self.base_dir / f"{self.config.script_stem}.{self.script_kind}"

    @property
    def updater_path(self) -> Path:
        return self.base_dir / self.config.updater_executable

    async def stage(self, decision: UpdateDecision, original_args: Sequence[str]) -> StagedUpdate:
        """
        Download, persist arguments, write and launch the hand-off script.

        On success the caller must exit immediately with code 0 so the
        hand-off process can replace the updater.

        Raises:
            StageError: on any download, write or launch failure; staged
                artifacts are removed first
        """
        if not decision.available or not decision.download_url:
            raise StageError("No update available to stage")

        arguments: List[str] = list(original_args)
        self.logger.info(f"Staging version {decision.latest_version} into {self.base_dir}")

        try:
            await self.downloader.download(decision.download_url, self.package_path,
                                           progress_callback=self._log_progress)
            write_args_file(self.args_path, arguments)

            plan = build_plan(
                package_path=self.package_path,
                base_dir=self.base_dir,
                updater_path=self.updater_path,
                relaunch_command=get_relaunch_command(self.updater_path),
                args_path=self.args_path,
                grace_period_seconds=self.config.grace_period_seconds,
            )
            write_script(self.script_path, render_script(plan, self.script_kind), self.script_kind)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._cleanup()
            raise StageError(f"Failed to download update: {e}") from e
        except OSError as e:
            self._cleanup()
            raise StageError(f"Failed to write update files: {e}") from e
        except Exception as e:
            self._cleanup()
            raise StageError(f"Failed to stage update: {e}") from e

        self.logger.info(f"Hand-off steps: {', '.join(plan.step_names)}")
        self.logger.info(f"Updater will restart with: {' '.join(plan.get(RELAUNCH_UPDATER).command)}")

        try:
            process = launch_detached(script_command(self.script_path), cwd=self.base_dir, hidden=True)
        except (OSError, ValueError) as e:
            self._cleanup()
            raise StageError(f"Failed to start update script {self.script_path}: {e}") from e

        self.logger.info(f"Update script started with PID: {process.pid}")
        return StagedUpdate(
            package_path=self.package_path,
            args_path=self.args_path,
            script_path=self.script_path,
            arguments=arguments,
            plan=plan,
        )

    def _cleanup(self):
        for path in (self.package_path, self.args_path, self.script_path):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                self.logger.warning(f"Could not remove staged file {path}: {e}")

    def _log_progress(self, percent: int):
        if percent % 10 == 0:
            self.logger.info(f"Download progress: {percent}%")
