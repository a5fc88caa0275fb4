"""
Main application class for the self-updater.
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from . import __version__, get_info
from .config import Config
from .core.exceptions import ExitCode, StageError, UpdaterError, UsageError
from .core.extractor import ArchiveExtractor
from .core.interfaces import PackageExtractor, UpdateChecker
from .updates.checker import ManifestUpdateChecker
from .updates.downloader import UpdateDownloader
from .updates.launcher import MainAppLauncher
from .updates.stager import UpdateStager
from .utils.logging import get_logger

USAGE = "Usage: updater <archivePath> <mainAppDirectory>"


class UpdaterArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting the process."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> UpdaterArgumentParser:
    parser = UpdaterArgumentParser(
        prog="updater",
        description="Apply an update package and restart the main application.",
        add_help=False,
    )
    parser.add_argument("archive_path", help="Path to the update package (.zip)")
    parser.add_argument("main_app_path", help="Directory of the main application")
    return parser


def expand_argument_files(argv: Sequence[str]) -> List[str]:
    """Replace each @file argument by the file's lines, one argument per line."""
    expanded: List[str] = []
    for argument in argv:
        if argument.startswith("@") and Path(argument[1:]).is_file():
            with open(argument[1:], "r", encoding="utf-8", errors="surrogateescape") as f:
                expanded.extend(line.rstrip("\r\n") for line in f if line.strip())
        else:
            expanded.append(argument)
    return expanded


def parse_arguments(argv: Sequence[str]) -> argparse.Namespace:
    """Parse the two positional values; quotes around the directory are stripped."""
    args = build_parser().parse_args(list(argv))
    args.main_app_path = args.main_app_path.strip().strip('"')
    return args


class UpdaterApp:
    """Coordinates update check, staging, extraction and relaunch."""

    def __init__(self, config: Config,
                 checker: Optional[UpdateChecker] = None,
                 stager: Optional[UpdateStager] = None,
                 extractor: Optional[PackageExtractor] = None,
                 launcher: Optional[MainAppLauncher] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.checker = checker or ManifestUpdateChecker(config.updates, __version__)
        self.stager = stager or UpdateStager(
            config.staging, UpdateDownloader(config.updates.download_timeout))
        self.extractor = extractor or ArchiveExtractor()
        self.launcher = launcher or MainAppLauncher(config.launch)

    async def run(self, argv: Sequence[str]) -> int:
        """Run the whole flow and return the process exit code. Never raises."""
        try:
            return await self._run(list(argv))
        except Exception as e:
            self.logger.error(f"Unexpected error during update: {e}", exc_info=True)
            self.wait_for_exit()
            return ExitCode.UNEXPECTED

    async def _run(self, argv: List[str]) -> int:
        info = get_info()
        self.logger.info(f"{info['name']} version: {info['version']}")

        response_files = [a for a in argv if a.startswith("@")]
        argv = expand_argument_files(argv)
        self._consume_args_file(response_files)

        if self.config.updates.check_on_startup and await self.try_self_update(argv):
            return ExitCode.OK

        try:
            args = parse_arguments(argv)
        except UsageError as e:
            self.logger.error(f"{e}")
            self.logger.info(USAGE)
            self.wait_for_exit()
            return e.exit_code

        archive_path = Path(args.archive_path)
        main_app_path = Path(args.main_app_path)
        self.logger.info(f"archivePath: {archive_path}")
        self.logger.info(f"mainAppPath: {main_app_path}")

        try:
            self.extractor.extract(archive_path, main_app_path)
            self.launcher.relaunch_main(main_app_path)
        except UpdaterError as e:
            self.logger.error(f"{e}")
            self.wait_for_exit()
            return e.exit_code

        await self.launcher.idle()
        return ExitCode.OK

    async def try_self_update(self, argv: Sequence[str]) -> bool:
        """True when an update was staged and the caller must exit now."""
        decision = await self.checker.check_for_update()
        if not decision.available:
            return False

        try:
            await self.stager.stage(decision, argv)
        except StageError as e:
            self.logger.error(f"Update not performed: {e}")
            return False

        self.logger.info("Update staged, exiting so the updater can be replaced.")
        return True

    def _consume_args_file(self, response_files: Sequence[str]):
        """Delete the staged arguments file once the relaunched updater has read it."""
        staged_args = self.stager.args_path.resolve()
        for argument in response_files:
            candidate = Path(argument[1:]).resolve()
            if candidate == staged_args and candidate.exists():
                try:
                    candidate.unlink()
                    self.logger.debug(f"Removed arguments file {candidate}")
                except OSError as e:
                    self.logger.warning(f"Could not remove arguments file {candidate}: {e}")

    def wait_for_exit(self):
        """Keep the console open until the user acknowledges the message."""
        if not self.config.launch.wait_for_acknowledgment:
            return
        self.logger.info("Press Enter to exit...")
        try:
            input()
        except (EOFError, OSError):
            # stdin closed or detached; nothing to wait for
            pass
