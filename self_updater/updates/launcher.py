import asyncio
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import LaunchConfig
from ..core.exceptions import LaunchError
from ..utils.logging import get_logger


def launch_detached(command: Sequence[str], cwd: Optional[Path] = None,
                    hidden: bool = False) -> subprocess.Popen:
    """
    Start a process that outlives the updater. Nothing waits on it.

    Args:
        command: Program and arguments
        cwd: Working directory for the child
        hidden: Suppress the console window on Windows

    Raises:
        OSError: if the program cannot be started
    """
    kwargs = {
        "cwd": str(cwd) if cwd else None,
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "close_fds": True,
    }
    if os.name == "nt":
        flags = subprocess.CREATE_NEW_PROCESS_GROUP
        flags |= subprocess.CREATE_NO_WINDOW if hidden else subprocess.DETACHED_PROCESS
        kwargs["creationflags"] = flags
    else:
        kwargs["start_new_session"] = True

    return subprocess.Popen(list(command), **kwargs)


def script_command(script_path: Path) -> List[str]:
    """Interpreter invocation for a rendered hand-off script."""
    if os.name == "nt":
        return ["cmd.exe", "/c", str(script_path)]
    return ["/bin/sh", str(script_path)]


class MainAppLauncher:
    """Starts the main application once its files are in place."""

    def __init__(self, config: Optional[LaunchConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or LaunchConfig()
        self.logger = logger or get_logger(__name__)

    def get_main_executable(self, main_app_dir: Path) -> Path:
        return Path(main_app_dir) / self.config.main_executable

    def relaunch_main(self, main_app_dir: Path) -> subprocess.Popen:
        """
        Start the main application without waiting for it.

        Raises:
            LaunchError: if the executable is missing or cannot be started
        """
        executable = self.get_main_executable(main_app_dir)
        if not executable.is_file():
            raise LaunchError(f"Main application not found: {executable}")

        self.logger.info(f"Starting main application: {executable}")
        try:
            process = launch_detached([str(executable)], cwd=Path(main_app_dir))
        except OSError as e:
            raise LaunchError(f"Failed to start {executable}: {e}") from e

        self.logger.info(f"Main application started with PID: {process.pid}")
        return process

    async def idle(self):
        """Keep the console visible for a while before the updater exits."""
        if self.config.idle_seconds <= 0:
            return
        self.logger.info(f"Closing in {self.config.idle_seconds} seconds...")
        await asyncio.sleep(self.config.idle_seconds)
