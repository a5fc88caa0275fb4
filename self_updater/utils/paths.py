"""
Runtime path helpers.

The updater ships as a frozen executable next to its staged artifacts, so
"beside the running executable" means the directory of ``sys.executable``
when frozen and the project root when running from source.
"""

import sys
from pathlib import Path


def is_frozen() -> bool:
    return getattr(sys, 'frozen', False)


def get_base_dir() -> Path:
    """Directory holding the updater executable, its log and staged artifacts."""
    if is_frozen():
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parent.parent.parent


def get_relaunch_command(updater_executable: Path) -> list:
    """Command that starts the updater again after the hand-off finishes."""
    if is_frozen():
        return [str(updater_executable)]
    return [sys.executable, "-m", "self_updater"]
