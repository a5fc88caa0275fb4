"""
Update system: check, stage, hand off and relaunch.
"""

from .checker import ManifestUpdateChecker
from .downloader import UpdateDownloader
from .handoff import HandoffPlan, HandoffStep, build_plan, render_script
from .launcher import MainAppLauncher, launch_detached
from .stager import UpdateStager

__all__ = [
    "ManifestUpdateChecker", "UpdateDownloader", "UpdateStager",
    "HandoffPlan", "HandoffStep", "build_plan", "render_script",
    "MainAppLauncher", "launch_detached",
]
