"""
Hand-off plan executed by a detached process after the updater exits.

A running executable cannot replace itself, so the updater describes the
replacement as an ordered list of steps, renders it to a script for the
host shell and lets a detached process run it once the updater is gone.
The plan is plain data and can be inspected without any shell.
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

WAIT = "wait"
DELETE_UPDATER = "delete_updater"
EXPAND_PACKAGE = "expand_package"
DELETE_PACKAGE = "delete_package"
RELAUNCH_UPDATER = "relaunch_updater"
DELETE_ARGS = "delete_args"
DELETE_SELF = "delete_self"

STEP_ORDER = (
    WAIT,
    DELETE_UPDATER,
    EXPAND_PACKAGE,
    DELETE_PACKAGE,
    RELAUNCH_UPDATER,
    DELETE_ARGS,
    DELETE_SELF,
)

# Time the relaunched updater gets to read its arguments file.
ARGS_SETTLE_SECONDS = 3


@dataclass
class HandoffStep:
    name: str
    path: Optional[str] = None
    destination: Optional[str] = None
    command: List[str] = field(default_factory=list)
    seconds: int = 0


@dataclass
class HandoffPlan:
    """Ordered steps that finish an update on behalf of the exited updater."""
    steps: List[HandoffStep] = field(default_factory=list)

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def get(self, name: str) -> HandoffStep:
        for step in self.steps:
            if step.name == name:
                return step
        raise KeyError(name)


def build_plan(package_path: Path, base_dir: Path, updater_path: Path,
               relaunch_command: List[str], args_path: Path,
               grace_period_seconds: int = 5) -> HandoffPlan:
    """Describe the replacement of the updater by the staged package."""
    return HandoffPlan(steps=[
        HandoffStep(WAIT, seconds=grace_period_seconds),
        HandoffStep(DELETE_UPDATER, path=str(updater_path)),
        HandoffStep(EXPAND_PACKAGE, path=str(package_path), destination=str(base_dir)),
        HandoffStep(DELETE_PACKAGE, path=str(package_path)),
        HandoffStep(RELAUNCH_UPDATER, destination=str(base_dir),
                    command=list(relaunch_command) + [f"@{args_path}"]),
        HandoffStep(DELETE_ARGS, path=str(args_path), seconds=ARGS_SETTLE_SECONDS),
        HandoffStep(DELETE_SELF),
    ])


# ── Windows batch ────────────────────────────────────────────────────

def _bat_quote(value: str) -> str:
    return '"' + value.replace('%', '%%') + '"'


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _bat_delete(path: str) -> List[str]:
    return [f"if exist {_bat_quote(path)} del /f /q {_bat_quote(path)}"]


def _bat_wait(seconds: int) -> List[str]:
    return [f"timeout /t {seconds} /nobreak >nul"]


def _render_bat_step(step: HandoffStep) -> List[str]:
    if step.name == WAIT:
        return _bat_wait(step.seconds)
    if step.name in (DELETE_UPDATER, DELETE_PACKAGE):
        return _bat_delete(step.path)
    if step.name == EXPAND_PACKAGE:
        expand = (f"Expand-Archive -LiteralPath {_ps_quote(step.path)} "
                  f"-DestinationPath {_ps_quote(step.destination)} -Force")
        return [f'powershell -NoProfile -ExecutionPolicy Bypass -Command "{expand}"']
    if step.name == RELAUNCH_UPDATER:
        command = " ".join(_bat_quote(part) for part in step.command)
        return [f'start "" /D {_bat_quote(step.destination)} {command}']
    if step.name == DELETE_ARGS:
        return _bat_wait(step.seconds) + _bat_delete(step.path)
    if step.name == DELETE_SELF:
        return ['(goto) 2>nul & del "%~f0"']
    raise ValueError(f"Unknown hand-off step: {step.name}")


# ── POSIX shell ──────────────────────────────────────────────────────

def _render_sh_step(step: HandoffStep) -> List[str]:
    if step.name == WAIT:
        return [f"sleep {step.seconds}"]
    if step.name in (DELETE_UPDATER, DELETE_PACKAGE):
        return [f"rm -f -- {shlex.quote(step.path)}"]
    if step.name == EXPAND_PACKAGE:
        package, destination = shlex.quote(step.path), shlex.quote(step.destination)
        return [f"unzip -o -q {package} -d {destination} "
                f"|| python3 -m zipfile -e {package} {destination}"]
    if step.name == RELAUNCH_UPDATER:
        command = " ".join(shlex.quote(part) for part in step.command)
        return [f"(cd {shlex.quote(step.destination)} && nohup {command} >/dev/null 2>&1 &)"]
    if step.name == DELETE_ARGS:
        return [f"sleep {step.seconds}", f"rm -f -- {shlex.quote(step.path)}"]
    if step.name == DELETE_SELF:
        return ['rm -f -- "$0"']
    raise ValueError(f"Unknown hand-off step: {step.name}")


RENDERERS: Dict[str, Callable[[HandoffStep], List[str]]] = {
    "bat": _render_bat_step,
    "sh": _render_sh_step,
}
HEADERS = {
    "bat": ["@echo off"],
    "sh": ["#!/bin/sh"],
}


def default_script_kind() -> str:
    return "bat" if os.name == "nt" else "sh"


def render_script(plan: HandoffPlan, kind: Optional[str] = None) -> str:
    """Render the plan for the given shell ("bat" or "sh", default: host)."""
    kind = kind or default_script_kind()
    if kind not in RENDERERS:
        raise ValueError(f"Unsupported script kind: {kind}")

    render_step = RENDERERS[kind]
    lines = list(HEADERS[kind])
    for step in plan.steps:
        lines.append(f"{'rem' if kind == 'bat' else '#'} {step.name}")
        lines.extend(render_step(step))
    return "\n".join(lines) + "\n"


def write_script(script_path: Path, content: str, kind: Optional[str] = None) -> Path:
    """Write the script with the host's line endings, durable before returning."""
    kind = kind or default_script_kind()
    newline = "\r\n" if kind == "bat" else "\n"

    with open(script_path, "w", encoding="utf-8", newline=newline) as f:
        f.write(content)
        f.flush()
        os.fsync(f.fileno())

    if kind == "sh":
        os.chmod(script_path, 0o755)
    return script_path
