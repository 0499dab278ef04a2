"""
L4 Execution — Post-convergence hooks.

After an install-type action converges an artifact, an optional
per-artifact script may run: ``<hooks_dir>/<artifact_id>.ps1`` (or
``.cmd`` / ``.bat``). A failing hook is reported but never undoes the
convergence already achieved.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wingetctl.adapters.base import CommandRunner
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.data.payloads import POWERSHELL
from wingetctl.core.services.winget.domain.outcome_classifier import (
    classify_result,
    describe_exit_code,
    is_success,
)

_HOOK_SUFFIXES = (".ps1", ".cmd", ".bat")


@dataclass
class HookResult:
    """What happened with an artifact's hook."""

    ran: bool = False
    ok: bool = True
    script: str | None = None
    exit_code: int | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "ran": self.ran,
            "ok": self.ok,
            "script": self.script,
            "exit_code": self.exit_code,
            "message": self.message,
        }


class HookRunner:
    def __init__(self, hooks_dir: Path | None, runner: CommandRunner, log: RunLogger):
        self.hooks_dir = Path(hooks_dir) if hooks_dir else None
        self.runner = runner
        self.log = log.child("hooks")

    def find(self, artifact_id: str) -> Path | None:
        if self.hooks_dir is None or not self.hooks_dir.is_dir():
            return None
        for suffix in _HOOK_SUFFIXES:
            candidate = self.hooks_dir / f"{artifact_id}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def run(self, artifact_id: str) -> HookResult:
        script = self.find(artifact_id)
        if script is None:
            return HookResult(message="no hook")

        if script.suffix == ".ps1":
            command = [*POWERSHELL, "-File", str(script)]
        else:
            command = ["cmd.exe", "/c", str(script)]

        self.log.info("Running hook %s", script)
        result = self.runner.run(command)

        if is_success(classify_result(result)):
            return HookResult(ran=True, ok=True, script=str(script), exit_code=result.exit_code)

        self.log.warning(
            "Hook %s failed (%s): %s",
            script.name,
            describe_exit_code(result.exit_code),
            result.summary(),
        )
        return HookResult(
            ran=True,
            ok=False,
            script=str(script),
            exit_code=result.exit_code,
            message=result.summary(),
        )
