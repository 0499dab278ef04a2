"""
winget adapter — the tool invocation surface the engine consumes.

Builds winget argument lists and runs them through a ``CommandRunner``.
Uses the winget CLI only. Returns raw ``CommandResult`` objects: this
adapter never interprets exit codes, that is the outcome classifier's
job.
"""

from __future__ import annotations

from wingetctl.adapters.base import CommandRunner
from wingetctl.core.models.command import CommandResult

_QUIET_FLAGS = ["--accept-source-agreements", "--disable-interactivity"]


class WingetCli:
    """winget operations bound to one executable path.

    Args:
        runner: Command runner used for every call.
        tool_path: Path to ``winget.exe`` (from the ``ToolHandle``).
        source: Source name passed to install and upgrade, or None for all.
            Listings are never narrowed by source, so packages installed
            outside winget are still detected.
    """

    def __init__(self, runner: CommandRunner, tool_path: str, source: str | None = None):
        self.runner = runner
        self.tool_path = tool_path
        self.source = source

    def _run(self, *args: str) -> CommandResult:
        return self.runner.run([self.tool_path, *args])

    def _source_args(self) -> list[str]:
        return ["--source", self.source] if self.source else []

    # ── Probe ───────────────────────────────────────────────────

    def version(self) -> CommandResult:
        return self._run("--version")

    # ── Query ───────────────────────────────────────────────────

    def list(self, artifact_id: str) -> CommandResult:
        """Exact-match listing of one installed artifact."""
        return self._run("list", "--id", artifact_id, "--exact", *_QUIET_FLAGS)

    def list_upgrades(self, artifact_id: str) -> CommandResult:
        """Informational: is a newer version available for this artifact?"""
        return self._run(
            "list", "--id", artifact_id, "--exact", "--upgrade-available",
            *_QUIET_FLAGS,
        )

    # ── Remediation ─────────────────────────────────────────────

    def install(
        self,
        artifact_id: str,
        version: str | None = None,
        *,
        scope: str | None = "machine",
        silent: bool = True,
    ) -> CommandResult:
        args = ["install", "--id", artifact_id, "--exact"]
        if version:
            args += ["--version", version]
        if scope:
            args += ["--scope", scope]
        if silent:
            args.append("--silent")
        args += self._source_args()
        args += ["--accept-package-agreements", *_QUIET_FLAGS]
        return self._run(*args)

    def upgrade(
        self,
        artifact_id: str,
        *,
        silent: bool = True,
    ) -> CommandResult:
        args = ["upgrade", "--id", artifact_id, "--exact"]
        if silent:
            args.append("--silent")
        args += self._source_args()
        args += ["--accept-package-agreements", *_QUIET_FLAGS]
        return self._run(*args)

    def uninstall(self, artifact_id: str, *, silent: bool = True) -> CommandResult:
        args = ["uninstall", "--id", artifact_id, "--exact"]
        if silent:
            args.append("--silent")
        args += _QUIET_FLAGS
        return self._run(*args)

    # ── Sources ─────────────────────────────────────────────────

    def source_reset(self) -> CommandResult:
        return self._run("source", "reset", "--force", "--disable-interactivity")

    def source_update(self) -> CommandResult:
        return self._run("source", "update", "--disable-interactivity")
