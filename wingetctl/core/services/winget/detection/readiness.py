"""
L3 Detection — Readiness probe.

Read-only probe: runs ``winget --version`` and parses the output.
Used as the cascade's entry check and as the authoritative success
test after every acquisition strategy.
"""

from __future__ import annotations

from wingetctl.adapters.base import CommandRunner
from wingetctl.adapters.winget.cli import WingetCli
from wingetctl.core.models.tool import ProbeResult
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.domain.listing_parser import parse_tool_version
from wingetctl.core.services.winget.domain.outcome_classifier import (
    classify_result,
    describe_exit_code,
    is_success,
)


class ReadinessProbe:
    """Confirm a winget executable runs and report its version.

    Never raises. The path is not checked on disk first: winget is
    usually an app execution alias, which ``os.path.exists`` can report
    as missing even though it runs.
    """

    def __init__(self, runner: CommandRunner, log: RunLogger):
        self.runner = runner
        self.log = log.child("readiness")

    def probe(self, path: str | None) -> ProbeResult:
        if not path:
            return ProbeResult.not_ready(None, "winget executable not located")

        result = WingetCli(self.runner, path).version()

        if not result.started:
            reason = result.error or "could not start"
            self.log.debug("Probe %s: not ready (%s)", path, reason)
            return ProbeResult.not_ready(path, reason)

        if not is_success(classify_result(result)):
            reason = f"--version exited {describe_exit_code(result.exit_code)}"
            self.log.debug("Probe %s: not ready (%s)", path, reason)
            return ProbeResult.not_ready(path, reason)

        version = parse_tool_version(result.output)
        if not version:
            reason = f"no version in output: {result.summary(80)!r}"
            self.log.debug("Probe %s: not ready (%s)", path, reason)
            return ProbeResult.not_ready(path, reason)

        self.log.debug("Probe %s: ready (v%s)", path, version)
        return ProbeResult.ok(path, version)
