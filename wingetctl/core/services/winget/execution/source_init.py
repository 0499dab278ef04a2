"""
L4 Execution — Source initialization.

Best-effort refresh of winget's package sources: reset, then update.
One attempt each, no retries. A failure is a warning, never fatal:
the cascade's job is "is the tool usable", not "are its sources warm".
"""

from __future__ import annotations

from typing import Any

from wingetctl.adapters.winget.cli import WingetCli
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.domain.outcome_classifier import (
    classify_result,
    describe_exit_code,
    is_success,
)


class SourceInitializer:
    def __init__(self, cli: WingetCli, log: RunLogger):
        self.cli = cli
        self.log = log.child("sources")

    def run(self) -> dict[str, Any]:
        """Reset then update sources.

        Returns:
            ``{"reset": bool, "update": bool}`` — for logging only.
        """
        return {
            "reset": self._step("source reset", self.cli.source_reset),
            "update": self._step("source update", self.cli.source_update),
        }

    def _step(self, label: str, call) -> bool:
        try:
            result = call()
        except Exception as exc:
            self.log.warning("winget %s raised: %s", label, exc)
            return False

        if is_success(classify_result(result)):
            self.log.info("winget %s: ok", label)
            return True

        self.log.warning(
            "winget %s failed (%s): %s",
            label,
            describe_exit_code(result.exit_code),
            result.summary(),
        )
        return False
