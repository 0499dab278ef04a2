"""
L5 Orchestration — Acquisition cascade.

Guarantees winget is usable on the host:

    probe ready?  ── yes ──────────────────────────────┐
        │ no                                           │
    strategy 1 → probe → ready? ── yes ────────────────┤
    strategy 2 → probe → ready? ── yes ────────────────┤
    strategy 3 → probe → ready? ── yes ────────────────┤
        │ no                                           ▼
    ToolUnavailableError                  source init (best-effort) → ToolHandle

Each strategy's own return value is advisory. The readiness probe,
run after every attempt, is authoritative.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wingetctl.adapters.base import CommandRunner
from wingetctl.adapters.winget.cli import WingetCli
from wingetctl.core.models.manifest import ToolSettings
from wingetctl.core.models.tool import ProbeResult, ToolHandle
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.detection.locate import locate_winget
from wingetctl.core.services.winget.detection.readiness import ReadinessProbe
from wingetctl.core.services.winget.execution.download_cache import (
    DownloadCache,
    default_cache_dir,
)
from wingetctl.core.services.winget.execution.source_init import SourceInitializer
from wingetctl.core.services.winget.execution.strategies import (
    AcquisitionStrategy,
    StrategyContext,
    build_strategies,
)

Locator = Callable[[str | None], str | None]


class ToolUnavailableError(Exception):
    """Every acquisition strategy was exhausted without a ready tool."""

    def __init__(self, message: str, attempts: list[dict[str, Any]]):
        super().__init__(message)
        self.attempts = attempts


@dataclass
class CascadeReport:
    """Result of a successful cascade run."""

    handle: ToolHandle
    fast_path: bool = False
    attempts: list[dict[str, Any]] = field(default_factory=list)
    sources: dict[str, bool] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ready": True,
            "tool": self.handle.to_dict(),
            "fast_path": self.fast_path,
            "attempts": self.attempts,
            "sources": self.sources,
        }


class AcquisitionCascade:
    """Run acquisition strategies in fixed order until winget is ready.

    Args:
        runner: Command runner for probes, strategies and source init.
        log: Run logger.
        strategies: Strategies in priority order. Each is attempted at
            most once per ``run()``.
        tool_path: Explicit winget path (skips location lookup).
        locate: Location lookup, re-run after every strategy because a
            strategy may have put winget somewhere new.
        source_init: Whether to refresh sources once the tool is ready.
    """

    def __init__(
        self,
        runner: CommandRunner,
        log: RunLogger,
        strategies: list[AcquisitionStrategy],
        *,
        tool_path: str | None = None,
        locate: Locator = locate_winget,
        source_init: bool = True,
    ):
        self.runner = runner
        self.log = log.child("cascade")
        self._run_log = log
        self.strategies = strategies
        self.tool_path = tool_path
        self.locate = locate
        self.source_init = source_init
        self.probe = ReadinessProbe(runner, log)

    @classmethod
    def from_settings(
        cls,
        settings: ToolSettings,
        runner: CommandRunner,
        log: RunLogger,
        *,
        locate: Locator = locate_winget,
    ) -> AcquisitionCascade:
        """Build a cascade (and its strategies) from manifest tool settings."""
        cache_dir = Path(settings.cache_dir) if settings.cache_dir else default_cache_dir()
        context = StrategyContext(
            runner=runner,
            log=log,
            cache=DownloadCache(cache_dir, log),
            scope=settings.scope,
        )
        return cls(
            runner,
            log,
            build_strategies(context, settings.strategies),
            tool_path=settings.path,
            locate=locate,
            source_init=settings.source_init,
        )

    def _probe_now(self) -> ProbeResult:
        return self.probe.probe(self.locate(self.tool_path))

    def run(self) -> CascadeReport:
        """Make winget ready or raise.

        Raises:
            ToolUnavailableError: all strategies exhausted. Source
                initialization is not attempted in that case.
        """
        initial = self._probe_now()
        if initial.ready:
            self.log.info("winget %s already ready at %s", initial.version, initial.path)
            return self._finish(ToolHandle.from_probe(initial), fast_path=True, attempts=[])

        self.log.warning("winget not ready (%s); starting acquisition", initial.reason)
        attempts: list[dict[str, Any]] = []

        for strategy in self.strategies:
            self.log.info("Trying acquisition strategy: %s", strategy.name)
            claimed = strategy.attempt()
            probe = self._probe_now()
            attempts.append({
                "strategy": strategy.name,
                "claimed": claimed,
                "ready": probe.ready,
                "reason": probe.reason,
            })

            if probe.ready:
                self.log.info(
                    "winget %s ready after %s (%s)",
                    probe.version,
                    strategy.name,
                    probe.path,
                )
                return self._finish(ToolHandle.from_probe(probe), fast_path=False, attempts=attempts)

            self.log.warning(
                "Strategy %s did not make winget ready (claimed=%s): %s",
                strategy.name,
                claimed,
                probe.reason,
            )

        names = ", ".join(s.name for s in self.strategies) or "none enabled"
        self.log.error("winget unavailable after all strategies (%s)", names)
        raise ToolUnavailableError(
            f"winget could not be made ready (tried: {names})",
            attempts,
        )

    def _finish(
        self,
        handle: ToolHandle,
        *,
        fast_path: bool,
        attempts: list[dict[str, Any]],
    ) -> CascadeReport:
        sources = None
        if self.source_init:
            sources = SourceInitializer(WingetCli(self.runner, handle.path), self._run_log).run()
        return CascadeReport(handle=handle, fast_path=fast_path, attempts=attempts, sources=sources)


def ensure_tool_ready(
    runner: CommandRunner,
    log: RunLogger,
    settings: ToolSettings | None = None,
    *,
    locate: Locator = locate_winget,
) -> ToolHandle:
    """Guarantee winget is ready and return its handle.

    Raises:
        ToolUnavailableError: all strategies exhausted.
    """
    cascade = AcquisitionCascade.from_settings(settings or ToolSettings(), runner, log, locate=locate)
    return cascade.run().handle
