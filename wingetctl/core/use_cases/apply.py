"""
Apply use case — make the host match a manifest.

This is the top-level orchestrator and the outermost error boundary:
it makes winget ready once, then reconciles (or checks, or upgrades)
every declared artifact strictly one at a time, and runs the
post-convergence hook where one applies.

Whatever happens, every artifact ends with a ``CanonicalOutcome``.
Unexpected exceptions become ``UNKNOWN_ERROR`` instead of propagating.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from wingetctl.adapters.base import CommandRunner
from wingetctl.core.models.manifest import ArtifactSpec, Manifest, ToolSettings
from wingetctl.core.models.outcome import (
    EXIT_STATUS,
    CanonicalOutcome,
    ReconcileResult,
)
from wingetctl.core.observability.logging_config import RunLogger, new_run_logger
from wingetctl.core.services.winget.detection.locate import locate_winget
from wingetctl.core.services.winget.execution.hooks import HookResult, HookRunner
from wingetctl.core.services.winget.orchestration.cascade import (
    AcquisitionCascade,
    CascadeReport,
    ToolUnavailableError,
)
from wingetctl.core.services.winget.orchestration.convergence import (
    ConvergenceEngine,
    ReconcileOptions,
)

Mode = Literal["reconcile", "check", "upgrade"]
Locator = Callable[[str | None], str | None]


# ── Results ─────────────────────────────────────────────────────


@dataclass
class ToolResult:
    """Outcome of making winget ready."""

    report: CascadeReport | None = None
    outcome: CanonicalOutcome = CanonicalOutcome.CONVERGED
    error: str | None = None
    attempts: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.report is not None

    @property
    def exit_status(self) -> int:
        return EXIT_STATUS[self.outcome]

    def to_dict(self) -> dict[str, Any]:
        if self.report is not None:
            return self.report.to_dict()
        return {
            "ready": False,
            "outcome": self.outcome.value,
            "error": self.error,
            "attempts": self.attempts,
        }


@dataclass
class ArtifactReport:
    """One artifact's reconcile result plus its hook, if one ran."""

    result: ReconcileResult
    hook: HookResult | None = None

    @property
    def outcome(self) -> CanonicalOutcome:
        if self.hook is not None and not self.hook.ok:
            return CanonicalOutcome.HOOK_FAILED
        return self.result.outcome

    @property
    def exit_status(self) -> int:
        return EXIT_STATUS[self.outcome]

    def to_dict(self) -> dict[str, Any]:
        data = self.result.to_dict()
        data["outcome"] = self.outcome.value
        data["exit_status"] = self.exit_status
        data["hook"] = self.hook.to_dict() if self.hook else None
        return data


@dataclass
class ApplyReport:
    """Result of applying a manifest."""

    run_id: str
    mode: Mode = "reconcile"
    tool: ToolResult | None = None
    artifacts: list[ArtifactReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    @property
    def exit_status(self) -> int:
        """0 when everything converged, else the status of the first failure."""
        if self.tool is not None and not self.tool.ok and not self.artifacts:
            return self.tool.exit_status
        for artifact in self.artifacts:
            if artifact.exit_status != 0:
                return artifact.exit_status
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "mode": self.mode,
            "ok": self.ok,
            "exit_status": self.exit_status,
            "tool": self.tool.to_dict() if self.tool else None,
            "artifacts": [a.to_dict() for a in self.artifacts],
        }


# ── Tool acquisition ────────────────────────────────────────────


def ensure_tool(
    settings: ToolSettings,
    runner: CommandRunner,
    log: RunLogger,
    *,
    acquire: bool = True,
    locate: Locator = locate_winget,
) -> ToolResult:
    """Run the acquisition cascade and capture the result.

    With ``acquire=False`` only the readiness probe runs: no strategy is
    attempted and sources are not refreshed.
    """
    if not acquire:
        settings = settings.model_copy(update={"strategies": [], "source_init": False})

    try:
        cascade = AcquisitionCascade.from_settings(settings, runner, log, locate=locate)
        return ToolResult(report=cascade.run())
    except ToolUnavailableError as e:
        return ToolResult(
            outcome=CanonicalOutcome.TOOL_UNAVAILABLE,
            error=str(e),
            attempts=e.attempts,
        )
    except Exception as e:
        log.exception("Unexpected error while acquiring winget")
        return ToolResult(outcome=CanonicalOutcome.UNKNOWN_ERROR, error=f"{type(e).__name__}: {e}")


# ── Apply ───────────────────────────────────────────────────────


def apply_manifest(
    manifest: Manifest,
    runner: CommandRunner,
    log: RunLogger | None = None,
    *,
    mode: Mode = "reconcile",
    locate: Locator = locate_winget,
) -> ApplyReport:
    """Bring every artifact in ``manifest`` to its desired state.

    Args:
        manifest: Validated manifest.
        runner: Command runner for every process invocation.
        log: Run logger (default: a fresh one).
        mode: ``reconcile`` remediates; ``check`` only detects and judges;
            ``upgrade`` runs an explicit upgrade per artifact.
        locate: winget location lookup.
    """
    log = log or new_run_logger()
    report = ApplyReport(run_id=log.run_id, mode=mode)

    report.tool = ensure_tool(manifest.tool, runner, log, acquire=mode != "check", locate=locate)
    cascade = report.tool.report
    if cascade is None:
        for spec in manifest.artifacts:
            report.artifacts.append(ArtifactReport(result=_failed(spec, report.tool.outcome, report.tool.error)))
        return report

    options = ReconcileOptions(
        check_upgrades=manifest.policy.check_upgrades,
        fail_on_upgrade_available=manifest.policy.fail_on_upgrade_available,
        scope=manifest.tool.scope,
    )
    engine = ConvergenceEngine(
        cascade.handle,
        runner,
        log,
        source=manifest.tool.source,
        options=options,
    )
    hooks = HookRunner(Path(manifest.hooks_dir) if manifest.hooks_dir else None, runner, log)

    for spec in manifest.artifacts:
        report.artifacts.append(_apply_one(engine, hooks, spec, mode, log))

    log.info(
        "%s finished: %d artifacts, exit status %d",
        mode, len(report.artifacts), report.exit_status,
    )
    return report


def _apply_one(
    engine: ConvergenceEngine,
    hooks: HookRunner,
    spec: ArtifactSpec,
    mode: Mode,
    log: RunLogger,
) -> ArtifactReport:
    try:
        if mode == "check":
            result = engine.check(spec.identity, spec.desired)
        elif mode == "upgrade":
            result = engine.upgrade(spec.identity)
        else:
            result = engine.reconcile(spec.identity, spec.desired)
    except Exception as e:
        log.exception("Unexpected error while handling %s", spec.id)
        return ArtifactReport(
            result=_failed(spec, CanonicalOutcome.UNKNOWN_ERROR, f"{type(e).__name__}: {e}")
        )

    hook = None
    if mode == "reconcile" and spec.hook and result.converged_by_install:
        try:
            hook = hooks.run(spec.id)
        except Exception as e:
            log.exception("Hook for %s raised", spec.id)
            hook = HookResult(ran=True, ok=False, message=f"{type(e).__name__}: {e}")
        if not hook.ran:
            hook = None  # no script for this artifact
    return ArtifactReport(result=result, hook=hook)


def _failed(spec: ArtifactSpec, outcome: CanonicalOutcome, message: str | None) -> ReconcileResult:
    return ReconcileResult(
        identity=spec.identity,
        desired=spec.desired,
        outcome=outcome,
        message=message or "",
    )
