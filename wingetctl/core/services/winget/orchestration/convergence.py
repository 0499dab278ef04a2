"""
L5 Orchestration — Convergence engine.

Drives one managed artifact from its observed state to the desired
state:

    detect → plan → act → detect → plan → ... → CanonicalOutcome

Every action is followed by a fresh detector query: the tool accepting
an action does not prove the listing reflects it. The pinned path is
bounded to ``MAX_PINNED_ATTEMPTS`` remediation attempts.

For the "present, any version" target an available upgrade is
informational: it is logged and reported, and only turns into
``UPGRADE_AVAILABLE`` when ``fail_on_upgrade_available`` is set. It
never triggers remediation.
"""

from __future__ import annotations

from dataclasses import dataclass

from wingetctl.adapters.base import CommandRunner
from wingetctl.adapters.winget.cli import WingetCli
from wingetctl.core.models.artifact import ArtifactIdentity, ArtifactState, DesiredState
from wingetctl.core.models.command import CommandResult
from wingetctl.core.models.outcome import (
    ActionKind,
    ActionRecord,
    CanonicalOutcome,
    ExitCategory,
    ReconcileResult,
    RemediationAction,
)
from wingetctl.core.models.tool import ToolHandle
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.detection.state_detector import (
    DetectionError,
    StateDetector,
)
from wingetctl.core.services.winget.domain.convergence_plan import (
    MAX_PINNED_ATTEMPTS,
    plan_next_action,
)
from wingetctl.core.services.winget.domain.outcome_classifier import (
    classify_result,
    describe_exit_code,
    is_success,
    outcome_for_action,
)


@dataclass
class ReconcileOptions:
    """Per-call knobs for reconcile/check.

    Args:
        check_upgrades: Query upgrade availability for "present" targets.
        fail_on_upgrade_available: Stricter compliance variant; an
            available upgrade yields ``UPGRADE_AVAILABLE`` instead of
            ``CONVERGED``.
        scope: Install scope passed to winget (``machine``/``user``/None).
        silent: Pass ``--silent`` to install/upgrade/uninstall.
    """

    check_upgrades: bool = True
    fail_on_upgrade_available: bool = False
    scope: str | None = "machine"
    silent: bool = True


def _validate(identity: ArtifactIdentity, desired: DesiredState) -> None:
    if desired == DesiredState.PINNED and not identity.version:
        raise ValueError(f"{identity.artifact_id}: pinned desired state requires a version")
    if desired != DesiredState.PINNED and identity.version:
        raise ValueError(
            f"{identity.artifact_id}: version {identity.version!r} given "
            f"but desired state is {desired.value}"
        )


def _record(action: RemediationAction, result: CommandResult, note: str = "") -> ActionRecord:
    message = result.summary()
    if note:
        message = f"{note}; {message}" if message else note
    return ActionRecord(
        action=action,
        exit_code=result.exit_code,
        code_name=describe_exit_code(result.exit_code),
        category=classify_result(result),
        message=message,
    )


class ConvergenceEngine:
    """Reconcile managed artifacts against desired states.

    Args:
        tool: Handle from the acquisition cascade (read-only).
        runner: Command runner for every winget call.
        log: Run logger.
        source: winget source to install from, or None for all sources.
        options: Default reconcile options.
    """

    def __init__(
        self,
        tool: ToolHandle,
        runner: CommandRunner,
        log: RunLogger,
        *,
        source: str | None = None,
        options: ReconcileOptions | None = None,
    ):
        self.tool = tool
        self.log = log.child("convergence")
        self.options = options or ReconcileOptions()
        self.cli = WingetCli(runner, tool.path, source)
        self.detector = StateDetector(self.cli, log)

    # ── Public operations ───────────────────────────────────────

    def reconcile(
        self,
        identity: ArtifactIdentity,
        desired: DesiredState,
        options: ReconcileOptions | None = None,
    ) -> ReconcileResult:
        """Converge ``identity`` to ``desired``, remediating as needed."""
        opts = options or self.options
        _validate(identity, desired)
        result = ReconcileResult(
            identity=identity,
            desired=desired,
            outcome=CanonicalOutcome.UNKNOWN_ERROR,
        )

        try:
            state = self.detector.detect(identity.artifact_id)
        except DetectionError as e:
            return self._detection_failed(result, e)
        result.initial_state = state

        prior: ActionRecord | None = None
        while True:
            decision = plan_next_action(state, desired, identity.version, prior)

            if decision.done:
                result.final_state = state
                result.outcome = decision.outcome
                if decision.outcome != CanonicalOutcome.CONVERGED:
                    self._attach_detail(result, prior, decision.reason)
                    self.log.warning(
                        "%s: %s (%s)", identity, decision.outcome.value, decision.reason,
                    )
                    return result
                break

            if len(result.actions) >= MAX_PINNED_ATTEMPTS:
                result.final_state = state
                result.outcome = CanonicalOutcome.VERSION_MISMATCH_UNRESOLVED
                self._attach_detail(result, prior, "remediation attempt limit reached")
                self.log.error("%s: remediation attempt limit reached", identity)
                return result

            record = self._execute(identity, decision.action, opts)
            result.actions.append(record)

            terminal = outcome_for_action(record.action, record.category)
            if terminal is not None and terminal != CanonicalOutcome.CONVERGED:
                result.outcome = terminal
                self._attach_detail(result, record)
                self.log.warning(
                    "%s: %s ended with %s (%s)",
                    identity, record.action, terminal.value, record.code_name,
                )
                return result

            try:
                state = self.detector.detect(identity.artifact_id)
            except DetectionError as e:
                return self._detection_failed(result, e)
            prior = record

        self.log.info("%s: converged (%s)", identity, state)
        if desired == DesiredState.PRESENT:
            self._apply_upgrade_policy(result, opts)
        return result

    def check(
        self,
        identity: ArtifactIdentity,
        desired: DesiredState,
        options: ReconcileOptions | None = None,
    ) -> ReconcileResult:
        """Compliance check: detect and judge, never remediate."""
        opts = options or self.options
        _validate(identity, desired)
        result = ReconcileResult(
            identity=identity,
            desired=desired,
            outcome=CanonicalOutcome.UNKNOWN_ERROR,
        )

        try:
            state = self.detector.detect(identity.artifact_id)
        except DetectionError as e:
            return self._detection_failed(result, e)
        result.initial_state = state
        result.final_state = state

        decision = plan_next_action(state, desired, identity.version)
        if decision.done:
            result.outcome = decision.outcome
            if desired == DesiredState.PRESENT and decision.outcome == CanonicalOutcome.CONVERGED:
                self._apply_upgrade_policy(result, opts)
            return result

        result.outcome = self._non_compliant_outcome(state, desired)
        result.message = f"would {decision.action}"
        self.log.info("%s: not compliant (%s), would %s", identity, state, decision.action)
        return result

    def upgrade(
        self,
        identity: ArtifactIdentity,
        options: ReconcileOptions | None = None,
    ) -> ReconcileResult:
        """Operator-requested upgrade of an installed artifact.

        ``UPDATE_NOT_APPLICABLE`` means already current: ``CONVERGED``.
        """
        opts = options or self.options
        result = ReconcileResult(
            identity=identity,
            desired=DesiredState.PRESENT,
            outcome=CanonicalOutcome.UNKNOWN_ERROR,
        )

        try:
            state = self.detector.detect(identity.artifact_id)
        except DetectionError as e:
            return self._detection_failed(result, e)
        result.initial_state = state

        if not state.is_present:
            result.final_state = state
            result.outcome = CanonicalOutcome.NOT_INSTALLED
            result.message = "cannot upgrade: not installed"
            return result

        record = self._execute(identity, RemediationAction.upgrade(), opts)
        result.actions.append(record)

        terminal = outcome_for_action(record.action, record.category)
        if terminal is not None and terminal != CanonicalOutcome.CONVERGED:
            result.outcome = terminal
            self._attach_detail(result, record)
            return result

        try:
            state = self.detector.detect(identity.artifact_id)
        except DetectionError as e:
            return self._detection_failed(result, e)
        result.final_state = state

        if state.is_present:
            result.outcome = CanonicalOutcome.CONVERGED
            result.upgrade_available = False if record.category == ExitCategory.UPDATE_NOT_APPLICABLE else None
        else:
            result.outcome = CanonicalOutcome.NOT_INSTALLED
            self._attach_detail(result, record, "absent after upgrade")
        return result

    # ── Internals ───────────────────────────────────────────────

    def _execute(
        self,
        identity: ArtifactIdentity,
        action: RemediationAction,
        opts: ReconcileOptions,
    ) -> ActionRecord:
        artifact_id = identity.artifact_id
        self.log.info("%s: executing %s", artifact_id, action)

        if action.kind == ActionKind.INSTALL_LATEST:
            record = _record(action, self.cli.install(
                artifact_id, scope=opts.scope, silent=opts.silent,
            ))
        elif action.kind == ActionKind.INSTALL_PINNED:
            record = _record(action, self.cli.install(
                artifact_id, action.version, scope=opts.scope, silent=opts.silent,
            ))
        elif action.kind == ActionKind.UPGRADE:
            record = _record(action, self.cli.upgrade(artifact_id, silent=opts.silent))
        elif action.kind == ActionKind.UNINSTALL:
            record = _record(action, self.cli.uninstall(artifact_id, silent=opts.silent))
        else:
            record = self._uninstall_then_install(identity, action, opts)

        if is_success(record.category):
            self.log.info("%s: %s accepted (%s)", artifact_id, action, record.code_name)
        else:
            self.log.warning("%s: %s returned %s", artifact_id, action, record.code_name)
        return record

    def _uninstall_then_install(
        self,
        identity: ArtifactIdentity,
        action: RemediationAction,
        opts: ReconcileOptions,
    ) -> ActionRecord:
        removed = self.cli.uninstall(identity.artifact_id, silent=opts.silent)
        category = classify_result(removed)
        if not (is_success(category) or category == ExitCategory.NO_RESULTS_FOUND):
            return _record(action, removed, "uninstall step failed")

        installed = self.cli.install(
            identity.artifact_id, action.version, scope=opts.scope, silent=opts.silent,
        )
        return _record(action, installed, f"uninstall {describe_exit_code(removed.exit_code)}")

    def _apply_upgrade_policy(self, result: ReconcileResult, opts: ReconcileOptions) -> None:
        if not (opts.check_upgrades or opts.fail_on_upgrade_available):
            return
        check = self.detector.check_upgrade(result.identity.artifact_id)
        result.upgrade_available = check.available
        if check.available and opts.fail_on_upgrade_available:
            result.outcome = CanonicalOutcome.UPGRADE_AVAILABLE
            result.message = f"upgrade available: {check.version or 'newer version'}"
            self.log.warning("%s: %s", result.identity, result.message)

    @staticmethod
    def _non_compliant_outcome(state: ArtifactState, desired: DesiredState) -> CanonicalOutcome:
        if desired == DesiredState.ABSENT:
            return CanonicalOutcome.UNWANTED_PRESENT
        if not state.is_present:
            return CanonicalOutcome.NOT_INSTALLED
        return CanonicalOutcome.VERSION_MISMATCH_UNRESOLVED

    def _detection_failed(self, result: ReconcileResult, error: DetectionError) -> ReconcileResult:
        result.outcome = error.outcome
        result.exit_code = error.exit_code
        result.code_name = error.code_name
        result.message = f"{error}: {error.output}" if error.output else str(error)
        self.log.warning("%s: %s (%s)", result.identity, error.outcome.value, error.code_name)
        return result

    @staticmethod
    def _attach_detail(
        result: ReconcileResult,
        record: ActionRecord | None,
        reason: str = "",
    ) -> None:
        if record is not None:
            result.exit_code = record.exit_code
            result.code_name = record.code_name
        parts = [p for p in (reason, record.message if record else "") if p]
        result.message = "; ".join(parts)


def reconcile(
    tool: ToolHandle,
    identity: ArtifactIdentity,
    desired: DesiredState,
    runner: CommandRunner,
    log: RunLogger,
    *,
    source: str | None = None,
    options: ReconcileOptions | None = None,
) -> ReconcileResult:
    """Converge one artifact. Convenience wrapper around ``ConvergenceEngine``."""
    engine = ConvergenceEngine(tool, runner, log, source=source, options=options)
    return engine.reconcile(identity, desired)


def check_compliance(
    tool: ToolHandle,
    identity: ArtifactIdentity,
    desired: DesiredState,
    runner: CommandRunner,
    log: RunLogger,
    *,
    source: str | None = None,
    options: ReconcileOptions | None = None,
) -> ReconcileResult:
    """Detection-only compliance check. Never remediates."""
    engine = ConvergenceEngine(tool, runner, log, source=source, options=options)
    return engine.check(identity, desired)
