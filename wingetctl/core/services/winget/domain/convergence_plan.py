"""
L1 Domain — Convergence plan (pure).

Chooses the next remediation action as a pure function of
(current state, desired state, prior action record). No I/O.

    current \\ desired     absent      present        pinned(v)
    ───────────────────   ─────────   ────────────   ─────────────────────────────
    Absent                converged   InstallLatest  InstallPinned(v)
    PresentUnknown        Uninstall   converged      InstallPinned(v) → on conflict
    PresentVersion(≠v)    Uninstall   converged        UninstallThenInstallPinned(v)
    PresentVersion(v)     Uninstall   converged      converged

The pinned path makes at most ``MAX_PINNED_ATTEMPTS`` attempts, because
uninstall+install is destructive and must not loop.
"""

from __future__ import annotations

from dataclasses import dataclass

from wingetctl.core.models.artifact import ArtifactState, DesiredState
from wingetctl.core.models.outcome import (
    ActionKind,
    ActionRecord,
    CanonicalOutcome,
    RemediationAction,
)
from wingetctl.core.services.winget.domain.outcome_classifier import is_conflict

MAX_PINNED_ATTEMPTS = 2


@dataclass(frozen=True)
class Decision:
    """Either an action to run next or a terminal outcome."""

    action: RemediationAction | None = None
    outcome: CanonicalOutcome | None = None
    reason: str = ""

    @property
    def done(self) -> bool:
        return self.outcome is not None


def _done(outcome: CanonicalOutcome, reason: str = "") -> Decision:
    return Decision(outcome=outcome, reason=reason)


def _do(action: RemediationAction) -> Decision:
    return Decision(action=action)


def plan_next_action(
    state: ArtifactState,
    desired: DesiredState,
    version: str | None = None,
    prior: ActionRecord | None = None,
) -> Decision:
    """Decide what to do given the freshly observed ``state``.

    Args:
        state: State from the most recent detector query.
        desired: Target condition.
        version: Required version when ``desired`` is ``PINNED``.
        prior: Record of the action executed just before ``state`` was
            observed, or ``None`` on the initial decision.
    """
    if desired == DesiredState.ABSENT:
        return _plan_absent(state, prior)
    if desired == DesiredState.PRESENT:
        return _plan_present(state, prior)
    if not version:
        raise ValueError("pinned desired state requires a version")
    return _plan_pinned(state, version, prior)


def _plan_absent(state: ArtifactState, prior: ActionRecord | None) -> Decision:
    if not state.is_present:
        return _done(CanonicalOutcome.CONVERGED)
    if prior is None:
        return _do(RemediationAction.uninstall())
    return _done(
        CanonicalOutcome.UNWANTED_PRESENT,
        f"still {state} after {prior.action}",
    )


def _plan_present(state: ArtifactState, prior: ActionRecord | None) -> Decision:
    if state.is_present:
        return _done(CanonicalOutcome.CONVERGED)
    if prior is None:
        return _do(RemediationAction.install_latest())
    return _done(
        CanonicalOutcome.NOT_INSTALLED,
        f"still absent after {prior.action}",
    )


def _plan_pinned(
    state: ArtifactState,
    version: str,
    prior: ActionRecord | None,
) -> Decision:
    if state.has_version(version):
        return _done(CanonicalOutcome.CONVERGED)

    if prior is None:
        return _do(RemediationAction.install_pinned(version))

    if prior.action.kind == ActionKind.INSTALL_PINNED and is_conflict(prior.category):
        return _do(RemediationAction.uninstall_then_install_pinned(version))

    return _done(
        CanonicalOutcome.VERSION_MISMATCH_UNRESOLVED,
        f"wanted {version}, observed {state} after {prior.action}",
    )
