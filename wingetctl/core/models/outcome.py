"""
Outcome models — exit categories, canonical outcomes, remediation actions.

``CanonicalOutcome`` is the ONLY value the orchestrator may branch on.
Everything else in a ``ReconcileResult`` is diagnostic detail.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wingetctl.core.models.artifact import ArtifactIdentity, ArtifactState, DesiredState


class ExitCategory(StrEnum):
    """Semantic category of a raw tool exit code."""

    SUCCESS = "success"
    SUCCESS_REBOOT_REQUIRED = "success_reboot_required"
    NO_RESULTS_FOUND = "no_results_found"
    MULTIPLE_MATCHES = "multiple_matches"
    UPDATE_NOT_APPLICABLE = "update_not_applicable"
    ALREADY_INSTALLED_CONFLICT = "already_installed_conflict"
    DOWNGRADE_CONFLICT = "downgrade_conflict"
    UNKNOWN = "unknown"


class CanonicalOutcome(StrEnum):
    """Stable result taxonomy handed to the orchestrator."""

    CONVERGED = "converged"
    NOT_INSTALLED = "not_installed"
    LIST_FAILED = "list_failed"
    TOOL_UNAVAILABLE = "tool_unavailable"
    AMBIGUOUS_MATCH = "ambiguous_match"
    UPGRADE_AVAILABLE = "upgrade_available"
    VERSION_MISMATCH_UNRESOLVED = "version_mismatch_unresolved"
    UNWANTED_PRESENT = "unwanted_present"
    HOOK_FAILED = "hook_failed"
    UNKNOWN_ERROR = "unknown_error"


# Process exit status per outcome. 0 is the only success value.
EXIT_STATUS: dict[CanonicalOutcome, int] = {
    CanonicalOutcome.CONVERGED: 0,
    CanonicalOutcome.NOT_INSTALLED: 1,
    CanonicalOutcome.LIST_FAILED: 2,
    CanonicalOutcome.TOOL_UNAVAILABLE: 3,
    CanonicalOutcome.AMBIGUOUS_MATCH: 4,
    CanonicalOutcome.UPGRADE_AVAILABLE: 5,
    CanonicalOutcome.VERSION_MISMATCH_UNRESOLVED: 6,
    CanonicalOutcome.HOOK_FAILED: 7,
    CanonicalOutcome.UNWANTED_PRESENT: 8,
    CanonicalOutcome.UNKNOWN_ERROR: 99,
}


class ActionKind(StrEnum):
    """Remediation action kinds."""

    INSTALL_LATEST = "install_latest"
    INSTALL_PINNED = "install_pinned"
    UPGRADE = "upgrade"
    UNINSTALL = "uninstall"
    UNINSTALL_THEN_INSTALL_PINNED = "uninstall_then_install_pinned"


_INSTALL_KINDS = frozenset({
    ActionKind.INSTALL_LATEST,
    ActionKind.INSTALL_PINNED,
    ActionKind.UNINSTALL_THEN_INSTALL_PINNED,
})


class RemediationAction(BaseModel):
    """One remediation step chosen by the convergence plan."""

    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    version: str | None = None

    @classmethod
    def install_latest(cls) -> RemediationAction:
        return cls(kind=ActionKind.INSTALL_LATEST)

    @classmethod
    def install_pinned(cls, version: str) -> RemediationAction:
        return cls(kind=ActionKind.INSTALL_PINNED, version=version)

    @classmethod
    def upgrade(cls) -> RemediationAction:
        return cls(kind=ActionKind.UPGRADE)

    @classmethod
    def uninstall(cls) -> RemediationAction:
        return cls(kind=ActionKind.UNINSTALL)

    @classmethod
    def uninstall_then_install_pinned(cls, version: str) -> RemediationAction:
        return cls(kind=ActionKind.UNINSTALL_THEN_INSTALL_PINNED, version=version)

    @property
    def is_install_type(self) -> bool:
        """Install-type actions are the ones that may trigger a post-convergence hook."""
        return self.kind in _INSTALL_KINDS

    def __str__(self) -> str:
        if self.version:
            return f"{self.kind.value}({self.version})"
        return self.kind.value


class ActionRecord(BaseModel):
    """What happened when an action was executed."""

    action: RemediationAction
    exit_code: int | None = None
    code_name: str = ""
    category: ExitCategory = ExitCategory.UNKNOWN
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": str(self.action),
            "exit_code": self.exit_code,
            "code_name": self.code_name,
            "category": self.category.value,
            "message": self.message,
        }


class ReconcileResult(BaseModel):
    """Canonical outcome of one reconcile/check plus diagnostic detail."""

    identity: ArtifactIdentity
    desired: DesiredState
    outcome: CanonicalOutcome
    initial_state: ArtifactState | None = None
    final_state: ArtifactState | None = None
    actions: list[ActionRecord] = Field(default_factory=list)
    upgrade_available: bool | None = None

    # Raw detail for operators (never for automation).
    exit_code: int | None = None
    code_name: str = ""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == CanonicalOutcome.CONVERGED

    @property
    def exit_status(self) -> int:
        return EXIT_STATUS[self.outcome]

    @property
    def converged_by_install(self) -> bool:
        """Converged, and the last action taken was install-type."""
        return self.ok and bool(self.actions) and self.actions[-1].action.is_install_type

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_id": self.identity.artifact_id,
            "version": self.identity.version,
            "desired": self.desired.value,
            "outcome": self.outcome.value,
            "exit_status": self.exit_status,
            "initial_state": str(self.initial_state) if self.initial_state else None,
            "final_state": str(self.final_state) if self.final_state else None,
            "actions": [a.to_dict() for a in self.actions],
            "upgrade_available": self.upgrade_available,
            "detail": {
                "exit_code": self.exit_code,
                "code_name": self.code_name,
                "message": self.message,
            },
        }
