"""
Domain models — pydantic types for the engine.

All models are re-exported here for convenient access:

    from wingetctl.core.models import ArtifactIdentity, ArtifactState, CanonicalOutcome
"""

from wingetctl.core.models.artifact import (
    ArtifactIdentity,
    ArtifactState,
    DesiredState,
    Presence,
    resolve_desired_state,
)
from wingetctl.core.models.command import CommandResult
from wingetctl.core.models.manifest import (
    ArtifactSpec,
    Manifest,
    PolicySettings,
    ToolSettings,
)
from wingetctl.core.models.outcome import (
    EXIT_STATUS,
    ActionKind,
    ActionRecord,
    CanonicalOutcome,
    ExitCategory,
    ReconcileResult,
    RemediationAction,
)
from wingetctl.core.models.tool import ProbeResult, ToolHandle

__all__ = [
    "EXIT_STATUS",
    "ActionKind",
    "ActionRecord",
    # artifact.py
    "ArtifactIdentity",
    # manifest.py
    "ArtifactSpec",
    "ArtifactState",
    "CanonicalOutcome",
    # command.py
    "CommandResult",
    "DesiredState",
    # outcome.py
    "ExitCategory",
    "Manifest",
    "PolicySettings",
    "Presence",
    # tool.py
    "ProbeResult",
    "ReconcileResult",
    "RemediationAction",
    "ToolHandle",
    "ToolSettings",
    "resolve_desired_state",
]
