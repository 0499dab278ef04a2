"""
Artifact models — what we manage, what we want, what we observed.

``ArtifactIdentity`` + ``DesiredState`` is the caller's intent.
``ArtifactState`` is what the state detector saw on the last query.
States are never cached: every remediation step re-detects.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class DesiredState(StrEnum):
    """Target condition for a managed artifact."""

    ABSENT = "absent"
    PRESENT = "present"     # any version
    PINNED = "pinned"       # exactly ArtifactIdentity.version


class Presence(StrEnum):
    """Observed presence of a managed artifact."""

    ABSENT = "absent"
    PRESENT_VERSION = "present_version"
    PRESENT_UNKNOWN_VERSION = "present_unknown_version"


class ArtifactIdentity(BaseModel):
    """A managed artifact id (opaque winget package id) and optional version."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    version: str | None = None

    @model_validator(mode="after")
    def _check_id(self) -> ArtifactIdentity:
        if not self.artifact_id.strip():
            raise ValueError("artifact_id must not be empty")
        if any(ch.isspace() for ch in self.artifact_id):
            raise ValueError(f"artifact_id must be a single token: {self.artifact_id!r}")
        return self

    def __str__(self) -> str:
        if self.version:
            return f"{self.artifact_id}@{self.version}"
        return self.artifact_id


class ArtifactState(BaseModel):
    """Observed installed state: Absent, PresentVersion(v), PresentUnknownVersion."""

    model_config = ConfigDict(frozen=True)

    presence: Presence
    version: str | None = None

    @classmethod
    def absent(cls) -> ArtifactState:
        return cls(presence=Presence.ABSENT)

    @classmethod
    def present(cls, version: str) -> ArtifactState:
        return cls(presence=Presence.PRESENT_VERSION, version=version)

    @classmethod
    def unknown_version(cls) -> ArtifactState:
        return cls(presence=Presence.PRESENT_UNKNOWN_VERSION)

    @property
    def is_present(self) -> bool:
        return self.presence != Presence.ABSENT

    def has_version(self, version: str) -> bool:
        """Whether the artifact is present at exactly ``version``."""
        return self.presence == Presence.PRESENT_VERSION and self.version == version

    def __str__(self) -> str:
        if self.presence == Presence.PRESENT_VERSION:
            return f"present ({self.version})"
        if self.presence == Presence.PRESENT_UNKNOWN_VERSION:
            return "present (unknown version)"
        return "absent"


def resolve_desired_state(ensure: str, version: str | None) -> DesiredState:
    """Turn a manifest/CLI ``ensure`` + ``version`` pair into a DesiredState.

    ``present`` with a version is treated as ``pinned``. ``pinned``
    without a version and ``absent`` with a version are rejected.
    """
    try:
        desired = DesiredState(ensure.lower())
    except ValueError:
        allowed = ", ".join(d.value for d in DesiredState)
        raise ValueError(f"Unknown ensure value {ensure!r} (expected one of: {allowed})") from None

    if desired == DesiredState.PRESENT and version:
        return DesiredState.PINNED
    if desired == DesiredState.PINNED and not version:
        raise ValueError("ensure: pinned requires a version")
    if desired == DesiredState.ABSENT and version:
        raise ValueError("ensure: absent does not take a version")
    return desired
