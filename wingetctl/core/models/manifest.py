"""
Manifest model — the declared intent for a host.

Loaded from wingetctl.yml. Describes how to acquire winget, the
compliance policy, and every managed artifact with its desired state.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from wingetctl.core.models.artifact import ArtifactIdentity, DesiredState, resolve_desired_state

_STRATEGY_NAMES = ("registration", "managed_repair", "manual_bootstrap")


class ToolSettings(BaseModel):
    """How to find, acquire and drive winget."""

    path: str | None = None
    scope: Literal["machine", "user"] = "machine"
    source: str | None = "winget"
    cache_dir: str | None = None
    strategies: list[str] = Field(default_factory=lambda: list(_STRATEGY_NAMES))
    source_init: bool = True

    @field_validator("strategies")
    @classmethod
    def _known_strategies(cls, value: list[str]) -> list[str]:
        unknown = [s for s in value if s not in _STRATEGY_NAMES]
        if unknown:
            raise ValueError(
                f"unknown strategies {unknown}; expected any of {list(_STRATEGY_NAMES)}"
            )
        return value


class PolicySettings(BaseModel):
    """Compliance policy knobs shared by every artifact."""

    check_upgrades: bool = True
    fail_on_upgrade_available: bool = False


class ArtifactSpec(BaseModel):
    """One managed artifact as declared in the manifest."""

    id: str
    ensure: str = "present"
    version: str | None = None
    hook: bool = True

    @field_validator("version", mode="before")
    @classmethod
    def _version_is_text(cls, value: object) -> object:
        # YAML reads 1.10 as the float 1.1, so the digits are already lost
        if value is not None and not isinstance(value, str):
            raise ValueError(f'version must be text; quote it in YAML (version: "{value}")')
        return value

    @model_validator(mode="after")
    def _check_ensure(self) -> ArtifactSpec:
        if not self.id.strip() or any(ch.isspace() for ch in self.id):
            raise ValueError(f"artifact id must be a single non-empty token: {self.id!r}")
        resolve_desired_state(self.ensure, self.version)
        return self

    @property
    def desired(self) -> DesiredState:
        return resolve_desired_state(self.ensure, self.version)

    @property
    def identity(self) -> ArtifactIdentity:
        return ArtifactIdentity(artifact_id=self.id, version=self.version)


class Manifest(BaseModel):
    """Root manifest — loaded from wingetctl.yml."""

    version: int = 1
    tool: ToolSettings = Field(default_factory=ToolSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)
    hooks_dir: str | None = None
    artifacts: list[ArtifactSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> Manifest:
        seen: set[str] = set()
        for spec in self.artifacts:
            key = spec.id.casefold()
            if key in seen:
                raise ValueError(f"artifact '{spec.id}' is declared more than once")
            seen.add(key)
        return self

    def get_artifact(self, artifact_id: str) -> ArtifactSpec | None:
        """Look up an artifact by id (case-insensitive)."""
        for spec in self.artifacts:
            if spec.id.casefold() == artifact_id.casefold():
                return spec
        return None
