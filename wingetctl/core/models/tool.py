"""
Tool models — readiness probe result and the validated tool handle.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ProbeResult(BaseModel):
    """Result of a readiness probe: ``Ready(version)`` or ``NotReady(reason)``."""

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    ready: bool = False
    version: str | None = None
    reason: str = ""

    @classmethod
    def ok(cls, path: str, version: str) -> ProbeResult:
        return cls(path=path, ready=True, version=version)

    @classmethod
    def not_ready(cls, path: str | None, reason: str) -> ProbeResult:
        return cls(path=path, ready=False, reason=reason)


class ToolHandle(BaseModel):
    """A located, validated winget executable.

    Created once the readiness probe confirms the tool runs, then lent
    read-only to every downstream component for the rest of the run.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    version: str

    @classmethod
    def from_probe(cls, probe: ProbeResult) -> ToolHandle:
        if not probe.ready or not probe.path or not probe.version:
            raise ValueError(f"Probe is not ready: {probe.reason or 'unknown reason'}")
        return cls(path=probe.path, version=probe.version)

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "version": self.version}
