"""
CommandResult — the structured result of one tool invocation.

Every external process call made by the engine goes through a single
command adapter that returns one of these. Callers never look at
``exit_code`` directly: interpretation belongs to the outcome
classifier.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class CommandResult(BaseModel):
    """Outcome of a single subprocess invocation.

    ``exit_code`` is ``None`` when the process could not be started at
    all (missing executable, permission error). ``error`` then carries
    the reason. The adapter NEVER raises for these conditions.
    """

    model_config = ConfigDict(frozen=True)

    command: list[str] = Field(default_factory=list)
    exit_code: int | None = None
    output: str = ""
    error: str | None = None

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    @property
    def started(self) -> bool:
        """Whether the process actually ran."""
        return self.exit_code is not None

    def summary(self, limit: int = 300) -> str:
        """Short diagnostic text for logs and reports."""
        text = self.error or self.output.strip()
        if len(text) > limit:
            return text[:limit] + "…"
        return text
