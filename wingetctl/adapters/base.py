"""
Command runner base — the protocol contract between engine and processes.

The engine only talks to external programs (winget, powershell, hook
scripts) through this interface, never by calling ``subprocess``
directly. That keeps every exit code flowing through one structured
``CommandResult`` and lets tests swap in a scripted runner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from wingetctl.core.models.command import CommandResult


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners execute a command and return a ``CommandResult``.
    They NEVER raise for process-level failures: a command that could
    not be started comes back with ``exit_code=None`` and ``error`` set.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def run(self, command: list[str], *, timeout: float | None = None) -> CommandResult:
        """Run ``command`` to completion and capture its output.

        ``timeout`` is ``None`` by default: the engine itself imposes no
        bound on tool calls.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
