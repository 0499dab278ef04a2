"""
Mock command runner — scripted test double for process invocations.

Responses are matched by command prefix (after the executable), so a
rule for ``("list",)`` answers every ``winget list ...`` call. Rules
can be one-shot or sticky; unmatched commands get the default result.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from wingetctl.adapters.base import CommandRunner
from wingetctl.core.models.command import CommandResult

Responder = Callable[[list[str]], CommandResult]


class MockCommandRunner(CommandRunner):
    """Scripted command runner for tests.

    By default every command succeeds with empty output. Configure with
    ``respond()`` (sticky) or ``queue()`` (consumed in order).
    """

    def __init__(
        self,
        runner_name: str = "mock",
        default_exit_code: int | None = 0,
        default_output: str = "",
    ):
        self._name = runner_name
        self._default_exit_code = default_exit_code
        self._default_output = default_output
        self._sticky: list[tuple[tuple[str, ...], Responder]] = []
        self._queued: list[tuple[tuple[str, ...], Responder]] = []
        self._call_log: list[list[str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[list[str]]:
        """All commands this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls_matching(self, *prefix: str) -> list[list[str]]:
        """Commands whose arguments (after the executable) start with ``prefix``."""
        return [c for c in self._call_log if _matches(c, prefix)]

    def respond(
        self,
        prefix: Sequence[str],
        exit_code: int | None = 0,
        output: str = "",
        *,
        responder: Responder | None = None,
    ) -> None:
        """Answer every command matching ``prefix`` the same way."""
        self._sticky.append((tuple(prefix), responder or _fixed(exit_code, output)))

    def queue(
        self,
        prefix: Sequence[str],
        exit_code: int | None = 0,
        output: str = "",
    ) -> None:
        """Answer the next matching command once; queued rules win over sticky ones."""
        self._queued.append((tuple(prefix), _fixed(exit_code, output)))

    def run(self, command: list[str], *, timeout: float | None = None) -> CommandResult:
        self._call_log.append(list(command))

        for i, (prefix, responder) in enumerate(self._queued):
            if _matches(command, prefix):
                del self._queued[i]
                return responder(command)

        # Latest sticky rule wins
        for prefix, responder in reversed(self._sticky):
            if _matches(command, prefix):
                return responder(command)

        return _fixed(self._default_exit_code, self._default_output)(command)

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._sticky.clear()
        self._queued.clear()


def _matches(command: list[str], prefix: tuple[str, ...]) -> bool:
    args = command[1:]
    return tuple(args[: len(prefix)]) == prefix


def _fixed(exit_code: int | None, output: str) -> Responder:
    def _respond(command: list[str]) -> CommandResult:
        if exit_code is None:
            return CommandResult(command=command, error=output or "[mock] not started")
        return CommandResult(command=command, exit_code=exit_code, output=output)

    return _respond
