"""
Subprocess command runner — execute a command and capture its output.

This is the SINGLE PLACE where ``subprocess.run`` is called. Every
winget, PowerShell and hook invocation goes through here and comes
back as a ``CommandResult``.
"""

from __future__ import annotations

import logging
import re
import subprocess
import time

from wingetctl.adapters.base import CommandRunner
from wingetctl.core.models.command import CommandResult

logger = logging.getLogger(__name__)

# winget draws spinners and progress bars with CR and ANSI escapes
_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

_OUTPUT_LIMIT = 64_000


def clean_output(text: str) -> str:
    """Strip ANSI escapes and carriage-return redraws from tool output.

    For every line, only the text after the last ``\\r`` is kept, which
    is what a terminal would have displayed.
    """
    if not text:
        return ""
    text = _ANSI_RE.sub("", text)
    lines = []
    for line in text.split("\n"):
        if "\r" in line:
            parts = [p for p in line.split("\r") if p.strip()]
            line = parts[-1] if parts else ""
        lines.append(line.rstrip())
    return "\n".join(lines)


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run``; stdout and stderr merged."""

    @property
    def name(self) -> str:
        return "subprocess"

    def run(self, command: list[str], *, timeout: float | None = None) -> CommandResult:
        logger.debug("Executing: %s", command)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                command=command,
                error=f"Command timed out after {timeout}s",
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        except (OSError, ValueError) as e:
            # ValueError: arguments the OS cannot accept (e.g. an embedded NUL)
            return CommandResult(
                command=command,
                error=f"Cannot execute {command[0]}: {e}",
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = clean_output(result.stdout or "")
        if len(output) > _OUTPUT_LIMIT:
            output = output[-_OUTPUT_LIMIT:]

        logger.debug("Exit %s after %dms: %s", result.returncode, elapsed_ms, command[0])
        return CommandResult(
            command=command,
            exit_code=result.returncode,
            output=output,
            duration_ms=elapsed_ms,
        )
