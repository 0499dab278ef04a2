"""
Adapters — the only code that touches external processes.
"""

from wingetctl.adapters.base import CommandRunner
from wingetctl.adapters.mock import MockCommandRunner
from wingetctl.adapters.shell.command import SubprocessRunner

__all__ = [
    "CommandRunner",
    "MockCommandRunner",
    "SubprocessRunner",
]
