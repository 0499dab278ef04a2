"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from wingetctl.adapters.mock import MockCommandRunner
from wingetctl.core.models.tool import ToolHandle
from wingetctl.core.observability.logging_config import new_run_logger

from simulated_winget import SimulatedWinget

WINGET = "C:/Users/test/AppData/Local/Microsoft/WindowsApps/winget.exe"


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def log():
    """A run logger with a fixed id."""
    return new_run_logger("test0001")


@pytest.fixture
def mock_runner() -> MockCommandRunner:
    """Scripted runner; every command succeeds with empty output by default."""
    return MockCommandRunner()


@pytest.fixture
def winget() -> SimulatedWinget:
    """Stateful winget with a small catalog and nothing installed."""
    return SimulatedWinget(
        catalog={
            "Mozilla.Firefox": ["124.0", "125.0.1", "126.0"],
            "7zip.7zip": ["22.01", "23.01"],
            "Old.Tool": ["1.0"],
        },
    )


@pytest.fixture
def tool() -> ToolHandle:
    return ToolHandle(path=WINGET, version="1.8.1911")


@pytest.fixture
def locate():
    """Location lookup that always finds winget at the alias path."""
    return lambda explicit=None: explicit or WINGET
