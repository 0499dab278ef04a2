"""
Tests for the acquisition cascade and source initialization.
"""

import pytest

from wingetctl.core.models.manifest import ToolSettings
from wingetctl.core.observability.logging_config import new_run_logger
from wingetctl.core.services.winget.execution.strategies import AcquisitionStrategy
from wingetctl.core.services.winget.orchestration.cascade import (
    AcquisitionCascade,
    ToolUnavailableError,
    ensure_tool_ready,
)

WINGET = "C:/winget.exe"


class FakeStrategy(AcquisitionStrategy):
    """Strategy double that records its attempt and optionally installs winget."""

    def __init__(self, name: str, journal: list[str], *, installs=None, claims=True, raises=False):
        self.name = name
        self.log = new_run_logger("test0001").child(f"strategy.{name}")
        self.journal = journal
        self.installs = installs
        self.claims = claims
        self.raises = raises

    def _attempt(self) -> bool:
        self.journal.append(self.name)
        if self.raises:
            raise RuntimeError("strategy blew up")
        if self.installs is not None:
            self.installs()
        return self.claims


class Host:
    """Where winget lives on the fake host, if anywhere."""

    def __init__(self, mock_runner, installed: bool):
        self.runner = mock_runner
        self.installed = False
        if installed:
            self.install()
        else:
            mock_runner.respond(["--version"], None, "not found")

    def install(self):
        self.installed = True
        self.runner.respond(["--version"], 0, "v1.8.1911")

    def locate(self, explicit=None):
        return explicit or WINGET


def _cascade(host, log, strategies, **kwargs):
    return AcquisitionCascade(host.runner, log, strategies, locate=host.locate, **kwargs)


# ── Fast path / idempotence ──────────────────────────────────────────


class TestFastPath:
    def test_ready_tool_runs_no_strategy(self, mock_runner, log):
        host = Host(mock_runner, installed=True)
        journal: list[str] = []
        strategies = [FakeStrategy(n, journal) for n in ("a", "b", "c")]

        report = _cascade(host, log, strategies).run()

        assert report.fast_path
        assert report.handle.path == WINGET
        assert report.handle.version == "1.8.1911"
        assert journal == []

    def test_idempotent(self, mock_runner, log):
        host = Host(mock_runner, installed=True)
        journal: list[str] = []
        cascade = _cascade(host, log, [FakeStrategy("a", journal)])

        first = cascade.run()
        second = cascade.run()

        assert first.handle == second.handle
        assert journal == []


# ── Strategy ordering ────────────────────────────────────────────────


class TestOrdering:
    def test_stops_at_first_success(self, mock_runner, log):
        host = Host(mock_runner, installed=False)
        journal: list[str] = []
        strategies = [
            FakeStrategy("registration", journal, claims=False),
            FakeStrategy("managed_repair", journal, installs=host.install),
            FakeStrategy("manual_bootstrap", journal, installs=host.install),
        ]

        report = _cascade(host, log, strategies).run()

        assert journal == ["registration", "managed_repair"]
        assert not report.fast_path
        assert [a["strategy"] for a in report.attempts] == ["registration", "managed_repair"]
        assert report.attempts[1]["ready"] is True

    def test_probe_is_authoritative(self, mock_runner, log):
        host = Host(mock_runner, installed=False)
        journal: list[str] = []
        strategies = [
            FakeStrategy("liar", journal, claims=True),
            FakeStrategy("quiet", journal, claims=False, installs=host.install),
        ]

        report = _cascade(host, log, strategies).run()

        assert journal == ["liar", "quiet"]
        assert report.attempts[0] == {
            "strategy": "liar", "claimed": True, "ready": False, "reason": "not found",
        }
        assert report.attempts[1]["claimed"] is False
        assert report.attempts[1]["ready"] is True

    def test_failing_strategy_does_not_stop_cascade(self, mock_runner, log):
        host = Host(mock_runner, installed=False)
        journal: list[str] = []
        strategies = [
            FakeStrategy("broken", journal, raises=True),
            FakeStrategy("works", journal, installs=host.install),
        ]
        report = _cascade(host, log, strategies).run()
        assert journal == ["broken", "works"]
        assert report.handle.version == "1.8.1911"


# ── Exhaustion ───────────────────────────────────────────────────────


class TestExhaustion:
    def test_tool_unavailable(self, mock_runner, log):
        host = Host(mock_runner, installed=False)
        journal: list[str] = []
        strategies = [FakeStrategy(n, journal, claims=False) for n in ("a", "b", "c")]

        with pytest.raises(ToolUnavailableError) as exc_info:
            _cascade(host, log, strategies).run()

        assert journal == ["a", "b", "c"]
        assert len(exc_info.value.attempts) == 3

    def test_no_source_init_on_exhaustion(self, mock_runner, log):
        host = Host(mock_runner, installed=False)
        with pytest.raises(ToolUnavailableError):
            _cascade(host, log, [FakeStrategy("a", [])]).run()
        assert mock_runner.calls_matching("source") == []

    def test_no_strategies_enabled(self, mock_runner, log):
        host = Host(mock_runner, installed=False)
        with pytest.raises(ToolUnavailableError, match="none enabled"):
            _cascade(host, log, []).run()


# ── Source initialization ────────────────────────────────────────────


class TestSourceInit:
    def test_reset_then_update(self, mock_runner, log):
        host = Host(mock_runner, installed=True)
        report = _cascade(host, log, []).run()

        sources = mock_runner.calls_matching("source")
        assert [c[2] for c in sources] == ["reset", "update"]
        assert report.sources == {"reset": True, "update": True}

    def test_failures_are_not_fatal(self, mock_runner, log):
        host = Host(mock_runner, installed=True)
        mock_runner.respond(["source", "reset"], 0x80070005, "Access is denied.")
        mock_runner.respond(["source", "update"], None, "crashed")

        report = _cascade(host, log, []).run()

        assert report.handle.version == "1.8.1911"
        assert report.sources == {"reset": False, "update": False}

    def test_disabled(self, mock_runner, log):
        host = Host(mock_runner, installed=True)
        report = _cascade(host, log, [], source_init=False).run()
        assert report.sources is None
        assert mock_runner.calls_matching("source") == []


class TestEnsureToolReady:
    def test_returns_handle(self, mock_runner, log):
        Host(mock_runner, installed=True)
        handle = ensure_tool_ready(
            mock_runner, log, ToolSettings(path="D:/winget.exe"), locate=lambda p: p,
        )
        assert handle.path == "D:/winget.exe"
        assert mock_runner.call_log[0] == ["D:/winget.exe", "--version"]

    def test_from_settings_respects_strategy_selection(self, mock_runner, log, tmp_path):
        settings = ToolSettings(strategies=["manual_bootstrap", "registration"], cache_dir=str(tmp_path))
        cascade = AcquisitionCascade.from_settings(settings, mock_runner, log)
        assert [s.name for s in cascade.strategies] == ["registration", "manual_bootstrap"]
