"""
Tests for the adapter layer — command runners and the winget CLI surface.
"""

import subprocess
from types import SimpleNamespace

from wingetctl.adapters.mock import MockCommandRunner
from wingetctl.adapters.shell import command as command_mod
from wingetctl.adapters.shell.command import SubprocessRunner, clean_output
from wingetctl.adapters.winget import WingetCli
from wingetctl.core.models.command import CommandResult

WINGET = "winget.exe"


# ── MockCommandRunner ────────────────────────────────────────────────


class TestMockCommandRunner:
    def test_default_success(self):
        runner = MockCommandRunner()
        result = runner.run([WINGET, "list"])
        assert result.exit_code == 0
        assert result.started
        assert runner.call_log == [[WINGET, "list"]]

    def test_prefix_skips_executable(self):
        runner = MockCommandRunner()
        runner.respond(["list", "--id"], 7, "seven")
        assert runner.run([WINGET, "list", "--id", "X"]).exit_code == 7
        assert runner.run(["other.exe", "list", "--id", "X"]).exit_code == 7
        assert runner.run([WINGET, "list"]).exit_code == 0

    def test_latest_sticky_wins(self):
        runner = MockCommandRunner()
        runner.respond(["list"], 1)
        runner.respond(["list"], 2)
        assert runner.run([WINGET, "list"]).exit_code == 2
        assert runner.run([WINGET, "list"]).exit_code == 2

    def test_queue_is_one_shot_and_wins(self):
        runner = MockCommandRunner()
        runner.respond(["install"], 5)
        runner.queue(["install"], 1)
        runner.queue(["install"], 2)
        codes = [runner.run([WINGET, "install"]).exit_code for _ in range(3)]
        assert codes == [1, 2, 5]

    def test_not_started(self):
        runner = MockCommandRunner()
        runner.respond(["--version"], None, "Cannot execute winget.exe")
        result = runner.run([WINGET, "--version"])
        assert not result.started
        assert result.error == "Cannot execute winget.exe"

    def test_responder(self):
        runner = MockCommandRunner()
        runner.respond(
            ["list"],
            responder=lambda cmd: CommandResult(command=cmd, exit_code=0, output=cmd[-1]),
        )
        assert runner.run([WINGET, "list", "abc"]).output == "abc"

    def test_calls_matching_and_reset(self):
        runner = MockCommandRunner()
        runner.run([WINGET, "list", "--id", "A"])
        runner.run([WINGET, "install", "--id", "A"])
        assert len(runner.calls_matching("install")) == 1
        runner.reset()
        assert runner.call_count == 0


# ── SubprocessRunner ─────────────────────────────────────────────────


class TestSubprocessRunner:
    def test_success(self, monkeypatch):
        seen = {}

        def fake_run(command, **kwargs):
            seen.update(kwargs)
            return SimpleNamespace(returncode=0, stdout="\x1b[32mv1.8.1911\x1b[0m\n")

        monkeypatch.setattr(command_mod.subprocess, "run", fake_run)

        result = SubprocessRunner().run([WINGET, "--version"], timeout=30)

        assert result.exit_code == 0
        assert result.output == "v1.8.1911\n"
        assert seen["stderr"] is subprocess.STDOUT
        assert seen["stdin"] is subprocess.DEVNULL
        assert seen["timeout"] == 30

    def test_nonzero_exit_is_not_an_error(self, monkeypatch):
        monkeypatch.setattr(
            command_mod.subprocess,
            "run",
            lambda command, **kwargs: SimpleNamespace(returncode=-1978335212, stdout="No package"),
        )
        result = SubprocessRunner().run([WINGET, "list"])
        assert result.exit_code == -1978335212
        assert result.error is None

    def test_missing_executable(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise FileNotFoundError(2, "No such file")

        monkeypatch.setattr(command_mod.subprocess, "run", fake_run)

        result = SubprocessRunner().run([WINGET, "--version"])

        assert not result.started
        assert result.error.startswith("Cannot execute winget.exe")

    def test_timeout(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr(command_mod.subprocess, "run", fake_run)

        result = SubprocessRunner().run([WINGET, "install"], timeout=5)

        assert not result.started
        assert "timed out after 5s" in result.error

    def test_unusable_path(self):
        result = SubprocessRunner().run(["win\x00get.exe", "--version"])
        assert not result.started
        assert "Cannot execute" in result.error

    def test_rejected_arguments(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise ValueError("embedded null byte")

        monkeypatch.setattr(command_mod.subprocess, "run", fake_run)

        result = SubprocessRunner().run([WINGET, "list"])

        assert not result.started
        assert result.error.endswith("embedded null byte")


class TestCleanOutput:
    def test_spinner_redraws(self):
        raw = "  - \r  \\ \r  | \rFound Firefox [Mozilla.Firefox]\n"
        assert clean_output(raw) == "Found Firefox [Mozilla.Firefox]\n"

    def test_progress_bar(self):
        raw = "  ██████▒▒▒▒  50%\r  ████████████  100%\nSuccessfully installed"
        assert clean_output(raw) == "  ████████████  100%\nSuccessfully installed"

    def test_empty(self):
        assert clean_output("") == ""


# ── WingetCli ────────────────────────────────────────────────────────


class TestWingetCli:
    def _cli(self, source="winget"):
        runner = MockCommandRunner()
        return WingetCli(runner, WINGET, source=source), runner

    def test_list(self):
        cli, runner = self._cli()
        cli.list("Mozilla.Firefox")
        command = runner.call_log[0]
        assert command[:5] == [WINGET, "list", "--id", "Mozilla.Firefox", "--exact"]
        assert "--accept-source-agreements" in command

    def test_list_upgrades(self):
        cli, runner = self._cli()
        cli.list_upgrades("Mozilla.Firefox")
        assert "--upgrade-available" in runner.call_log[0]

    def test_install_pinned(self):
        cli, runner = self._cli()
        cli.install("7zip.7zip", "23.01", scope="user")
        command = runner.call_log[0]
        assert command[:5] == [WINGET, "install", "--id", "7zip.7zip", "--exact"]
        assert command[command.index("--version") + 1] == "23.01"
        assert command[command.index("--scope") + 1] == "user"
        assert command[command.index("--source") + 1] == "winget"
        assert "--silent" in command
        assert "--accept-package-agreements" in command

    def test_install_latest_without_scope_or_source(self):
        cli, runner = self._cli(source=None)
        cli.install("7zip.7zip", scope=None, silent=False)
        command = runner.call_log[0]
        for flag in ("--version", "--scope", "--source", "--silent"):
            assert flag not in command

    def test_upgrade(self):
        cli, runner = self._cli()
        cli.upgrade("Mozilla.Firefox")
        command = runner.call_log[0]
        assert command[1] == "upgrade"
        assert "--silent" in command
        assert "--version" not in command

    def test_uninstall_ignores_source(self):
        cli, runner = self._cli()
        cli.uninstall("Old.Tool")
        command = runner.call_log[0]
        assert command[1] == "uninstall"
        assert "--source" not in command

    def test_sources(self):
        cli, runner = self._cli()
        cli.source_reset()
        cli.source_update()
        assert runner.call_log[0][1:4] == ["source", "reset", "--force"]
        assert runner.call_log[1][1:3] == ["source", "update"]
