"""
Tests for post-convergence hooks.
"""

from pathlib import Path

from wingetctl.core.services.winget.execution.hooks import HookRunner


def _hooks(tmp_path: Path, *names: str) -> Path:
    hooks_dir = tmp_path / "hooks"
    hooks_dir.mkdir()
    for name in names:
        (hooks_dir / name).write_text("exit 0\n")
    return hooks_dir


class TestHookRunner:
    def test_no_hooks_dir(self, mock_runner, log):
        result = HookRunner(None, mock_runner, log).run("Mozilla.Firefox")
        assert not result.ran
        assert result.ok
        assert mock_runner.call_count == 0

    def test_no_script_for_artifact(self, tmp_path, mock_runner, log):
        hooks_dir = _hooks(tmp_path, "Other.App.ps1")
        result = HookRunner(hooks_dir, mock_runner, log).run("Mozilla.Firefox")
        assert not result.ran
        assert mock_runner.call_count == 0

    def test_powershell_hook(self, tmp_path, mock_runner, log):
        hooks_dir = _hooks(tmp_path, "Mozilla.Firefox.ps1")

        result = HookRunner(hooks_dir, mock_runner, log).run("Mozilla.Firefox")

        assert result.ran and result.ok
        command = mock_runner.call_log[0]
        assert command[0] == "powershell.exe"
        assert command[-2:] == ["-File", str(hooks_dir / "Mozilla.Firefox.ps1")]

    def test_cmd_hook(self, tmp_path, mock_runner, log):
        hooks_dir = _hooks(tmp_path, "7zip.7zip.cmd")
        HookRunner(hooks_dir, mock_runner, log).run("7zip.7zip")
        assert mock_runner.call_log[0] == ["cmd.exe", "/c", str(hooks_dir / "7zip.7zip.cmd")]

    def test_ps1_preferred_over_cmd(self, tmp_path, mock_runner, log):
        hooks_dir = _hooks(tmp_path, "7zip.7zip.cmd", "7zip.7zip.ps1")
        result = HookRunner(hooks_dir, mock_runner, log).run("7zip.7zip")
        assert result.script.endswith(".ps1")

    def test_failure_reported(self, tmp_path, mock_runner, log):
        hooks_dir = _hooks(tmp_path, "Mozilla.Firefox.ps1")
        mock_runner.respond(["-NoProfile"], 2, "policy file missing")

        result = HookRunner(hooks_dir, mock_runner, log).run("Mozilla.Firefox")

        assert result.ran
        assert not result.ok
        assert result.exit_code == 2
        assert result.to_dict()["message"] == "policy file missing"
