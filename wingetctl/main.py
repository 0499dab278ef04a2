"""
wingetctl — CLI entrypoint.

Usage:
    wingetctl --help
    wingetctl ensure-tool
    wingetctl reconcile 7zip.7zip --version 23.01
    wingetctl apply --json

The process exit status is derived from the canonical outcome:
0 means converged, every other outcome has its own reserved code.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from wingetctl import __version__
from wingetctl.core.observability.logging_config import setup_logging

# Exit status for an unusable manifest (outside the outcome table)
CONFIG_ERROR_STATUS = 64

_OUTCOME_STYLE = {
    "converged": ("✓", "green"),
    "upgrade_available": ("⬆", "yellow"),
    "not_installed": ("✗", "red"),
    "unwanted_present": ("✗", "red"),
    "hook_failed": ("⚠", "yellow"),
}


@click.group()
@click.version_option(version=__version__, prog_name="wingetctl")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to wingetctl.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """wingetctl — keep winget ready and packages converged."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("WGC_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("WGC_LOG_FILE"),
        log_file_level=os.environ.get("WGC_LOG_FILE_LEVEL"),
    )


# ── Helpers ─────────────────────────────────────────────────────


def _runner(ctx: click.Context):
    runner = ctx.obj.get("runner")
    if runner is None:
        from wingetctl.adapters.shell.command import SubprocessRunner

        runner = SubprocessRunner()
    return runner


def _locate(ctx: click.Context):
    locate = ctx.obj.get("locate")
    if locate is None:
        from wingetctl.core.services.winget.detection.locate import locate_winget

        locate = locate_winget
    return locate


def _load_manifest(ctx: click.Context, required: bool):
    """Load the manifest; without one, single-artifact commands use defaults."""
    from wingetctl.core.config.loader import ConfigError, default_manifest_path, load_manifest
    from wingetctl.core.models.manifest import Manifest

    path = ctx.obj.get("config_path") or default_manifest_path()
    if path is None and not required:
        return Manifest()

    try:
        return load_manifest(path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(CONFIG_ERROR_STATUS)


def _single_artifact(ctx: click.Context, artifact_id: str, version: str | None, absent: bool):
    """Manifest narrowed to one artifact, declared on the command line or in the file."""
    from pydantic import ValidationError

    from wingetctl.core.models.manifest import ArtifactSpec

    if version and absent:
        raise click.UsageError("--version and --absent are mutually exclusive")

    manifest = _load_manifest(ctx, required=False)
    declared = manifest.get_artifact(artifact_id)

    try:
        if declared is not None and not version and not absent:
            spec = declared
        elif absent:
            spec = ArtifactSpec(id=artifact_id, ensure="absent")
        else:
            spec = ArtifactSpec(id=artifact_id, version=version)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="ARTIFACT_ID") from None
    return manifest.model_copy(update={"artifacts": [spec]})


def _with_policy(manifest, fail_on_upgrade: bool):
    if not fail_on_upgrade:
        return manifest
    policy = manifest.policy.model_copy(update={"fail_on_upgrade_available": True})
    return manifest.model_copy(update={"policy": policy})


def _print_report(report, ctx: click.Context) -> None:
    quiet = ctx.obj.get("quiet", False)
    tool = report.tool

    if tool is not None and not quiet:
        if tool.ok:
            handle = tool.report.handle
            label = "ready" if tool.report.fast_path else "acquired"
            click.secho(f"\n🔧 winget {handle.version} {label}", fg="cyan", bold=True)
            click.echo(f"   {handle.path}")
        else:
            click.secho(f"\n❌ winget unavailable: {tool.error}", fg="red", bold=True)

    if report.artifacts:
        click.echo()
    for artifact in report.artifacts:
        result = artifact.result
        outcome = artifact.outcome.value
        icon, color = _OUTCOME_STYLE.get(outcome, ("✗", "red"))
        target = str(result.identity) if result.identity.version else result.identity.artifact_id
        click.secho(f"   {icon} {target} ", fg=color, nl=False)
        click.echo(f"{outcome}" + (f" ({result.final_state})" if result.final_state else ""))

        if ctx.obj.get("verbose"):
            for action in result.actions:
                click.echo(f"     │ {action.action} → {action.code_name}")
        if not artifact.result.ok or (artifact.hook and not artifact.hook.ok):
            detail = artifact.hook.message if artifact.hook and not artifact.hook.ok else result.message
            if detail:
                click.echo(f"     │ {detail.splitlines()[0]}")
        if result.upgrade_available and result.ok:
            click.echo("     │ upgrade available")

    click.echo()


def _finish(report, ctx: click.Context, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report, ctx)
    sys.exit(report.exit_status)


# ── Commands ────────────────────────────────────────────────────


@cli.command("ensure-tool")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def ensure_tool_cmd(ctx: click.Context, as_json: bool) -> None:
    """Make sure winget is installed and usable."""
    from wingetctl.core.observability.logging_config import new_run_logger
    from wingetctl.core.use_cases.apply import ensure_tool

    manifest = _load_manifest(ctx, required=False)
    result = ensure_tool(manifest.tool, _runner(ctx), new_run_logger(), locate=_locate(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_status)

    if result.ok:
        report = result.report
        click.secho(f"✅ winget {report.handle.version}", fg="green", bold=True)
        click.echo(f"   Path: {report.handle.path}")
        if not report.fast_path:
            for attempt in report.attempts:
                mark = "✓" if attempt["ready"] else "✗"
                click.echo(f"   {mark} {attempt['strategy']}")
        if report.sources is not None:
            refreshed = ", ".join(k for k, ok in report.sources.items() if ok) or "none"
            click.echo(f"   Sources refreshed: {refreshed}")
    else:
        click.secho(f"❌ {result.error}", fg="red", bold=True)
        for attempt in result.attempts:
            click.echo(f"   ✗ {attempt['strategy']}: {attempt['reason']}")

    sys.exit(result.exit_status)


@cli.command()
@click.argument("artifact_id")
@click.option("--version", "version", default=None, help="Pin to this exact version.")
@click.option("--absent", is_flag=True, help="Ensure the artifact is not installed.")
@click.option("--fail-on-upgrade", is_flag=True, help="Treat an available upgrade as non-compliant.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def reconcile(
    ctx: click.Context,
    artifact_id: str,
    version: str | None,
    absent: bool,
    fail_on_upgrade: bool,
    as_json: bool,
) -> None:
    """Converge one artifact to its desired state.

    Examples:

        wingetctl reconcile Mozilla.Firefox

        wingetctl reconcile 7zip.7zip --version 23.01

        wingetctl reconcile Old.Tool --absent
    """
    from wingetctl.core.use_cases.apply import apply_manifest

    manifest = _with_policy(_single_artifact(ctx, artifact_id, version, absent), fail_on_upgrade)
    report = apply_manifest(manifest, _runner(ctx), locate=_locate(ctx))
    _finish(report, ctx, as_json)


@cli.command()
@click.argument("artifact_id")
@click.option("--version", "version", default=None, help="Expect this exact version.")
@click.option("--absent", is_flag=True, help="Expect the artifact not to be installed.")
@click.option("--fail-on-upgrade", is_flag=True, help="Treat an available upgrade as non-compliant.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(
    ctx: click.Context,
    artifact_id: str,
    version: str | None,
    absent: bool,
    fail_on_upgrade: bool,
    as_json: bool,
) -> None:
    """Check one artifact's compliance without changing anything."""
    from wingetctl.core.use_cases.apply import apply_manifest

    manifest = _with_policy(_single_artifact(ctx, artifact_id, version, absent), fail_on_upgrade)
    report = apply_manifest(manifest, _runner(ctx), mode="check", locate=_locate(ctx))
    _finish(report, ctx, as_json)


@cli.command()
@click.argument("artifact_id")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def upgrade(ctx: click.Context, artifact_id: str, as_json: bool) -> None:
    """Upgrade an installed artifact to the latest available version."""
    from wingetctl.core.use_cases.apply import apply_manifest

    manifest = _single_artifact(ctx, artifact_id, None, False)
    report = apply_manifest(manifest, _runner(ctx), mode="upgrade", locate=_locate(ctx))
    _finish(report, ctx, as_json)


@cli.command()
@click.option("--check", "check_only", is_flag=True, help="Detect and report only; change nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def apply(ctx: click.Context, check_only: bool, as_json: bool) -> None:
    """Apply every artifact declared in wingetctl.yml."""
    from wingetctl.core.use_cases.apply import apply_manifest

    manifest = _load_manifest(ctx, required=True)
    report = apply_manifest(
        manifest,
        _runner(ctx),
        mode="check" if check_only else "reconcile",
        locate=_locate(ctx),
    )
    _finish(report, ctx, as_json)


@cli.command("explain-code")
@click.argument("code")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def explain_code(code: str, as_json: bool) -> None:
    """Explain a raw winget/installer exit code (decimal or 0x hex)."""
    from wingetctl.core.services.winget.data.exit_codes import normalize_exit_code
    from wingetctl.core.services.winget.domain.outcome_classifier import (
        classify_exit_code,
        describe_exit_code,
    )

    try:
        value = normalize_exit_code(int(code, 0))
    except ValueError:
        raise click.BadParameter(f"not an integer: {code}", param_hint="CODE") from None

    info = {
        "code": value,
        "hex": f"0x{value & 0xFFFFFFFF:08X}",
        "name": describe_exit_code(value),
        "category": classify_exit_code(value).value,
    }

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    click.secho(f"{info['hex']} ({info['code']})", bold=True)
    click.echo(f"   Name:     {info['name']}")
    click.echo(f"   Category: {info['category']}")


if __name__ == "__main__":
    cli()
