"""
envdeploy — CLI entrypoint.

Usage:
    envdeploy --help
    envdeploy deploy -p Service -e DEV1 -s Portfolio -w main --dry-run
    envdeploy resolve -p Service -e DEV1 -s Portfolio -w main
    envdeploy envs list -p Service -s Portfolio -w main
    envdeploy config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
import yaml

from envdeploy import __version__
from envdeploy.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    level_from_flags,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="envdeploy")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to envdeploy.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """envdeploy — deploy per-environment config into a project workspace."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=level_from_flags(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


# ── Shared options ──────────────────────────────────────────────


def _locating_options(*, environment: bool = True):
    """Options that identify what to deploy (shared by several commands)."""

    def decorator(f):
        f = click.option(
            "--workspace-root-selector", "--workspace", "-w", "workspace",
            required=True, help="Workspace directory (relative to workspace_base).",
        )(f)
        f = click.option(
            "--service-instance", "-s", "instance",
            required=True, help="Service instance folder under the deploy directory.",
        )(f)
        if environment:
            f = click.option(
                "--environment", "-e", "environment",
                required=True, help="Environment name, e.g. DEV1.",
            )(f)
        f = click.option(
            "--project", "-p", "project",
            required=True, help="Project name or fragment.",
        )(f)
        return f

    return decorator


def _print_error(error: str | None, kind: str | None) -> None:
    label = f" [{kind}]" if kind else ""
    click.secho(f"❌{label} {error}", fg="red", err=True)


# ── deploy ──────────────────────────────────────────────────────


@cli.command()
@_locating_options()
@click.option("--dry-run", is_flag=True, help="Resolve and show changes; write nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--startup/--no-startup",
    "startup",
    default=None,
    help="Answer the startup-project question up front instead of prompting.",
)
@click.option("--no-backup", is_flag=True, help="Do not back up the target config.")
@click.pass_context
def deploy(
    ctx: click.Context,
    project: str,
    environment: str,
    instance: str,
    workspace: str,
    dry_run: bool,
    as_json: bool,
    startup: bool | None,
    no_backup: bool,
) -> None:
    """Deploy an environment config into a project.

    Examples:

        envdeploy deploy -p Service -e DEV1 -s Portfolio -w main

        envdeploy deploy -p Service -e PROD -s Portfolio -w main --dry-run
    """
    from envdeploy.core.services.startup import FixedPrompt
    from envdeploy.core.use_cases.deploy import run_deploy

    prompt = FixedPrompt(startup) if startup is not None else None
    if as_json and prompt is None:
        prompt = FixedPrompt(False)

    result = run_deploy(
        project,
        environment,
        instance,
        workspace,
        dry_run=dry_run,
        config_path=ctx.obj.get("config_path"),
        prompt=prompt,
        backup=False if no_backup else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        _print_error(result.error, result.error_kind)
        sys.exit(1)

    a = result.artifacts
    assert a is not None  # guaranteed when ok

    mode_label = "[dry-run] " if dry_run else ""
    click.secho(f"\n🚀 {mode_label}{a.project.name} → {environment}", fg="cyan", bold=True)
    click.echo(f"   Project:     {a.project.file_path}  ({a.project.matched_by})")
    click.echo(f"   Instance:    {a.instance.folder_path}")
    click.echo(f"   Environment: {a.environment_config.source_file_path}")
    click.echo(f"   Target:      {a.target.path}")
    click.echo(f"   Hostname:    {result.hostname}")
    click.echo()

    if dry_run:
        state = "would change" if result.config_changed else "already up to date"
        click.echo(f"   Config: {state}")
        if result.preview is not None:
            for line in result.preview.text.splitlines():
                click.echo(f"     │ {line}")
            if result.preview.truncated:
                click.echo(f"     │ … ({result.preview.total_chars} chars total)")
    elif result.config_written:
        click.secho("   ✓ Config written", fg="green")
        if result.backup_path:
            click.echo(f"     backup: {result.backup_path}")
    else:
        click.echo("   ⊘ Config already up to date")

    copy = result.copy_directive
    if copy is not None:
        if not copy.found:
            click.secho(f"   ⚠️  No copy directive for {a.target.path.name} in project", fg="yellow")
        elif copy.changed:
            verb = "would set" if dry_run else "set"
            click.secho(f"   ✓ Copy directive {verb} to Always (was {copy.previous or 'unset'})", fg="green")
        else:
            click.echo("   ⊘ Copy directive already Always")

    launch = result.debug_launch
    if launch is not None:
        if launch.changed:
            verb = "would update" if dry_run else "updated"
            click.secho(f"   ✓ Debug launch {verb}: {', '.join(launch.changed_fields)}", fg="green")
        else:
            click.echo("   ⊘ Debug launch already up to date")

    if result.startup is not None and result.startup.registered:
        click.secho(f"   ✓ {a.project.name} set as startup project", fg="green")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()


# ── resolve ─────────────────────────────────────────────────────


@cli.command()
@_locating_options()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(
    ctx: click.Context,
    project: str,
    environment: str,
    instance: str,
    workspace: str,
    as_json: bool,
) -> None:
    """Show which files a deploy would use, without changing anything."""
    from envdeploy.core.use_cases.resolve import run_resolve

    result = run_resolve(
        project, instance, environment, workspace,
        config_path=ctx.obj.get("config_path"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        _print_error(result.error, result.error_kind)
        sys.exit(1)

    for key, value in result.to_dict().items():
        if key in ("ok", "environments"):
            continue
        click.echo(f"   {key:<17} {value}")
    click.echo(f"   {'environments':<17} {', '.join(result.environments)}")


# ── config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Settings file commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate envdeploy.yml."""
    from envdeploy.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        source = result.config_path or "built-in defaults"
        click.secho("✅ Settings are valid", fg="green", bold=True)
        click.echo(f"   Source: {source}")
    else:
        click.secho("❌ Settings errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective settings as YAML."""
    from envdeploy.core.config.loader import ConfigError, load_settings

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        _print_error(str(e), "config")
        sys.exit(1)

    click.echo(yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False), nl=False)


# ── Register sub-command groups from envdeploy/ui/cli/ ──────────

from envdeploy.ui.cli.envs import envs  # noqa: E402

cli.add_command(envs)


if __name__ == "__main__":
    cli()
