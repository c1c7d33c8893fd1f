"""
CLI commands for browsing environment configs of a service instance.

Thin wrappers over ``envdeploy.core.use_cases``.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def envs() -> None:
    """Environment configs — list and preview."""


@envs.command("list")
@click.option("--project", "-p", required=True, help="Project name or fragment.")
@click.option("--service-instance", "-s", "instance", required=True, help="Service instance folder.")
@click.option("--workspace-root-selector", "--workspace", "-w", "workspace", required=True,
              help="Workspace directory (relative to workspace_base).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, project: str, instance: str, workspace: str, as_json: bool) -> None:
    """List the environments an instance can be deployed as."""
    from envdeploy.core.use_cases.resolve import run_list_environments

    listing = run_list_environments(
        project, instance, workspace, config_path=ctx.obj.get("config_path")
    )

    if as_json:
        click.echo(json.dumps(listing.to_dict(), indent=2))
        sys.exit(1 if listing.error else 0)

    if listing.error:
        click.secho(f"❌ [{listing.error_kind}] {listing.error}", fg="red", err=True)
        sys.exit(1)

    click.secho(f"📂 {listing.instance_dir}", fg="cyan", bold=True)
    if not listing.environments:
        click.echo("   (no environment configs)")
    for name in listing.environments:
        click.echo(f"   • {name}")


@envs.command("show")
@click.option("--project", "-p", required=True, help="Project name or fragment.")
@click.option("--environment", "-e", required=True, help="Environment name, e.g. DEV1.")
@click.option("--service-instance", "-s", "instance", required=True, help="Service instance folder.")
@click.option("--workspace-root-selector", "--workspace", "-w", "workspace", required=True,
              help="Workspace directory (relative to workspace_base).")
@click.option("--chars", type=int, default=None, help="Preview length (default: preview_chars).")
@click.pass_context
def show_cmd(
    ctx: click.Context,
    project: str,
    environment: str,
    instance: str,
    workspace: str,
    chars: int | None,
) -> None:
    """Print an environment config as it would be deployed."""
    from envdeploy.core.use_cases.resolve import run_preview_environment

    result = run_preview_environment(
        project,
        instance,
        environment,
        workspace,
        config_path=ctx.obj.get("config_path"),
        chars=chars if chars is not None and chars > 0 else None,
    )
    if result.error:
        click.secho(f"❌ [{result.error_kind}] {result.error}", fg="red", err=True)
        sys.exit(1)

    assert result.preview is not None  # set whenever there is no error
    click.echo(result.preview.text)
    if result.preview.truncated:
        click.secho(f"… ({result.preview.total_chars} chars total)", fg="yellow", err=True)
