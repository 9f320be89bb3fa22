# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/cli/app.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from rigger.commands import (
    COMMANDS,
    CommandContext,
    CreateCommand,
    DestroyCommand,
    PurgeCommand,
    RegisterCommand,
    RenderCommand,
    StepOutcome,
    ValidateCommand,
    list_environments,
    show_environment,
)
from rigger.config.settings import Settings
from rigger.errors import RiggerError
from rigger.logging.log import init_logging
from rigger.observers.console import ConsoleObserver
from rigger.observers.dispatcher import EventBus
from rigger.observers.logger import LoggerObserver
from rigger.persistence.store import EnvironmentStore

# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Rigger: provision, configure and run Torrust tracker environments")


@app.callback()
def main(
    ctx: typer.Context,
    working_dir: Optional[Path] = typer.Option(
        None,
        "--working-dir",
        envvar="RIGGER_WORKING_DIR",
        help="Directory holding data/ and build/ (default: current directory)",
    ),
    debug: bool = typer.Option(False, "--debug", help="Log DEBUG to the console"),
):
    settings = Settings(working_dir=working_dir) if working_dir else Settings()
    ctx.obj = {"settings": settings, "debug": debug}


def _command_context(ctx: typer.Context) -> CommandContext:
    settings: Settings = ctx.obj["settings"]
    logger, run_id, log_path = init_logging(base_dir=settings.log_dir, verbose=ctx.obj["debug"])
    typer.echo(f"  Run ID   : {run_id}")
    typer.echo(f"  Logs     : {log_path}")

    bus = EventBus(observers=[LoggerObserver(logger), ConsoleObserver()])
    return CommandContext.default(settings, bus=bus, run_id=run_id)


def _state_note(outcome: StepOutcome) -> str:
    if not outcome.state_preserved:
        return f"{outcome.operation} failed; local state may be incomplete"
    if outcome.operation == "destroy":
        return "destroy failed; local state preserved for manual cleanup"
    return f"{outcome.operation} failed; local state preserved"


def _report(outcome: StepOutcome) -> None:
    if outcome.ok:
        typer.echo(outcome.message)
        return
    typer.echo(f"error[{outcome.kind}]: {outcome.message}", err=True)
    if outcome.failed_step:
        typer.echo(f"  failed step: {outcome.failed_step}", err=True)
    typer.echo(_state_note(outcome), err=True)
    raise typer.Exit(code=1)


def _run_lifecycle(ctx: typer.Context, operation: str, env: str) -> None:
    command = COMMANDS[operation](_command_context(ctx))
    _report(command.execute(env))


# ------------------------------------------------------------------------------
# Lifecycle commands
# ------------------------------------------------------------------------------

@app.command()
def create(
    ctx: typer.Context,
    config: Path = typer.Argument(..., help="Environment definition YAML"),
):
    """Create a new environment from a config file."""
    _report(CreateCommand(_command_context(ctx)).execute(config))


@app.command()
def validate(
    ctx: typer.Context,
    config: Path = typer.Argument(..., help="Environment definition YAML"),
):
    """Check a config file without creating anything."""
    outcome = ValidateCommand(_command_context(ctx)).execute(config)
    _report(outcome)
    p = outcome.payload
    typer.echo(f"  provider : {p['provider']}")
    typer.echo(f"  services : {', '.join(p['services']) or '-'}")
    typer.echo(f"  networks : {', '.join(p['networks']) or '-'}")
    typer.echo(f"  https    : {'yes' if p['https'] else 'no'}")


@app.command()
def render(
    ctx: typer.Context,
    env: Optional[str] = typer.Argument(None, help="Environment still in phase created"),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Render straight from a config file instead"
    ),
    ip: str = typer.Option(..., "--ip", help="Instance address to render into the artifacts"),
):
    """Write all deployment artifacts into build/<env> without provisioning."""
    if (env is None) == (config is None):
        raise typer.BadParameter("give either an environment name or --config")
    command = RenderCommand(_command_context(ctx), ip)
    _report(command.execute(env) if env else command.execute_config(config))


@app.command()
def provision(ctx: typer.Context, env: str = typer.Argument(...)):
    """Create the instance with OpenTofu and wait for SSH."""
    _run_lifecycle(ctx, "provision", env)


@app.command()
def register(
    ctx: typer.Context,
    env: str = typer.Argument(...),
    ip: str = typer.Option(..., "--ip", help="Address of the existing instance"),
):
    """Adopt an existing instance instead of provisioning one."""
    _report(RegisterCommand(_command_context(ctx), ip).execute(env))


@app.command()
def configure(ctx: typer.Context, env: str = typer.Argument(...)):
    """Install docker, docker compose and the firewall with Ansible."""
    _run_lifecycle(ctx, "configure", env)


@app.command()
def release(ctx: typer.Context, env: str = typer.Argument(...)):
    """Render the compose project and upload it to the instance."""
    _run_lifecycle(ctx, "release", env)


@app.command()
def run(ctx: typer.Context, env: str = typer.Argument(...)):
    """Start the services and check the tracker is healthy."""
    _run_lifecycle(ctx, "run", env)


@app.command()
def destroy(
    ctx: typer.Context,
    env: str = typer.Argument(...),
    force: bool = typer.Option(False, "--force", help="Do not ask for confirmation"),
):
    """Tear down the instance. Safe to repeat."""
    if not force:
        typer.confirm(f"Destroy environment '{env}' and its instance?", abort=True)
    _report(DestroyCommand(_command_context(ctx)).execute(env))


@app.command()
def purge(
    ctx: typer.Context,
    env: str = typer.Argument(...),
    force: bool = typer.Option(
        False, "--force", help="Do not ask, and purge even if not destroyed"
    ),
):
    """Delete all local data and build artifacts of an environment."""
    if not force:
        typer.confirm(f"Remove all local data of environment '{env}'?", abort=True)
    _report(PurgeCommand(_command_context(ctx), force=force).execute(env))


# ------------------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------------------

@app.command("list")
def list_cmd(ctx: typer.Context):
    """List known environments and their phase."""
    rows = list_environments(EnvironmentStore(ctx.obj["settings"]))
    if not rows:
        typer.echo("no environments")
        return
    for row in rows:
        line = f"{row['name']:<24} {row['phase']:<12} {row['address'] or '-'}"
        if row["error"]:
            line += f"  ({row['error']})"
        typer.echo(line)


@app.command()
def show(ctx: typer.Context, env: str = typer.Argument(...)):
    """Print the persisted state of one environment as JSON."""
    try:
        info = show_environment(EnvironmentStore(ctx.obj["settings"]), env)
    except RiggerError as exc:
        typer.echo(f"error[{exc.kind}]: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(info, indent=2))


if __name__ == "__main__":
    app()
