#!/usr/bin/env python3
"""
OnOff Control CLI - Command Line Interface for the OnOff Engine.

Provides commands for dispatching event batches from files, simulating
single lifecycle events, inspecting the role-team map and resolved users,
and running the webhook API server.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..config import EngineConfig, load_config
from ..connectors import get_connector_class
from ..engine.role_mapper import RoleTeamMap, select_team
from ..errors import ConfigurationError, StructuralError
from ..models import BatchReport, EventTypeCode, LifecycleEvent, OutcomeStatus

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console()

STATUS_STYLES = {
    OutcomeStatus.APPLIED: "green",
    OutcomeStatus.IGNORED: "dim",
    OutcomeStatus.NO_HANDLE: "yellow",
    OutcomeStatus.NO_TEAM: "yellow",
    OutcomeStatus.SKIPPED_NO_USER: "yellow",
    OutcomeStatus.RESOLUTION_FAILED: "red",
    OutcomeStatus.MUTATION_FAILED: "red",
    OutcomeStatus.ERROR: "red",
}


class OnOffController:
    """Main controller for OnOff Engine operations."""

    def __init__(self, config_path: Optional[str] = None, mock_mode: Optional[bool] = None):
        """Initialize the controller from environment and optional YAML overrides."""
        self.config_path = Path(config_path) if config_path else None
        config = load_config(self.config_path)
        if mock_mode is not None:
            config = config.model_copy(update={"mock_mode": mock_mode})
        self.config: EngineConfig = config
        logging.getLogger("onoff_engine").setLevel(config.logging_level)

    def role_map(self) -> RoleTeamMap:
        return RoleTeamMap.from_config(self.config)

    def dispatcher(self):
        from ..workflows import build_dispatcher

        return build_dispatcher(self.config)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True), help='Path to YAML configuration overrides')
@click.option('--mock/--live', default=None, help='Use in-memory connectors or real APIs (default: ONOFF_MOCK_MODE)')
@click.pass_context
def cli(ctx, config, mock):
    """OnOff Engine Control CLI - OneLogin to GitHub team lifecycle sync"""
    ctx.ensure_object(dict)
    ctx.obj['controller'] = OnOffController(config, mock)


@cli.command()
@click.argument('batch_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def dispatch(ctx, batch_file):
    """Dispatch a batch of lifecycle events from a JSON file."""
    controller = ctx.obj['controller']

    try:
        dispatcher = controller.dispatcher()
        report = dispatcher.handle_batch(Path(batch_file).read_bytes())
    except (ConfigurationError, StructuralError) as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    display_batch_report(report)


@cli.command()
@click.option('--event-type-id', type=int, default=int(EventTypeCode.CREATED_USER),
              show_default=True, help='OneLogin event type id')
@click.option('--user-id', type=int, prompt='OneLogin user id')
@click.pass_context
def simulate(ctx, event_type_id, user_id):
    """Simulate a single lifecycle event."""
    controller = ctx.obj['controller']

    try:
        dispatcher = controller.dispatcher()
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    console.print(f"[blue]Simulating event {event_type_id} for user {user_id}[/blue]")
    report = dispatcher.dispatch([LifecycleEvent(event_type_id=event_type_id, user_id=user_id)])
    display_batch_report(report)


@cli.command()
@click.pass_context
def roles(ctx):
    """Show the role-team map."""
    controller = ctx.obj['controller']

    table = Table(title="Role-Team Map")
    table.add_column("Role", style="cyan")
    table.add_column("Role ID", style="green")
    table.add_column("Team ID", style="magenta")

    for role in controller.config.roles:
        team = str(role.team_id) if role.team_id is not None else "[yellow]not configured[/yellow]"
        table.add_row(role.name, str(role.role_id), team)

    console.print(table)


@cli.command()
@click.argument('user_id', type=int)
@click.pass_context
def resolve(ctx, user_id):
    """Resolve a OneLogin user and show the team it would map to."""
    controller = ctx.obj['controller']
    config = controller.config

    resolver_class = get_connector_class("onelogin", mock=config.mock_mode)
    resolver = resolver_class(config.onelogin)
    if config.mock_mode:
        resolver.seed(config.mock_users)
    else:
        missing = resolver.validate_config()
        if missing:
            console.print(f"[red]✗ {ConfigurationError.missing(missing)}[/red]")
            sys.exit(1)

    result = resolver.get_user(user_id)
    if not result.success:
        console.print(f"[red]✗ {result.message}[/red]")
        sys.exit(1)

    user = result.data
    entry = select_team(user.role_ids, controller.role_map())

    console.print(f"[bold blue]{user.display_name or '(no name)'}[/bold blue]")
    console.print(f"GitHub handle: {user.external_handle or '[yellow]none[/yellow]'}")
    console.print(f"Roles: {', '.join(str(r) for r in user.role_ids) or 'none'}")
    console.print(f"Team: {entry.label if entry else '[yellow]no mapped role[/yellow]'}")


@cli.command()
@click.option('--port', default=8000, help='Port to run the API server on')
@click.option('--host', default='127.0.0.1', help='Host to bind the API server to')
def serve(port, host):
    """Start the OnOff Engine API server."""
    from ..api.server import start_server

    console.print(f"[green]Starting OnOff Engine API server on {host}:{port}[/green]")
    console.print("[blue]Press Ctrl+C to stop[/blue]")

    try:
        start_server(host=host, port=port, reload=False)
    except KeyboardInterrupt:
        console.print("[yellow]Server stopped[/yellow]")


def display_batch_report(report: BatchReport):
    """Display per-event outcomes of a dispatched batch."""
    table = Table(title=f"Batch Results ({report.total} events)")
    table.add_column("#", style="cyan")
    table.add_column("Event Type", style="blue")
    table.add_column("User", style="green")
    table.add_column("Outcome")
    table.add_column("Action", style="magenta")
    table.add_column("Notified")

    for outcome in report.outcomes:
        style = STATUS_STYLES.get(outcome.status, "white")
        action = ""
        if outcome.action:
            action = f"{outcome.action.direction.value} {outcome.action.handle} → {outcome.action.team_label}"
        table.add_row(
            str(outcome.index),
            str(outcome.event_type_id),
            str(outcome.user_id),
            f"[{style}]{outcome.status.value}[/{style}]",
            action,
            "✓" if outcome.notified else "",
        )

    console.print(table)

    errors = [o for o in report.outcomes if o.error]
    if errors:
        console.print("[red]Errors:[/red]")
        for outcome in errors:
            console.print(f"  - event {outcome.index}: {outcome.error}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
