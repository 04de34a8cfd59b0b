"""CLI entry point for trigger-dispatch.

Invoked as::

    trigger-dispatch [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m trigger_dispatch.cli.main

Commands
--------
version                    Show version information
plugins                    List constructors advertised through entry-points
registrations list         Show configured registrations in execution order
registrations check        Load and resolve the registrations of one entity kind
"""
from __future__ import annotations

import sys
from collections import defaultdict
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from trigger_dispatch.plugins import PluginConstructor, PluginRegistry

console = Console()


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="trigger-dispatch")
def cli() -> None:
    """Ordered plugin dispatch for entity lifecycle events"""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from trigger_dispatch import __version__

    console.print(f"[bold]trigger-dispatch[/bold] v{__version__}")


@cli.command(name="plugins")
def plugins_command() -> None:
    """List plugin constructors loaded from entry-points."""
    registry = _load_constructors()
    names = registry.list_plugins()

    console.print("[bold]Registered plugin constructors:[/bold]")
    if not names:
        console.print("  (No constructors registered. Install a plugin package to see entries here.)")
        return
    for name in names:
        cls = registry.get(name)
        console.print(f"  {name}  [dim]{cls.__module__}.{cls.__qualname__}[/dim]")


# ------------------------------------------------------------------
# registrations command group
# ------------------------------------------------------------------


@cli.group(name="registrations")
def registrations_group() -> None:
    """Inspect configured plugin registrations."""


@registrations_group.command(name="list")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", "-k", default=None, help="Only show this entity kind.")
def list_command(config_file: str, kind: str | None) -> None:
    """List the registrations in CONFIG_FILE in execution order.

    Order keys shared by more than one registration are flagged: plugins
    in such a group may run in any relative order.
    """
    from trigger_dispatch.dispatch.ordering import group_by_order_key
    from trigger_dispatch.errors import ConfigurationError
    from trigger_dispatch.registration import JsonFileConfigurationSource, parse_row

    source = JsonFileConfigurationSource(config_file)
    try:
        rows = source.all_rows()
    except ConfigurationError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    by_kind = defaultdict(list)
    problems: list[str] = []
    for position, row in enumerate(rows):
        row_kind = str(row.get("target_kind", ""))
        if kind is not None and row_kind != kind:
            continue
        try:
            registration = parse_row(row, row_kind)
        except ConfigurationError as exc:
            problems.append(f"row {position}: {exc}")
            continue
        by_kind[registration.target_kind].append(registration)

    if not by_kind and not problems:
        console.print("[yellow]No registrations found matching your criteria.[/yellow]")
        return

    for target_kind in sorted(by_kind):
        table = Table(title=f"Registrations: {target_kind}", show_header=True)
        table.add_column("Order", justify="right", style="cyan")
        table.add_column("Constructor")
        table.add_column("Extension point")
        table.add_column("Active", justify="center")
        table.add_column("Description")

        for order_key, group in group_by_order_key(by_kind[target_kind]):
            order_str = f"{order_key} [yellow](tie)[/yellow]" if len(group) > 1 else str(order_key)
            for registration in group:
                active_str = "[red]No[/red]" if registration.bypass_execution else "[green]Yes[/green]"
                table.add_row(
                    order_str,
                    registration.constructor_ref,
                    registration.extension_point,
                    active_str,
                    registration.description or "",
                )
        console.print(table)

    for problem in problems:
        console.print(f"  [red]INVALID[/red]  {problem}")
    if problems:
        sys.exit(1)


@registrations_group.command(name="check")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", "-k", required=True, help="Entity kind to check.")
def check_command(config_file: str, kind: str) -> None:
    """Load KIND from CONFIG_FILE the way a dispatch would and resolve every constructor.

    Constructors are looked up among the plugins installed through
    entry-points. Exits with status 1 on the first configuration error.
    """
    from trigger_dispatch.dispatch.ordering import ambiguous_groups, order
    from trigger_dispatch.errors import ConfigurationError
    from trigger_dispatch.registration import (
        EXTENSION_POINT,
        JsonFileConfigurationSource,
        RegistrationStore,
    )

    store = RegistrationStore(JsonFileConfigurationSource(config_file), _load_constructors())
    try:
        registrations = order(store.load_for(kind, EXTENSION_POINT))
    except ConfigurationError as exc:
        console.print(f"  [red]FAIL[/red]  {exc}")
        sys.exit(1)

    for registration in registrations:
        console.print(
            f"  [green]PASS[/green]  {registration.order_key:>6}  {registration.constructor_ref}"
        )
    for order_key, group in ambiguous_groups(registrations):
        refs = ", ".join(r.constructor_ref for r in group)
        console.print(
            f"  [yellow]WARN[/yellow]  order key {order_key} is shared by {refs}; "
            "their relative order is unspecified."
        )
    console.print(f"\n[green]{len(registrations)} registration(s) for {kind!r} resolve.[/green]")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _load_constructors() -> "PluginRegistry[PluginConstructor]":
    """Return a constructor registry populated from entry-points."""
    from trigger_dispatch.plugins import ENTRYPOINT_GROUP, PluginConstructor, PluginRegistry
    from trigger_dispatch.registration import EXTENSION_POINT

    registry = PluginRegistry(PluginConstructor, EXTENSION_POINT)
    registry.load_entrypoints(ENTRYPOINT_GROUP)
    return registry


if __name__ == "__main__":
    cli()
