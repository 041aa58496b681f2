"""CLI entry point for astral-engine.

Invoked as::

    astral [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m astral_engine.cli.main

Every command reads an object/type snapshot from a YAML or JSON file
(``--snapshot``) and evaluates it at ``--now`` (ISO 8601, defaults to the
wall clock).

Commands
--------
search      Rank objects against a query
tags        List the tag inventory
query       Run a dashboard panel or an ad-hoc panel query
chart       Aggregate a chart panel into data points
panels      List the panels available in a snapshot
parse       Parse a quick-entry command
suggest     Show relation suggestions for a partial command
export      Re-serialize a snapshot as JSON or YAML
grammar     Print the command grammar
version     Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from astral_engine.model import AstralObject, DashboardPanel, Snapshot

console = Console()
err_console = Console(stderr=True)

F = TypeVar("F", bound=Callable[..., Any])


def _load_snapshot(path: str) -> "Snapshot":
    """Load a YAML or JSON snapshot, exiting on error."""
    from astral_engine.errors import SchemaError
    from astral_engine.model import SnapshotSerializer

    serializer = SnapshotSerializer()
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)

    try:
        if Path(path).suffix.lower() == ".json":
            return serializer.from_json(text)
        return serializer.from_yaml(text)
    except SchemaError as exc:
        err_console.print(f"[red]Schema error[/red] in {path}: {exc}")
        sys.exit(1)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        err_console.print(f"[red]Syntax error[/red] in {path}: {exc}")
        sys.exit(1)


def _parse_now(ctx: click.Context, param: click.Parameter, value: str | None) -> datetime | None:
    """Click callback: parse ``--now`` as a naive ISO 8601 date-time."""
    if value is None:
        return None
    from astral_engine.model.clock import to_naive

    try:
        return to_naive(datetime.fromisoformat(value))
    except ValueError:
        raise click.BadParameter(f"not an ISO 8601 date-time: {value!r}") from None


def snapshot_options(func: F) -> F:
    """Attach the shared ``--snapshot`` and ``--now`` options."""
    func = click.option(
        "--now",
        callback=_parse_now,
        default=None,
        help="Evaluation time (ISO 8601); defaults to the current time",
    )(func)
    func = click.option(
        "--snapshot",
        "-s",
        "snapshot_path",
        required=True,
        type=click.Path(exists=False),
        help="Snapshot file (.yaml, .yml or .json)",
    )(func)
    return func


def _find_panel(snapshot: "Snapshot", panel_id: str) -> "DashboardPanel":
    """Look a panel up in the snapshot, then among the built-ins."""
    from astral_engine.query import default_panel

    for panel in snapshot.panels:
        if panel.id == panel_id:
            return panel
    found = default_panel(panel_id)
    if found is None:
        err_console.print(f"[red]Error:[/red] Unknown panel: {panel_id}")
        sys.exit(1)
    return found


def _objects_table(title: str, objects: "list[AstralObject]", snapshot: "Snapshot") -> Table:
    from astral_engine.model import TypeCatalog

    catalog = TypeCatalog(snapshot.types)
    table = Table(title=title)
    table.add_column("Id", style="dim")
    table.add_column("Type")
    table.add_column("Title", style="bold")
    table.add_column("Updated")
    for obj in objects:
        object_type = catalog.display(obj.type)
        table.add_row(
            obj.id,
            f"{object_type.icon} {object_type.name}".strip(),
            obj.title,
            obj.updated_at.isoformat(timespec="minutes"),
        )
    return table


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="astral-engine")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log engine decisions to stderr")
def cli(verbose: bool) -> None:
    """Query, ranking and command interpretation for a personal knowledge base."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from astral_engine import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]astral-engine[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# search command
# ---------------------------------------------------------------------------


@cli.command(name="search")
@click.argument("query")
@snapshot_options
@click.option("--type", "-t", "type_filters", multiple=True, help="Restrict to a type id or name")
@click.option("--tag", "tag_filters", multiple=True, help="Require a tag")
@click.option("--blocks-only", is_flag=True, default=False, help="Only content-bearing objects")
@click.option("--limit", "-n", default=50, show_default=True, help="Maximum number of results")
@click.option("--group", is_flag=True, default=False, help="Group results by type")
def search_command(
    query: str,
    snapshot_path: str,
    now: datetime | None,
    type_filters: tuple[str, ...],
    tag_filters: tuple[str, ...],
    blocks_only: bool,
    limit: int,
    group: bool,
) -> None:
    """Rank objects against QUERY.

    QUERY may mix free text with /type, #tag and prop:value filters.
    """
    from astral_engine.model import TypeCatalog
    from astral_engine.ranking import SearchEngine, SearchOptions, group_results_by_type

    snapshot = _load_snapshot(snapshot_path)
    options = SearchOptions(
        query=query,
        type_filters=type_filters,
        tag_filters=tag_filters,
        show_blocks_only=blocks_only,
        limit=limit,
    )
    results = SearchEngine().search(snapshot.objects, snapshot.types, options)

    if not results:
        console.print(f"[yellow]No results[/yellow] for {query!r}")
        return

    catalog = TypeCatalog(snapshot.types)
    batches = group_results_by_type(results, snapshot.types) if group else {"": results}
    for type_id, batch in batches.items():
        title = catalog.display(type_id).name if group else f"Search: {query}"
        table = Table(title=title)
        table.add_column("Score", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Type")
        table.add_column("Matches")
        for result in batch:
            matches = ", ".join(f"{m.field.value}:{m.matched_text}" for m in result.matches)
            table.add_row(
                f"{result.score:g}",
                result.object.title,
                catalog.display(result.object.type).name,
                matches,
            )
        console.print(table)
    console.print(f"\n[bold]{len(results)}[/bold] result(s)")


# ---------------------------------------------------------------------------
# tags command
# ---------------------------------------------------------------------------


@cli.command(name="tags")
@snapshot_options
def tags_command(snapshot_path: str, now: datetime | None) -> None:
    """List every tag in the snapshot, most frequent first."""
    from astral_engine.ranking import get_all_tags

    snapshot = _load_snapshot(snapshot_path)
    tags = get_all_tags(snapshot.objects)
    if not tags:
        console.print("[yellow]No tags[/yellow]")
        return
    for tag in tags:
        console.print(f"#{tag}")


# ---------------------------------------------------------------------------
# query command
# ---------------------------------------------------------------------------


def _parse_filter(raw: str) -> Any:
    """Parse ``property:operator[:value]`` into a ``PropertyFilter``."""
    from astral_engine.model import FilterOperator, PropertyFilter

    parts = raw.split(":", 2)
    if len(parts) < 2:
        raise click.BadParameter(f"expected property:operator[:value], got {raw!r}")
    try:
        operator = FilterOperator(parts[1])
    except ValueError:
        choices = ", ".join(op.value for op in FilterOperator)
        raise click.BadParameter(f"unknown operator {parts[1]!r} (choose from {choices})") from None
    return PropertyFilter(parts[0], operator, parts[2] if len(parts) == 3 else None)


@cli.command(name="query")
@snapshot_options
@click.option("--panel", "-p", "panel_id", default=None, help="Panel id (snapshot or built-in)")
@click.option("--type", "-t", "types", multiple=True, help="Keep only this type id")
@click.option(
    "--special",
    type=click.Choice(["orphans", "inbox", "recently_modified", "favorites"]),
    default=None,
    help="Special filter",
)
@click.option("--filter", "-f", "filters", multiple=True, help="property:operator[:value]")
@click.option(
    "--date-field",
    default="createdAt",
    show_default=True,
    help="Date field bounded by --from / --to",
)
@click.option("--from", "date_from", default=None, help="Inclusive start date or @token")
@click.option("--to", "date_to", default=None, help="Inclusive end date or @token")
@click.option("--sort-by", default="updatedAt", show_default=True)
@click.option(
    "--direction",
    type=click.Choice(["asc", "desc"]),
    default="desc",
    show_default=True,
)
@click.option("--limit", "-n", default=None, type=int, help="Truncate the result")
def query_command(
    snapshot_path: str,
    now: datetime | None,
    panel_id: str | None,
    types: tuple[str, ...],
    special: str | None,
    filters: tuple[str, ...],
    date_field: str,
    date_from: str | None,
    date_to: str | None,
    sort_by: str,
    direction: str,
    limit: int | None,
) -> None:
    """Run a panel's query, or an ad-hoc query built from options."""
    from astral_engine.model import DateRangeFilter, PanelQuery, SortDirection, SpecialFilter
    from astral_engine.query import QueryEngine

    snapshot = _load_snapshot(snapshot_path)
    if panel_id is not None:
        panel = _find_panel(snapshot, panel_id)
        panel_query = panel.query
        title = panel.name
        if limit is None:
            limit = panel.max_items
    else:
        panel_query = PanelQuery(
            types=types,
            special_filter=SpecialFilter(special) if special else None,
            property_filters=tuple(_parse_filter(f) for f in filters),
            date_range=(
                DateRangeFilter(date_field, date_from, date_to)
                if date_from is not None or date_to is not None
                else None
            ),
            sort_by=sort_by,
            sort_direction=SortDirection(direction),
        )
        title = "Query"

    result = QueryEngine(now=now).execute(panel_query, snapshot.objects, snapshot.types)
    total = len(result)
    if limit is not None:
        result = result[: max(limit, 0)]
    console.print(_objects_table(title, result, snapshot))
    console.print(f"\n[bold]{total}[/bold] matching object(s)")


# ---------------------------------------------------------------------------
# chart command
# ---------------------------------------------------------------------------


@cli.command(name="chart")
@snapshot_options
@click.option("--panel", "-p", "panel_id", required=True, help="Chart panel id")
def chart_command(snapshot_path: str, now: datetime | None, panel_id: str) -> None:
    """Aggregate a chart panel into data points."""
    from astral_engine.model import TimelineDataPoint
    from astral_engine.query import generate_chart_data

    snapshot = _load_snapshot(snapshot_path)
    panel = _find_panel(snapshot, panel_id)
    if panel.chart_config is None:
        err_console.print(f"[red]Error:[/red] Panel {panel_id!r} has no chart configuration")
        sys.exit(1)

    points = generate_chart_data(panel, snapshot.objects, snapshot.types, now=now)
    table = Table(title=f"{panel.name} ({panel.chart_config.type.value})")
    if points and isinstance(points[0], TimelineDataPoint):
        table.add_column("Date")
        table.add_column("Count", justify="right")
        for point in points:
            table.add_row(point.date, str(point.count))
    else:
        table.add_column("Name")
        table.add_column("Value", justify="right")
        table.add_column("Color")
        for point in points:
            color = point.color or ""
            swatch = f"[{color}]■[/{color}] {color}" if color else ""
            table.add_row(point.name, f"{point.value:g}", swatch)
    console.print(table)


# ---------------------------------------------------------------------------
# panels command
# ---------------------------------------------------------------------------


@cli.command(name="panels")
@snapshot_options
def panels_command(snapshot_path: str, now: datetime | None) -> None:
    """List the snapshot's panels, or the built-in ones if it has none."""
    from astral_engine.query import DEFAULT_PANELS, QueryEngine

    snapshot = _load_snapshot(snapshot_path)
    panels = snapshot.panels or DEFAULT_PANELS
    engine = QueryEngine(now=now)

    table = Table(title="Panels")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Mode")
    table.add_column("Matches", justify="right")
    for panel in panels:
        count = len(engine.execute(panel.query, snapshot.objects, snapshot.types))
        table.add_row(panel.id, panel.name, panel.display_mode.value, str(count))
    console.print(table)


# ---------------------------------------------------------------------------
# parse command
# ---------------------------------------------------------------------------


@cli.command(name="parse")
@click.argument("text")
@snapshot_options
def parse_command(text: str, snapshot_path: str, now: datetime | None) -> None:
    """Parse a quick-entry command such as "@tarea/Comprar pan > fecha = @hoy"."""
    from astral_engine.command import CommandParser, format_properties_preview

    snapshot = _load_snapshot(snapshot_path)
    command = CommandParser(now=now).parse(text, snapshot.types, snapshot.objects)
    if command is None:
        console.print("[yellow]Not a command[/yellow]: the text would be searched as-is")
        sys.exit(1)

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Intent[/bold]", "update" if command.is_update else "create")
    table.add_row("[bold]Type[/bold]", command.type.name if command.type else "[dim](unresolved)[/dim]")
    table.add_row("[bold]Name[/bold]", command.name)
    if command.existing_object_id:
        table.add_row("[bold]Existing[/bold]", command.existing_object_id)
    if command.raw_properties:
        table.add_row(
            "[bold]Preview[/bold]",
            format_properties_preview(command.raw_properties, command.type),
        )
    for property_id, value in command.properties.items():
        table.add_row(f"  {property_id}", f"{value.display()} [dim]({type(value).__name__})[/dim]")
    console.print(table)

    for warning in command.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")


# ---------------------------------------------------------------------------
# suggest command
# ---------------------------------------------------------------------------


@cli.command(name="suggest")
@click.argument("text")
@snapshot_options
@click.option("--cursor", default=None, type=int, help="Caret offset (defaults to end of text)")
@click.option("--limit", "-n", default=8, show_default=True)
def suggest_command(
    text: str,
    snapshot_path: str,
    now: datetime | None,
    cursor: int | None,
    limit: int,
) -> None:
    """Show relation suggestions for the value being typed in TEXT."""
    from astral_engine.command import get_relation_suggestions

    snapshot = _load_snapshot(snapshot_path)
    context = get_relation_suggestions(
        text, snapshot.types, snapshot.objects, limit=limit, cursor=cursor
    )
    if context is None:
        console.print("[yellow]No relation value is being typed[/yellow]")
        return

    table = Table(title=f"{context.property_name} = {context.partial_value}…")
    table.add_column("Id", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Type")
    for suggestion in context.suggestions:
        table.add_row(suggestion.id, suggestion.title, suggestion.type_name or suggestion.type_id)
    console.print(table)
    console.print(f"[dim]insert at offset {context.insert_position}[/dim]")


# ---------------------------------------------------------------------------
# export command
# ---------------------------------------------------------------------------


@cli.command(name="export")
@snapshot_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def export_command(
    snapshot_path: str,
    now: datetime | None,
    output_format: str,
    output: str | None,
) -> None:
    """Re-serialize a snapshot as JSON or YAML."""
    from astral_engine.model import SnapshotSerializer

    snapshot = _load_snapshot(snapshot_path)
    serializer = SnapshotSerializer()
    if output_format.lower() == "json":
        text = serializer.to_json(snapshot)
        lang = "json"
    else:
        text = serializer.to_yaml(snapshot)
        lang = "yaml"

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Snapshot written to[/green] {output}")
    else:
        console.print(Syntax(text, lang, line_numbers=True))


# ---------------------------------------------------------------------------
# grammar command
# ---------------------------------------------------------------------------


@cli.command(name="grammar")
def grammar_command() -> None:
    """Print the quick-entry command grammar."""
    from astral_engine.command import COMMAND_GRAMMAR

    console.print(Syntax(COMMAND_GRAMMAR.strip(), "text"))


if __name__ == "__main__":
    cli()
