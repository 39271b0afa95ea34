# src/termsnap/cli.py
"""
termsnap Command Line Interface (CLI).

Operator console over the snapshot engine, built with `typer` and `rich`.
Every command reads a calendar JSON file and (where entities matter) an
entities JSON file, and works against the JSON snapshot store.

Global options default to the ``TERMSNAP_CALENDAR_FILE``,
``TERMSNAP_ENTITIES_FILE`` and ``TERMSNAP_STORE_DIR`` settings. ``--at``
pins the reference instant, which makes "as of" audits reproducible.

Usage
-----
    $ termsnap --calendar cal.json --at 2025-06-15 status
    $ termsnap --calendar cal.json --entities pupils.json coverage
    $ termsnap --calendar cal.json --entities pupils.json repair --force
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from termsnap.core.calendar.recess import container_gaps
from termsnap.core.calendar.resolver import period_message
from termsnap.core.clock import fixed_clock
from termsnap.core.contracts.reports import ItemError, MissingSnapshot
from termsnap.core.contracts.status import PeriodStatus
from termsnap.core.errors import TermsnapError
from termsnap.core.facade import SnapshotFacade
from termsnap.core.loaders import build_facade
from termsnap.core.settings import load_settings

load_dotenv()

app = typer.Typer(
    help="termsnap: keep per-period snapshots consistent with the school calendar.",
    rich_markup_mode="markdown",
)
console = Console()

_MAX_ROWS = 20


# --------------------------------------------------------------------------- #
# Helpers: Wiring & Rendering
# --------------------------------------------------------------------------- #


class _Options:
    """Global options shared by every command."""

    def __init__(
        self,
        calendar: Path | None,
        entities: Path | None,
        store_dir: Path | None,
        at: datetime | None,
    ) -> None:
        self.calendar = calendar
        self.entities = entities
        self.store_dir = store_dir
        self.at = at


def _facade(ctx: typer.Context) -> SnapshotFacade:
    opts: _Options = ctx.obj
    if opts.calendar is None:
        console.print(
            "[bold red]❌ No calendar file:[/bold red] pass --calendar or set TERMSNAP_CALENDAR_FILE"
        )
        raise typer.Exit(code=1)
    try:
        return build_facade(
            opts.calendar,
            opts.entities,
            opts.store_dir,
            clock=fixed_clock(opts.at) if opts.at is not None else None,
        )
    except (OSError, ValueError) as e:
        console.print(f"[bold red]❌ Could not load data:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _fail(label: str, exc: Exception) -> typer.Exit:
    console.print(f"\n[bold red]❌ {label}:[/bold red] {exc}")
    return typer.Exit(code=1)


def _render_status(status: PeriodStatus) -> None:
    table = Table(show_header=False, box=None)
    table.add_row("At", status.at.isoformat())
    table.add_row("Container", status.container.name if status.container else "-")
    table.add_row("Current", status.current.name if status.current else "-")
    table.add_row("Previous", status.previous.name if status.previous else "-")
    table.add_row("Next", status.next.name if status.next else "-")
    if status.recess is not None:
        table.add_row("Recess", f"{status.recess.name} ({status.recess.days} days)")
    if status.next is not None:
        table.add_row("Days until next", str(status.days_until_next))
    console.print(Panel(table, title=period_message(status), border_style="cyan"))


def _render_missing(missing: list[MissingSnapshot]) -> None:
    if not missing:
        return
    table = Table("Entity", "Period", "Container", title="Missing snapshots")
    for m in missing[:_MAX_ROWS]:
        table.add_row(m.entity_id, m.period_name or m.period_id, m.container_name)
    console.print(table)
    if len(missing) > _MAX_ROWS:
        console.print(f"[dim]... and {len(missing) - _MAX_ROWS} more[/dim]")


def _render_errors(errors: list[ItemError]) -> None:
    for e in errors[:_MAX_ROWS]:
        line = escape(f"{e.entity_id or '-'} / {e.period_id}: [{e.code}] {e.message}")
        console.print(f" [red]•[/red] {line}")
    if len(errors) > _MAX_ROWS:
        console.print(f"[dim]... and {len(errors) - _MAX_ROWS} more[/dim]")


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.callback()
def main(
    ctx: typer.Context,
    calendar: Annotated[
        Path | None,
        typer.Option("--calendar", "-c", help="Calendar JSON file."),
    ] = None,
    entities: Annotated[
        Path | None,
        typer.Option("--entities", "-e", help="Entities JSON file."),
    ] = None,
    store_dir: Annotated[
        Path | None,
        typer.Option("--store-dir", "-s", help="Snapshot store directory."),
    ] = None,
    at: Annotated[
        datetime | None,
        typer.Option("--at", help="Reference instant (UTC), e.g. 2025-06-15."),
    ] = None,
) -> None:
    """Resolve calendar positions and audit or repair period snapshots."""
    cfg = load_settings()
    ctx.obj = _Options(
        calendar=calendar or cfg.calendar_file,
        entities=entities or cfg.entities_file,
        store_dir=store_dir or cfg.store_dir,
        at=at,
    )


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the calendar position: current, previous and next period."""
    _render_status(_facade(ctx).period_status(ctx.obj.at))


@app.command()
def display(ctx: typer.Context) -> None:
    """Show which period a report screen should display, and why."""
    chosen = _facade(ctx).effective_period_for_display(at=ctx.obj.at)
    name = chosen.period.name if chosen.period else "none"
    console.print(f"[bold]{name}[/bold] [dim]({chosen.reason.value})[/dim]")


@app.command()
def recess(ctx: typer.Context) -> None:
    """List recess intervals for every year container."""
    facade = _facade(ctx)
    table = Table("Container", "Recess", "Start", "End", "Days", "Kind")
    for container in facade.calendar():
        for gap in container_gaps(container):
            table.add_row(
                container.name,
                gap.name,
                gap.start.date().isoformat(),
                gap.end.date().isoformat(),
                str(gap.days),
                gap.kind.value,
            )
    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    entity_id: Annotated[str, typer.Argument(help="Entity id.")],
    period_id: Annotated[str, typer.Argument(help="Period id.")],
) -> None:
    """
    Show the effective attributes of an entity in a period.

    For a concluded period without a snapshot, one is created on the spot.
    """
    try:
        result = _facade(ctx).effective_attributes(entity_id, period_id)
    except TermsnapError as e:
        raise _fail("Lookup Error", e) from e

    kind = "live" if result.is_virtual else "snapshot"
    if result.reconstructed:
        kind += ", reconstructed"
    table = Table("Attribute", "Value", title=f"{entity_id} in {period_id} ({kind})")
    for key, value in sorted(result.attributes.items()):
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def coverage(ctx: typer.Context) -> None:
    """Report expected vs persisted snapshots for concluded periods."""
    report = _facade(ctx).coverage()
    console.print(
        f"Expected [bold]{report.expected}[/bold], existing [bold]{report.existing}[/bold], "
        f"missing [bold]{report.missing_count}[/bold] ({report.coverage_percent}% covered)"
    )
    _render_missing(report.missing)


@app.command()
def validate(ctx: typer.Context) -> None:
    """Pass/fail completeness check; exits with code 1 when snapshots are missing."""
    report = _facade(ctx).validate()
    if report.passed:
        console.print(
            f"[bold green]✅ Complete[/bold green] {report.total_existing} snapshots "
            f"across {report.concluded_periods} concluded periods"
        )
        return
    console.print(
        f"[bold red]❌ Incomplete[/bold red] {report.missing_count} of "
        f"{report.total_expected} snapshots missing"
    )
    _render_missing(report.missing)
    raise typer.Exit(code=1)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Count snapshots by period phase."""
    result = _facade(ctx).stats()
    table = Table("Phase", "Snapshots")
    table.add_row("concluded", str(result.concluded_count))
    table.add_row("current", str(result.current_count))
    table.add_row("future", str(result.future_count))
    table.add_row("[bold]total[/bold]", f"[bold]{result.total}[/bold]")
    console.print(table)
    if not result.healthy:
        console.print("[yellow]Snapshots exist for non-concluded periods; run `cleanup`.[/yellow]")


@app.command()
def repair(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Accept best-effort reconstructed snapshots."),
    ] = False,
) -> None:
    """Create missing snapshots for concluded periods."""
    result = _facade(ctx).repair(force=force)
    if force:
        console.print(
            f"[bold green]✅ Created {result.snapshots_created}[/bold green] snapshots "
            f"over {result.terms_processed} periods "
            f"({result.errors_recovered} reconstructed)"
        )
    else:
        console.print(
            f"[bold green]✅ Created {result.created}[/bold green], skipped {result.skipped}"
        )
    if result.errors:
        console.print(f"[yellow]{len(result.errors)} items failed:[/yellow]")
        _render_errors(result.errors)
        raise typer.Exit(code=1)


@app.command()
def cleanup(ctx: typer.Context) -> None:
    """Delete snapshots persisted against current or future periods."""
    result = _facade(ctx).cleanup()
    console.print(f"Deleted [bold]{result.deleted}[/bold] invalid snapshots")
    if result.errors:
        _render_errors(result.errors)
        raise typer.Exit(code=1)


@app.command()
def maintain(ctx: typer.Context) -> None:
    """Run daily maintenance: snapshot periods that concluded recently."""
    report = _facade(ctx).run_daily_maintenance()
    style = "green" if report.success else "red"
    console.print(f"[bold {style}]{report.message}[/bold {style}]")
    if not report.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
