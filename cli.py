#!/usr/bin/env python3
"""
Growthlog CLI

Command-line interface for keeping children's growth records.
"""

import functools
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from growthlog import __version__
from growthlog.auth.identity import RequestContext
from growthlog.bootstrap import build_facade, configure_logging, ensure_token_secret
from growthlog.config import Settings
from growthlog.errors import Forbidden, NotFound, StorageUnavailable, ValidationError
from growthlog.facade import SyncFacade

console = Console()

EXIT_CODES = {
    ValidationError: 1,
    NotFound: 2,
    Forbidden: 2,
    StorageUnavailable: 3,
}


class Session:
    """Facade plus the guardian context persisted in the token file."""

    def __init__(self, facade: SyncFacade, token_file: Path):
        self.facade = facade
        self.token_file = token_file
        token = token_file.read_text().strip() if token_file.exists() else None
        self.context = RequestContext(token=token or None)

    def save_token(self) -> None:
        """Persist a token issued on first use."""
        if self.context.issued_token:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            self.token_file.write_text(self.context.issued_token)
            self.token_file.chmod(0o600)


def handle_errors(fn):
    """Print domain errors and exit with a code per error family."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        session: Session = click.get_current_context().obj
        try:
            return fn(*args, **kwargs)
        except tuple(EXIT_CODES) as e:
            console.print(f"[red]✗ {e}[/red]")
            code = next(c for t, c in EXIT_CODES.items() if isinstance(e, t))
            sys.exit(code)
        finally:
            session.save_token()
    return wrapper


def _fmt(value, suffix: str = "") -> str:
    if value is None:
        return "—"
    if isinstance(value, float):
        return f"{value:g}{suffix}"
    return f"{value}{suffix}"


def _patch(**options) -> dict:
    """Options the user actually passed. An empty string clears a field."""
    patch = {}
    for key, value in options.items():
        if value is None:
            continue
        patch[key] = None if value == "" else value
    return patch


def measurement_table(measurements: list[dict], title: str = "Measurements") -> Table:
    table = Table(title=title)
    table.add_column("Date")
    table.add_column("Height", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Head", justify="right")
    table.add_column("BMI", justify="right")
    table.add_column("Note")
    table.add_column("ID", style="dim")

    for m in measurements:
        table.add_row(
            m["date"],
            _fmt(m.get("height_cm"), " cm"),
            _fmt(m.get("weight_kg"), " kg"),
            _fmt(m.get("head_circumference_cm"), " cm"),
            _fmt(m.get("bmi")),
            m.get("note") or "",
            m["id"],
        )
    return table


@click.group()
@click.version_option(version=__version__, prog_name="growthlog")
@click.option("--data-dir", type=click.Path(file_okay=False), envvar="GROWTHLOG_DATA_DIR",
              help="Directory holding the growth records and token")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[str]):
    """
    Growthlog - Child Growth Records

    Track height, weight and head circumference over time, with BMI and
    age worked out for you.
    """
    settings = Settings.from_env()
    if data_dir:
        settings.data_dir = Path(data_dir).expanduser()
    configure_logging(settings)

    try:
        ensure_token_secret(settings)
        facade = build_facade(settings)
    except StorageUnavailable as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(EXIT_CODES[StorageUnavailable])
    except ValueError as e:
        raise click.ClickException(str(e))

    ctx.obj = Session(facade, settings.token_file)


# =============================================================================
# CHILDREN
# =============================================================================

@cli.group()
def children():
    """Manage children."""


@children.command("list")
@click.pass_obj
@handle_errors
def list_children(session: Session):
    """List children with their latest measurement."""
    rows = session.facade.list_children(session.context)
    if not rows:
        console.print("[dim]No children yet. Add one with: growthlog children add NAME[/dim]")
        return

    table = Table(title="Children")
    table.add_column("Name", style="bold")
    table.add_column("Age", justify="right")
    table.add_column("Birth date")
    table.add_column("Latest")
    table.add_column("BMI", justify="right")
    table.add_column("ID", style="dim")

    for child in rows:
        latest = child["measurements"][0] if child["measurements"] else None
        summary = ""
        if latest:
            summary = f"{latest['date']}  {_fmt(latest.get('height_cm'), ' cm')} / {_fmt(latest.get('weight_kg'), ' kg')}"
        table.add_row(
            child["name"],
            _fmt(child.get("age_years")),
            child.get("birth_date") or "—",
            summary,
            _fmt(latest.get("bmi")) if latest else "—",
            child["id"],
        )
    console.print(table)


@children.command("show")
@click.argument("child_id")
@click.pass_obj
@handle_errors
def show_child(session: Session, child_id: str):
    """Show a child and every measurement."""
    child = session.facade.get_child(session.context, child_id)

    console.print(Panel(
        f"[bold]{child['name']}[/bold]\n"
        f"ID: {child['id']}\n"
        f"DOB: {child.get('birth_date') or '—'}\n"
        f"Age: {_fmt(child.get('age_years'), ' years')}\n"
        f"Gender: {child.get('gender') or '—'}",
        title="Child",
        border_style="blue",
    ))

    if child["measurements"]:
        console.print(measurement_table(child["measurements"]))
    else:
        console.print("[dim]No measurements yet[/dim]")


@children.command("add")
@click.argument("name")
@click.option("--birth-date", "-b", help="Birth date (YYYY-MM-DD)")
@click.option("--gender", "-g", help="Gender or sex")
@click.pass_obj
@handle_errors
def add_child(session: Session, name: str, birth_date: Optional[str], gender: Optional[str]):
    """Add a child."""
    fields = {"name": name}
    if birth_date:
        fields["birth_date"] = birth_date
    if gender:
        fields["gender"] = gender

    child = session.facade.create_child(session.context, fields)
    console.print(f"[green]✓ Added {child['name']}[/green] [dim]({child['id']})[/dim]")


@children.command("update")
@click.argument("child_id")
@click.option("--name", "-n", help="New name")
@click.option("--birth-date", "-b", help="Birth date (YYYY-MM-DD, empty to clear)")
@click.option("--gender", "-g", help="Gender (empty to clear)")
@click.pass_obj
@handle_errors
def update_child(session: Session, child_id: str, name: Optional[str], birth_date: Optional[str], gender: Optional[str]):
    """Update a child's name, birth date or gender."""
    patch = _patch(name=name, birth_date=birth_date, gender=gender)
    child = session.facade.update_child(session.context, child_id, patch)
    console.print(f"[green]✓ Updated {child['name']}[/green]")


@children.command("delete")
@click.argument("child_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
@handle_errors
def delete_child(session: Session, child_id: str, yes: bool):
    """Delete a child and all of its measurements."""
    if not yes:
        click.confirm("Delete this child and all of its measurements?", abort=True)
    session.facade.delete_child(session.context, child_id)
    console.print("[green]✓ Deleted[/green]")


# =============================================================================
# MEASUREMENTS
# =============================================================================

@cli.group()
def measure():
    """Record growth measurements."""


@measure.command("add")
@click.argument("child_id")
@click.option("--date", "-d", "measured_on", default=lambda: date.today().isoformat(),
              show_default="today", help="Measurement date (YYYY-MM-DD)")
@click.option("--height", "-h", "height_cm", type=float, help="Height in cm")
@click.option("--weight", "-w", "weight_kg", type=float, help="Weight in kg")
@click.option("--head", "head_circumference_cm", type=float, help="Head circumference in cm")
@click.option("--note", help="Free-text note")
@click.pass_obj
@handle_errors
def add_measurement(
    session: Session,
    child_id: str,
    measured_on: str,
    height_cm: Optional[float],
    weight_kg: Optional[float],
    head_circumference_cm: Optional[float],
    note: Optional[str],
):
    """
    Record a measurement for a child.

    Example:

        growthlog measure add CHILD_ID --date 2024-06-01 --height 110 --weight 18.5
    """
    fields = _patch(
        height_cm=height_cm,
        weight_kg=weight_kg,
        head_circumference_cm=head_circumference_cm,
        note=note,
    )
    fields["date"] = measured_on

    m = session.facade.create_measurement(session.context, child_id, fields)
    bmi = f" (BMI {m['bmi']})" if m.get("bmi") is not None else ""
    console.print(f"[green]✓ Recorded {m['date']}{bmi}[/green] [dim]({m['id']})[/dim]")


@measure.command("update")
@click.argument("measurement_id")
@click.option("--date", "-d", "measured_on", help="Measurement date (YYYY-MM-DD)")
@click.option("--height", "-h", "height_cm", help="Height in cm (empty to clear)")
@click.option("--weight", "-w", "weight_kg", help="Weight in kg (empty to clear)")
@click.option("--head", "head_circumference_cm", help="Head circumference in cm (empty to clear)")
@click.option("--note", help="Free-text note (empty to clear)")
@click.pass_obj
@handle_errors
def update_measurement(
    session: Session,
    measurement_id: str,
    measured_on: Optional[str],
    height_cm: Optional[str],
    weight_kg: Optional[str],
    head_circumference_cm: Optional[str],
    note: Optional[str],
):
    """Update fields of a measurement."""
    patch = _patch(
        height_cm=height_cm,
        weight_kg=weight_kg,
        head_circumference_cm=head_circumference_cm,
        note=note,
    )
    if measured_on:
        patch["date"] = measured_on

    m = session.facade.update_measurement(session.context, measurement_id, patch)
    console.print(measurement_table([m], title="Updated"))


@measure.command("delete")
@click.argument("measurement_id")
@click.pass_obj
@handle_errors
def delete_measurement(session: Session, measurement_id: str):
    """Delete a measurement."""
    session.facade.delete_measurement(session.context, measurement_id)
    console.print("[green]✓ Deleted[/green]")


@cli.command()
def info():
    """
    Show information about Growthlog.
    """
    console.print(Panel(
        "[bold]Growthlog[/bold]\n\n"
        "Longitudinal growth records for children:\n"
        "• Height, weight and head circumference over time\n"
        "• BMI and age derived automatically\n"
        "• Records kept privately per guardian\n\n"
        "[dim]Heights 20-250 cm and weights 1-300 kg are accepted.[/dim]",
        title="About",
        border_style="blue",
    ))

    console.print("\n[bold]Quick Start:[/bold]")
    console.print("  growthlog children add Sam --birth-date 2020-01-15")
    console.print("  growthlog measure add CHILD_ID --height 110 --weight 18.5")
    console.print("  growthlog children show CHILD_ID")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
