"""
Main CLI application using Typer.

Entry point: python -m brigade.cli
CLI Name: brigade-admin
"""
import uuid
from datetime import date, datetime, timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from brigade import __version__ as app_version

app = typer.Typer(
    name="brigade-admin",
    help="Chef Brigade journal admin CLI",
)
console = Console()


def _parse_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"Expected a date as YYYY-MM-DD, got '{value}'")


def _parse_user_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise typer.BadParameter(f"'{value}' is not a valid user id")


@app.command()
def version():
    """Show CLI version information."""
    typer.echo(f"Chef Brigade journal CLI version {app_version}")


@app.command("init-db")
def init_db_command():
    """Create the database tables."""
    from brigade.core.database import init_db

    init_db()
    console.print("[green]Database initialized[/green]")


@app.command()
def token(
    user_id: str = typer.Argument(..., help="User id to put in the token subject"),
    minutes: Optional[int] = typer.Option(None, "--minutes", help="Lifetime in minutes"),
):
    """Mint a bearer token for a user."""
    from brigade.core.security import create_access_token

    subject = _parse_user_id(user_id)
    expires = timedelta(minutes=minutes) if minutes else None
    typer.echo(create_access_token(str(subject), expires_delta=expires))


@app.command()
def prompt(on: Optional[str] = typer.Option(None, "--on", help="Date as YYYY-MM-DD; defaults to today (UTC)")):
    """Print the daily reflection prompt."""
    from brigade.core.time_utils import utc_today
    from brigade.services.prompt_service import select_prompt

    daily = select_prompt(_parse_date(on) or utc_today())
    console.print(f"[bold]{daily.date.isoformat()}[/bold] (#{daily.id})")
    console.print(daily.text)


@app.command()
def streak(
    user_id: str = typer.Argument(..., help="User whose journal to summarise"),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Reference date as YYYY-MM-DD"),
):
    """Print streak and mood statistics for a user."""
    from brigade.api.dependencies import get_local_cache, get_record_store
    from brigade.core.database import get_session_context
    from brigade.services.entry_store import JournalRepository, LocalEntryCache
    from brigade.services.journal_service import JournalService

    subject = _parse_user_id(user_id)
    reference = _parse_date(as_of)

    with get_session_context() as session:
        repository = JournalRepository(get_record_store(session), LocalEntryCache(get_local_cache()))
        state = JournalService(repository).load(subject, reference)

    if state.store.degraded:
        console.print(f"[yellow]Served from local cache: {state.store.error}[/yellow]")

    table = Table(title=f"Journal for {subject}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Entries", str(len(state.entries)))
    table.add_row("Current streak", str(state.streak.current))
    table.add_row("Longest streak", str(state.streak.longest))
    table.add_row("This month", str(state.streak.this_month))
    if state.mood is not None:
        average = "-" if state.mood.average is None else f"{state.mood.average:.1f}"
        table.add_row("Mood entries", str(state.mood.total))
        table.add_row("Average mood", average)
    console.print(table)
