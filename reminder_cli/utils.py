"""Console helpers for the command line interface."""

from rich.console import Console
from rich.table import Table

from event_reminder.errors import ValidationError
from event_reminder.models import EventStatus, EventView

console = Console()
err_console = Console(stderr=True)

STATUS_STYLES = {
    EventStatus.TODAY: "bold green",
    EventStatus.UPCOMING: "yellow",
    EventStatus.FUTURE: "cyan",
    EventStatus.PAST: "dim",
}


def print_validation_error(error: ValidationError) -> None:
    """Print one line per invalid field."""
    for field, message in error.errors.items():
        err_console.print(f"[red]Error:[/red] {field}: {message}")


def event_count_text(count: int) -> str:
    """'1 event' or 'N events'."""
    return "1 event" if count == 1 else f"{count} events"


def create_events_table(views: list[EventView], show_ids: bool = True) -> Table:
    """Create a table of events with status and countdown."""
    table = Table(
        title=f"📅 Events ({event_count_text(len(views))})",
        show_header=True,
        header_style="bold magenta",
    )
    if show_ids:
        table.add_column("ID", style="dim")
    table.add_column("Title", style="white")
    table.add_column("Date", style="yellow")
    table.add_column("When")
    table.add_column("Status")
    table.add_column("Countdown", justify="right")

    for view in views:
        style = STATUS_STYLES[view.status]
        row = [
            view.event.title,
            view.date_long,
            view.date_relative,
            f"[{style}]{view.status_label}[/{style}]",
            view.countdown_text or "—",
        ]
        if show_ids:
            row.insert(0, view.event.id)
        table.add_row(*row)

    return table
