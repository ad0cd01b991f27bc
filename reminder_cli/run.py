# -*- coding: utf-8 -*-
import asyncio
import typing as t
from pathlib import Path

import click
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from event_reminder.config import COUNTDOWN_INTERVAL_SECONDS, DATA_FILE, PORT, STATIC_ROOT
from event_reminder.errors import NotFoundError, ValidationError
from event_reminder.formatting import format_events_table
from event_reminder.log import configure_logging
from event_reminder.reminders import NotificationPolicy
from event_reminder.storage import JsonFileKeyValueStore
from event_reminder.store import EventStore
from event_reminder.sync import ViewSynchronizer
from event_reminder.theme import ThemePreference
from notifications.email_service import EmailDispatcher
from notifications.reminder_job import send_due_reminders
from reminder_cli.utils import (
    console,
    create_events_table,
    err_console,
    event_count_text,
    print_validation_error,
)


class AppContext:
    """Objects shared by every command, built from the data file option."""

    def __init__(self, data_file: str) -> None:
        self.kv = JsonFileKeyValueStore(data_file)
        self.store = EventStore(self.kv)

    def check_saved(self) -> None:
        if not self.store.last_save_ok:
            err_console.print("[yellow]Warning:[/yellow] changes could not be saved to disk.")


pass_app = click.make_pass_decorator(AppContext)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data-file",
    default=DATA_FILE,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="JSON file events are stored in.",
)
@click.option("--log-level", default=None, help="Log level (defaults to EVENT_REMINDER_LOG_LEVEL).")
@click.pass_context
def cli(ctx: click.Context, data_file: str, log_level: t.Optional[str]) -> None:
    """Keep track of upcoming events with live countdowns and email reminders."""
    configure_logging(log_level)
    ctx.obj = AppContext(data_file)


@cli.command()
@click.argument("title")
@click.argument("date")
@click.option("--description", "-d", default="", help="Optional description.")
@pass_app
def add(app: AppContext, title: str, date: str, description: str) -> None:
    """Add an event. DATE is YYYY-MM-DD."""
    try:
        event = app.store.add(title, date, description)
    except ValidationError as e:
        print_validation_error(e)
        raise SystemExit(1)
    app.check_saved()
    console.print(f'[green]✓ Event added:[/green] "{event.title}" ({event.id})')


@cli.command()
@click.argument("event_id")
@click.option("--title", default=None, help="New title.")
@click.option("--date", default=None, help="New date (YYYY-MM-DD).")
@click.option("--description", "-d", default=None, help="New description.")
@pass_app
def edit(
        app: AppContext,
        event_id: str,
        title: t.Optional[str],
        date: t.Optional[str],
        description: t.Optional[str],
) -> None:
    """Edit an event. Fields that are not given keep their current value."""
    current = app.store.get_by_id(event_id)
    if current is None:
        err_console.print(f"[red]Error:[/red] Event '{event_id}' not found.")
        raise SystemExit(1)
    try:
        event = app.store.update(
            event_id,
            title if title is not None else current.title,
            date if date is not None else current.date,
            description if description is not None else current.description,
        )
    except ValidationError as e:
        print_validation_error(e)
        raise SystemExit(1)
    except NotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    app.check_saved()
    console.print(f'[green]✓ Event updated:[/green] "{event.title}"')


@cli.command()
@click.argument("event_id")
@pass_app
def delete(app: AppContext, event_id: str) -> None:
    """Delete an event."""
    if app.store.delete(event_id):
        app.check_saved()
        console.print("[green]✓ Event deleted[/green]")
    else:
        console.print(f"[yellow]No event with id '{event_id}'.[/yellow]")


@cli.command("list")
@pass_app
def list_events(app: AppContext) -> None:
    """List events by date with status and countdown."""
    views = ViewSynchronizer(app.store).compute()
    if not views:
        console.print("[dim]No events yet. Add one with 'event-reminder add'.[/dim]")
        return
    console.print(create_events_table(views))


@cli.command()
@pass_app
def show(app: AppContext) -> None:
    """Print events as a plain text table."""
    click.echo(format_events_table(ViewSynchronizer(app.store).compute()))


async def _watch(store: EventStore, interval: float, duration: t.Optional[float]) -> None:
    """Redraw the events table on every synchronizer refresh."""
    with Live(console=console, auto_refresh=False) as live:
        def render(views) -> None:
            live.update(create_events_table(views, show_ids=False), refresh=True)

        async with ViewSynchronizer(store, on_refresh=render, interval=interval):
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)


@cli.command()
@click.option("--interval", default=COUNTDOWN_INTERVAL_SECONDS, show_default=True, help="Seconds between refreshes.")
@click.option("--duration", type=float, default=None, help="Stop after this many seconds.")
@pass_app
def watch(app: AppContext, interval: float, duration: t.Optional[float]) -> None:
    """Show live countdowns until interrupted."""
    try:
        asyncio.run(_watch(app.store, interval, duration))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@cli.command("export")
@click.argument("output", type=click.File("w", encoding="utf-8"), default="-")
@pass_app
def export_events(app: AppContext, output: t.TextIO) -> None:
    """Export all events as JSON (to OUTPUT, default stdout)."""
    output.write(app.store.export_json())
    output.write("\n")


@cli.command("import")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--merge", is_flag=True, help="Keep existing events and add new ids only.")
@pass_app
def import_events(app: AppContext, source: t.TextIO, merge: bool) -> None:
    """Import events from a JSON export."""
    try:
        imported = app.store.import_json(source.read(), replace_existing=not merge)
    except ValidationError as e:
        print_validation_error(e)
        raise SystemExit(1)
    app.check_saved()
    console.print(
        f"[green]✓ Imported {event_count_text(imported)}[/green] "
        f"(total: {event_count_text(app.store.count())})"
    )


@cli.command()
@click.option("--dry-run", is_flag=True, help="List due events without sending.")
@pass_app
def notify(app: AppContext, dry_run: bool) -> None:
    """Email a reminder for every event that is due today."""
    policy = NotificationPolicy(app.kv)
    due = policy.due_events(app.store.list_sorted())
    if not due:
        console.print("[dim]No reminders due.[/dim]")
        return
    if dry_run:
        for event in due:
            console.print(f"   • {event.title} ({event.date})")
        return

    dispatcher = EmailDispatcher()
    results = asyncio.run(send_due_reminders(app.store, policy, dispatcher))

    sent = sum(1 for result in results if result.ok)
    stats = Text()
    stats.append("Sent: ", style="white")
    stats.append(str(sent), style="bold green")
    stats.append("\nFailed: ", style="white")
    stats.append(str(len(results) - sent), style="bold red" if sent < len(results) else "bold green")
    console.print(Panel(stats, title="📧 Reminders", border_style="green"))
    for result in results:
        if not result.ok:
            console.print(f"   [red]✕[/red] {result.event_id}: {result.error}")
    if sent < len(results):
        raise SystemExit(1)


@cli.command()
@click.argument("choice", type=click.Choice(["light", "dark", "toggle"]), required=False)
@pass_app
def theme(app: AppContext, choice: t.Optional[str]) -> None:
    """Show or change the saved theme."""
    preference = ThemePreference(app.kv)
    if choice == "toggle":
        preference.toggle()
    elif choice is not None:
        preference.set(choice)
    console.print(f"Theme: [bold]{preference.current}[/bold]")


@cli.command()
@click.option("--port", default=PORT, show_default=True, help="Port to listen on.")
@click.option("--root", default=STATIC_ROOT, show_default=True, type=click.Path(file_okay=False), help="Directory to serve.")
def serve(port: int, root: str) -> None:
    """Serve the front end files for local development."""
    from services.static_server.app import run

    console.print(
        Panel.fit(
            f"[bold blue]📡 Event Reminder dev server[/bold blue]\n"
            f"http://localhost:{port}\n"
            f"Serving [bold]{Path(root).resolve()}[/bold]",
            border_style="blue",
        )
    )
    run(port=port, root=root)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
