#!/usr/bin/env python3
"""
Sticky Board CLI.

Primary entry point for working with the note collection from a terminal.
Use --service to select the operation; notes are addressed with --id.

Usage:
    python cli.py --help
    python cli.py --service list --search tag:work --sort title
    python cli.py --service new --template todo
    python cli.py --service edit --id <note-id> --title "Groceries"
    python cli.py --service remind --id <note-id> --at "2026-10-20 09:00" --recurrence daily
    python cli.py --service lock --id <note-id>
    python cli.py --service watch --verbose
"""

import asyncio
import sys
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.sticky.core.exceptions import ApplicationError
from modules.sticky.core.logging import get_logger, setup_logging
from modules.sticky.core.utils import format_local
from modules.sticky.models.note import PALETTE, Note, Recurrence
from modules.sticky.schemas.note import TEMPLATES, NoteUpdate
from modules.sticky.schemas.notification import ReminderNotification
from modules.sticky.services.lock import LockOutcome
from modules.sticky.services.query import SortKey
from modules.sticky.windows import Desktop, WindowSession

console = Console()

NOTE_SERVICES = {
    "show", "edit", "pin", "color", "tag", "folder",
    "duplicate", "delete", "remind", "lock", "unlock",
}


class ClickPrompt:
    """Lock dialogs on the terminal. Ctrl+C at a prompt counts as cancel."""

    def ask(self, message: str, default: str = "") -> str | None:
        try:
            return click.prompt(message.rstrip(":"), default=default, hide_input=True, show_default=False)
        except click.Abort:
            return None

    def alert(self, message: str) -> None:
        click.echo(click.style(message, fg="red"), err=True)


class ConsoleNotificationSink:
    """Prints reminders as they fire."""

    def send(self, notification: ReminderNotification) -> None:
        console.print(Panel(escape(notification.body), title=escape(notification.title)))


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice([
        "list", "new", "show", "edit", "pin", "color", "tag", "folder",
        "duplicate", "delete", "remind", "lock", "unlock", "watch", "config", "info",
    ]),
    default="list",
    help="Operation to run.",
)
@click.option("--id", "note_id", default=None, help="Note id (a unique prefix is enough).")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--search", default="", help="Filter text; supports tag:<name> and folder:<name>.")
@click.option("--pinned", is_flag=True, help="Show pinned notes only.")
@click.option(
    "--sort",
    type=click.Choice([key.value for key in SortKey]),
    default=SortKey.UPDATED.value,
    help="Sort order (list).",
)
@click.option(
    "--template",
    type=click.Choice(sorted(TEMPLATES)),
    default="blank",
    help="Template for a new note.",
)
@click.option("--title", default=None, help="New title (edit).")
@click.option("--content", default=None, help="New content (edit).")
@click.option("--value", default=None, help="Color (color) or folder name (folder).")
@click.option("--tag", default=None, help="Tag to add (tag).")
@click.option("--remove", is_flag=True, help="Remove the tag instead of adding it.")
@click.option("--at", "remind_at", default=None, help="Reminder date/time; empty clears it.")
@click.option(
    "--recurrence",
    type=click.Choice([r.value for r in Recurrence]),
    default=None,
    help="Recurrence for the reminder.",
)
@click.option("--password", default=None, help="Password for a locked note (prompted when omitted).")
def main(
    service: str,
    note_id: str | None,
    verbose: bool,
    debug: bool,
    search: str,
    pinned: bool,
    sort: str,
    template: str,
    title: str | None,
    content: str | None,
    value: str | None,
    tag: str | None,
    remove: bool,
    remind_at: str | None,
    recurrence: str | None,
    password: str | None,
) -> None:
    """
    Sticky Board CLI.

    Use --service to select the operation. Operations on a single note
    take --id with the full id or a unique prefix of it.

    \b
    Examples:
        python cli.py --service list --pinned
        python cli.py --service list --search folder:work --sort created
        python cli.py --service new --template meeting
        python cli.py --service show --id 3f2a
        python cli.py --service tag --id 3f2a --tag work
        python cli.py --service folder --id 3f2a --value archive
        python cli.py --service remind --id 3f2a --at "2026-10-20 09:00"
        python cli.py --service remind --id 3f2a --at ""
        python cli.py --service watch --verbose
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "config":
        show_config()
        return
    if service == "watch":
        run_watch(logger)
        return

    desktop = Desktop.from_config(sink=ConsoleNotificationSink())
    board = desktop.open_board()
    try:
        if service == "list":
            list_notes(board, search, pinned, sort)
        elif service == "info":
            show_info(board)
        elif service == "new":
            note = board.notes.create_note(template)
            click.echo(f"Created {note.id}")
        elif service in NOTE_SERVICES:
            if not note_id:
                raise click.UsageError(f"--id is required for --service {service}")
            target = resolve_note_id(board, note_id)
            run_note_service(
                board, service, target,
                title=title, content=content, value=value, tag=tag, remove=remove,
                remind_at=remind_at, recurrence=recurrence, password=password,
            )
    except ApplicationError as e:
        logger.warning("Operation failed", extra={"service": service, "code": e.code, "error": e.message})
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)
    finally:
        desktop.close_all()


def resolve_note_id(board: WindowSession, prefix: str) -> str:
    """Expand an id prefix to the one note it names."""
    if prefix in board.repo:
        return prefix
    candidates = [note.id for note in board.repo.all() if note.id.startswith(prefix)]
    if len(candidates) != 1:
        problem = "No note matches" if not candidates else "Ambiguous id"
        click.echo(click.style(f"Error: {problem} '{prefix}'", fg="red"), err=True)
        sys.exit(1)
    return candidates[0]


def run_note_service(board: WindowSession, service: str, note_id: str, **options) -> None:
    """Dispatch an operation on one note."""
    notes = board.notes

    if service == "show":
        note = board.repo.get(note_id)
        if note.locked:
            secret = options["password"] or ClickPrompt().ask("Password")
            note = board.lock.reveal(note_id, secret)
        show_note(note)
    elif service == "edit":
        fields = {k: options[k] for k in ("title", "content") if options[k] is not None}
        if board.lock.is_locked(note_id):
            secret = options["password"] or ClickPrompt().ask("Password")
            board.lock.update_locked(note_id, secret, **fields)
        else:
            notes.update_note(note_id, NoteUpdate(**fields))
        click.echo(f"Updated {note_id}")
    elif service == "pin":
        note = notes.toggle_pin(note_id)
        click.echo(f"{'Pinned' if note.pinned else 'Unpinned'} {note_id}")
    elif service == "color":
        color = options["value"] or PALETTE[0]
        notes.set_color(note_id, color)
        click.echo(f"Color of {note_id} set to {color}")
    elif service == "tag":
        if not options["tag"]:
            raise click.UsageError("--tag is required for --service tag")
        if options["remove"]:
            notes.remove_tag(note_id, options["tag"])
        else:
            notes.add_tag(note_id, options["tag"])
        click.echo(f"Tags of {note_id}: {', '.join(board.repo.get(note_id).tags) or '-'}")
    elif service == "folder":
        notes.set_folder(note_id, options["value"] or "default")
        click.echo(f"Moved {note_id} to {board.repo.get(note_id).folder}")
    elif service == "duplicate":
        copy = notes.duplicate_note(note_id)
        click.echo(f"Created {copy.id}")
    elif service == "delete":
        notes.delete_note(note_id)
        click.echo(f"Deleted {note_id}")
    elif service == "remind":
        note = notes.set_reminder(note_id, options["remind_at"] or "", options["recurrence"])
        if not note.reminder_at:
            click.echo(f"Reminder cleared for {note_id}")
        else:
            click.echo(f"Reminder for {note_id} at {format_local(note.reminder_at)}")
    elif service in ("lock", "unlock"):
        if board.lock.is_locked(note_id) == (service == "lock"):
            click.echo(f"Note {note_id} is already {service}ed")
            return
        outcome = board.lock.toggle(note_id, ClickPrompt())
        if outcome is LockOutcome.REJECTED:
            sys.exit(1)
        click.echo(f"{outcome.value.title()} {note_id}")


def list_notes(board: WindowSession, search: str, pinned: bool, sort: str) -> None:
    """Render the board as a table."""
    visible = board.visible(search, pinned, sort)
    if not visible:
        console.print("[dim]No notes[/dim]")
        return

    table = Table(title="Sticky Notes")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Folder")
    table.add_column("Tags")
    table.add_column("Reminder")
    table.add_column("Updated")

    for note in visible:
        title = escape(note.title or "Untitled")
        if note.pinned:
            title = f"* {title}"
        if note.locked:
            title = f"{title} [locked]"
        reminder = format_local(note.reminder_at) if note.reminder_at else ""
        if reminder and note.recurrence:
            reminder = f"{reminder} ({note.recurrence.value})"
        table.add_row(
            note.id[:8],
            title,
            escape(note.folder),
            escape(", ".join(note.tags)),
            reminder,
            format_local(note.updated_at),
        )

    console.print(table)


def show_note(note: Note) -> None:
    """Print one note with its metadata."""
    meta = [
        f"Folder: {note.folder}",
        f"Tags: {', '.join(note.tags) or '-'}",
        f"Color: {note.color}",
        f"Created: {format_local(note.created_at)}",
        f"Updated: {format_local(note.updated_at)}",
    ]
    if note.reminder_at:
        meta.append(f"Reminder: {format_local(note.reminder_at)}")
    if note.voice_notes:
        meta.append(f"Voice notes: {len(note.voice_notes)}")
    console.print(Panel(
        f"{escape(note.content)}\n\n[dim]" + escape("\n".join(meta)) + "[/dim]",
        title=escape(note.title or "Untitled"),
    ))


def show_info(board: WindowSession) -> None:
    """Display application information and collection summary."""
    from modules.sticky.core.config import get_app_config, get_store_path

    app_config = get_app_config()
    notes = board.repo.all()
    upcoming = board.next_reminder()

    console.print(Panel(
        f"[bold]{app_config.application.name}[/bold]\n"
        f"Version: {app_config.application.version}\n"
        f"Store: {get_store_path()}\n"
        f"Notes: {len(notes)} ({sum(1 for n in notes if n.pinned)} pinned)\n"
        f"Next reminder: "
        + (f"{upcoming.title or 'Untitled'} at {format_local(upcoming.reminder_at)}" if upcoming else "-"),
        title="Application Info",
    ))


def show_config() -> None:
    """Display the validated YAML configuration."""
    from modules.sticky.core.config import get_app_config

    app_config = get_app_config()
    sections = {
        "application": app_config.application,
        "storage": app_config.storage,
        "reminders": app_config.reminders,
        "logging": app_config.logging,
        "features": app_config.features,
        "security": app_config.security,
    }
    for name, schema in sections.items():
        table = Table(title=name)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in schema.model_dump().items():
            table.add_row(key, str(value))
        console.print(table)


def run_watch(logger) -> None:
    """Open a board window and fire reminders until interrupted."""
    desktop = Desktop.from_config(sink=ConsoleNotificationSink())
    click.echo("Watching reminders")
    click.echo("Press Ctrl+C to stop\n")
    try:
        asyncio.run(_watch(desktop))
    except KeyboardInterrupt:
        logger.info("Reminder watch stopped")
    finally:
        desktop.close_all()


async def _watch(desktop: Desktop) -> None:
    board = desktop.open_board()
    # Anything already past due fires right away instead of after the first interval
    board.scheduler.tick()
    board.start()
    await asyncio.Event().wait()


if __name__ == "__main__":
    main()
