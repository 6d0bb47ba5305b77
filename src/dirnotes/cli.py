"""dirnotes CLI - show and track notes kept in per-directory notes files."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.core import TyperGroup

from dirnotes import __version__
from dirnotes.config import COLUMNS, Settings, load_settings
from dirnotes.notes import extract_summary, notes_version, read_notes, resolve_dirs
from dirnotes.session import derive_session_id
from dirnotes.tracking.detection import should_display
from dirnotes.tracking.models import RecentActivity
from dirnotes.tracking.store import NotesStore, StoreError
from dirnotes.tracking.tracker import DirectoryTracker

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "show"

COLUMN_TITLES = {
    "date": "Last activity",
    "dir": "Directory",
    "summary": "Summary",
}


class NotesGroup(TyperGroup):
    """Command group that accepts unique prefixes and defaults to `show`.

    `dirnotes some/dir` behaves like `dirnotes show some/dir`.
    """

    def get_command(self, ctx, cmd_name):
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None or not cmd_name:
            return cmd
        matches = [name for name in self.list_commands(ctx) if name.startswith(cmd_name.lower())]
        if len(matches) > 1:
            ctx.fail(f"Ambiguous command {cmd_name!r}: could be {', '.join(sorted(matches))}")
        if matches:
            return super().get_command(ctx, matches[0])
        return None

    def resolve_command(self, ctx, args):
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            return DEFAULT_COMMAND, super().get_command(ctx, DEFAULT_COMMAND), args
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest


app = typer.Typer(
    name="dirnotes",
    cls=NotesGroup,
    help="Display and track notes kept in per-directory notes files.",
    invoke_without_command=True,
)

console = Console()


@dataclass
class AppState:
    """Per-invocation collaborators shared by all subcommands."""

    settings: Settings
    store: NotesStore
    tracker: DirectoryTracker
    session_id: str


def version_callback(value: bool) -> None:
    if value:
        console.print(f"dirnotes {__version__}")
        raise typer.Exit()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("dirnotes").setLevel(getattr(logging, level.upper(), logging.WARNING))


@app.callback()
def main(
    ctx: typer.Context,
    db: Annotated[
        Optional[Path],
        typer.Option("--db", hidden=True, help="Notes database to use instead of ~/.dir_notes.db"),
    ] = None,
    notes_file: Annotated[
        Optional[str],
        typer.Option("--notes-file", hidden=True, help="Notes filename to look for"),
    ] = None,
    session_timeout: Annotated[
        Optional[int],
        typer.Option("--session-timeout", min=0, help="Seconds before `prompt` shows unchanged notes again"),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level for diagnostics on stderr"),
    ] = None,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """dirnotes - leave notes in directories and see where you worked recently."""
    try:
        settings = load_settings()
    except ValidationError as e:
        raise typer.BadParameter(f"invalid environment setting: {e}") from e

    overrides = {
        "db_path": db,
        "notes_filename": notes_file,
        "session_timeout": session_timeout,
        "log_level": log_level,
    }
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    _setup_logging(settings.log_level)

    store = NotesStore(settings.db_path)
    try:
        store.open()
    except StoreError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1)
    ctx.call_on_close(store.close)

    ctx.obj = AppState(
        settings=settings,
        store=store,
        tracker=DirectoryTracker(store, settings.notes_filename),
        session_id=derive_session_id(),
    )

    if ctx.invoked_subcommand is None:
        show(ctx, [])


def _display_notes(state: AppState, directory: Path, notes: Path, explicit: bool) -> None:
    """Print a notes file with its header and record the visit."""
    try:
        content = read_notes(notes)
    except OSError as e:
        logger.warning("Could not read %s: %s", notes, e)
        return

    header = f"NOTES for {directory}:" if explicit else "NOTES:"
    typer.echo(header)
    typer.echo("=" * len(header))
    typer.echo(content, nl=not content.endswith("\n"))

    state.tracker.track_visit(directory, extract_summary(content))


def _print_listing(entries: list[RecentActivity], title: str, columns: list[str]) -> None:
    if not entries:
        console.print("[dim]No directories with notes yet.[/dim]")
        return

    # Printed above the table so narrow tables do not wrap it
    console.print(f"[bold]{title}:[/bold]", soft_wrap=True)
    table = Table()
    for column in columns:
        style = {"date": "cyan", "dir": "green"}.get(column)
        table.add_column(COLUMN_TITLES[column], style=style)

    for entry in entries:
        cells = {
            "date": entry.date,
            "dir": entry.path,
            "summary": entry.summary or "",
        }
        table.add_row(*(escape(cells[c]) for c in columns))

    console.print(table)


def _is_missing(state: AppState, directory: Path) -> bool:
    found = state.tracker.inspect(directory)
    return found is None or not found[0]


def _parse_columns(value: str) -> list[str]:
    columns = [c.strip().lower() for c in value.split(",") if c.strip()]
    unknown = [c for c in columns if c not in COLUMNS]
    if unknown or not columns:
        raise typer.BadParameter(
            f"choose from {', '.join(COLUMNS)}", param_hint="--columns"
        )
    return columns


# ── Commands ─────────────────────────────────────────────────────


@app.command("show")
def show(
    ctx: typer.Context,
    dirs: Annotated[
        Optional[list[str]],
        typer.Argument(help="Directories to show notes for (default: current directory)"),
    ] = None,
) -> None:
    """Show the notes for directories and remember the visit."""
    state: AppState = ctx.obj
    explicit = bool(dirs)
    targets = resolve_dirs(dirs or [])

    for directory in targets:
        found = state.tracker.inspect(directory)
        if found is None:
            continue
        notes = state.tracker.notes_path(directory)
        if not found[1]:
            # Stay quiet for the implicit current directory
            if explicit:
                console.print(f"[dim]No notes in {escape(str(directory))}[/dim]", soft_wrap=True)
            continue
        _display_notes(state, directory, notes, explicit)

    state.tracker.clean_up(targets)


@app.command("prompt")
def prompt(
    ctx: typer.Context,
    dirs: Annotated[
        Optional[list[str]],
        typer.Argument(help="Directories to check (default: current directory)"),
    ] = None,
) -> None:
    """Show notes only if they are new or changed in this shell session.

    Meant for PROMPT_COMMAND or precmd hooks: prints nothing otherwise.
    """
    state: AppState = ctx.obj
    explicit = bool(dirs)
    targets = resolve_dirs(dirs or [])

    for directory in targets:
        found = state.tracker.inspect(directory)
        if found is None or not found[1]:
            continue
        notes = state.tracker.notes_path(directory)
        try:
            version = notes_version(notes)
        except OSError as e:
            logger.warning("Could not stat %s: %s", notes, e)
            continue

        if should_display(
            state.store,
            str(directory),
            version,
            state.session_id,
            state.settings.session_timeout,
        ):
            _display_notes(state, directory, notes, explicit)

    state.tracker.clean_up(targets)


@app.command("ls")
def ls(
    ctx: typer.Context,
    refresh: Annotated[
        bool, typer.Option("--refresh", help="Re-read summaries and drop directories without notes")
    ] = False,
    missing: Annotated[
        bool, typer.Option("--missing", help="Only list directories not currently present")
    ] = False,
    dirs_only: Annotated[
        bool, typer.Option("--dirs", help="Print bare directory paths, one per line")
    ] = False,
    columns: Annotated[
        str, typer.Option("--columns", help=f"Comma-separated columns from: {', '.join(COLUMNS)}")
    ] = ",".join(COLUMNS),
) -> None:
    """List directories with notes, newest first."""
    state: AppState = ctx.obj
    selected = _parse_columns(columns)

    if refresh:
        result = state.tracker.refresh()
        logger.info(
            "Refreshed %d, removed %d, skipped %d directories",
            len(result.updated),
            len(result.removed),
            len(result.skipped),
        )

    entries = state.store.list_recent()
    if missing:
        entries = [e for e in entries if _is_missing(state, Path(e.path))]

    if dirs_only:
        for entry in entries:
            typer.echo(entry.path)
        return

    title = "Missing directories with notes" if missing else "Recently used directories with notes"
    _print_listing(entries, title, selected)


@app.command("rm")
def rm(
    ctx: typer.Context,
    dirs: Annotated[list[str], typer.Argument(help="Directories to forget and delete notes from")],
) -> None:
    """Forget directories and delete their notes files."""
    state: AppState = ctx.obj

    results = state.tracker.delete(resolve_dirs(dirs))
    for path, deleted in results.items():
        console.print(f"Removing from DB:    {escape(path)}", soft_wrap=True)
        if deleted:
            notes = state.tracker.notes_path(Path(path))
            console.print(f"Removing notes file: {escape(str(notes))}", soft_wrap=True)

    console.print()
    _print_listing(state.store.list_recent(), "Remaining directories with notes", list(COLUMNS))
