"""Listing, showing and deleting tapes."""

from __future__ import annotations

from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

from popcorn.commands.common import load_config_or_exit, print_demo_result
from popcorn.core.errors import TapeStoreError
from popcorn.core.tape_store import TapeStore

console = Console()


def _open_store() -> TapeStore:
    store = TapeStore(load_config_or_exit().tapes_path)
    try:
        store.init()
    except TapeStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(-1) from e
    return store


def _format_size(size: float) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def list_tapes_command() -> None:
    """List saved tapes, newest first."""
    store = _open_store()
    records = store.list()
    if not records:
        console.print("[dim]No tapes recorded yet.[/dim]")
        return

    table = Table(title="Tapes")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("When")
    table.add_column("Status")
    table.add_column("Video", justify="right")
    for record in records:
        when = datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
        status = "[green]passed[/green]" if record.passed else "[red]failed[/red]"
        video = _format_size(record.file_size) if record.video_file else "-"
        table.add_row(record.id or "", record.demo_name, when, status, video)
    console.print(table)

    count, total = store.storage_usage()
    console.print(f"[dim]{count} tape(s), {_format_size(total)} on disk[/dim]")


def show_tape_command(tape_id: str = typer.Argument(..., help="Tape id")) -> None:
    """Show the steps of a saved tape."""
    record = _open_store().get(tape_id)
    if record is None:
        console.print(f"[red]Tape not found: {tape_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[bold]{record.demo_name}[/bold] ({record.status})")
    print_demo_result(record.results, verbose=True)


def delete_tape_command(tape_id: str = typer.Argument(..., help="Tape id")) -> None:
    """Delete a saved tape."""
    try:
        _open_store().delete(tape_id)
    except TapeStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    console.print(f"[green]Deleted tape {tape_id}[/green]")
