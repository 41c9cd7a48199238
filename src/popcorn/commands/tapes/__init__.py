"""Tape-related CLI commands for Popcorn."""

import typer

from . import manage as manage_module

app = typer.Typer(help="Inspect recorded tapes")

app.command("list", help="List saved tapes, newest first")(manage_module.list_tapes_command)
app.command("show", help="Show the steps of a saved tape")(manage_module.show_tape_command)
app.command("delete", help="Delete a saved tape")(manage_module.delete_tape_command)
