"""Main CLI application for Popcorn."""

import typer
from rich.console import Console

from . import __version__

console = Console()
app = typer.Typer(
    name="popcorn",
    help="Scripted demo runs and autonomous exploration of live web pages",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"Popcorn v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """
    Popcorn: does this page still work?

    Plays test plans against a running application, or clicks through its
    interactive elements, and saves every run as a tape with screenshots and video.
    """
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def register_commands() -> None:
    """Register CLI commands."""
    from .commands import tapes as tape_commands
    from .commands.explore import explore_command
    from .commands.init import init_command
    from .commands.run import run_command

    app.command("init", help="Initialize Popcorn in your project")(init_command)
    app.command("run", help="Run a test plan against the live application")(run_command)
    app.command("explore", help="Explore the interactive elements of a page")(explore_command)
    app.add_typer(tape_commands.app, name="tapes")


register_commands()


if __name__ == "__main__":
    app()
