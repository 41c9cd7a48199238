"""Init command implementation."""

from __future__ import annotations

import typer
from rich.console import Console

from popcorn.core.config.main import PopcornConfig, ProjectConfig
from popcorn.core.errors import ConfigLoadingError

console = Console()


def init_command(
    name: str | None = typer.Option(None, "--name", help="Project name (defaults to the directory name)"),
    base_url: str = typer.Option("http://localhost:3000", "--base-url", help="URL of the application under test"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing popcorn.yaml"),
) -> None:
    """Initialize Popcorn in your project."""
    config_path = PopcornConfig.get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]{config_path.name} already exists.[/yellow] Use [bold]--force[/bold] to overwrite it.")
        raise typer.Exit(1)

    config = PopcornConfig.default(name)
    config.project = ProjectConfig(name=config.project.name, base_url=base_url)

    try:
        config.save()
    except ConfigLoadingError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(-1) from e
