"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ws_export.commands.inspect import execute_clean, execute_info
from ws_export.models.config import ParserConfig

app = typer.Typer(
    name="ws-export",
    help="Inspect and normalize rendered Wikisource pages for ebook export.",
    add_completion=False,
)

console = Console()


def _load_config(config_path: Path | None) -> ParserConfig | None:
    if config_path is None:
        return None
    try:
        return ParserConfig.from_file(config_path)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Invalid configuration {config_path}: {escape(str(e))}[/]")
        raise typer.Exit(1)


HtmlPath = Annotated[
    Path,
    typer.Argument(
        help="Path to a rendered page (HTML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="JSON file overriding the parser configuration",
        exists=True,
        dir_okay=False,
    ),
]
MainPageOption = Annotated[
    bool,
    typer.Option(
        "--main-page",
        help="Keep the work header (the page is the work's front page)",
    ),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Inspect and normalize rendered Wikisource pages for ebook export."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def info(
    html_path: HtmlPath,
    title: Annotated[
        Optional[str],
        typer.Option(
            "--title",
            "-t",
            help="Work title; subpage links of it are added to the chapters",
        ),
    ] = None,
    main_page: MainPageOption = False,
    nested: Annotated[
        bool,
        typer.Option("--nested", help="Show nested summary lists as subchapters"),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """Display metadata, chapters and pictures of a page."""
    config = _load_config(config_path)
    try:
        execute_info(
            html_path=html_path,
            title=title,
            is_main_page=main_page,
            nested=nested,
            config=config,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error reading page: {escape(str(e))}[/]")
        raise typer.Exit(1)


@app.command()
def clean(
    html_path: HtmlPath,
    output_path: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Output file (default: <page>.clean.html)",
        ),
    ] = None,
    main_page: MainPageOption = False,
    config_path: ConfigOption = None,
) -> None:
    """Write the normalized content of a page."""
    config = _load_config(config_path)
    try:
        execute_clean(
            html_path=html_path,
            output_path=output_path,
            is_main_page=main_page,
            config=config,
            console=console,
        )
    except OSError as e:
        console.print(f"[red]Error writing output: {escape(str(e))}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
