"""Inspect command implementation."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ws_export.core.page_parser import PageParser
from ws_export.models.book import Chapter, ParsedPage, Picture
from ws_export.models.config import ParserConfig


def load_page(
    html_path: Path,
    config: ParserConfig | None = None,
    base_url: str | None = None,
) -> PageParser:
    """Create a parser over a saved HTML file."""
    return PageParser(html_path.read_bytes(), config=config, base_url=base_url)


def display_metadata(metadata: dict[str, str], console: Console) -> None:
    """Display the metadata found on the page."""
    if metadata:
        lines = [f"[dim]{key}:[/] {escape(value)}" for key, value in metadata.items()]
    else:
        lines = ["[dim]No metadata found[/]"]
    console.print(Panel("\n".join(lines), title="Metadata", border_style="green"))


def display_chapters(chapters: list[Chapter], console: Console) -> None:
    """Display table of contents, indenting subchapters."""
    table = Table(title="Table of Contents", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", style="white")
    table.add_column("Title", style="dim")

    counter = 0

    def add_rows(entries: list[Chapter], level: int) -> None:
        nonlocal counter
        for chapter in entries:
            counter += 1
            table.add_row(
                str(counter), "  " * level + escape(chapter.name), escape(chapter.title)
            )
            add_rows(chapter.subchapters, level + 1)

    add_rows(chapters, 0)
    console.print(table)


def display_pictures(pictures: dict[str, Picture], console: Console) -> None:
    """Display pictures referenced by the page."""
    table = Table(title="Pictures", show_header=True, header_style="bold cyan")
    table.add_column("Title", style="white")
    table.add_column("Name", style="green")
    table.add_column("URL", style="dim")

    for picture in pictures.values():
        table.add_row(escape(picture.title), escape(picture.name), escape(picture.url))

    console.print(table)


def execute_info(
    html_path: Path,
    title: str | None,
    is_main_page: bool,
    nested: bool,
    config: ParserConfig | None,
    console: Console,
) -> ParsedPage:
    """Parse a page and print what was extracted."""
    parser = load_page(html_path, config=config)
    parsed = parser.parse(
        title=title,
        is_main_page=is_main_page,
        nested=nested,
    )

    console.print()
    display_metadata(parsed.metadata, console)
    console.print()
    display_chapters(parsed.chapters, console)
    console.print()
    display_pictures(parsed.pictures, console)

    if parsed.pages:
        console.print()
        console.print(f"[dim]Scan pages:[/] {escape(', '.join(parsed.pages))}")
    console.print()
    return parsed


def execute_clean(
    html_path: Path,
    output_path: Path | None,
    is_main_page: bool,
    config: ParserConfig | None,
    console: Console,
) -> Path:
    """Write the normalized content of a page next to it (or to output_path)."""
    parser = load_page(html_path, config=config)
    content = parser.get_content(is_main_page=is_main_page, freeze=True)
    body = content.body or content

    if output_path is None:
        output_path = html_path.with_name(f"{html_path.stem}.clean.html")
    output_path.write_text(body.decode_contents(), encoding="utf-8")

    console.print(f"[green]Wrote normalized content to {output_path}[/]")
    return output_path
