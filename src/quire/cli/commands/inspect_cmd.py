# ABOUTME: The `quire inspect` command for viewing EPUB metadata.
# ABOUTME: Shows metadata and structure read back from a single EPUB file.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from quire.formats.epub import EpubReadError, read_epub_metadata

console = Console()


@click.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def inspect(path: Path) -> None:
    """Show metadata read back from an EPUB file."""
    try:
        info = read_epub_metadata(path)
    except EpubReadError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    table = Table(title=str(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", info.title)
    table.add_row("Author", info.author or "[dim]unknown[/dim]")
    table.add_row("Identifier", info.identifier or "[dim]none[/dim]")
    table.add_row("Genre", info.genre or "[dim]none[/dim]")
    table.add_row("Language", info.language or "[dim]unknown[/dim]")
    table.add_row("Publisher", info.publisher or "[dim]unknown[/dim]")
    table.add_row("Description", info.description or "[dim]none[/dim]")
    if len(info.subjects) > 1:
        table.add_row("Tags", ", ".join(info.subjects[1:]))
    table.add_row("Documents", str(info.document_count))
    table.add_row("Cover", "yes" if info.has_cover else "no")

    console.print(table)
