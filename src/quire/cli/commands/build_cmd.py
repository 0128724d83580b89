# ABOUTME: The `quire build` command for generating an EPUB from a project file.
# ABOUTME: Writes a verified archive, or an unpacked directory tree with --unpacked.

import asyncio
from pathlib import Path

import click
from rich.console import Console

from quire.cli.options import output_option
from quire.core.builder import GenerationError
from quire.core.pipeline import publish_epub
from quire.core.project import DEFAULT_OUTPUT_DIR, ProjectError, load_project
from quire.metadata.types import ValidationError

console = Console()


@click.command("build")
@click.argument("project", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@output_option
@click.option("--name", default=None, help="Archive name without extension (default: project name).")
@click.option(
    "--unpacked",
    is_flag=True,
    default=False,
    help="Write the package as a directory tree instead of an .epub archive.",
)
@click.option(
    "--no-verify",
    is_flag=True,
    default=False,
    help="Skip reading the archive back to verify its metadata.",
)
def build(
    project: Path, output_dir: Path | None, name: str | None, unpacked: bool, no_verify: bool
) -> None:
    """Generate an EPUB from a JSON project file."""
    try:
        document = load_project(project)
    except (ProjectError, ValidationError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    output_dir = output_dir or DEFAULT_OUTPUT_DIR
    name = name or project.stem

    if unpacked:
        target = output_dir / name
        try:
            asyncio.run(document.write_files(target))
        except GenerationError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise SystemExit(1) from exc
        console.print(
            f"[green]Wrote[/green] {document.section_count()} section(s) to {target}"
        )
        return

    result = asyncio.run(publish_epub(document, output_dir, name, verify=not no_verify))
    if not result.success:
        console.print(f"[red]Error:[/red] {result.error}")
        raise SystemExit(1)

    console.print(
        f"[green]Wrote[/green] {result.path} "
        f"({document.section_count()} section(s), {len(document.metadata.images)} image(s))"
    )
