# ABOUTME: Shared Click options for Quire CLI commands.
# ABOUTME: Provides reusable decorators for common flags like --output.

from pathlib import Path

import click

from quire.core.project import DEFAULT_OUTPUT_DIR

output_option = click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=f"Directory to write to (default: {DEFAULT_OUTPUT_DIR})",
)
