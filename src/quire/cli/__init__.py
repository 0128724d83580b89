# ABOUTME: CLI package for Quire, built on Click.
# ABOUTME: Defines the root command group, configures logging, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from quire.cli.commands import build_cmd, inspect_cmd


@click.group()
@click.version_option(package_name="quire")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Quire - assemble EPUB packages from sections and metadata."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


cli.add_command(build_cmd.build)
cli.add_command(inspect_cmd.inspect)
