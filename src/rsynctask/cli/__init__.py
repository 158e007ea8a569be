"""Command-line interface for rsynctask.

This module provides the main CLI entry point and assembles all commands.

Commands:
- run: Copy files with rsync and show progress
"""

from __future__ import annotations

import click

from rsynctask.cli.config import load_options, setup_logging
from rsynctask.cli.run import format_status, run


@click.group()
@click.version_option(package_name="rsynctask")
def cli() -> None:
    """rsynctask - rsync with structured progress."""


cli.add_command(run)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "format_status",
    "load_options",
    "main",
    "run",
    "setup_logging",
]
