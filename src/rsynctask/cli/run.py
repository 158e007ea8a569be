"""Run command for the rsynctask CLI.

Commands:
- run: Copy SOURCE to DESTINATION with rsync, showing progress
"""

from __future__ import annotations

import json
import sys
import threading
from pathlib import Path

import click

from rsynctask.cli.config import load_options, setup_logging
from rsynctask.core.config import RsyncOptions
from rsynctask.core.types import TaskState
from rsynctask.task import Task


def format_status(state: TaskState) -> str:
    """Format a one-line progress summary."""
    done = state.total - state.remaining
    status = f"  {state.percent:5.1f}%  {done}/{state.total} files"
    if state.speed:
        status += f"  {state.speed}"
    return status


@click.command()
@click.argument("source")
@click.argument("destination")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with rsync options.",
)
@click.option("--delete", is_flag=True, help="Delete extraneous files from the destination.")
@click.option("--dry-run", "-n", is_flag=True, help="Show what would be transferred.")
@click.option("--compress", "-z", is_flag=True, help="Compress data during the transfer.")
@click.option("--exclude", multiple=True, help="Exclude files matching PATTERN.")
@click.option("--json", "as_json", is_flag=True, help="Print final state and log as JSON.")
@click.option(
    "--interval",
    type=click.FloatRange(min=0.05),
    default=0.5,
    show_default=True,
    help="Seconds between progress updates.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def run(
    source: str,
    destination: str,
    config_file: Path | None,
    delete: bool,
    dry_run: bool,
    compress: bool,
    exclude: tuple[str, ...],
    as_json: bool,
    interval: float,
    verbose: bool,
) -> None:
    """Copy SOURCE to DESTINATION with rsync.

    Archive mode, partial transfers and progress reporting are always on.
    """
    setup_logging(verbose)

    try:
        options = load_options(config_file) if config_file else RsyncOptions()
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    options.delete = options.delete or delete
    options.dry_run = options.dry_run or dry_run
    options.compress = options.compress or compress
    options.exclude.extend(exclude)

    task = Task.create(source, destination, options)
    errors: list[Exception] = []

    def run_task() -> None:
        try:
            task.run()
        except Exception as e:
            errors.append(e)

    thread = threading.Thread(target=run_task, name="rsync-task", daemon=True)
    thread.start()

    last_status_len = 0
    try:
        while thread.is_alive():
            thread.join(interval)
            if not as_json:
                status = format_status(task.state())
                clear_part = " " * max(0, last_status_len - len(status))
                click.echo(f"\r{status}{clear_part}", nl=False)
                last_status_len = len(status)
    except KeyboardInterrupt:
        click.echo("\nInterrupted, stopping rsync...", err=True)
        task.process.terminate()
        thread.join()

    state = task.state()
    log = task.log()

    if as_json:
        click.echo(
            json.dumps(
                {
                    "state": state.to_dict(),
                    "log": log.to_dict(),
                    "error": str(errors[0]) if errors else None,
                },
                indent=2,
            )
        )
    elif last_status_len:
        click.echo()

    if errors:
        if not as_json:
            if log.stderr:
                click.echo(log.stderr, err=True, nl=False)
            click.echo(f"Error: {errors[0]}", err=True)
        sys.exit(1)

    if not as_json:
        click.echo(f"Done: {state.total - state.remaining}/{state.total} files")
