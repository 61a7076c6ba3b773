"""Command line entry point."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from change_tag_push import __version__
from change_tag_push.cli.commands.release import run_release
from change_tag_push.core.version import USAGE_HINT

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Add the git log since the last Changes update to the changelog, "
    "then commit, tag and push.",
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command()
def release(
    version_spec: str = typer.Argument(..., metavar="VERSION", help=USAGE_HINT),
    allow_dirty: bool = typer.Option(
        False, "--allow-dirty", help="Allow uncommitted changes to tracked files."
    ),
    changes_filename: str | None = typer.Option(
        None, "--changes-filename", help="Changelog file, relative to the work tree."
    ),
    preamble: str | None = typer.Option(
        None, "--preamble", help="Preamble for a changelog that has none."
    ),
    since: str | None = typer.Option(
        None, "--since", help="Collect commits after this ref instead of the last Changes commit."
    ),
    date: str | None = typer.Option(
        None, "--date", help="Release date, or a strftime template. Defaults to today (UTC)."
    ),
    no_date: bool = typer.Option(False, "--no-date", help="Leave the release date unchanged."),
    path: str | None = typer.Option(None, "--path", "-p", help="Project directory."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress messages."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    if date is not None and no_date:
        raise typer.BadParameter("--date and --no-date can't be used together", param_hint="--date")
    _setup_logging(verbose)
    date_directive: bool | str = False if no_date else (date or True)
    run_release(
        path,
        version_spec,
        allow_dirty=allow_dirty,
        changes_filename=changes_filename,
        preamble=preamble,
        since=since,
        date_directive=date_directive,
        console=console,
        err_console=err_console,
    )


def main() -> None:
    app()
