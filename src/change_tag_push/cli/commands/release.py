"""Implementation of the release command.

Updates the changelog with the commits since its last change, lets the
operator tidy it up, then commits, tags and pushes.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from change_tag_push.cli.interaction import RichInteraction, resolve_editor
from change_tag_push.config.loader import get_project_name, load_config
from change_tag_push.core.workflow import ReleaseWorkflow
from change_tag_push.exceptions import ChangeTagPushError, UserAbortedError
from change_tag_push.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from change_tag_push.core.reconcile import DateDirective


def run_release(
    path: str | None,
    version_spec: str,
    *,
    allow_dirty: bool,
    changes_filename: str | None,
    preamble: str | None,
    since: str | None,
    date_directive: DateDirective,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to the project directory
        version_spec: Explicit version, bump keyword, "current" or "next"
        allow_dirty: Skip the clean working tree check
        changes_filename: Changelog file name, overriding the configuration
        preamble: Preamble for a new changelog, overriding the configuration
        since: Git reference to collect commits from
        date_directive: Release date directive
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
    except ChangeTagPushError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    # Command line options win over pyproject.toml
    if allow_dirty:
        config.git.allow_dirty = True
    if changes_filename:
        config.changelog.path = Path(changes_filename)
    if preamble:
        config.changelog.preamble = preamble

    workflow = ReleaseWorkflow(
        GitRepository(project_path),
        RichInteraction(console, editor=resolve_editor(config.editor)),
        config,
        project_name=get_project_name(project_path),
    )

    try:
        result = workflow.run(version_spec, since=since, date_directive=date_directive)
    except UserAbortedError as e:
        err_console.print(f"[yellow]Aborted:[/] {escape(str(e))}")
        raise SystemExit(1) from e
    except ChangeTagPushError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if result.is_pending:
        summary = f"[green]Committed {escape(str(config.changelog.path))} for the next version.[/]"
    else:
        summary = f"[green]Released {result.version}![/]"
    summary += f"\n{len(result.records)} change(s) added from the git log."
    console.print(Panel(summary, title="[green]Done[/]", border_style="green"))
