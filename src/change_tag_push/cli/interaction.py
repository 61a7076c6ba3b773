"""Terminal interaction: yes/no prompts, editor and diff display."""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import TYPE_CHECKING

from rich.prompt import Confirm
from rich.syntax import Syntax

from change_tag_push.exceptions import EditorError

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

DEFAULT_EDITOR = "vi"


def resolve_editor(configured: str | None = None) -> str:
    """Editor command from $VISUAL, $EDITOR, the configuration, or vi."""
    return (
        os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or configured
        or DEFAULT_EDITOR
    )


class RichInteraction:
    """Interaction backed by a rich console.

    Args:
        console: Console used for prompts and output
        editor: Editor command line, e.g. ``"code --wait"``
    """

    def __init__(self, console: Console, editor: str = DEFAULT_EDITOR) -> None:
        self.console = console
        self.editor = editor

    def confirm(self, prompt: str) -> bool:
        return Confirm.ask(prompt, console=self.console, default=True)

    def edit(self, path: Path) -> None:
        command = [*shlex.split(self.editor), str(path)]
        try:
            subprocess.run(command, check=True)
        except FileNotFoundError as e:
            raise EditorError(f"Editor not found: {self.editor}") from e
        except subprocess.CalledProcessError as e:
            raise EditorError(f"Editor '{self.editor}' exited with code {e.returncode}") from e

    def show_diff(self, diff: str) -> None:
        if not diff.strip():
            self.console.print("[dim]No changes.[/]")
            return
        self.console.print(Syntax(diff, "diff", theme="ansi_dark"))
