"""
Branchwright CLI - Continue and abort commands.

Finish or undo a merge, rebase or squash merge that a previous run left
stopped on conflicts. Nothing is persisted between runs: only the
interrupted git operation is handled; re-run the original command to
sync the remaining branches.
"""

from __future__ import annotations

import typer
from rich.console import Console

from branchwright.cli.errors import ExitCode, print_error
from branchwright.cli.execution import open_repository, report_failure, run_steps
from branchwright.core.git import GitError
from branchwright.core.steps import interrupted_operation

console = Console()

NOTHING_IN_PROGRESS = "No merge, rebase or squash merge is in progress"


def continue_command() -> None:
    """Finish the interrupted merge after resolving its conflicts."""
    repo = open_repository()
    try:
        conflict = interrupted_operation(repo)
    except GitError as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    if conflict is None:
        print_error("Nothing to continue", reason=NOTHING_IN_PROGRESS)
        raise typer.Exit(ExitCode.USER_ERROR)

    run_steps(repo, conflict.continue_steps)
    console.print("[green]✓[/green] Continued. Re-run your last command to finish the remaining branches.")


def abort_command() -> None:
    """Undo the merge that stopped on conflicts."""
    repo = open_repository()
    try:
        conflict = interrupted_operation(repo)
    except GitError as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    if conflict is None:
        print_error("Nothing to abort", reason=NOTHING_IN_PROGRESS)
        raise typer.Exit(ExitCode.USER_ERROR)

    run_steps(repo, conflict.abort_steps)
    console.print("[green]✓[/green] Aborted")
