"""
Branchwright CLI - Prune-branches command.

Deletes local branches that were merged and removed on origin.
"""

from __future__ import annotations

import typer
from rich.console import Console

from branchwright.cli.errors import ExitCode, print_error
from branchwright.cli.execution import open_repository, report_failure, run_steps
from branchwright.core.git import GitError
from branchwright.core.steps import fetch_steps, prune_branches_steps

console = Console()
app = typer.Typer(
    name="prune-branches",
    help="Delete local branches whose tracking branch is gone",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def prune_branches(ctx: typer.Context) -> None:
    """
    Delete merged branches.

    Fetches from origin with pruning, then deletes every local feature
    branch whose tracking branch no longer exists. Perennial branches are
    kept.

    Examples:
        branchwright prune-branches
    """
    if ctx.invoked_subcommand is not None:
        return

    repo = open_repository()
    if repo.config.is_offline():
        print_error("Cannot prune branches in offline mode", solution="unset offline")
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        if not repo.git.has_remote("origin"):
            print_error("No git remote 'origin' found")
            raise typer.Exit(ExitCode.USER_ERROR)
    except GitError as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    run_steps(repo, fetch_steps(repo))

    # Planned after the fetch so the tracking information is current
    try:
        steps = prune_branches_steps(repo)
    except GitError as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if steps.is_empty():
        console.print("[blue]No branches to prune[/blue]")
        return

    run_steps(repo, steps)
    console.print(f"[green]✓[/green] Pruned {len(steps.branch_names())} branches")
