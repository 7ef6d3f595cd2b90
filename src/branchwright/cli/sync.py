"""
Branchwright CLI - Sync command.

Brings the current branch (or all local branches) up to date with its
tracking branch, its parent, and the upstream repository.
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from branchwright.cli.errors import ExitCode
from branchwright.cli.execution import open_repository, print_steps, report_failure, run_steps
from branchwright.core.git import GitError
from branchwright.core.steps import (
    branches_in_sync_order,
    fetch_steps,
    plan_sync,
    sync_steps_for,
)

console = Console()
app = typer.Typer(
    name="sync",
    help="Sync branches with their parents and remotes",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def sync(
    ctx: typer.Context,
    all_branches: Annotated[
        bool,
        typer.Option(
            "--all",
            "-a",
            help="Sync all local branches, parents before children",
        ),
    ] = False,
    no_push: Annotated[
        bool,
        typer.Option(
            "--no-push",
            help="Don't push branches after syncing them",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Print the git commands without running them",
        ),
    ] = False,
) -> None:
    """
    Sync the current branch.

    Feature branches merge their tracking branch and their parent branch.
    Perennial branches pull from their tracking branch (merge or rebase,
    per pull_branch_strategy); the main branch also rebases onto
    upstream/<main> when an upstream remote exists.

    Examples:
        branchwright sync             # Sync the current branch
        branchwright sync --all       # Sync every local branch
        branchwright sync --no-push   # Sync without pushing
        branchwright sync -n          # Show what would run
    """
    if ctx.invoked_subcommand is not None:
        return

    repo = open_repository()
    try:
        fetch = fetch_steps(repo)
    except GitError as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    if dry_run:
        print_steps(fetch)
    else:
        run_steps(repo, fetch)

    try:
        initial = repo.git.current_branch()
        if all_branches:
            branches = branches_in_sync_order(repo.git.local_branches(), repo)
        else:
            branches = [*repo.config.ancestor_branches(initial), initial]
            branches = [b for b in branches if repo.git.has_local_branch(b)]
        results = plan_sync(branches, not no_push, repo)
        steps = sync_steps_for(results, return_to=initial)
    except GitError as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if dry_run:
        print_steps(steps)
        return

    run_steps(repo, steps)
    console.print(f"[green]✓[/green] Synced {', '.join(branches)}", highlight=False)
