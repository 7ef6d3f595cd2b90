"""
Branchwright CLI - Ship command.

Delivers a feature branch into its parent as one squashed commit and
deletes it.
"""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console

from branchwright.cli.errors import ExitCode, print_dirty_working_tree_error, print_error
from branchwright.cli.execution import open_repository, report_failure, run_steps
from branchwright.core.git import GitError
from branchwright.core.hosting import HostingError, PullRequestInfo
from branchwright.core.steps import ShipError, fetch_steps, ship_steps

console = Console()
app = typer.Typer(
    name="ship",
    help="Squash-merge a feature branch into its parent and delete it",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def ship(
    ctx: typer.Context,
    branch: Annotated[
        Optional[str],
        typer.Argument(help="Branch to ship (defaults to the current branch)"),
    ] = None,
    message: Annotated[
        Optional[str],
        typer.Option(
            "--message",
            "-m",
            help="Commit message for the squash commit",
        ),
    ] = None,
) -> None:
    """
    Ship a feature branch.

    Syncs the parent branch and the feature branch, then squash-merges the
    feature branch into its parent. When the origin is on a supported
    hosting service and exactly one pull request exists for the branch,
    the merge happens through the pull request; otherwise it happens
    locally and the parent is pushed. Finally the branch is deleted
    locally and on origin.

    Examples:
        branchwright ship                       # Ship the current branch
        branchwright ship my-feature            # Ship another branch
        branchwright ship -m "Add login page"   # Custom commit message
    """
    if ctx.invoked_subcommand is not None:
        return

    repo = open_repository()
    try:
        initial = repo.git.current_branch()
        target = branch or initial
        if not repo.git.has_local_branch(target):
            print_error(f"There is no branch named '{target}'")
            raise typer.Exit(ExitCode.USER_ERROR)
        if repo.git.has_uncommitted_changes():
            print_dirty_working_tree_error()
            raise typer.Exit(ExitCode.USER_ERROR)

        run_steps(repo, fetch_steps(repo))

        pull_request: PullRequestInfo | None = None
        parent = repo.config.parent_branch(target)
        if repo.driver is not None and not repo.config.is_offline():
            pull_request = repo.driver.load_pull_request_info(target, parent)

        return_to = initial if initial != target else parent
        steps = ship_steps(
            target,
            repo,
            commit_message=message,
            pull_request=pull_request,
            return_to=return_to,
        )
    except ShipError as e:
        print_error(str(e), solution="only feature branches can be shipped")
        raise typer.Exit(ExitCode.USER_ERROR)
    except (GitError, HostingError) as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    run_steps(repo, steps)
    console.print(f"[green]✓[/green] Shipped {target} into {parent}", highlight=False)
