"""
Exit codes and error output for branchwright commands.

Every failure a command reports goes through ``print_error``, which pairs
the problem with a command that gets the user unstuck.
"""

from enum import IntEnum

from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    """Process exit statuses."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    """A git command or hosting API call failed."""

    USER_ERROR = 2
    """Invalid input or configuration, or a repository in the wrong state."""

    CONFLICT = 3
    """A merge or rebase stopped and is waiting for manual resolution."""

    SIGINT = 130


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Report a failure on the console.

    Args:
        problem: One-line summary, printed after ``Error:``
        reason: Underlying cause, usually the git or API message
        solution: Command the user can run next

    Example:
        >>> print_error(
        ...     "Cannot ship main",
        ...     reason="main is a perennial branch",
        ...     solution="git checkout my-feature",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)

    if reason:
        console.print(reason, style="dim", markup=False, highlight=False)

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)


def print_not_git_repo_error() -> None:
    """Print error when not in a git repository."""
    print_error(
        "Not a git repository",
        reason="branchwright operates on the git repository in the current directory",
        solution="cd to your repository root",
    )


def print_dirty_working_tree_error() -> None:
    """Print error when the working tree has uncommitted changes."""
    print_error(
        "You have uncommitted changes",
        reason="Shipping squash-merges branches and needs a clean working tree",
        solution="git commit -am 'WIP'  # or git stash",
    )


def print_no_hosting_driver_error() -> None:
    """Print error when the origin remote isn't on a supported hosting service."""
    print_error(
        "Unsupported hosting service",
        reason="The origin remote isn't on GitHub, GitLab, Gitea, or Bitbucket",
        solution='set "hosting": {"service": "..."} in .branchwright.json',
    )


def print_conflict_instructions(message: str) -> None:
    """Print how to get out of a conflict after the process exits."""
    print_error(
        "Conflicts need to be resolved",
        reason=message,
        solution="resolve the conflicts, then run 'branchwright continue'\n"
        "       [cyan]→ Or:[/cyan] run 'branchwright abort' to undo the operation",
    )


__all__ = [
    "ExitCode",
    "print_conflict_instructions",
    "print_dirty_working_tree_error",
    "print_error",
    "print_no_hosting_driver_error",
    "print_not_git_repo_error",
]
