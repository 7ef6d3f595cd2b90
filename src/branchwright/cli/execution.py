"""
Shared helpers for commands that execute step lists.

Opens the repository, echoes each git command as it runs, and turns
conflicts into an interactive continue/abort choice (or, when there is
no terminal, into instructions and a dedicated exit code).
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from branchwright.cli.errors import (
    ExitCode,
    print_conflict_instructions,
    print_error,
    print_not_git_repo_error,
)
from branchwright.core.git import GitError, GitRepo
from branchwright.core.hosting import HostingError
from branchwright.core.repository import Repository
from branchwright.core.steps import RunResult, Step, StepList, StepRunner

console = Console()


class ConsoleStepPrinter:
    """Runner callback that prints every step before it runs."""

    def __init__(self, output: Console | None = None) -> None:
        self.output = output or console

    def on_step(self, step: Step) -> None:
        self.output.print(f"[bold]{step.describe()}[/bold]", highlight=False)


def hosting_log(template: str, *args: Any) -> None:
    """Log callback for hosting drivers: prints API activity dimmed."""
    message = template % args if args else template
    console.print(message, style="dim", markup=False, highlight=False)


def is_interactive() -> bool:
    return sys.stdin.isatty()


def open_repository(project_dir: Path | None = None) -> Repository:
    """
    Open the repository containing the current directory, rooted at its top level.

    Exits with USER_ERROR when the directory isn't inside a git repository
    or the configuration is invalid.
    """
    git = GitRepo(project_dir)
    try:
        root = Path(git.run("rev-parse", "--show-toplevel"))
    except GitError:
        print_not_git_repo_error()
        raise typer.Exit(ExitCode.USER_ERROR)
    try:
        return Repository.open(root, log=hosting_log)
    except ValidationError as e:
        print_error(
            "Invalid configuration",
            reason=str(e),
            solution="fix .branchwright.json or ~/.config/branchwright/config.json",
        )
        raise typer.Exit(ExitCode.USER_ERROR)


def print_steps(steps: StepList) -> None:
    """Print the git commands of a plan without running them."""
    for step in steps:
        console.print(step.describe(), highlight=False)


def report_failure(error: Exception) -> None:
    """Print a fatal git or hosting error."""
    if isinstance(error, GitError):
        print_error(str(error), reason=error.stderr or None)
    elif isinstance(error, HostingError):
        print_error(str(error))
    else:
        print_error(f"Unexpected error: {error}")


def _ask_resolution() -> str:
    while True:
        answer = typer.prompt(
            "Resolve the conflicts, then type 'continue' (or 'abort' to undo)",
            default="continue",
        )
        answer = answer.strip().lower()
        if answer in ("continue", "abort"):
            return answer
        console.print("[yellow]Please answer 'continue' or 'abort'[/yellow]")


def resolve_conflicts(runner: StepRunner, result: RunResult, *, interactive: bool) -> RunResult:
    """
    Drive a halted run to completion or abort.

    Returns:
        The final, completed RunResult

    Raises:
        typer.Exit: CONFLICT when not interactive, GENERAL_ERROR after an abort
    """
    while result.conflict is not None:
        conflict = result.conflict
        console.print(
            f"[yellow]Conflict:[/yellow] {conflict.step.describe()} stopped", highlight=False
        )
        if not interactive:
            print_conflict_instructions(conflict.message)
            raise typer.Exit(ExitCode.CONFLICT)

        console.print(conflict.message, style="dim", markup=False, highlight=False)
        if _ask_resolution() == "abort":
            runner.abort(conflict)
            console.print("[yellow]Aborted.[/yellow] The remaining steps were skipped.")
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        result = runner.continue_run(conflict)
    return result


def run_steps(repo: Repository, steps: StepList, *, interactive: bool | None = None) -> RunResult:
    """
    Execute steps, handling conflicts and fatal errors the same way for all commands.

    Raises:
        typer.Exit: On conflicts that weren't resolved and on fatal errors
    """
    if interactive is None:
        interactive = is_interactive()
    runner = StepRunner(repo, ConsoleStepPrinter())
    try:
        result = runner.execute(steps)
        return resolve_conflicts(runner, result, interactive=interactive)
    except (GitError, HostingError) as e:
        report_failure(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
