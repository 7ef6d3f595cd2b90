"""
Branchwright CLI - Repo command.

Shows the hosting service and web URL of the repository.
"""

from __future__ import annotations

import webbrowser
from typing import Annotated

import typer
from rich.console import Console

from branchwright.cli.errors import ExitCode, print_no_hosting_driver_error
from branchwright.cli.execution import open_repository

console = Console()
app = typer.Typer(
    name="repo",
    help="Show the repository on its hosting service",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def repo(
    ctx: typer.Context,
    open_browser: Annotated[
        bool,
        typer.Option("--open", "-o", help="Open the repository in the browser"),
    ] = False,
) -> None:
    """
    Print the web URL of the repository.

    Examples:
        branchwright repo          # Print the URL
        branchwright repo --open   # Open it in the browser
    """
    if ctx.invoked_subcommand is not None:
        return

    repository = open_repository()
    driver = repository.driver
    if driver is None:
        print_no_hosting_driver_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    url = driver.repository_url()
    console.print(f"{driver.hosting_service_name()}: {url}", highlight=False)
    if open_browser:
        webbrowser.open(url)
