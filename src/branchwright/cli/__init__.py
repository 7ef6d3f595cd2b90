"""
Branchwright CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from branchwright import __version__
from branchwright.cli import prune, repo, resolve, ship, sync
from branchwright.core.config.env import load_layered_env

# Help panel names for command grouping
PANEL_BRANCHES = "Work with Branches"
PANEL_CONFLICTS = "Resolve Conflicts"
PANEL_INFO = "Repository Info"

app = typer.Typer(
    name="branchwright",
    help="Branch workflow automation for git",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    Branchwright - keep feature branches in sync and ship them.

    Common Workflows:
        branchwright sync              # Sync the current branch
        branchwright sync --all        # Sync every local branch
        branchwright ship              # Squash-merge the current branch
        branchwright prune-branches    # Delete branches removed on origin
        branchwright repo --open       # Open the repository in the browser

    Conflicts:
        branchwright continue          # After resolving conflicts
        branchwright abort             # Undo the conflicting operation
    """
    setup_logging(debug)

    # Hosting tokens may live in .env files.
    # Precedence: OS env > project .env > user .env
    load_layered_env()

    ctx.obj = {"debug": debug}


app.add_typer(sync.app, name="sync", rich_help_panel=PANEL_BRANCHES)
app.add_typer(ship.app, name="ship", rich_help_panel=PANEL_BRANCHES)
app.add_typer(prune.app, name="prune-branches", rich_help_panel=PANEL_BRANCHES)

app.command(name="continue", rich_help_panel=PANEL_CONFLICTS)(resolve.continue_command)
app.command(name="abort", rich_help_panel=PANEL_CONFLICTS)(resolve.abort_command)

app.add_typer(repo.app, name="repo", rich_help_panel=PANEL_INFO)


@app.command(rich_help_panel=PANEL_INFO)
def version() -> None:
    """Show branchwright version and exit."""
    console.print(f"branchwright version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
