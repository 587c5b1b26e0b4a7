"""
tokensync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import typer
from rich.console import Console

from tokensync import __version__
from tokensync.cli import auth, branches, folders, pull, push, repos, state
from tokensync.cli.context import setup_logging
from tokensync.core.config.env import load_layered_env

PANEL_TARGET = "Choose Where Tokens Go"
PANEL_PUBLISH = "Publish and Pull Tokens"

app = typer.Typer(
    name="tokensync",
    help="Commit design token exports to GitHub",
    no_args_is_help=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"tokensync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        help="GitHub token for this invocation (overrides env and remembered token)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    tokensync - publish design tokens to GitHub.

    Quick Start:
        1. tokensync auth login --remember
        2. tokensync repos select acme/design
        3. tokensync branches list
        4. tokensync push ./export --scope all

    Token lookup order: --token, TOKENSYNC_GITHUB_TOKEN, GITHUB_TOKEN,
    then the remembered token.
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug, "token": token}


app.add_typer(auth.app, name="auth", rich_help_panel=PANEL_TARGET)
app.add_typer(repos.app, name="repos", rich_help_panel=PANEL_TARGET)
app.add_typer(branches.app, name="branches", rich_help_panel=PANEL_TARGET)
app.add_typer(folders.app, name="folders", rich_help_panel=PANEL_TARGET)
app.add_typer(state.app, name="state", rich_help_panel=PANEL_TARGET)

app.command(name="push", rich_help_panel=PANEL_PUBLISH)(push.push)
app.command(name="preview", rich_help_panel=PANEL_PUBLISH)(push.preview)
app.command(name="pull", rich_help_panel=PANEL_PUBLISH)(pull.pull)


__all__ = ["app"]
