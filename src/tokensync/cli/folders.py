"""
tokensync CLI - Export folder commands.
"""

import typer
from rich.console import Console

from tokensync.cli import context as cli_context
from tokensync.cli.errors import ExitCode, exit_code_for_status, print_error, print_result_failure
from tokensync.core.browse import BrowseService

console = Console()
app = typer.Typer(
    name="folders",
    help="Browse, create and select the export folder",
    no_args_is_help=True,
)


@app.command(name="list")
def list_folders(
    ctx: typer.Context,
    path: str = typer.Argument("", help="Folder to list (default: repository root)"),
    owner: str | None = typer.Option(None, "--owner", help="Repository owner"),
    repo: str | None = typer.Option(None, "--repo", help="Repository name"),
    branch: str | None = typer.Option(None, "--branch", help="Branch to browse"),
) -> None:
    """
    List sub-folders on the selected branch.

    Examples:
        tokensync folders list
        tokensync folders list tokens/brand
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    owner, repo = cli_context.resolve_repo(cli, owner, repo)
    branch = cli_context.resolve_branch(cli, branch)

    result = BrowseService(cli.client, cli.store).list_folders(
        cli.session, owner, repo, branch, path
    )
    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))

    if not result.entries:
        console.print("[dim]No sub-folders[/dim]")
        return
    for entry in result.entries:
        console.print(f"{entry.path}/")


@app.command()
def create(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Folder to create"),
    owner: str | None = typer.Option(None, "--owner", help="Repository owner"),
    repo: str | None = typer.Option(None, "--repo", help="Repository name"),
    branch: str | None = typer.Option(None, "--branch", help="Branch to write to"),
) -> None:
    """
    Create a folder by committing a .gitkeep placeholder.

    An existing folder is left alone.
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    owner, repo = cli_context.resolve_repo(cli, owner, repo)
    branch = cli_context.resolve_branch(cli, branch)

    result = BrowseService(cli.client, cli.store).create_folder(
        cli.session, owner, repo, branch, path
    )
    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))

    if result.created:
        console.print(f"[green]✓[/green] Created {result.folder_path}/")
    else:
        console.print(f"[blue]{result.folder_path}/ already exists[/blue]")


@app.command(name="set")
def set_folder(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Export folder; '/' or '' for the repository root"),
) -> None:
    """
    Remember the folder exports are written to.

    Examples:
        tokensync folders set tokens/brand
        tokensync folders set /
    """
    cli = cli_context.from_typer(ctx)
    normalized = BrowseService(cli.client, cli.store).set_folder(path)
    if not normalized.ok:
        print_error(normalized.message or "Invalid folder")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"[green]✓[/green] Export folder: {normalized.display}")
