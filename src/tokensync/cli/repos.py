"""
tokensync CLI - Repository commands.
"""

import typer
from rich.console import Console
from rich.table import Table

from tokensync.cli import context as cli_context
from tokensync.cli.errors import ExitCode, exit_code_for_status, print_error, print_result_failure
from tokensync.core.browse import BrowseService

console = Console()
app = typer.Typer(
    name="repos",
    help="List and select repositories",
    no_args_is_help=True,
)


@app.command(name="list")
def list_repos(ctx: typer.Context) -> None:
    """
    List repositories the token can access.

    Examples:
        tokensync repos list
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    result = BrowseService(cli.client, cli.store).list_repos(cli.session)
    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))

    selected = cli.selection()
    table = Table(title=f"Repositories ({len(result.repos)})")
    table.add_column("Repository", style="cyan")
    table.add_column("Default branch")
    table.add_column("Private")
    table.add_column("Push")
    for repo in result.repos:
        marker = " *" if repo.owner == selected.owner and repo.name == selected.repo else ""
        table.add_row(
            f"{repo.full_name}{marker}",
            repo.default_branch,
            "yes" if repo.private else "no",
            "yes" if repo.permissions and repo.permissions.push else "no",
        )
    console.print(table)


@app.command()
def select(
    ctx: typer.Context,
    full_name: str = typer.Argument(..., help="Repository as OWNER/REPO"),
) -> None:
    """
    Remember the repository to publish to.

    Selecting a repository clears the remembered folder.

    Examples:
        tokensync repos select acme/design
    """
    owner, sep, repo = full_name.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        print_error(f"Invalid repository: {full_name}", solution="use OWNER/REPO")
        raise typer.Exit(ExitCode.USER_ERROR)

    cli = cli_context.from_typer(ctx)
    selection = BrowseService(cli.client, cli.store).select_repo(owner, repo)
    console.print(f"[green]✓[/green] Selected {selection.owner}/{selection.repo}")
