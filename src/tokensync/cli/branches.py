"""
tokensync CLI - Branch commands.
"""

import typer
from rich.console import Console

from tokensync.cli import context as cli_context
from tokensync.cli.errors import exit_code_for_status, print_result_failure
from tokensync.core.browse import BrowseService

console = Console()
app = typer.Typer(
    name="branches",
    help="List, select and create branches",
    no_args_is_help=True,
)


@app.command(name="list")
def list_branches(
    ctx: typer.Context,
    owner: str | None = typer.Option(None, "--owner", help="Repository owner"),
    repo: str | None = typer.Option(None, "--repo", help="Repository name"),
    page: int = typer.Option(1, "--page", min=1, help="Page of 100 branches"),
    force: bool = typer.Option(False, "--force", help="Bypass HTTP caches"),
) -> None:
    """
    List branches of the selected repository.

    Page 1 also selects the repository's default branch.

    Examples:
        tokensync branches list
        tokensync branches list --owner acme --repo design --page 2
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    owner, repo = cli_context.resolve_repo(cli, owner, repo)

    result = BrowseService(cli.client, cli.store).fetch_branches(
        cli.session, owner, repo, page=page, force=force
    )
    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))

    selected = cli.selection().branch
    for name in result.branches:
        if name == selected:
            console.print(f"[green]* {name}[/green]")
        else:
            console.print(f"  {name}")
    if result.has_more:
        console.print(f"[dim]More branches: --page {page + 1}[/dim]")


@app.command()
def select(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Branch to publish to"),
) -> None:
    """Remember the branch to publish to; clears the remembered folder."""
    cli = cli_context.from_typer(ctx)
    cli_context.resolve_repo(cli, None, None)
    selection = BrowseService(cli.client, cli.store).select_branch(branch.strip())
    console.print(
        f"[green]✓[/green] Selected {selection.owner}/{selection.repo}@{selection.branch}"
    )


@app.command()
def create(
    ctx: typer.Context,
    new_branch: str = typer.Argument(..., help="Name of the branch to create"),
    base: str | None = typer.Option(
        None, "--from", help="Branch to start from (default: selected branch)"
    ),
    owner: str | None = typer.Option(None, "--owner", help="Repository owner"),
    repo: str | None = typer.Option(None, "--repo", help="Repository name"),
) -> None:
    """
    Create a branch and select it.

    Examples:
        tokensync branches create tokens/update --from main
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    owner, repo = cli_context.resolve_repo(cli, owner, repo)
    base_branch = cli_context.resolve_branch(cli, base)

    result = BrowseService(cli.client, cli.store).create_branch(
        cli.session, owner, repo, base_branch, new_branch.strip()
    )
    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))

    console.print(f"[green]✓[/green] Created {result.new_branch} from {result.base_branch}")
    if result.html_url:
        console.print(f"[dim]{result.html_url}[/dim]")
