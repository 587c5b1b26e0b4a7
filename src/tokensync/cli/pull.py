"""
tokensync CLI - Pull command.
"""

from pathlib import Path

import typer
from rich.console import Console

from tokensync.cli import context as cli_context
from tokensync.cli.errors import exit_code_for_status, print_result_failure
from tokensync.core.pull import FileTokenImporter, PullService

console = Console()


def pull(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path of the token file in the repository"),
    output: Path = typer.Option(
        Path("tokens.json"), "--output", "-o", help="Where to write the pulled tokens"
    ),
    owner: str | None = typer.Option(None, "--owner", help="Repository owner"),
    repo: str | None = typer.Option(None, "--repo", help="Repository name"),
    branch: str | None = typer.Option(None, "--branch", help="Branch to read from"),
    allow_hex: bool = typer.Option(
        False, "--allow-hex", help="Accept hex strings as color values"
    ),
    contexts: list[str] = typer.Option(
        [], "--context", help="Token context to import (repeatable)"
    ),
) -> None:
    """
    Fetch a token file from GitHub and write it locally.

    Examples:
        tokensync pull tokens/tokens.json -o ./tokens.json
        tokensync pull tokens/brand_light.json --branch main --context light
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    owner, repo = cli_context.resolve_repo(cli, owner, repo)
    branch = cli_context.resolve_branch(cli, branch)

    service = PullService(cli.client, FileTokenImporter(output))
    result = service.fetch_tokens(
        cli.session,
        owner,
        repo,
        branch,
        path,
        allow_hex_strings=allow_hex,
        contexts=contexts,
    )
    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))

    count = result.summary.token_count if result.summary else 0
    console.print(
        f"[green]✓[/green] Pulled {count} tokens from "
        f"{owner}/{repo}@{branch}:{result.path} into {output}"
    )
