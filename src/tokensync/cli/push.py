"""
tokensync CLI - Publish commands.

``push`` exports tokens from a directory of exported JSON files and
commits them to the selected GitHub target. ``preview`` shows which
files an export would contain without touching GitHub.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax

from tokensync.cli import context as cli_context
from tokensync.cli.errors import ExitCode, exit_code_for_status, print_error, print_result_failure
from tokensync.core.export import DirectoryExportSource, Scope
from tokensync.core.publish import (
    CommitOrchestrator,
    CommitRequest,
    CommitResult,
    ExportFilesRequest,
    serialize_export,
)

console = Console()


def _print_commit(result: CommitResult) -> None:
    console.print(
        f"[green]✓[/green] Committed {result.full_path} to "
        f"{result.owner}/{result.repo}@{result.branch}"
    )
    if result.commit_sha:
        console.print(f"  Commit: {result.commit_sha[:8]}")
    if result.commit_url:
        console.print(f"  [dim]{result.commit_url}[/dim]")

    pr = result.pull_request
    if pr is None:
        return
    if pr.ok:
        verb = "Pull request already open" if pr.already_existed else "Opened pull request"
        console.print(f"[green]✓[/green] {verb} #{pr.number}: {pr.url}")
    else:
        console.print(f"[yellow]⚠[/yellow]  Pull request not created: {pr.message}")


def push(
    ctx: typer.Context,
    export_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory with exported token JSON files",
    ),
    owner: str | None = typer.Option(None, "--owner", help="Repository owner"),
    repo: str | None = typer.Option(None, "--repo", help="Repository name"),
    branch: str | None = typer.Option(None, "--branch", help="Branch to commit to"),
    folder: str | None = typer.Option(
        None, "--folder", help="Folder in the repository; '/' for the root"
    ),
    filename: str | None = typer.Option(None, "--filename", help="File name to write"),
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
    scope: Scope | None = typer.Option(None, "--scope", help="Which tokens to export"),
    collection: str | None = typer.Option(
        None, "--collection", help="Collection for --scope selected"
    ),
    mode: str | None = typer.Option(None, "--mode", help="Mode for --scope selected"),
    style_dictionary: bool = typer.Option(
        False, "--style-dictionary", help="Write Style Dictionary keys (value/type)"
    ),
    flat_tokens: bool = typer.Option(False, "--flat-tokens", help="Flatten token paths"),
    create_pr: bool = typer.Option(False, "--pr", help="Open a pull request after committing"),
    pr_base: str | None = typer.Option(None, "--pr-base", help="Pull request target branch"),
    pr_title: str | None = typer.Option(None, "--pr-title", help="Pull request title"),
    pr_body: str | None = typer.Option(None, "--pr-body", help="Pull request body"),
) -> None:
    """
    Export tokens and commit them when they changed.

    Options left out fall back to the remembered selection. Exits with
    code 3 when the repository already matches the export.

    Examples:
        tokensync push ./export --scope all
        tokensync push ./export --collection Brand --mode Light --folder tokens
        tokensync push ./export --branch tokens/update --pr --pr-base main
    """
    cli = cli_context.from_typer(ctx)
    cli_context.require_token(cli)
    owner, repo = cli_context.resolve_repo(cli, owner, repo)
    branch = cli_context.resolve_branch(cli, branch)
    sel = cli.selection()

    request = CommitRequest(
        owner=owner,
        repo=repo,
        branch=branch,
        folder=folder if folder is not None else (sel.folder or ""),
        filename=filename,
        commit_message=message or sel.commit_message,
        scope=scope or sel.scope or Scope.SELECTED,
        collection=collection,
        mode=mode,
        style_dictionary=style_dictionary,
        flat_tokens=flat_tokens,
        create_pr=create_pr,
        pr_base=pr_base or (sel.pr_base if create_pr else None),
        pr_title=pr_title,
        pr_body=pr_body,
    )

    source = DirectoryExportSource(export_dir)
    orchestrator = CommitOrchestrator(
        cli.client, cli.store, source, source, config=cli.config.publish
    )
    result = orchestrator.export_and_commit(cli.session, request)

    if not result.ok:
        print_result_failure(result.status, result.message)
        raise typer.Exit(exit_code_for_status(False, result.status))
    _print_commit(result)


def preview(
    ctx: typer.Context,
    export_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory with exported token JSON files",
    ),
    scope: Scope | None = typer.Option(None, "--scope", help="Which tokens to export"),
    collection: str | None = typer.Option(None, "--collection", help="Collection"),
    mode: str | None = typer.Option(None, "--mode", help="Mode"),
    style_dictionary: bool = typer.Option(False, "--style-dictionary"),
    flat_tokens: bool = typer.Option(False, "--flat-tokens"),
    show: bool = typer.Option(False, "--show", help="Print file contents"),
) -> None:
    """
    Show the files an export would contain.

    Examples:
        tokensync preview ./export --scope all --show
    """
    cli = cli_context.from_typer(ctx)
    sel = cli.selection()
    request = ExportFilesRequest(
        scope=scope or sel.scope or Scope.SELECTED,
        collection=collection or sel.collection or "",
        mode=mode or sel.mode or "",
        style_dictionary=style_dictionary,
        flat_tokens=flat_tokens,
    )

    source = DirectoryExportSource(export_dir)
    result = CommitOrchestrator(
        cli.client, cli.store, source, source, config=cli.config.publish
    ).export_files(request)
    if not result.files:
        print_error(result.message or "Nothing to export")
        raise typer.Exit(ExitCode.USER_ERROR)

    for export_file in result.files:
        console.print(f"[cyan]{export_file.name}[/cyan]")
        if show:
            console.print(Syntax(serialize_export(export_file.json_data), "json"))
