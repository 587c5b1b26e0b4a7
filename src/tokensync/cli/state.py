"""
tokensync CLI - Remembered selection commands.
"""

import typer
from rich.console import Console
from rich.table import Table

from tokensync.cli import context as cli_context
from tokensync.core.config import resolve_store_path
from tokensync.core.state import SELECTED_KEY

console = Console()
app = typer.Typer(
    name="state",
    help="Show and reset the remembered selection",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the remembered target, export options and last commit."""
    cli = cli_context.from_typer(ctx)
    data = cli.selection().to_storage()

    table = Table(title="Selection")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, str(value))
    if not data:
        table.add_row("[dim]none[/dim]", "")
    console.print(table)

    signature = cli.store.get_last_commit_signature()
    if signature is not None:
        console.print(
            f"Last commit: {signature.full_path} on {signature.branch} "
            f"(scope {signature.scope.value})"
        )
    console.print(f"[dim]Store: {resolve_store_path(cli.config)}[/dim]")


@app.command(name="clear-signature")
def clear_signature(ctx: typer.Context) -> None:
    """
    Forget the last commit signature.

    The next push reads the remote file again before deciding whether
    anything changed.
    """
    cli = cli_context.from_typer(ctx)
    cli.store.clear_last_commit_signature()
    console.print("[green]✓[/green] Cleared last commit signature")


@app.command()
def reset(ctx: typer.Context) -> None:
    """Forget the remembered selection and last commit signature."""
    cli = cli_context.from_typer(ctx)
    cli.store.remove(SELECTED_KEY)
    cli.store.clear_last_commit_signature()
    console.print("[green]✓[/green] Selection cleared")
