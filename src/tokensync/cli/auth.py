"""
tokensync CLI - GitHub authentication commands.
"""

import typer
from rich.console import Console

from tokensync.cli import context as cli_context
from tokensync.cli.errors import ExitCode, print_error

console = Console()
app = typer.Typer(
    name="auth",
    help="Set, check and forget the GitHub token",
    no_args_is_help=True,
)


@app.command()
def login(
    ctx: typer.Context,
    token: str = typer.Option(
        ...,
        "--with-token",
        prompt="GitHub personal access token",
        hide_input=True,
        help="Personal access token (prompted when omitted)",
    ),
    remember: bool = typer.Option(
        False,
        "--remember/--no-remember",
        help="Store the token for later invocations",
    ),
) -> None:
    """
    Verify a GitHub token and optionally remember it.

    Examples:
        tokensync auth login --remember
        tokensync auth login --with-token "$GITHUB_TOKEN"
    """
    cli = cli_context.from_typer(ctx)
    result = cli.sessions.set_token(cli.session, token, remember=remember)
    if not result.ok:
        if result.error == "empty token":
            print_error("No token given", solution="tokensync auth login")
            raise typer.Exit(ExitCode.USER_ERROR)
        print_error(
            "GitHub rejected the token",
            reason=result.error,
            solution="check the token's scopes and SSO authorization",
        )
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    who = result.login if not result.name else f"{result.login} ({result.name})"
    console.print(f"[green]✓[/green] Authenticated as {who}")
    if remember:
        console.print("[dim]Token remembered for later invocations[/dim]")


@app.command()
def logout(ctx: typer.Context) -> None:
    """Forget the remembered GitHub token."""
    cli = cli_context.from_typer(ctx)
    cli.sessions.forget_token(cli.session)
    console.print("[green]✓[/green] Forgot the remembered token")


@app.command()
def status(ctx: typer.Context) -> None:
    """
    Show which GitHub user the current token belongs to.

    Exits with code 2 when no token is available.
    """
    cli = cli_context.from_typer(ctx)
    token = cli_context.require_token(cli)
    who = cli.client.get_user(token)
    if not who.ok or who.user is None:
        print_error("GitHub authentication failed", reason=who.message)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    console.print(f"Authenticated as [bold]{who.user.login}[/bold]")
    if who.rate and who.rate.remaining is not None:
        console.print(f"[dim]Rate limit remaining: {who.rate.remaining}[/dim]")
    remembered = "on" if cli.sessions.remember_pref() else "off"
    console.print(f"[dim]Remember token: {remembered}[/dim]")
