"""
Shared wiring for CLI commands.

Builds the config, store, GitHub client and credential session every
command works with.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError

from tokensync.cli.errors import (
    ExitCode,
    print_error,
    print_missing_target_error,
    print_not_authenticated_error,
)
from tokensync.core.config import TokensyncConfig, load_config, resolve_store_path, token_from_env
from tokensync.core.github.client import GitHubClient
from tokensync.core.github.protocol import ForgeClient
from tokensync.core.session.manager import ForgeSession, SessionManager
from tokensync.core.state.kv import JsonFileKeyValueStore
from tokensync.core.state.models import Selection
from tokensync.core.state.store import SelectionStore

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for CLI commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_client(config: TokensyncConfig) -> ForgeClient:
    return GitHubClient.from_config(config.github)


@dataclass
class CliContext:
    config: TokensyncConfig
    store: SelectionStore
    client: ForgeClient
    session: ForgeSession
    sessions: SessionManager

    def selection(self) -> Selection:
        return self.store.get_selected()


def build_context(token: str | None = None, project_dir: Path | None = None) -> CliContext:
    """
    Wire up a CliContext.

    The session credential comes from ``token``, then the environment, then
    the remembered token (unless remembering is switched off).
    """
    try:
        config = load_config(project_dir)
    except ValidationError as e:
        print_error("Invalid tokensync configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    store = SelectionStore(JsonFileKeyValueStore(resolve_store_path(config)))
    client = create_client(config)
    sessions = SessionManager(client, store)

    resolved = (token or "").strip() or token_from_env()
    if not resolved and sessions.remember_pref():
        resolved = sessions.stored_token()
    logger.debug("GitHub token %s", "found" if resolved else "not found")
    return CliContext(
        config=config,
        store=store,
        client=client,
        session=ForgeSession(token=resolved),
        sessions=sessions,
    )


def require_token(ctx: CliContext) -> str:
    if not ctx.session.token:
        print_not_authenticated_error()
        raise typer.Exit(ExitCode.USER_ERROR)
    return ctx.session.token


def resolve_repo(ctx: CliContext, owner: str | None, repo: str | None) -> tuple[str, str]:
    """Owner/repo from options, falling back to the remembered selection."""
    sel = ctx.selection()
    owner = owner or sel.owner
    repo = repo or sel.repo
    if not owner:
        print_missing_target_error("owner")
        raise typer.Exit(ExitCode.USER_ERROR)
    if not repo:
        print_missing_target_error("repo")
        raise typer.Exit(ExitCode.USER_ERROR)
    return owner, repo


def resolve_branch(ctx: CliContext, branch: str | None) -> str:
    branch = branch or ctx.selection().branch
    if not branch:
        print_missing_target_error("branch")
        raise typer.Exit(ExitCode.USER_ERROR)
    return branch


def from_typer(ctx: typer.Context) -> CliContext:
    """
    Build a CliContext using the global ``--token`` option, if given.

    The GitHub client is closed when the command finishes.
    """
    obj = ctx.obj or {}
    cli = build_context(obj.get("token"))
    ctx.call_on_close(cli.client.close)
    return cli
