"""
GitHub token and .env loading.

The token (and any ``TOKENSYNC_*`` override) may live in a ``.env`` file
next to the user config or in the project directory. Precedence:

  shell environment > project .env > user .env
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

from .loader import get_user_config_path

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("TOKENSYNC_GITHUB_TOKEN", "GITHUB_TOKEN")


def _collect(paths: Iterable[Path]) -> dict[str, str]:
    """Merge the values of every existing .env file; later files win."""
    merged: dict[str, str] = {}
    for path in map(Path, paths):
        if path.is_file():
            merged.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    return merged


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> list[str]:
    """
    Export .env values that the shell has not already set.

    Args:
        project_dir: Directory holding the project .env (defaults to cwd)
        user_env_paths: User .env files (defaults to the one beside the user config)
        project_env_paths: Project .env files (defaults to ``project_dir/.env``)

    Returns:
        Names of the variables that were set
    """
    if user_env_paths is None:
        user_env_paths = [get_user_config_path().parent / ".env"]
    if project_env_paths is None:
        project_env_paths = [(project_dir or Path.cwd()) / ".env"]

    layered = {**_collect(user_env_paths), **_collect(project_env_paths)}
    applied = [name for name in layered if name not in os.environ]
    for name in applied:
        os.environ[name] = layered[name]
    if applied:
        logger.debug("Loaded %s from .env files", ", ".join(sorted(applied)))
    return applied


def token_from_env() -> str | None:
    """Return the first non-empty GitHub token found in the environment."""
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None
