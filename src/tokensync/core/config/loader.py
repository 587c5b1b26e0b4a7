"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import TokensyncConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: TokensyncConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_xdg_data_home() -> Path:
    """
    Get XDG data home directory.

    Returns:
        Path to data directory (defaults to ~/.local/share)
    """
    if xdg_home := os.environ.get("XDG_DATA_HOME"):
        return Path(xdg_home)
    return Path.home() / ".local" / "share"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/tokensync/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "tokensync" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .tokensync.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".tokensync.json"


def get_default_store_path() -> Path:
    """Path of the key-value store when storage.store_path is unset."""
    return get_xdg_data_home() / "tokensync" / "store.json"


def resolve_store_path(config: TokensyncConfig) -> Path:
    """Return the configured store path, expanding ``~``."""
    if config.storage.store_path:
        return Path(config.storage.store_path).expanduser()
    return get_default_store_path()


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 30}})
        {'a': 1, 'b': {'x': 10, 'y': 30}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config system should be resilient to a broken file
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        TOKENSYNC_API_URL - overrides github.api_url
        TOKENSYNC_TIMEOUT - overrides github.timeout_seconds
        TOKENSYNC_RACE_RETRY_DELAY_MS - overrides publish.race_retry_delay_ms
        TOKENSYNC_STORE_PATH - overrides storage.store_path

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if api_url := os.environ.get("TOKENSYNC_API_URL"):
        result.setdefault("github", {})
        result["github"] = {**result["github"], "api_url": api_url}

    if timeout_str := os.environ.get("TOKENSYNC_TIMEOUT"):
        try:
            timeout = float(timeout_str)
            result.setdefault("github", {})
            result["github"] = {**result["github"], "timeout_seconds": timeout}
        except ValueError:
            logger.warning("Invalid TOKENSYNC_TIMEOUT value '%s', ignoring", timeout_str)

    if delay_str := os.environ.get("TOKENSYNC_RACE_RETRY_DELAY_MS"):
        try:
            delay = int(delay_str)
            result.setdefault("publish", {})
            result["publish"] = {**result["publish"], "race_retry_delay_ms": delay}
        except ValueError:
            logger.warning(
                "Invalid TOKENSYNC_RACE_RETRY_DELAY_MS value '%s', ignoring", delay_str
            )

    if store_path := os.environ.get("TOKENSYNC_STORE_PATH"):
        result.setdefault("storage", {})
        result["storage"] = {**result["storage"], "store_path": store_path}

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "github": {"api_url": "https://api.github.com", "timeout_seconds": 30.0},
        "publish": {
            "default_filename": "tokens.json",
            "default_commit_message": "Update tokens from Figma",
            "race_retry_delay_ms": 200,
        },
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TokensyncConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TOKENSYNC_*)
        2. Project config (.tokensync.json)
        3. User config (~/.config/tokensync/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .tokensync.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated TokensyncConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = TokensyncConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
