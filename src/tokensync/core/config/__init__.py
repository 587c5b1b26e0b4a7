"""
Configuration models and loading.

This module provides Pydantic models for tokensync configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .env import load_layered_env, token_from_env
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    get_xdg_data_home,
    load_config,
    resolve_store_path,
)
from .models import GitHubConfig, PublishConfig, StorageConfig, TokensyncConfig

__all__ = [
    # Models
    "GitHubConfig",
    "PublishConfig",
    "StorageConfig",
    "TokensyncConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "get_xdg_data_home",
    "load_config",
    "resolve_store_path",
    # Environment
    "load_layered_env",
    "token_from_env",
]
