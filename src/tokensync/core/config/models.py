"""
Configuration data models for tokensync.

These models define the structure of .tokensync.json and
~/.config/tokensync/config.json files, with validation and type safety
via Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitHubConfig(BaseModel):
    """
    Connection settings for the GitHub REST API.
    """
    api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API (GitHub Enterprise uses /api/v3)"
    )
    web_url: str = Field(
        default="https://github.com",
        description="Base URL used to build commit, tree and pull request links"
    )
    api_version: str = Field(
        default="2022-11-28",
        description="Value sent in the X-GitHub-Api-Version header"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout in seconds"
    )

    @field_validator('api_url', 'web_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store base URLs without a trailing slash."""
        return v.rstrip("/")


class PublishConfig(BaseModel):
    """
    Defaults applied when exporting and committing token files.
    """
    default_filename: str = Field(
        default="tokens.json",
        description="Filename used when neither the request nor the stored selection has one"
    )
    default_commit_message: str = Field(
        default="Update tokens from Figma",
        description="Commit message used when the request leaves it empty"
    )
    race_retry_delay_ms: int = Field(
        default=200,
        ge=0,
        le=10_000,
        description="Fixed wait before the single retry of a fast-forward race"
    )


class StorageConfig(BaseModel):
    """
    Location of the persisted selection, signature and credential store.
    """
    store_path: Optional[str] = Field(
        default=None,
        description="Path of the JSON key-value store (defaults to $XDG_DATA_HOME/tokensync/store.json)"
    )


class TokensyncConfig(BaseModel):
    """
    Top-level tokensync configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TokensyncConfig(publish=PublishConfig(race_retry_delay_ms=50))
        >>> config.publish.race_retry_delay_ms
        50
    """
    github: GitHubConfig = Field(
        default_factory=GitHubConfig,
        description="GitHub API connection"
    )
    publish: PublishConfig = Field(
        default_factory=PublishConfig,
        description="Export and commit defaults"
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Persistent state location"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )
