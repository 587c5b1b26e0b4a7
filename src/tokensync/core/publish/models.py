"""
Request and result models for publishing token exports.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from tokensync.core.export.models import ExportFile, Scope
from tokensync.core.github.models import PullRequestResult, RateInfo


class CommitRequest(BaseModel):
    """
    One export-and-commit request.

    ``filename``, ``collection`` and ``mode`` fall back to the remembered
    selection when left unset.
    """

    owner: str = ""
    repo: str = ""
    branch: str = Field(default="", description="Branch the commit is written to")
    folder: str = Field(default="", description="Raw folder, normalized before use")
    filename: str | None = None
    commit_message: str = ""
    scope: Scope = Scope.SELECTED
    collection: str = ""
    mode: str = ""
    style_dictionary: bool = False
    flat_tokens: bool = False
    create_pr: bool = False
    pr_base: str = ""
    pr_title: str = ""
    pr_body: str | None = None

    @field_validator("scope", mode="before")
    @classmethod
    def coerce_scope(cls, v: Any) -> Scope:
        return Scope.coerce(v)

    @field_validator(
        "owner", "repo", "branch", "folder", "commit_message", "collection", "mode", "pr_base",
        "pr_title",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class CreatedPullRequest(BaseModel):
    number: int | None = None
    url: str | None = None
    base: str
    head: str


class CommitResult(BaseModel):
    """
    Outcome of an export-and-commit request.

    ``ok`` is True only when a commit was written. A no-op is reported as
    ``ok=False`` with ``status=304``. Failures carry an HTTP-like status
    (0 when an unexpected error interrupted the request) and a message.
    The target fields are always filled so callers can render a message.
    """

    ok: bool
    owner: str
    repo: str
    branch: str
    folder: str = ""
    filename: str | None = None
    full_path: str | None = None
    status: int | None = None
    message: str | None = None
    commit_sha: str | None = None
    commit_url: str | None = None
    tree_url: str | None = None
    rate: RateInfo | None = None
    created_pr: CreatedPullRequest | None = None
    pull_request: PullRequestResult | None = Field(
        default=None,
        description="Pull request outcome, reported separately from the commit",
    )

    @property
    def not_modified(self) -> bool:
        return not self.ok and self.status == 304


class ExportFilesRequest(BaseModel):
    scope: Scope = Scope.SELECTED
    collection: str = ""
    mode: str = ""
    style_dictionary: bool = False
    flat_tokens: bool = False

    @field_validator("scope", mode="before")
    @classmethod
    def coerce_scope(cls, v: Any) -> Scope:
        return Scope.coerce(v)


class ExportFilesResult(BaseModel):
    files: list[ExportFile] = Field(default_factory=list)
    message: str | None = Field(default=None, description="Error shown when files is empty")


class WritabilityResult(BaseModel):
    ok: bool
    status: int | None = None
    message: str | None = None
