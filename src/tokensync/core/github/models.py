"""
GitHub data models for tokensync.

Every call on the REST client returns a result model instead of raising:
``ok`` tells success from failure, failures carry the HTTP ``status`` (0 for
network errors) and a ``message``, and every result carries the rate-limit
snapshot of the last response when GitHub sent one.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class RateInfo(BaseModel):
    """Rate limit headers of a GitHub response."""

    remaining: int | None = Field(default=None, description="x-ratelimit-remaining")
    reset_epoch_sec: int | None = Field(default=None, description="x-ratelimit-reset")

    @classmethod
    def from_headers(cls, headers: object) -> RateInfo | None:
        """
        Parse rate headers, returning None when neither is present.

        Args:
            headers: Mapping-like object with a ``get`` method

        Returns:
            RateInfo or None
        """
        getter = getattr(headers, "get", None)
        if getter is None:
            return None

        def _int(key: str) -> int | None:
            raw = getter(key)
            try:
                return int(raw) if raw is not None else None
            except (TypeError, ValueError):
                return None

        remaining = _int("x-ratelimit-remaining")
        reset = _int("x-ratelimit-reset")
        if remaining is None and reset is None:
            return None
        return cls(remaining=remaining, reset_epoch_sec=reset)


class ApiResult(BaseModel):
    """Common shape of every client result."""

    ok: bool
    status: int = Field(default=200, description="HTTP status, 0 for network errors")
    message: str | None = None
    saml_required: bool = Field(default=False, description="SSO authorization needed")
    rate: RateInfo | None = None


class GitHubUser(BaseModel):
    login: str
    name: str | None = None


class UserResult(ApiResult):
    user: GitHubUser | None = None


class RepoPermissions(BaseModel):
    admin: bool = False
    push: bool = False
    pull: bool = False


class RepoSummary(BaseModel):
    """A repository the authenticated user can see."""

    id: int | None = None
    name: str = ""
    full_name: str = Field(..., description="owner/repo")
    private: bool = False
    default_branch: str = "main"
    owner_login: str | None = None
    permissions: RepoPermissions | None = None
    fork: bool = False

    @computed_field
    @property
    def owner(self) -> str:
        """Owner part of full_name."""
        return self.owner_login or self.full_name.split("/", 1)[0]


class ListReposResult(ApiResult):
    repos: list[RepoSummary] = Field(default_factory=list)


class ListBranchesResult(ApiResult):
    owner: str
    repo: str
    page: int = 1
    branches: list[str] = Field(default_factory=list)
    default_branch: str | None = None
    has_more: bool = False


class CreateBranchResult(ApiResult):
    owner: str
    repo: str
    base_branch: str
    new_branch: str
    sha: str | None = None
    html_url: str | None = None
    no_push_permission: bool = False


class DirEntry(BaseModel):
    type: str = Field(..., description="'dir' or 'file'")
    name: str
    path: str


class ListDirResult(ApiResult):
    owner: str
    repo: str
    ref: str
    path: str = ""
    entries: list[DirEntry] = Field(default_factory=list)


class EnsureFolderResult(ApiResult):
    owner: str
    repo: str
    branch: str
    folder_path: str
    created: bool = False
    file_sha: str | None = None
    html_url: str | None = None


class FileContentsResult(ApiResult):
    path: str = ""
    content_text: str = ""


class CommitFile(BaseModel):
    """One file in a multi-file commit."""

    path: str = Field(..., description="Repository path, may include folders")
    content: str = Field(..., description="UTF-8 text contents")
    mode: str = "100644"


class CommitFilesResult(ApiResult):
    owner: str
    repo: str
    branch: str
    commit_sha: str | None = None
    commit_url: str | None = None
    tree_url: str | None = None


class PullRequestResult(ApiResult):
    owner: str
    repo: str
    base: str
    head: str
    number: int | None = None
    url: str | None = None
    already_existed: bool = False
