"""
Persisted selection state for tokensync.

``Selection`` is the user's last-chosen commit target and export options,
``CommitSignature`` identifies the last commit tokensync made.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tokensync.core.export.models import Scope


class Selection(BaseModel):
    """
    Remembered target repository and export options.

    Every field is optional; unset fields are left out when stored.
    """

    owner: str | None = None
    repo: str | None = None
    branch: str | None = None
    folder: str | None = Field(default=None, description="Storage-form folder")
    filename: str | None = None
    commit_message: str | None = None
    scope: Scope | None = None
    collection: str | None = None
    mode: str | None = None
    style_dictionary: bool | None = None
    flat_tokens: bool | None = None
    create_pr: bool | None = None
    pr_base: str | None = None
    pr_title: str | None = None
    pr_body: str | None = None

    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    def to_storage(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)


class CommitSignature(BaseModel):
    """Identity of the last successful commit, compared before committing again."""

    branch: str
    full_path: str
    scope: Scope = Scope.SELECTED

    def matches(self, branch: str, full_path: str, scope: Scope) -> bool:
        return self.branch == branch and self.full_path == full_path and self.scope == scope
