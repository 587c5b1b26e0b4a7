"""
Forge client interface.

The orchestrator, browse and pull services only depend on this Protocol, so
tests can hand them an in-memory fake and other forges can be plugged in.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tokensync.core.github.models import (
    CommitFile,
    CommitFilesResult,
    CreateBranchResult,
    EnsureFolderResult,
    FileContentsResult,
    ListBranchesResult,
    ListDirResult,
    ListReposResult,
    PullRequestResult,
    UserResult,
)


@runtime_checkable
class ForgeClient(Protocol):
    """Remote Git forge operations used by tokensync."""

    def get_user(self, token: str) -> UserResult: ...

    def list_repos(self, token: str) -> ListReposResult: ...

    def list_branches(
        self, token: str, owner: str, repo: str, page: int = 1, force: bool = False
    ) -> ListBranchesResult: ...

    def create_branch(
        self, token: str, owner: str, repo: str, new_branch: str, base_branch: str
    ) -> CreateBranchResult: ...

    def list_dirs(
        self, token: str, owner: str, repo: str, branch: str, path: str = ""
    ) -> ListDirResult: ...

    def ensure_folder(
        self, token: str, owner: str, repo: str, branch: str, folder_path: str
    ) -> EnsureFolderResult: ...

    def get_file_contents(
        self, token: str, owner: str, repo: str, branch: str, path: str
    ) -> FileContentsResult: ...

    def commit_files(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        files: list[CommitFile],
    ) -> CommitFilesResult: ...

    def create_pull_request(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
        body: str = "",
    ) -> PullRequestResult: ...

    def close(self) -> None:
        """Release connections held by the client."""
        ...
