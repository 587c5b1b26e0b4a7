"""
GitHub integration for tokensync.

Provides the REST client, its result models and the ForgeClient protocol
the services depend on.
"""

from tokensync.core.github.client import GitHubClient, GitHubClientError, encode_path_segments
from tokensync.core.github.models import (
    ApiResult,
    CommitFile,
    CommitFilesResult,
    CreateBranchResult,
    DirEntry,
    EnsureFolderResult,
    FileContentsResult,
    GitHubUser,
    ListBranchesResult,
    ListDirResult,
    ListReposResult,
    PullRequestResult,
    RateInfo,
    RepoSummary,
    UserResult,
)
from tokensync.core.github.protocol import ForgeClient

__all__ = [
    "ApiResult",
    "CommitFile",
    "CommitFilesResult",
    "CreateBranchResult",
    "DirEntry",
    "EnsureFolderResult",
    "FileContentsResult",
    "ForgeClient",
    "GitHubClient",
    "GitHubClientError",
    "GitHubUser",
    "ListBranchesResult",
    "ListDirResult",
    "ListReposResult",
    "PullRequestResult",
    "RateInfo",
    "RepoSummary",
    "UserResult",
    "encode_path_segments",
]
