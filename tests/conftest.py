"""
Pytest configuration and shared fixtures.

Provides an in-memory fake of the GitHub client, selection stores,
sessions and export directories used across the test suite.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from tokensync.core.config import clear_cache
from tokensync.core.github.models import (
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
    RepoPermissions,
    RepoSummary,
    UserResult,
)
from tokensync.core.session.manager import ForgeSession
from tokensync.core.state.kv import MemoryKeyValueStore
from tokensync.core.state.store import SelectionStore

# ==============================================================================
# Fake GitHub client
# ==============================================================================


class FakeForgeClient:
    """
    In-memory stand-in for GitHubClient.

    Files live in ``self.files`` keyed by ``(branch, path)``. Folders exist
    implicitly when a file lives under them. Every call is recorded in
    ``self.calls`` as ``(method, kwargs)``.

    Scripted failures:
        commit_failures: results returned (in order) before commits succeed
        read_failures: path -> FileContentsResult returned instead of the file
        dir_failures: path -> ListDirResult returned instead of a listing
        pr_result: result returned by create_pull_request
    """

    def __init__(self, valid_tokens: tuple[str, ...] = ("tok",)) -> None:
        self.valid_tokens = set(valid_tokens)
        self.files: dict[tuple[str, str], str] = {}
        self.branches: dict[str, str] = {"main": "sha-main"}
        self.default_branch = "main"
        self.repos: list[RepoSummary] = [
            RepoSummary(
                id=1,
                name="design",
                full_name="acme/design",
                default_branch="main",
                permissions=RepoPermissions(push=True, pull=True),
            )
        ]
        self.commit_failures: list[CommitFilesResult] = []
        self.read_failures: dict[str, FileContentsResult] = {}
        self.dir_failures: dict[str, ListDirResult] = {}
        self.pr_result: PullRequestResult | None = None
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self._commit_count = 0

    # Helpers

    def put(self, branch: str, path: str, content: Any) -> None:
        """Seed a file; non-string content is serialized like an export."""
        text = content if isinstance(content, str) else json.dumps(content, indent=2) + "\n"
        self.files[(branch, path)] = text

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))

    def _paths(self, branch: str) -> list[str]:
        return [p for (b, p) in self.files if b == branch]

    # ForgeClient

    def get_user(self, token: str) -> UserResult:
        self._record("get_user", token=token)
        if token not in self.valid_tokens:
            return UserResult(ok=False, status=401, message="Bad credentials")
        return UserResult(
            ok=True,
            user=GitHubUser(login="octocat", name="Mona"),
            rate=RateInfo(remaining=4999, reset_epoch_sec=1700000000),
        )

    def list_repos(self, token: str) -> ListReposResult:
        self._record("list_repos", token=token)
        return ListReposResult(ok=True, repos=list(self.repos))

    def list_branches(
        self, token: str, owner: str, repo: str, page: int = 1, force: bool = False
    ) -> ListBranchesResult:
        self._record("list_branches", owner=owner, repo=repo, page=page, force=force)
        return ListBranchesResult(
            ok=True,
            owner=owner,
            repo=repo,
            page=page,
            branches=sorted(self.branches),
            default_branch=self.default_branch if page == 1 else None,
        )

    def create_branch(
        self, token: str, owner: str, repo: str, new_branch: str, base_branch: str
    ) -> CreateBranchResult:
        self._record("create_branch", new_branch=new_branch, base_branch=base_branch)
        ident = {"owner": owner, "repo": repo, "base_branch": base_branch, "new_branch": new_branch}
        if base_branch not in self.branches:
            return CreateBranchResult(ok=False, status=404, message="Not Found", **ident)
        self.branches[new_branch] = self.branches[base_branch]
        for (branch, path), text in list(self.files.items()):
            if branch == base_branch:
                self.files[(new_branch, path)] = text
        return CreateBranchResult(ok=True, status=201, sha=self.branches[new_branch], **ident)

    def list_dirs(
        self, token: str, owner: str, repo: str, branch: str, path: str = ""
    ) -> ListDirResult:
        self._record("list_dirs", branch=branch, path=path)
        ident = {"owner": owner, "repo": repo, "ref": branch, "path": path}
        if path in self.dir_failures:
            return self.dir_failures[path]
        paths = self._paths(branch)
        if path in paths:
            return ListDirResult(ok=False, status=409, message=f'"{path}" is a file', **ident)
        prefix = f"{path}/" if path else ""
        children = [p[len(prefix):] for p in paths if p.startswith(prefix)]
        if path and not children:
            return ListDirResult(ok=False, status=404, message="Not Found", **ident)
        names = sorted({c.split("/", 1)[0] for c in children if "/" in c})
        entries = [DirEntry(type="dir", name=n, path=prefix + n) for n in names]
        return ListDirResult(ok=True, entries=entries, **ident)

    def ensure_folder(
        self, token: str, owner: str, repo: str, branch: str, folder_path: str
    ) -> EnsureFolderResult:
        self._record("ensure_folder", branch=branch, folder_path=folder_path)
        ident = {"owner": owner, "repo": repo, "branch": branch, "folder_path": folder_path}
        keep = f"{folder_path}/.gitkeep"
        if any(p.startswith(f"{folder_path}/") for p in self._paths(branch)):
            return EnsureFolderResult(ok=True, created=False, **ident)
        self.files[(branch, keep)] = ""
        return EnsureFolderResult(ok=True, status=201, created=True, **ident)

    def get_file_contents(
        self, token: str, owner: str, repo: str, branch: str, path: str
    ) -> FileContentsResult:
        self._record("get_file_contents", branch=branch, path=path)
        if path in self.read_failures:
            return self.read_failures[path]
        text = self.files.get((branch, path))
        if text is None:
            return FileContentsResult(ok=False, status=404, message="Not Found", path=path)
        return FileContentsResult(ok=True, path=path, content_text=text)

    def commit_files(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        files: list[CommitFile],
    ) -> CommitFilesResult:
        self._record("commit_files", branch=branch, message=message, files=list(files))
        if self.commit_failures:
            return self.commit_failures.pop(0)
        self._commit_count += 1
        for f in files:
            self.files[(branch, f.path)] = f.content
        sha = f"c{self._commit_count:03d}"
        self.branches[branch] = sha
        return CommitFilesResult(
            ok=True,
            status=201,
            owner=owner,
            repo=repo,
            branch=branch,
            commit_sha=sha,
            commit_url=f"https://github.com/{owner}/{repo}/commit/{sha}",
            tree_url=f"https://github.com/{owner}/{repo}/tree/{branch}",
        )

    def close(self) -> None:
        self.closed = True

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
    ) -> PullRequestResult:
        self._record("create_pull_request", title=title, head=head, base=base, body=body)
        if self.pr_result is not None:
            return self.pr_result
        return PullRequestResult(
            ok=True,
            status=201,
            owner=owner,
            repo=repo,
            base=base,
            head=head,
            number=7,
            url=f"https://github.com/{owner}/{repo}/pull/7",
        )


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def fake_client():
    """Provide an empty FakeForgeClient accepting the token "tok"."""
    return FakeForgeClient()


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    """Provide a SelectionStore over an in-memory key-value store."""
    return SelectionStore(kv)


@pytest.fixture
def session():
    """Provide an authenticated ForgeSession."""
    return ForgeSession(token="tok")


@pytest.fixture
def export_dir(tmp_path):
    """
    Provide a directory shaped like a token export.

    Creates:
    - "Brand - Light.json", "Brand - Dark.json" (per-mode files)
    - typography.json (text styles)
    """
    root = tmp_path / "export"
    root.mkdir()
    light = {"color": {"primary": {"$type": "color", "$value": "#ffffff"}}}
    dark = {"color": {"primary": {"$type": "color", "$value": "#000000"}}}
    typography = {
        "heading": {
            "$type": "typography",
            "$value": {"fontFamily": "Inter", "fontSize": 24},
        }
    }
    (root / "Brand - Light.json").write_text(json.dumps(light))
    (root / "Brand - Dark.json").write_text(json.dumps(dark))
    (root / "typography.json").write_text(json.dumps(typography))
    return root


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config, store and token lookups away from the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    for var in (
        "TOKENSYNC_GITHUB_TOKEN",
        "GITHUB_TOKEN",
        "TOKENSYNC_API_URL",
        "TOKENSYNC_TIMEOUT",
        "TOKENSYNC_RACE_RETRY_DELAY_MS",
        "TOKENSYNC_STORE_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def store_path(tmp_path) -> Path:
    return tmp_path / "state" / "store.json"
