"""
Browsing the commit target: repositories, branches and folders.

Each call that reaches GitHub requires a credential in the session and
reports a missing one as status 401. Choices are remembered in the
selection store.
"""

from __future__ import annotations

import logging

from tokensync.core.export.folders import FolderNormalization, normalize_folder, resolve_folder
from tokensync.core.github.models import (
    CreateBranchResult,
    EnsureFolderResult,
    ListBranchesResult,
    ListDirResult,
    ListReposResult,
)
from tokensync.core.github.protocol import ForgeClient
from tokensync.core.publish.prober import ensure_folder_writable
from tokensync.core.session.manager import ForgeSession
from tokensync.core.state.models import Selection
from tokensync.core.state.store import SelectionStore

logger = logging.getLogger(__name__)

NO_TOKEN = "No token"


class BrowseService:
    """
    Pick the repository, branch and folder tokens are committed to.

    Example:
        >>> browse = BrowseService(client, store)
        >>> browse.fetch_branches(session, "acme", "design").default_branch
        'main'
    """

    def __init__(self, client: ForgeClient, store: SelectionStore) -> None:
        self.client = client
        self.store = store

    # Repositories

    def list_repos(self, session: ForgeSession) -> ListReposResult:
        if not session.token:
            return ListReposResult(ok=False, status=401, message=NO_TOKEN)
        res = self.client.list_repos(session.token)
        if not res.ok:
            logger.warning("GitHub: Could not list repos: %s", res.message)
        return res

    def select_repo(self, owner: str, repo: str) -> Selection:
        """Remember ``owner/repo``; the folder belongs to the old repo and is cleared."""
        return self.store.merge_selected({"owner": owner, "repo": repo, "folder": None})

    # Branches

    def fetch_branches(
        self, session: ForgeSession, owner: str, repo: str, page: int = 1, force: bool = False
    ) -> ListBranchesResult:
        """
        List one page of branches.

        On page 1 the repository's default branch becomes both the selected
        branch and the pull request base.
        """
        if not session.token:
            return ListBranchesResult(ok=False, owner=owner, repo=repo, status=401, message=NO_TOKEN)
        res = self.client.list_branches(session.token, owner, repo, page, force)
        if res.ok and page == 1 and res.default_branch:
            self.store.merge_selected(
                {
                    "owner": owner,
                    "repo": repo,
                    "branch": res.default_branch,
                    "pr_base": res.default_branch,
                }
            )
        return res

    def select_branch(
        self, branch: str, owner: str | None = None, repo: str | None = None
    ) -> Selection:
        current = self.store.get_selected()
        return self.store.merge_selected(
            {
                "owner": owner or current.owner,
                "repo": repo or current.repo,
                "branch": branch,
                "folder": None,
            }
        )

    def create_branch(
        self, session: ForgeSession, owner: str, repo: str, base_branch: str, new_branch: str
    ) -> CreateBranchResult:
        ident = {"owner": owner, "repo": repo, "base_branch": base_branch, "new_branch": new_branch}
        if not session.token:
            return CreateBranchResult(ok=False, status=401, message=NO_TOKEN, **ident)
        if not owner or not repo or not base_branch or not new_branch:
            return CreateBranchResult(
                ok=False, status=400, message="Missing owner/repo/base/new", **ident
            )
        res = self.client.create_branch(session.token, owner, repo, new_branch, base_branch)
        if res.ok:
            self.store.merge_selected({"owner": owner, "repo": repo, "branch": res.new_branch})
        return res

    # Folders

    def list_folders(
        self, session: ForgeSession, owner: str, repo: str, branch: str, path: str = ""
    ) -> ListDirResult:
        """List the sub-folders of ``path``, checking it is not a file first."""
        ident = {"owner": owner, "repo": repo, "ref": branch}
        if not session.token:
            return ListDirResult(ok=False, path=path, status=401, message=NO_TOKEN, **ident)

        resolved = resolve_folder(path)
        if isinstance(resolved, str):
            return ListDirResult(ok=False, path=path, status=400, message=resolved, **ident)

        if resolved.path:
            check = ensure_folder_writable(
                self.client, session.token, owner, repo, branch, resolved.path
            )
            if not check.ok:
                return ListDirResult(
                    ok=False,
                    path=resolved.path,
                    status=check.status or 400,
                    message=check.message,
                    **ident,
                )
        return self.client.list_dirs(session.token, owner, repo, branch, resolved.path)

    def create_folder(
        self, session: ForgeSession, owner: str, repo: str, branch: str, path: str
    ) -> EnsureFolderResult:
        raw = (path or "").strip()
        ident = {"owner": owner, "repo": repo, "branch": branch, "folder_path": raw}
        if not session.token:
            return EnsureFolderResult(ok=False, status=401, message=NO_TOKEN, **ident)

        resolved = resolve_folder(raw)
        if isinstance(resolved, str):
            return EnsureFolderResult(ok=False, status=400, message=resolved, **ident)
        if not resolved.path:
            return EnsureFolderResult(
                ok=False, status=400, message="GitHub: Choose a subfolder name.", **ident
            )
        return self.client.ensure_folder(session.token, owner, repo, branch, resolved.path)

    def set_folder(
        self, folder: str, owner: str | None = None, repo: str | None = None
    ) -> FolderNormalization:
        """Normalize and remember ``folder``; an invalid folder is not stored."""
        normalized = normalize_folder(folder)
        if not normalized.ok:
            return normalized
        current = self.store.get_selected()
        self.store.merge_selected(
            {
                "owner": owner or current.owner,
                "repo": repo or current.repo,
                "folder": normalized.storage,
            }
        )
        return normalized
