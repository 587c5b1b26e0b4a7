"""
GitHub REST client for tokensync.

Talks to the GitHub REST API over httpx. Every public method returns a
result model from ``tokensync.core.github.models``; HTTP failures are
reported through ``ok``/``status``/``message`` and transport errors become
``status=0`` results, so callers never have to catch httpx exceptions.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from tokensync.core.config.models import GitHubConfig
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

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_WEB_URL = "https://github.com"
DEFAULT_API_VERSION = "2022-11-28"
JSON_ACCEPT = "application/vnd.github+json"
RAW_ACCEPT = "application/vnd.github.raw"
PAGE_SIZE = 100

_SAML_MESSAGE = "SAML/SSO required"
_SAML_PATTERN = re.compile(r"SAML|SSO", re.IGNORECASE)
_NEXT_LINK = re.compile(r'\brel="next"', re.IGNORECASE)


class GitHubClientError(Exception):
    """Error from GitHub client operations."""

    pass


def encode_path_segments(path: str) -> str:
    """
    URL-encode a repository path while keeping its ``/`` separators.

    Example:
        >>> encode_path_segments("/design tokens/web/")
        'design%20tokens/web'
    """
    norm = (path or "").strip("/")
    if not norm:
        return ""
    return "/".join(quote(seg, safe="") for seg in norm.split("/") if seg)


def strip_heads(ref: str) -> str:
    return (ref or "").strip().removeprefix("refs/heads/")


def _cache_buster() -> str:
    return str(int(time.time() * 1000))


class GitHubClient:
    """
    Client for the GitHub REST API.

    Example:
        >>> client = GitHubClient()
        >>> result = client.get_user("ghp_...")
        >>> result.user.login if result.ok else result.message
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        web_url: str = DEFAULT_WEB_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        get_retries: int = 1,
        retry_delay: float = 0.15,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize GitHubClient.

        Args:
            base_url: REST API root
            web_url: Web root used to build commit/tree links
            api_version: X-GitHub-Api-Version header value
            timeout: Per-request timeout in seconds
            http_client: Pre-configured httpx client (tests pass one with a
                MockTransport)
            get_retries: Extra attempts for GET requests on transport errors
            retry_delay: Fixed wait between GET attempts, in seconds
            sleep: Sleep function, injectable for tests
        """
        self.base_url = base_url.rstrip("/")
        self.web_url = web_url.rstrip("/")
        self.api_version = api_version
        self.get_retries = get_retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: GitHubConfig, **kwargs: Any) -> GitHubClient:
        """Create a client from the ``github`` config section."""
        return cls(
            config.api_url,
            web_url=config.web_url,
            api_version=config.api_version,
            timeout=config.timeout_seconds,
            **kwargs,
        )

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _headers(self, token: str, accept: str = JSON_ACCEPT) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
            "X-GitHub-Api-Version": self.api_version,
        }

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self.base_url}/repos/{owner}/{repo}"

    def _request(
        self,
        method: str,
        url: str,
        token: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        accept: str = JSON_ACCEPT,
    ) -> httpx.Response:
        """
        Send one request.

        GET requests are retried on transport errors (timeouts, refused
        connections) after a fixed delay; writes are sent exactly once.

        Raises:
            httpx.HTTPError: When every attempt failed at the transport level
        """
        attempts = 1 + (self.get_retries if method == "GET" else 0)
        last_exc: httpx.HTTPError | None = None
        for attempt in range(attempts):
            try:
                return self._http.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=self._headers(token, accept),
                )
            except httpx.TransportError as e:
                last_exc = e
                if attempt + 1 < attempts:
                    logger.debug("%s %s failed (%s), retrying", method, url, e)
                    self._sleep(self.retry_delay)
        assert last_exc is not None
        raise last_exc

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise GitHubClientError(f"Failed to parse GitHub API response: {e}")

    @staticmethod
    def _json_object(response: httpx.Response) -> dict[str, Any]:
        data = GitHubClient._json(response)
        if not isinstance(data, dict):
            raise GitHubClientError("Unexpected GitHub API response: expected an object")
        return data

    @staticmethod
    def _is_saml(response: httpx.Response) -> bool:
        return response.status_code == 403 and bool(response.headers.get("x-github-saml"))

    @staticmethod
    def _failure(response: httpx.Response) -> dict[str, Any]:
        """Failure fields for a non-2xx response."""
        rate = RateInfo.from_headers(response.headers)
        if GitHubClient._is_saml(response):
            return {
                "ok": False,
                "status": 403,
                "message": _SAML_MESSAGE,
                "saml_required": True,
                "rate": rate,
            }
        return {
            "ok": False,
            "status": response.status_code,
            "message": response.text or f"HTTP {response.status_code}",
            "rate": rate,
        }

    @staticmethod
    def _network_failure(exc: Exception) -> dict[str, Any]:
        return {"ok": False, "status": 0, "message": str(exc) or "network error"}

    # ------------------------------------------------------------------
    # Auth / repos
    # ------------------------------------------------------------------

    def get_user(self, token: str) -> UserResult:
        """
        Look up the user a token belongs to.

        Returns:
            UserResult with ``user`` set on success; ``bad credentials`` on 401
        """
        try:
            res = self._request("GET", f"{self.base_url}/user", token)
            rate = RateInfo.from_headers(res.headers)
            if res.status_code == 401:
                return UserResult(ok=False, status=401, message="bad credentials", rate=rate)
            if not res.is_success:
                return UserResult(
                    ok=False, status=res.status_code, message=f"HTTP {res.status_code}", rate=rate
                )
            data = self._json(res)
            login = data.get("login") if isinstance(data, dict) else None
            if not isinstance(login, str) or not login:
                return UserResult(
                    ok=False, status=res.status_code, message="response missing login", rate=rate
                )
            name = data.get("name") if isinstance(data.get("name"), str) else None
            return UserResult(ok=True, user=GitHubUser(login=login, name=name), rate=rate)
        except (httpx.HTTPError, GitHubClientError) as e:
            return UserResult(**self._network_failure(e))

    def list_repos(self, token: str) -> ListReposResult:
        """
        List every repository the user owns, collaborates on or can see
        through an organization, most recently updated first.

        A failure after at least one page was read returns the repositories
        collected so far.
        """
        url = f"{self.base_url}/user/repos"
        repos: list[RepoSummary] = []
        rate: RateInfo | None = None
        page = 1
        try:
            while True:
                res = self._request(
                    "GET",
                    url,
                    token,
                    params={
                        "per_page": PAGE_SIZE,
                        "affiliation": "owner,collaborator,organization_member",
                        "sort": "updated",
                        "page": page,
                    },
                )
                rate = RateInfo.from_headers(res.headers) or rate
                if res.status_code == 401:
                    return ListReposResult(
                        ok=False, status=401, message="bad credentials", rate=rate
                    )
                if not res.is_success:
                    if repos:
                        return ListReposResult(ok=True, repos=repos, rate=rate)
                    return ListReposResult(**self._failure(res))

                items = self._json(res)
                if not isinstance(items, list) or not items:
                    break
                for item in items:
                    if isinstance(item, dict) and item.get("full_name"):
                        repos.append(self._repo_summary(item))
                if len(items) < PAGE_SIZE:
                    break
                page += 1
        except (httpx.HTTPError, GitHubClientError) as e:
            return ListReposResult(**self._network_failure(e))

        logger.debug("Listed %d repositories", len(repos))
        return ListReposResult(ok=True, repos=repos, rate=rate)

    @staticmethod
    def _repo_summary(item: dict[str, Any]) -> RepoSummary:
        owner = item.get("owner") if isinstance(item.get("owner"), dict) else {}
        perms = item.get("permissions")
        return RepoSummary(
            id=item.get("id"),
            name=item.get("name") or "",
            full_name=item["full_name"],
            private=bool(item.get("private")),
            default_branch=item.get("default_branch") or "main",
            owner_login=owner.get("login"),
            permissions=RepoPermissions(**perms) if isinstance(perms, dict) else None,
            fork=bool(item.get("fork")),
        )

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def list_branches(
        self, token: str, owner: str, repo: str, page: int = 1, force: bool = False
    ) -> ListBranchesResult:
        """
        List one page of branches.

        ``force`` adds a cache-busting parameter. On page 1 the repository's
        default branch is looked up as well.
        """
        repo_url = self._repo_url(owner, repo)
        params: dict[str, Any] = {"per_page": PAGE_SIZE, "page": page}
        if force:
            params["_ts"] = _cache_buster()
        try:
            res = self._request("GET", f"{repo_url}/branches", token, params=params)
            if not res.is_success:
                return ListBranchesResult(owner=owner, repo=repo, page=page, **self._failure(res))

            items = self._json(res)
            branches = [
                b["name"]
                for b in (items if isinstance(items, list) else [])
                if isinstance(b, dict) and isinstance(b.get("name"), str)
            ]
            link = res.headers.get("link")
            has_more = bool(link and _NEXT_LINK.search(link)) or len(branches) == PAGE_SIZE

            default_branch = None
            if page == 1:
                default_branch = self._default_branch(token, repo_url, force)

            return ListBranchesResult(
                ok=True,
                owner=owner,
                repo=repo,
                page=page,
                branches=branches,
                default_branch=default_branch,
                has_more=has_more,
                rate=RateInfo.from_headers(res.headers),
            )
        except (httpx.HTTPError, GitHubClientError) as e:
            return ListBranchesResult(owner=owner, repo=repo, page=page, **self._network_failure(e))

    def _default_branch(self, token: str, repo_url: str, force: bool) -> str | None:
        params = {"_ts": _cache_buster()} if force else None
        try:
            res = self._request("GET", repo_url, token, params=params)
            if not res.is_success:
                return None
            data = self._json(res)
        except (httpx.HTTPError, GitHubClientError) as e:
            logger.debug("Default branch lookup failed: %s", e)
            return None
        value = data.get("default_branch") if isinstance(data, dict) else None
        return value if isinstance(value, str) else None

    def create_branch(
        self, token: str, owner: str, repo: str, new_branch: str, base_branch: str
    ) -> CreateBranchResult:
        """
        Create ``new_branch`` pointing at the head of ``base_branch``.

        Checks the token's push permission on the repository first.
        """
        branch_name = strip_heads(new_branch)
        base_name = strip_heads(base_branch)
        ident = {"owner": owner, "repo": repo, "base_branch": base_name, "new_branch": branch_name}
        if not branch_name or not base_name:
            return CreateBranchResult(ok=False, status=400, message="empty branch name(s)", **ident)

        repo_url = self._repo_url(owner, repo)
        try:
            repo_res = self._request("GET", repo_url, token)
            if not repo_res.is_success:
                return CreateBranchResult(**ident, **self._failure(repo_res))
            repo_json = self._json(repo_res)
            perms = repo_json.get("permissions") if isinstance(repo_json, dict) else None
            if isinstance(perms, dict) and perms.get("push") is not True:
                return CreateBranchResult(
                    ok=False,
                    status=403,
                    message="Token/user lacks push permission to this repository",
                    no_push_permission=True,
                    rate=RateInfo.from_headers(repo_res.headers),
                    **ident,
                )

            ref_res = self._request(
                "GET", f"{repo_url}/git/ref/heads/{quote(base_name, safe='')}", token
            )
            if not ref_res.is_success:
                return CreateBranchResult(**ident, **self._failure(ref_res))
            sha = self._ref_sha(self._json(ref_res))
            if not sha:
                return CreateBranchResult(
                    ok=False, status=500, message="could not resolve base SHA", **ident
                )

            create_res = self._request(
                "POST",
                f"{repo_url}/git/refs",
                token,
                json_body={"ref": f"refs/heads/{branch_name}", "sha": sha},
            )
            if not create_res.is_success:
                return CreateBranchResult(**ident, **self._failure(create_res))
        except (httpx.HTTPError, GitHubClientError) as e:
            return CreateBranchResult(**ident, **self._network_failure(e))

        logger.info("Created branch %s from %s in %s/%s", branch_name, base_name, owner, repo)
        return CreateBranchResult(
            ok=True,
            status=create_res.status_code,
            sha=sha,
            html_url=f"{self.web_url}/{owner}/{repo}/tree/{quote(branch_name, safe='')}",
            rate=RateInfo.from_headers(create_res.headers),
            **ident,
        )

    @staticmethod
    def _ref_sha(data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        obj = data.get("object") if isinstance(data.get("object"), dict) else {}
        return str(obj.get("sha") or data.get("sha") or "").strip()

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        rel = encode_path_segments(path)
        base = f"{self._repo_url(owner, repo)}/contents"
        return f"{base}/{rel}" if rel else base

    def list_dir(self, token: str, owner: str, repo: str, path: str, ref: str) -> ListDirResult:
        """
        List a directory at ``ref``.

        A path that resolves to a file is reported as status 409, since a
        directory cannot be created there.
        """
        norm = (path or "").strip("/")
        ident = {"owner": owner, "repo": repo, "ref": ref, "path": norm}
        try:
            res = self._request(
                "GET",
                self._contents_url(owner, repo, norm),
                token,
                params={"ref": ref, "_ts": _cache_buster()},
            )
            if not res.is_success:
                return ListDirResult(**ident, **self._failure(res))
            data = self._json(res)
        except (httpx.HTTPError, GitHubClientError) as e:
            return ListDirResult(**ident, **self._network_failure(e))

        rate = RateInfo.from_headers(res.headers)
        if isinstance(data, dict):
            return ListDirResult(
                ok=False, status=409, message=f'"{norm}" is a file', rate=rate, **ident
            )
        entries = [
            DirEntry(
                type="dir" if item.get("type") == "dir" else "file",
                name=str(item.get("name") or ""),
                path=str(item.get("path") or ""),
            )
            for item in (data if isinstance(data, list) else [])
            if isinstance(item, dict)
        ]
        return ListDirResult(ok=True, entries=entries, rate=rate, **ident)

    def list_dirs(
        self, token: str, owner: str, repo: str, branch: str, path: str = ""
    ) -> ListDirResult:
        """Like ``list_dir`` but keeps directories only and flags SSO failures."""
        res = self.list_dir(token, owner, repo, path, branch)
        if not res.ok:
            saml = res.saml_required or res.status == 403 or bool(
                _SAML_PATTERN.search(res.message or "")
            )
            return res.model_copy(update={"saml_required": saml})
        return res.model_copy(update={"entries": [e for e in res.entries if e.type == "dir"]})

    def ensure_folder(
        self, token: str, owner: str, repo: str, branch: str, folder_path: str
    ) -> EnsureFolderResult:
        """
        Make sure ``folder_path`` exists on ``branch``.

        An empty folder cannot exist in git, so a missing folder is
        materialized by committing a ``.gitkeep`` placeholder into it.
        """
        norm = (folder_path or "").strip("/")
        ident = {"owner": owner, "repo": repo, "branch": branch, "folder_path": norm}
        if not norm:
            return EnsureFolderResult(ok=False, status=400, message="empty folder path", **ident)

        html_url = (
            f"{self.web_url}/{owner}/{repo}/tree/{quote(branch, safe='')}/"
            f"{encode_path_segments(norm)}"
        )
        try:
            res = self._request(
                "GET",
                self._contents_url(owner, repo, norm),
                token,
                params={"ref": branch, "_ts": _cache_buster()},
            )
            if res.is_success:
                return EnsureFolderResult(
                    ok=True,
                    created=False,
                    html_url=html_url,
                    rate=RateInfo.from_headers(res.headers),
                    **ident,
                )
            if res.status_code != 404:
                return EnsureFolderResult(**ident, **self._failure(res))

            put_res = self._request(
                "PUT",
                self._contents_url(owner, repo, f"{norm}/.gitkeep"),
                token,
                json_body={
                    "message": f"chore: create folder {norm}",
                    "content": base64.b64encode(b".").decode("ascii"),
                    "branch": branch,
                },
            )
            if not put_res.is_success:
                return EnsureFolderResult(**ident, **self._failure(put_res))
            data = self._json(put_res)
        except (httpx.HTTPError, GitHubClientError) as e:
            return EnsureFolderResult(**ident, **self._network_failure(e))

        file_sha = ""
        if isinstance(data, dict):
            for key in ("content", "commit"):
                section = data.get(key)
                if isinstance(section, dict) and section.get("sha"):
                    file_sha = str(section["sha"])
                    break
        logger.info("Created folder %s in %s/%s@%s", norm, owner, repo, branch)
        return EnsureFolderResult(
            ok=True,
            status=put_res.status_code,
            created=True,
            file_sha=file_sha or None,
            html_url=html_url,
            rate=RateInfo.from_headers(put_res.headers),
            **ident,
        )

    def get_file_contents(
        self, token: str, owner: str, repo: str, branch: str, path: str
    ) -> FileContentsResult:
        """Fetch the raw text of a file at ``branch``."""
        norm = (path or "").strip("/")
        try:
            res = self._request(
                "GET",
                self._contents_url(owner, repo, norm),
                token,
                params={"ref": branch, "_ts": _cache_buster()},
                accept=RAW_ACCEPT,
            )
        except httpx.HTTPError as e:
            return FileContentsResult(path=norm, **self._network_failure(e))
        if not res.is_success:
            return FileContentsResult(path=norm, **self._failure(res))
        return FileContentsResult(
            ok=True,
            status=res.status_code,
            path=norm,
            content_text=res.text,
            rate=RateInfo.from_headers(res.headers),
        )

    # ------------------------------------------------------------------
    # Commits / pull requests
    # ------------------------------------------------------------------

    def commit_files(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        files: list[CommitFile],
    ) -> CommitFilesResult:
        """
        Write ``files`` to ``branch`` as a single commit.

        Uses the Git Data API: resolve the branch head, create one blob per
        file, a tree on top of the head's tree, a commit, then move the
        branch ref without forcing. A branch that moved in the meantime
        makes the last step fail with 422 "Update is not a fast forward".
        """
        ident = {"owner": owner, "repo": repo, "branch": branch}
        cleaned = [
            CommitFile(path=f.path.strip("/"), content=f.content, mode=f.mode or "100644")
            for f in files
            if f.path.strip("/")
        ]
        if not cleaned:
            return CommitFilesResult(ok=False, status=400, message="no files to commit", **ident)

        repo_url = self._repo_url(owner, repo)
        branch_ref = quote(branch, safe="")
        try:
            ref_res = self._request("GET", f"{repo_url}/git/ref/heads/{branch_ref}", token)
            if not ref_res.is_success:
                return CommitFilesResult(**ident, **self._failure(ref_res))
            base_commit_sha = self._ref_sha(self._json(ref_res))
            if not base_commit_sha:
                return CommitFilesResult(
                    ok=False, status=500, message="could not resolve branch commit sha", **ident
                )

            commit_res = self._request("GET", f"{repo_url}/git/commits/{base_commit_sha}", token)
            if not commit_res.is_success:
                return CommitFilesResult(**ident, **self._failure(commit_res))
            tree = self._json_object(commit_res).get("tree") or {}
            base_tree_sha = str(tree.get("sha") or "").strip()
            if not base_tree_sha:
                return CommitFilesResult(
                    ok=False, status=500, message="could not resolve base tree sha", **ident
                )

            tree_entries = []
            for f in cleaned:
                blob_res = self._request(
                    "POST",
                    f"{repo_url}/git/blobs",
                    token,
                    json_body={"content": f.content, "encoding": "utf-8"},
                )
                if not blob_res.is_success:
                    return CommitFilesResult(**ident, **self._failure(blob_res))
                blob_sha = str(self._json_object(blob_res).get("sha") or "").strip()
                if not blob_sha:
                    return CommitFilesResult(
                        ok=False, status=500, message="failed to create blob sha", **ident
                    )
                tree_entries.append({"path": f.path, "type": "blob", "mode": f.mode, "sha": blob_sha})

            tree_res = self._request(
                "POST",
                f"{repo_url}/git/trees",
                token,
                json_body={"base_tree": base_tree_sha, "tree": tree_entries},
            )
            if not tree_res.is_success:
                return CommitFilesResult(**ident, **self._failure(tree_res))
            new_tree_sha = str(self._json_object(tree_res).get("sha") or "").strip()
            if not new_tree_sha:
                return CommitFilesResult(
                    ok=False, status=500, message="failed to create tree sha", **ident
                )

            new_commit_res = self._request(
                "POST",
                f"{repo_url}/git/commits",
                token,
                json_body={"message": message, "tree": new_tree_sha, "parents": [base_commit_sha]},
            )
            if not new_commit_res.is_success:
                return CommitFilesResult(**ident, **self._failure(new_commit_res))
            new_commit_sha = str(self._json_object(new_commit_res).get("sha") or "").strip()
            if not new_commit_sha:
                return CommitFilesResult(
                    ok=False, status=500, message="failed to create commit sha", **ident
                )

            update_res = self._request(
                "PATCH",
                f"{repo_url}/git/refs/heads/{branch_ref}",
                token,
                json_body={"sha": new_commit_sha, "force": False},
            )
            if not update_res.is_success:
                return CommitFilesResult(**ident, **self._failure(update_res))
        except (httpx.HTTPError, GitHubClientError) as e:
            return CommitFilesResult(**ident, **self._network_failure(e))

        logger.info(
            "Committed %d file(s) to %s/%s@%s as %s",
            len(cleaned), owner, repo, branch, new_commit_sha[:7],
        )
        return CommitFilesResult(
            ok=True,
            status=update_res.status_code,
            commit_sha=new_commit_sha,
            commit_url=f"{self.web_url}/{owner}/{repo}/commit/{new_commit_sha}",
            tree_url=f"{self.web_url}/{owner}/{repo}/tree/{branch_ref}",
            rate=RateInfo.from_headers(update_res.headers),
            **ident,
        )

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
        """
        Open a pull request from ``head`` into ``base``.

        When GitHub answers that a pull request for the pair already exists,
        the open one is looked up and returned with ``already_existed=True``.
        """
        ident = {"owner": owner, "repo": repo, "base": base, "head": head}
        pulls_url = f"{self._repo_url(owner, repo)}/pulls"
        try:
            res = self._request(
                "POST",
                pulls_url,
                token,
                json_body={"title": title, "head": head, "base": base, "body": body},
            )
            if res.is_success:
                data = self._json_object(res)
                return PullRequestResult(
                    ok=True,
                    status=res.status_code,
                    number=data.get("number"),
                    url=data.get("html_url"),
                    rate=RateInfo.from_headers(res.headers),
                    **ident,
                )
            if res.status_code == 422 and "already exists" in res.text.lower():
                existing = self._find_open_pull(token, pulls_url, owner, head, base)
                if existing is not None:
                    return PullRequestResult(
                        ok=True,
                        status=200,
                        number=existing.get("number"),
                        url=existing.get("html_url"),
                        already_existed=True,
                        rate=RateInfo.from_headers(res.headers),
                        **ident,
                    )
            return PullRequestResult(**ident, **self._failure(res))
        except (httpx.HTTPError, GitHubClientError) as e:
            return PullRequestResult(**ident, **self._network_failure(e))

    def _find_open_pull(
        self, token: str, pulls_url: str, owner: str, head: str, base: str
    ) -> dict[str, Any] | None:
        res = self._request(
            "GET",
            pulls_url,
            token,
            params={"head": f"{owner}:{head}", "base": base, "state": "open"},
        )
        if not res.is_success:
            return None
        items = self._json(res)
        if isinstance(items, list) and items and isinstance(items[0], dict):
            return items[0]
        return None
