"""
Tests for the GitHub REST client.

Requests are answered by an httpx.MockTransport routing table, so no
network access is needed.
"""

import base64
import json

import httpx
import pytest

from tokensync.core.config.models import GitHubConfig
from tokensync.core.github.client import (
    GitHubClient,
    GitHubClientError,
    encode_path_segments,
    strip_heads,
)
from tokensync.core.github.models import CommitFile

API = "https://api.github.com"
REPO = "/repos/acme/design"


class Router:
    """
    Route ``(method, path)`` to canned responses and record every request.

    A route value may be an httpx.Response, a list of them (served in
    order), or a callable taking the request.
    """

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, list):
            route = route.pop(0)
        if callable(route):
            return route(request)
        return route

    def sent(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]


def _client(routes, **kwargs):
    router = Router(routes)
    http = httpx.Client(transport=httpx.MockTransport(router))
    return GitHubClient(API, http_client=http, sleep=lambda s: None, **kwargs), router


def _body(request):
    return json.loads(request.content)


class TestHelpers:
    def test_encode_path_segments(self):
        assert encode_path_segments("/design tokens/web/") == "design%20tokens/web"
        assert encode_path_segments("") == ""
        assert encode_path_segments("a//b") == "a/b"

    def test_strip_heads(self):
        assert strip_heads(" refs/heads/main ") == "main"
        assert strip_heads("feature/x") == "feature/x"

    def test_from_config(self):
        config = GitHubConfig(api_url="https://ghe.example.com/api/v3/", timeout_seconds=5)
        client = GitHubClient.from_config(config)
        assert client.base_url == "https://ghe.example.com/api/v3"
        client.close()

    def test_context_manager_closes_owned_http_client(self):
        with GitHubClient(API) as client:
            http = client._http
        assert http.is_closed

    def test_injected_http_client_left_open(self):
        http = httpx.Client(transport=httpx.MockTransport(Router({})))
        GitHubClient(API, http_client=http).close()
        assert not http.is_closed
        http.close()

    def test_error_class(self):
        with pytest.raises(GitHubClientError, match="boom"):
            raise GitHubClientError("boom")


class TestGetUser:
    """Tests for GitHubClient.get_user."""

    def test_success_with_rate(self):
        client, router = _client(
            {
                ("GET", "/user"): httpx.Response(
                    200,
                    json={"login": "octocat", "name": "Mona"},
                    headers={"x-ratelimit-remaining": "4999", "x-ratelimit-reset": "1700000000"},
                )
            }
        )
        result = client.get_user("tok")
        assert result.ok
        assert result.user.login == "octocat"
        assert result.rate.remaining == 4999
        headers = router.requests[0].headers
        assert headers["authorization"] == "Bearer tok"
        assert headers["x-github-api-version"] == "2022-11-28"

    def test_bad_credentials(self):
        client, _ = _client({("GET", "/user"): httpx.Response(401, json={})})
        result = client.get_user("bad")
        assert (result.ok, result.status, result.message) == (False, 401, "bad credentials")

    def test_missing_login(self):
        client, _ = _client({("GET", "/user"): httpx.Response(200, json={"id": 1})})
        assert client.get_user("tok").message == "response missing login"

    def test_get_retried_after_transport_error(self):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        client, router = _client(
            {("GET", "/user"): [fail, httpx.Response(200, json={"login": "octocat"})]}
        )
        assert client.get_user("tok").ok
        assert len(router.requests) == 2

    def test_network_failure_is_status_zero(self):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        client, router = _client({("GET", "/user"): fail})
        result = client.get_user("tok")
        assert (result.ok, result.status, result.message) == (False, 0, "refused")
        assert len(router.requests) == 2


class TestListRepos:
    """Tests for GitHubClient.list_repos."""

    def test_paginates(self):
        page1 = [{"full_name": f"acme/r{i}", "name": f"r{i}"} for i in range(100)]
        page2 = [
            {
                "full_name": "acme/design",
                "name": "design",
                "owner": {"login": "acme"},
                "default_branch": "trunk",
                "permissions": {"push": True, "pull": True, "admin": False},
            }
        ]
        client, router = _client(
            {
                ("GET", "/user/repos"): [
                    httpx.Response(200, json=page1),
                    httpx.Response(200, json=page2),
                ]
            }
        )
        result = client.list_repos("tok")
        assert len(result.repos) == 101
        last = result.repos[-1]
        assert (last.owner, last.default_branch, last.permissions.push) == ("acme", "trunk", True)
        assert router.requests[1].url.params["page"] == "2"

    def test_partial_results_on_later_failure(self):
        page1 = [{"full_name": f"acme/r{i}"} for i in range(100)]
        client, _ = _client(
            {
                ("GET", "/user/repos"): [
                    httpx.Response(200, json=page1),
                    httpx.Response(500, text="oops"),
                ]
            }
        )
        result = client.list_repos("tok")
        assert result.ok
        assert len(result.repos) == 100

    def test_first_page_failure(self):
        client, _ = _client({("GET", "/user/repos"): httpx.Response(500, text="oops")})
        result = client.list_repos("tok")
        assert (result.ok, result.status, result.message) == (False, 500, "oops")


class TestBranches:
    """Tests for branch listing and creation."""

    def test_list_first_page_with_default(self):
        client, router = _client(
            {
                ("GET", f"{REPO}/branches"): httpx.Response(
                    200,
                    json=[{"name": "main"}, {"name": "dev"}],
                    headers={"link": f'<{API}{REPO}/branches?page=2>; rel="next"'},
                ),
                ("GET", REPO): httpx.Response(200, json={"default_branch": "main"}),
            }
        )
        result = client.list_branches("tok", "acme", "design", force=True)
        assert result.branches == ["main", "dev"]
        assert result.default_branch == "main"
        assert result.has_more
        assert "_ts" in router.sent("GET", f"{REPO}/branches")[0].url.params

    def test_later_page_skips_default_lookup(self):
        client, router = _client(
            {("GET", f"{REPO}/branches"): httpx.Response(200, json=[{"name": "x"}])}
        )
        result = client.list_branches("tok", "acme", "design", page=2)
        assert result.default_branch is None
        assert not result.has_more
        assert router.sent("GET", REPO) == []

    def test_create_branch(self):
        client, router = _client(
            {
                ("GET", REPO): httpx.Response(200, json={"permissions": {"push": True}}),
                ("GET", f"{REPO}/git/ref/heads/main"): httpx.Response(
                    200, json={"object": {"sha": "abc123"}}
                ),
                ("POST", f"{REPO}/git/refs"): httpx.Response(201, json={}),
            }
        )
        result = client.create_branch("tok", "acme", "design", "refs/heads/tokens", "main")
        assert result.ok
        assert result.sha == "abc123"
        assert result.new_branch == "tokens"
        assert result.html_url == "https://github.com/acme/design/tree/tokens"
        assert _body(router.sent("POST", f"{REPO}/git/refs")[0]) == {
            "ref": "refs/heads/tokens",
            "sha": "abc123",
        }

    def test_create_branch_without_push_permission(self):
        client, router = _client(
            {("GET", REPO): httpx.Response(200, json={"permissions": {"push": False}})}
        )
        result = client.create_branch("tok", "acme", "design", "tokens", "main")
        assert (result.status, result.no_push_permission) == (403, True)
        assert router.sent("POST", f"{REPO}/git/refs") == []

    def test_create_branch_empty_name(self):
        client, router = _client({})
        result = client.create_branch("tok", "acme", "design", " ", "main")
        assert result.status == 400
        assert router.requests == []


class TestContents:
    """Tests for directory listing, folder creation and file reads."""

    def test_list_dirs_keeps_directories(self):
        client, _ = _client(
            {
                ("GET", f"{REPO}/contents/tokens"): httpx.Response(
                    200,
                    json=[
                        {"type": "dir", "name": "web", "path": "tokens/web"},
                        {"type": "file", "name": "a.json", "path": "tokens/a.json"},
                    ],
                )
            }
        )
        result = client.list_dirs("tok", "acme", "design", "main", "/tokens/")
        assert [e.path for e in result.entries] == ["tokens/web"]
        assert result.path == "tokens"

    def test_list_dir_on_file_is_conflict(self):
        client, _ = _client(
            {("GET", f"{REPO}/contents/tokens"): httpx.Response(200, json={"type": "file"})}
        )
        result = client.list_dirs("tok", "acme", "design", "main", "tokens")
        assert (result.ok, result.status) == (False, 409)
        assert result.message == '"tokens" is a file'

    def test_list_dirs_flags_saml(self):
        client, _ = _client(
            {
                ("GET", f"{REPO}/contents/tokens"): httpx.Response(
                    403, text="forbidden", headers={"x-github-saml": "required"}
                )
            }
        )
        result = client.list_dirs("tok", "acme", "design", "main", "tokens")
        assert result.saml_required
        assert result.message == "SAML/SSO required"

    def test_list_dirs_not_found(self):
        client, _ = _client({})
        result = client.list_dirs("tok", "acme", "design", "main", "missing")
        assert (result.status, result.saml_required) == (404, False)

    def test_ensure_folder_existing(self):
        client, router = _client(
            {("GET", f"{REPO}/contents/tokens"): httpx.Response(200, json=[])}
        )
        result = client.ensure_folder("tok", "acme", "design", "main", "tokens/")
        assert result.ok
        assert not result.created
        assert router.sent("PUT", f"{REPO}/contents/tokens/.gitkeep") == []

    def test_ensure_folder_creates_gitkeep(self):
        client, router = _client(
            {
                ("PUT", f"{REPO}/contents/tokens/web/.gitkeep"): httpx.Response(
                    201, json={"content": {"sha": "f00"}}
                )
            }
        )
        result = client.ensure_folder("tok", "acme", "design", "main", "tokens/web")
        assert result.created
        assert result.file_sha == "f00"
        body = _body(router.sent("PUT", f"{REPO}/contents/tokens/web/.gitkeep")[0])
        assert body["branch"] == "main"
        assert base64.b64decode(body["content"]) == b"."

    def test_get_file_contents_raw(self):
        client, router = _client(
            {("GET", f"{REPO}/contents/tokens/tokens.json"): httpx.Response(200, text='{"a": 1}\n')}
        )
        result = client.get_file_contents("tok", "acme", "design", "main", "tokens/tokens.json")
        assert result.ok
        assert result.content_text == '{"a": 1}\n'
        request = router.requests[0]
        assert request.headers["accept"] == "application/vnd.github.raw"
        assert request.url.params["ref"] == "main"

    def test_get_file_contents_missing(self):
        client, _ = _client({})
        result = client.get_file_contents("tok", "acme", "design", "main", "x.json")
        assert (result.ok, result.status) == (False, 404)


def _commit_routes(update=None):
    return {
        ("GET", f"{REPO}/git/ref/heads/main"): httpx.Response(
            200, json={"object": {"sha": "base"}}
        ),
        ("GET", f"{REPO}/git/commits/base"): httpx.Response(200, json={"tree": {"sha": "t0"}}),
        ("POST", f"{REPO}/git/blobs"): httpx.Response(201, json={"sha": "b1"}),
        ("POST", f"{REPO}/git/trees"): httpx.Response(201, json={"sha": "t1"}),
        ("POST", f"{REPO}/git/commits"): httpx.Response(201, json={"sha": "c1abcdef"}),
        ("PATCH", f"{REPO}/git/refs/heads/main"): update or httpx.Response(200, json={}),
    }


class TestCommitFiles:
    """Tests for the Git Data API commit sequence."""

    def test_commit(self):
        client, router = _client(_commit_routes())
        result = client.commit_files(
            "tok", "acme", "design", "main", "sync",
            [CommitFile(path="/tokens/tokens.json", content="{}\n")],
        )
        assert result.ok
        assert result.commit_sha == "c1abcdef"
        assert result.commit_url == "https://github.com/acme/design/commit/c1abcdef"
        assert result.tree_url == "https://github.com/acme/design/tree/main"

        tree = _body(router.sent("POST", f"{REPO}/git/trees")[0])
        assert tree == {
            "base_tree": "t0",
            "tree": [{"path": "tokens/tokens.json", "type": "blob", "mode": "100644", "sha": "b1"}],
        }
        commit = _body(router.sent("POST", f"{REPO}/git/commits")[0])
        assert commit == {"message": "sync", "tree": "t1", "parents": ["base"]}
        assert _body(router.sent("PATCH", f"{REPO}/git/refs/heads/main")[0]) == {
            "sha": "c1abcdef",
            "force": False,
        }

    def test_fast_forward_race(self):
        client, _ = _client(
            _commit_routes(update=httpx.Response(422, text="Update is not a fast forward"))
        )
        result = client.commit_files(
            "tok", "acme", "design", "main", "sync", [CommitFile(path="a.json", content="{}")]
        )
        assert (result.ok, result.status) == (False, 422)
        assert result.message == "Update is not a fast forward"

    def test_no_files(self):
        client, router = _client({})
        result = client.commit_files("tok", "acme", "design", "main", "sync", [])
        assert result.status == 400
        assert router.requests == []

    def test_unexpected_body_is_status_zero(self):
        routes = _commit_routes()
        routes[("POST", f"{REPO}/git/blobs")] = httpx.Response(201, json=["not", "an", "object"])
        client, _ = _client(routes)
        result = client.commit_files(
            "tok", "acme", "design", "main", "sync", [CommitFile(path="a.json", content="{}")]
        )
        assert (result.ok, result.status) == (False, 0)

    def test_writes_not_retried(self):
        def fail(request):
            raise httpx.ReadTimeout("timed out", request=request)

        routes = _commit_routes()
        routes[("POST", f"{REPO}/git/blobs")] = fail
        client, router = _client(routes)
        result = client.commit_files(
            "tok", "acme", "design", "main", "sync", [CommitFile(path="a.json", content="{}")]
        )
        assert result.status == 0
        assert len(router.sent("POST", f"{REPO}/git/blobs")) == 1


class TestPullRequests:
    """Tests for GitHubClient.create_pull_request."""

    def test_create(self):
        client, router = _client(
            {
                ("POST", f"{REPO}/pulls"): httpx.Response(
                    201, json={"number": 12, "html_url": "https://github.com/acme/design/pull/12"}
                )
            }
        )
        result = client.create_pull_request(
            "tok", "acme", "design", title="Tokens", head="dev", base="main"
        )
        assert (result.ok, result.number, result.already_existed) == (True, 12, False)
        assert _body(router.requests[0]) == {
            "title": "Tokens",
            "head": "dev",
            "base": "main",
            "body": "",
        }

    def test_existing_pull_request_returned(self):
        client, router = _client(
            {
                ("POST", f"{REPO}/pulls"): httpx.Response(
                    422, text='{"message": "A pull request already exists for acme:dev."}'
                ),
                ("GET", f"{REPO}/pulls"): httpx.Response(
                    200, json=[{"number": 3, "html_url": "https://github.com/acme/design/pull/3"}]
                ),
            }
        )
        result = client.create_pull_request(
            "tok", "acme", "design", title="Tokens", head="dev", base="main"
        )
        assert (result.ok, result.number, result.already_existed) == (True, 3, True)
        assert router.sent("GET", f"{REPO}/pulls")[0].url.params["head"] == "acme:dev"

    def test_other_failure(self):
        client, _ = _client(
            {("POST", f"{REPO}/pulls"): httpx.Response(422, text="No commits between")}
        )
        result = client.create_pull_request(
            "tok", "acme", "design", title="Tokens", head="dev", base="main"
        )
        assert (result.ok, result.status, result.message) == (False, 422, "No commits between")
