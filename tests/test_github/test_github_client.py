"""Tests for the GitHub REST client (tree reads and contents writes)."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from pagesync.exceptions import (
    BranchNotFoundError,
    GitHubApiError,
    GitHubWriteError,
    GitHubWriteReason,
    RepositoryNotFoundError,
    ValidationError,
)
from pagesync.github.client import GitHubClient, TreeEntryType
from tests._github_helpers import FakeGitHub, make_client


class TestRequestHeaders:
    async def test_auth_accept_and_user_agent(self) -> None:
        fake = FakeGitHub()
        client, http_client = make_client(fake, token="ghp_secret")
        async with http_client:
            await client.get_repository("octo", "site")

        headers = fake.requests[0].headers
        assert headers["Authorization"] == "Bearer ghp_secret"
        assert headers["Accept"] == "application/vnd.github.v3+json"
        assert headers["User-Agent"] == "WebpageSync/1.0"
        assert str(fake.requests[0].url) == "https://api.github.test/repos/octo/site"


class TestGetTree:
    async def test_default_branch_used_when_omitted(self) -> None:
        fake = FakeGitHub(default_branch="trunk", files={"index.html": "<p>hi</p>"})
        client, http_client = make_client(fake)
        async with http_client:
            tree = await client.get_tree("octo", "site")

        assert tree.branch == "trunk"
        assert fake.paths_requested("GET")[1] == "/repos/octo/site/branches/trunk"
        assert tree.file_paths() == {"index.html"}

    async def test_explicit_branch(self) -> None:
        fake = FakeGitHub(branches={"main", "gh-pages"}, files={"a.html": "a"})
        client, http_client = make_client(fake)
        async with http_client:
            tree = await client.get_tree("octo", "site", "gh-pages")

        assert tree.branch == "gh-pages"
        tree_request = fake.requests[-1]
        assert tree_request.url.params["recursive"] == "1"

    async def test_entry_types_mapped(self) -> None:
        fake = FakeGitHub(files={"docs/guide.html": "guide", "index.html": "home"})
        client, http_client = make_client(fake)
        async with http_client:
            tree = await client.get_tree("octo", "site")

        by_path = {entry.path: entry for entry in tree.entries}
        assert by_path["docs"].type is TreeEntryType.DIRECTORY
        assert by_path["docs"].size is None
        assert by_path["docs/guide.html"].type is TreeEntryType.FILE
        assert by_path["docs/guide.html"].size == 5

    async def test_submodule_and_unknown_types(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/branches/main"):
                return httpx.Response(200, json={"commit": {"commit": {"tree": {"sha": "t1"}}}})
            if "/git/trees/" in request.url.path:
                return httpx.Response(
                    200,
                    json={
                        "tree": [
                            {"path": "vendor/lib", "type": "commit", "sha": "s1"},
                            {"path": "weird", "type": "symlink-ish", "sha": "s2"},
                        ]
                    },
                )
            return httpx.Response(200, json={"default_branch": "main"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            tree = await GitHubClient(http_client, "t").get_tree("octo", "site")

        assert [(entry.path, entry.type) for entry in tree.entries] == [
            ("vendor/lib", TreeEntryType.SUBMODULE)
        ]
        assert tree.truncated is False

    async def test_truncated_listing_still_returns_entries(self) -> None:
        files = {f"pages/p{i}.html": str(i) for i in range(5)}
        fake = FakeGitHub(files=files, truncated=True)
        client, http_client = make_client(fake)
        async with http_client:
            tree = await client.get_tree("octo", "site")

        assert tree.truncated is True
        assert tree.file_paths() == set(files)

    async def test_repository_not_found(self) -> None:
        fake = FakeGitHub()
        client, http_client = make_client(fake)
        async with http_client:
            with pytest.raises(RepositoryNotFoundError, match="Repository not found: Not Found"):
                await client.get_tree("octo", "missing")

    async def test_branch_not_found(self) -> None:
        fake = FakeGitHub()
        client, http_client = make_client(fake)
        async with http_client:
            with pytest.raises(BranchNotFoundError) as exc_info:
                await client.get_tree("octo", "site", "nope")

        assert exc_info.value.message == "Branch not found: Branch not found"
        assert exc_info.value.status_code == 404

    async def test_tree_failure(self) -> None:
        fake = FakeGitHub()
        fake.tree_status = 500
        client, http_client = make_client(fake)
        async with http_client:
            with pytest.raises(GitHubApiError) as exc_info:
                await client.get_tree("octo", "site")

        assert exc_info.value.category == "github_api"
        assert exc_info.value.upstream_status == 500

    async def test_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http_client:
            with pytest.raises(GitHubApiError, match="GitHub request failed"):
                await GitHubClient(http_client, "t").get_tree("octo", "site")

    async def test_malformed_api_url(self) -> None:
        fake = FakeGitHub()
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as http_client:
            client = GitHubClient(http_client, "t", api_url="https://api.github.test:abc")
            with pytest.raises(GitHubApiError, match="GitHub request failed"):
                await client.get_tree("octo", "site")

        assert fake.requests == []


class TestWriteFile:
    async def test_create_omits_sha(self) -> None:
        fake = FakeGitHub()
        client, http_client = make_client(fake)
        async with http_client:
            result = await client.write_file("octo", "site", "main", "docs/a.html", "<p>é</p>")

        put = fake.puts[0]
        assert "sha" not in put
        assert put["branch"] == "main"
        assert put["message"] == "Update docs/a.html"
        assert base64.b64decode(put["content"]).decode("utf-8") == "<p>é</p>"
        assert result.committed is True
        assert result.created is True
        assert result.path == "docs/a.html"
        assert result.commit_sha is not None
        assert fake.files["docs/a.html"] == "<p>é</p>"

    async def test_update_sends_existing_sha(self) -> None:
        fake = FakeGitHub(files={"a.html": "old"})
        previous_sha = fake.shas["a.html"]
        client, http_client = make_client(fake)
        async with http_client:
            result = await client.write_file(
                "octo", "site", "main", "a.html", "new", message="Sync a"
            )

        put = fake.puts[0]
        assert put["sha"] == previous_sha
        assert put["message"] == "Sync a"
        assert result.created is False
        assert fake.files["a.html"] == "new"
        lookup = fake.requests[0]
        assert lookup.method == "GET"
        assert lookup.url.params["ref"] == "main"

    async def test_branch_omitted_when_not_configured(self) -> None:
        fake = FakeGitHub()
        client, http_client = make_client(fake)
        async with http_client:
            await client.write_file("octo", "site", None, "a.html", "x")

        assert "branch" not in json.loads(fake.requests[-1].content)
        assert "ref" not in fake.requests[0].url.params

    async def test_failed_lookup_means_no_sha(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            if request.method == "GET":
                return httpx.Response(500, json={"message": "boom"})
            return httpx.Response(201, json={"content": {"sha": "b"}, "commit": {"sha": "c"}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = GitHubClient(http_client, "t")
            result = await client.write_file("octo", "site", "main", "a.html", "x")

        assert calls == ["GET", "PUT"]
        assert result.created is True

    @pytest.mark.parametrize(
        ("token", "owner", "repo", "path", "content"),
        [
            ("", "octo", "site", "a.html", "x"),
            ("t", "", "site", "a.html", "x"),
            ("t", "octo", "", "a.html", "x"),
            ("t", "octo", "site", "", "x"),
            ("t", "octo", "site", "a.html", ""),
        ],
    )
    async def test_missing_fields_rejected_before_request(
        self, token: str, owner: str, repo: str, path: str, content: str
    ) -> None:
        fake = FakeGitHub()
        client, http_client = make_client(fake, token=token)
        async with http_client:
            with pytest.raises(ValidationError, match="Missing required fields"):
                await client.write_file(owner, repo, "main", path, content)
        assert fake.requests == []

    @pytest.mark.parametrize(
        ("upstream_status", "reason", "status_code", "fragment"),
        [
            (401, GitHubWriteReason.INVALID_CREDENTIALS, 401, "Invalid GitHub token"),
            (403, GitHubWriteReason.INSUFFICIENT_SCOPE, 403, "'repo' scope"),
            (404, GitHubWriteReason.NOT_FOUND, 404, "Repository not found"),
            (422, GitHubWriteReason.UPSTREAM, 502, "Something went wrong"),
        ],
    )
    async def test_write_failures_classified(
        self,
        upstream_status: int,
        reason: GitHubWriteReason,
        status_code: int,
        fragment: str,
    ) -> None:
        fake = FakeGitHub()
        fake.write_status = upstream_status
        client, http_client = make_client(fake)
        async with http_client:
            with pytest.raises(GitHubWriteError) as exc_info:
                await client.write_file("octo", "site", "main", "a.html", "x")

        error = exc_info.value
        assert error.reason is reason
        assert error.status_code == status_code
        assert error.upstream_status == upstream_status
        assert error.category == "github_write"
        assert fragment in error.message

    async def test_upstream_failure_without_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(404)
            return httpx.Response(500)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            with pytest.raises(GitHubWriteError, match="Failed to push to GitHub"):
                await GitHubClient(http_client, "t").write_file("o", "r", None, "a.html", "x")

    async def test_transport_failure_is_upstream(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(404)
            raise httpx.ReadTimeout("read timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            with pytest.raises(GitHubWriteError) as exc_info:
                await GitHubClient(http_client, "t").write_file("o", "r", None, "a.html", "x")

        assert exc_info.value.reason is GitHubWriteReason.UPSTREAM
        assert exc_info.value.status_code == 502
