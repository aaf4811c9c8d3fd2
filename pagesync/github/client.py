"""GitHub REST client: repository tree listing and single-file commits."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any
from urllib.parse import quote

import httpx

from pagesync.exceptions import (
    BranchNotFoundError,
    GitHubApiError,
    GitHubWriteError,
    GitHubWriteReason,
    RepositoryNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "WebpageSync/1.0"

_INSUFFICIENT_SCOPE_MESSAGE = (
    "GitHub token doesn't have permission to write to this repository. "
    "Please ensure your token has 'repo' scope (classic token) or "
    "'Contents' read/write permissions (fine-grained token)."
)
_NOT_FOUND_MESSAGE = "Repository not found. Please check the owner and repository name."
_INVALID_TOKEN_MESSAGE = "Invalid GitHub token. Please check your token and try again."


class TreeEntryType(StrEnum):
    FILE = "file"
    DIRECTORY = "directory"
    SUBMODULE = "submodule"


_GIT_TYPES = {
    "blob": TreeEntryType.FILE,
    "tree": TreeEntryType.DIRECTORY,
    "commit": TreeEntryType.SUBMODULE,
}


@dataclass(frozen=True)
class RepositoryTreeEntry:
    """One path in a recursive git tree listing."""

    path: str
    type: TreeEntryType
    sha: str
    size: int | None = None


@dataclass
class RepositoryTree:
    """Snapshot of a branch's tree.

    ``truncated`` means GitHub cut the listing short, so a path missing from
    ``entries`` may still exist in the repository.
    """

    branch: str
    entries: list[RepositoryTreeEntry] = field(default_factory=list)
    truncated: bool = False

    def file_paths(self) -> set[str]:
        return {entry.path for entry in self.entries if entry.type is TreeEntryType.FILE}


@dataclass
class CommitResult:
    committed: bool
    path: str
    content_sha: str | None = None
    commit_sha: str | None = None
    created: bool = False


def _upstream_message(response: httpx.Response) -> str | None:
    """Extract GitHub's ``message`` from an error response, if any."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return None


def classify_write_failure(response: httpx.Response) -> GitHubWriteError:
    """Map a failed contents PUT to a caller-facing error."""
    status = response.status_code
    if status == 401:
        return GitHubWriteError(
            _INVALID_TOKEN_MESSAGE,
            reason=GitHubWriteReason.INVALID_CREDENTIALS,
            upstream_status=status,
        )
    if status == 403:
        return GitHubWriteError(
            _INSUFFICIENT_SCOPE_MESSAGE,
            reason=GitHubWriteReason.INSUFFICIENT_SCOPE,
            upstream_status=status,
        )
    if status == 404:
        return GitHubWriteError(
            _NOT_FOUND_MESSAGE,
            reason=GitHubWriteReason.NOT_FOUND,
            upstream_status=status,
        )
    return GitHubWriteError(
        _upstream_message(response) or "Failed to push to GitHub",
        reason=GitHubWriteReason.UPSTREAM,
        upstream_status=status,
    )


class GitHubClient:
    """Thin async wrapper over the GitHub REST endpoints PageSync needs.

    The HTTP client is injected and owned by the caller.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._http = http_client
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": user_agent,
        }

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.api_url}{endpoint}"
        logger.debug("GitHub request: %s %s", method, endpoint)
        try:
            response = await self._http.request(method, url, headers=self.headers, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("GitHub request %s %s failed: %s", method, endpoint, exc)
            msg = f"GitHub request failed: {exc}"
            raise GitHubApiError(msg) from exc
        logger.debug(
            "GitHub response: %s %s (status=%d)", method, endpoint, response.status_code
        )
        return response

    @staticmethod
    def _repo_endpoint(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Fetch repository metadata."""
        response = await self._request("GET", self._repo_endpoint(owner, repo))
        if not response.is_success:
            detail = _upstream_message(response) or response.reason_phrase
            raise RepositoryNotFoundError(
                f"Repository not found: {detail}", upstream_status=response.status_code
            )
        data: dict[str, Any] = response.json()
        return data

    async def get_branch_tree_sha(self, owner: str, repo: str, branch: str) -> str:
        """Return the tree SHA of the branch's head commit."""
        endpoint = f"{self._repo_endpoint(owner, repo)}/branches/{quote(branch, safe='/')}"
        response = await self._request("GET", endpoint)
        if not response.is_success:
            detail = _upstream_message(response) or response.reason_phrase
            raise BranchNotFoundError(
                f"Branch not found: {detail}", upstream_status=response.status_code
            )
        data = response.json()
        try:
            return str(data["commit"]["commit"]["tree"]["sha"])
        except (KeyError, TypeError) as exc:
            msg = f"Unexpected branch response for {branch!r}"
            raise GitHubApiError(msg) from exc

    async def get_tree(
        self, owner: str, repo: str, branch: str | None = None
    ) -> RepositoryTree:
        """List every file and folder of a branch (default branch when omitted)."""
        metadata = await self.get_repository(owner, repo)
        if not branch:
            branch = str(metadata.get("default_branch") or "main")

        tree_sha = await self.get_branch_tree_sha(owner, repo, branch)
        response = await self._request(
            "GET",
            f"{self._repo_endpoint(owner, repo)}/git/trees/{tree_sha}",
            params={"recursive": "1"},
        )
        if not response.is_success:
            raise GitHubApiError(
                _upstream_message(response) or "Failed to fetch repository tree",
                upstream_status=response.status_code,
            )

        data = response.json()
        entries: list[RepositoryTreeEntry] = []
        for item in data.get("tree", []):
            entry_type = _GIT_TYPES.get(item.get("type", ""))
            if entry_type is None:
                logger.debug("Ignoring tree entry of unknown type: %r", item)
                continue
            entries.append(
                RepositoryTreeEntry(
                    path=item["path"],
                    type=entry_type,
                    sha=item.get("sha", ""),
                    size=item.get("size") if entry_type is TreeEntryType.FILE else None,
                )
            )

        truncated = bool(data.get("truncated", False))
        if truncated:
            logger.warning(
                "Tree of %s/%s@%s is truncated (%d entries received)",
                owner,
                repo,
                branch,
                len(entries),
            )
        return RepositoryTree(branch=branch, entries=entries, truncated=truncated)

    async def get_file_sha(
        self, owner: str, repo: str, path: str, branch: str | None = None
    ) -> str | None:
        """Return the blob SHA of an existing file, or None.

        Any failure counts as "no such file"; a real problem resurfaces when
        the write is attempted.
        """
        params = {"ref": branch} if branch else None
        endpoint = f"{self._repo_endpoint(owner, repo)}/contents/{quote(path, safe='/')}"
        try:
            response = await self._request("GET", endpoint, params=params)
        except GitHubApiError:
            return None
        if not response.is_success:
            if response.status_code != 404:
                logger.info(
                    "Existence check for %s returned HTTP %d; writing without sha",
                    path,
                    response.status_code,
                )
            return None
        try:
            payload = response.json()
        except ValueError:
            return None
        if isinstance(payload, dict) and payload.get("sha"):
            return str(payload["sha"])
        return None

    async def write_file(
        self,
        owner: str,
        repo: str,
        branch: str | None,
        path: str,
        content: str,
        message: str | None = None,
    ) -> CommitResult:
        """Create or update one file in a single commit."""
        if not (self._token and owner and repo and path and content):
            raise ValidationError("Missing required fields")

        sha = await self.get_file_sha(owner, repo, path, branch)

        body: dict[str, str] = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if branch:
            body["branch"] = branch
        if sha:
            body["sha"] = sha

        endpoint = f"{self._repo_endpoint(owner, repo)}/contents/{quote(path, safe='/')}"
        try:
            response = await self._request("PUT", endpoint, json=body)
        except GitHubApiError as exc:
            raise GitHubWriteError(exc.message, reason=GitHubWriteReason.UPSTREAM) from exc

        if not response.is_success:
            error = classify_write_failure(response)
            logger.warning(
                "GitHub write of %s failed (HTTP %d): %s",
                path,
                response.status_code,
                _upstream_message(response),
            )
            raise error

        result = response.json()
        logger.info("Committed %s to %s/%s (%s)", path, owner, repo, "update" if sha else "create")
        return CommitResult(
            committed=True,
            path=path,
            content_sha=(result.get("content") or {}).get("sha"),
            commit_sha=(result.get("commit") or {}).get("sha"),
            created=sha is None,
        )
