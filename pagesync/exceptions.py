"""Application-level exception types.

Convention:
- ``PageSyncError`` subclasses carry a client-safe message, a machine-readable
  ``category`` and an HTTP ``status_code``.  The global handler in
  ``pagesync/main.py`` returns ``{"detail": message, "category": category}``.
- ``InternalServerError`` is for errors whose details must never reach clients
  (undecryptable stored credentials, etc.).  The global handler logs the full
  message at ERROR and returns a generic "Internal server error" (500).
"""

from __future__ import annotations

from enum import StrEnum


class InternalServerError(Exception):
    """Raised for internal errors whose details must not be exposed to clients."""


class PageSyncError(Exception):
    """Base class for errors surfaced to API clients as a message plus category."""

    category: str = "error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PageSyncError):
    """Missing or malformed required input."""

    category = "validation"
    status_code = 400


class InvalidUrlError(ValidationError):
    """A URL that is not an absolute HTTP(S) URL."""

    category = "invalid_url"


class ConfigurationMissingError(ValidationError):
    """GitHub configuration is absent or incomplete."""

    category = "configuration_missing"


class UpstreamFetchError(PageSyncError):
    """A page or sitemap origin returned a non-success status or was unreachable."""

    category = "upstream_fetch"
    status_code = 502

    def __init__(
        self, message: str, *, url: str, upstream_status: int | None = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.upstream_status = upstream_status


class GitHubApiError(PageSyncError):
    """The GitHub API rejected a request or could not be reached."""

    category = "github_api"
    status_code = 502

    def __init__(self, message: str, *, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class RepositoryNotFoundError(GitHubApiError):
    category = "repository_not_found"
    status_code = 404


class BranchNotFoundError(GitHubApiError):
    category = "branch_not_found"
    status_code = 404


class GitHubWriteReason(StrEnum):
    """Caller-facing classification of a failed contents write."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INSUFFICIENT_SCOPE = "insufficient_scope"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


_WRITE_REASON_STATUS = {
    GitHubWriteReason.INVALID_CREDENTIALS: 401,
    GitHubWriteReason.INSUFFICIENT_SCOPE: 403,
    GitHubWriteReason.NOT_FOUND: 404,
    GitHubWriteReason.UPSTREAM: 502,
}


class GitHubWriteError(GitHubApiError):
    """Creating or updating a repository file failed."""

    category = "github_write"

    def __init__(
        self,
        message: str,
        *,
        reason: GitHubWriteReason,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message, upstream_status=upstream_status)
        self.reason = reason
        self.status_code = _WRITE_REASON_STATUS[reason]


class PersistenceError(PageSyncError):
    """A datastore operation failed."""

    category = "persistence"
    status_code = 503


class PageSyncFailedError(PageSyncError):
    """Syncing one tracked page failed and the batch was aborted.

    Keeps the category and status of the underlying error so clients can still
    tell a fetch failure from a GitHub write failure.
    """

    def __init__(
        self,
        *,
        page_id: int,
        url: str,
        cause: PageSyncError,
        synced_count: int = 0,
    ) -> None:
        super().__init__(f"Failed to sync {url}: {cause.message}")
        self.page_id = page_id
        self.url = url
        self.cause = cause
        self.synced_count = synced_count
        self.category = cause.category
        self.status_code = cause.status_code
