"""Sitemap reconciliation: turn sitemap candidates into tracked pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from pagesync.exceptions import PageSyncError, PersistenceError
from pagesync.models.page import TrackedPage
from pagesync.remote.sitemap import parse_sitemap
from pagesync.services.config_service import save_sitemap_url
from pagesync.services.datetime_service import stored_now
from pagesync.services.page_service import list_tracked_urls
from pagesync.services.persistence import commit_or_raise

if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx
    from sqlalchemy.ext.asyncio import AsyncSession

    from pagesync.github.client import GitHubClient
    from pagesync.remote.sitemap import CandidatePage
    from pagesync.services.config_service import GitHubCredentials

logger = logging.getLogger(__name__)


class ScanStatus(StrEnum):
    ADDED = "added"
    EXISTS = "exists"
    ERROR = "error"


@dataclass
class ScanOutcome:
    """What happened to one sitemap candidate."""

    page: CandidatePage
    status: ScanStatus
    message: str
    tracked_page_id: int | None = None
    linked: bool = False


@dataclass
class ScanReport:
    sitemap_url: str
    outcomes: list[ScanOutcome] = field(default_factory=list)
    total_urls: int = 0
    repository_checked: bool = False
    truncated: bool = False

    def count(self, status: ScanStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)


async def reconcile_candidates(
    session: AsyncSession,
    candidates: Iterable[CandidatePage],
    tracked_urls: set[str],
    repo_files: set[str],
) -> list[ScanOutcome]:
    """Insert a tracked page for every candidate whose URL is not tracked yet.

    A candidate whose file path already exists in the repository is linked to
    that file. A failed insert is reported for that candidate only.
    """
    known_urls = set(tracked_urls)
    outcomes: list[ScanOutcome] = []

    for candidate in candidates:
        if candidate.url in known_urls:
            outcomes.append(
                ScanOutcome(
                    page=candidate, status=ScanStatus.EXISTS, message="Already in sync list"
                )
            )
            continue

        linked = candidate.file_path in repo_files
        page = TrackedPage(
            url=candidate.url,
            name=candidate.name,
            folder_path=candidate.folder_path,
            folder_name=candidate.folder_name,
            repo_file_path=candidate.file_path if linked else None,
            created_at=stored_now(),
        )
        session.add(page)
        try:
            await commit_or_raise(session, f"add page {candidate.url}")
        except PersistenceError as exc:
            outcomes.append(
                ScanOutcome(page=candidate, status=ScanStatus.ERROR, message=exc.message)
            )
            continue

        known_urls.add(candidate.url)
        outcomes.append(
            ScanOutcome(
                page=candidate,
                status=ScanStatus.ADDED,
                message="Linked to existing file" if linked else "Will create new file on sync",
                tracked_page_id=page.id,
                linked=linked,
            )
        )

    return outcomes


async def scan_sitemap(
    session: AsyncSession,
    origin_client: httpx.AsyncClient,
    sitemap_url: str | None,
    *,
    github: GitHubClient | None,
    credentials: GitHubCredentials | None,
    user_agent: str,
) -> ScanReport:
    """Parse a sitemap and reconcile its pages against tracked pages and the repository.

    Without usable GitHub credentials, or when the tree cannot be fetched, every
    added page is planned as a new file.
    """
    url = await save_sitemap_url(session, sitemap_url)
    parsed = await parse_sitemap(origin_client, url, user_agent=user_agent)
    tracked_urls = await list_tracked_urls(session)

    report = ScanReport(sitemap_url=url, total_urls=parsed.total_urls)
    repo_files: set[str] = set()
    if github is not None and credentials is not None and credentials.is_complete:
        try:
            tree = await github.get_tree(
                credentials.owner, credentials.repo, credentials.branch or None
            )
        except PageSyncError as exc:
            logger.warning("Skipping repository file check during scan: %s", exc.message)
        else:
            repo_files = tree.file_paths()
            report.repository_checked = True
            report.truncated = tree.truncated
    else:
        logger.info("GitHub is not configured; skipping repository file check")

    report.outcomes = await reconcile_candidates(session, parsed.pages, tracked_urls, repo_files)
    logger.info(
        "Sitemap scan of %s: %d added, %d existing, %d errors",
        url,
        report.count(ScanStatus.ADDED),
        report.count(ScanStatus.EXISTS),
        report.count(ScanStatus.ERROR),
    )
    return report

