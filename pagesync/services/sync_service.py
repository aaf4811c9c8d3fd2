"""Sync service: fetch each tracked page and commit it to the repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import inspect

from pagesync.exceptions import PageSyncError, PageSyncFailedError
from pagesync.remote.fetcher import fetch_page
from pagesync.services.page_service import mark_synced
from pagesync.services.path_service import resolve_page_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx
    from sqlalchemy.ext.asyncio import AsyncSession

    from pagesync.github.client import GitHubClient
    from pagesync.models.page import TrackedPage
    from pagesync.services.config_service import GitHubCredentials

logger = logging.getLogger(__name__)


class PageSyncStatus(StrEnum):
    SYNCED = "synced"
    FAILED = "failed"


@dataclass
class PageSyncResult:
    page_id: int
    url: str
    file_path: str
    status: PageSyncStatus
    message: str
    category: str | None = None
    synced_at: str | None = None
    created: bool = False


@dataclass
class SyncReport:
    results: list[PageSyncResult] = field(default_factory=list)

    def count(self, status: PageSyncStatus) -> int:
        return sum(1 for result in self.results if result.status is status)


async def sync_page(
    session: AsyncSession,
    page: TrackedPage,
    *,
    origin_client: httpx.AsyncClient,
    github: GitHubClient,
    credentials: GitHubCredentials,
    user_agent: str,
) -> PageSyncResult:
    """Fetch one page, commit it to its resolved path and record the sync time.

    Raises the PageSyncError of whichever step failed; ``last_synced_at`` is
    only updated after a successful commit.
    """
    content = await fetch_page(origin_client, page.url, user_agent=user_agent)
    file_path = resolve_page_path(page)
    commit = await github.write_file(
        credentials.owner,
        credentials.repo,
        credentials.branch or None,
        file_path,
        content,
        message=f"Sync {page.name} from {page.url}",
    )
    synced_at = await mark_synced(session, page)
    logger.info("Synced %s to %s", page.url, file_path)
    return PageSyncResult(
        page_id=page.id,
        url=page.url,
        file_path=file_path,
        status=PageSyncStatus.SYNCED,
        message="Created" if commit.created else "Updated",
        synced_at=synced_at,
        created=commit.created,
    )


async def sync_pages(
    session: AsyncSession,
    pages: Iterable[TrackedPage],
    *,
    origin_client: httpx.AsyncClient,
    github: GitHubClient,
    credentials: GitHubCredentials,
    user_agent: str,
    continue_on_error: bool = False,
) -> SyncReport:
    """Sync pages one after another, in the given order.

    By default the first failure aborts the batch with PageSyncFailedError and
    the remaining pages are not attempted. With ``continue_on_error`` every
    page is attempted and failures are recorded in the report.
    """
    report = SyncReport()
    for page in pages:
        if inspect(page).expired_attributes:
            # A rolled-back commit of an earlier page expired this one.
            await session.refresh(page)
        page_id, url, file_path = page.id, page.url, resolve_page_path(page)
        try:
            result = await sync_page(
                session,
                page,
                origin_client=origin_client,
                github=github,
                credentials=credentials,
                user_agent=user_agent,
            )
        except PageSyncError as exc:
            logger.warning("Sync of %s failed: %s", url, exc.message)
            if not continue_on_error:
                raise PageSyncFailedError(
                    page_id=page_id,
                    url=url,
                    cause=exc,
                    synced_count=report.count(PageSyncStatus.SYNCED),
                ) from exc
            report.results.append(
                PageSyncResult(
                    page_id=page_id,
                    url=url,
                    file_path=file_path,
                    status=PageSyncStatus.FAILED,
                    message=exc.message,
                    category=exc.category,
                )
            )
            continue
        report.results.append(result)

    logger.info(
        "Sync finished: %d synced, %d failed",
        report.count(PageSyncStatus.SYNCED),
        report.count(PageSyncStatus.FAILED),
    )
    return report
