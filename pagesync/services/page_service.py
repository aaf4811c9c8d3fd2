"""Tracked page service: listing, manual registration and removal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select

from pagesync.exceptions import ValidationError
from pagesync.models.page import TrackedPage
from pagesync.remote.fetcher import validate_http_url
from pagesync.schemas.page import LinkMode
from pagesync.services.datetime_service import stored_now
from pagesync.services.path_service import build_file_path, split_repo_file_path
from pagesync.services.persistence import commit_or_raise

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from pagesync.schemas.page import TrackedPageCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FolderInfo:
    path: str
    name: str


async def list_pages(session: AsyncSession) -> list[TrackedPage]:
    """All tracked pages in stored order."""
    result = await session.execute(select(TrackedPage).order_by(TrackedPage.id))
    return list(result.scalars().all())


async def get_page(session: AsyncSession, page_id: int) -> TrackedPage | None:
    return await session.get(TrackedPage, page_id)


async def list_tracked_urls(session: AsyncSession) -> set[str]:
    result = await session.execute(select(TrackedPage.url))
    return set(result.scalars().all())


def collect_folders(pages: list[TrackedPage]) -> list[FolderInfo]:
    """Distinct folders of the given pages, in first-seen order."""
    seen: dict[str, FolderInfo] = {}
    for page in pages:
        if page.folder_path and page.folder_name and page.folder_path not in seen:
            seen[page.folder_path] = FolderInfo(path=page.folder_path, name=page.folder_name)
    return list(seen.values())


async def list_folders(session: AsyncSession) -> list[FolderInfo]:
    return collect_folders(await list_pages(session))


def _clean_folder(
    folder_path: str | None, folder_name: str | None
) -> tuple[str | None, str | None]:
    path = (folder_path or "").strip().strip("/")
    name = (folder_name or "").strip()
    if not path:
        if name:
            raise ValidationError("A folder name requires a folder path")
        return None, None
    return path, name or path.rsplit("/", 1)[-1]


async def add_page(session: AsyncSession, data: TrackedPageCreate) -> TrackedPage:
    """Register a page, either as a new file or linked to an existing repository file."""
    if not data.url.strip():
        raise ValidationError("Please provide a URL for the page")
    url = validate_http_url(data.url, invalid_message="Invalid page URL format")

    if data.mode is LinkMode.EXISTING:
        repo_file_path = (data.repo_file_path or "").strip().strip("/")
        if not repo_file_path:
            raise ValidationError("Please select a file from the repository")
        parts = split_repo_file_path(repo_file_path)
        name = parts.name
        folder_path, folder_name = parts.folder_path, parts.folder_name
    else:
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("Please provide a name for the new file")
        if "/" in name:
            raise ValidationError("Page name must not contain '/'")
        folder_path, folder_name = _clean_folder(data.folder_path, data.folder_name)
        repo_file_path = build_file_path(name, folder_path)

    page = TrackedPage(
        url=url,
        name=name,
        folder_path=folder_path,
        folder_name=folder_name,
        repo_file_path=repo_file_path,
        created_at=stored_now(),
    )
    session.add(page)
    await commit_or_raise(session, "add page")
    await session.refresh(page)
    logger.info("Tracking %s as %s", url, repo_file_path)
    return page


async def remove_page(session: AsyncSession, page_id: int) -> bool:
    """Delete a tracked page. Returns True if found and deleted."""
    page = await session.get(TrackedPage, page_id)
    if page is None:
        return False
    await session.delete(page)
    await commit_or_raise(session, "remove page")
    logger.info("Stopped tracking %s", page.url)
    return True


async def mark_synced(session: AsyncSession, page: TrackedPage) -> str:
    """Record a successful sync of ``page`` and return the stored timestamp."""
    page.last_synced_at = stored_now()
    await commit_or_raise(session, "record sync time")
    return page.last_synced_at
