"""Tracked page API endpoints: registration, removal and sync."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pagesync.api.deps import (
    GitHubAccess,
    get_origin_client,
    get_session,
    get_settings,
    require_github,
)
from pagesync.config import Settings
from pagesync.schemas.page import (
    FolderResponse,
    PageSyncResultResponse,
    SyncReportResponse,
    TrackedPageCreate,
    TrackedPageListResponse,
    TrackedPageResponse,
)
from pagesync.services.datetime_service import to_iso
from pagesync.services.page_service import (
    add_page,
    get_page,
    list_folders,
    list_pages,
    remove_page,
)
from pagesync.services.path_service import resolve_page_path
from pagesync.services.sync_service import PageSyncStatus, sync_page, sync_pages

if TYPE_CHECKING:
    from pagesync.models.page import TrackedPage
    from pagesync.services.sync_service import PageSyncResult

router = APIRouter(prefix="/api/pages", tags=["pages"])


def _page_response(page: TrackedPage) -> TrackedPageResponse:
    return TrackedPageResponse(
        id=page.id,
        url=page.url,
        name=page.name,
        folder_path=page.folder_path,
        folder_name=page.folder_name,
        repo_file_path=page.repo_file_path,
        resolved_file_path=resolve_page_path(page),
        last_synced_at=to_iso(page.last_synced_at),
        created_at=to_iso(page.created_at),
    )


def _result_response(result: PageSyncResult) -> PageSyncResultResponse:
    return PageSyncResultResponse(
        page_id=result.page_id,
        url=result.url,
        file_path=result.file_path,
        status=result.status,
        message=result.message,
        category=result.category,
        synced_at=to_iso(result.synced_at),
        created=result.created,
    )


@router.get("", response_model=TrackedPageListResponse)
async def list_pages_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TrackedPageListResponse:
    """List tracked pages in the order they were added."""
    pages = await list_pages(session)
    return TrackedPageListResponse(items=[_page_response(page) for page in pages])


@router.post("", response_model=TrackedPageResponse, status_code=status.HTTP_201_CREATED)
async def add_page_endpoint(
    body: TrackedPageCreate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TrackedPageResponse:
    """Track a page as a new file or linked to an existing repository file."""
    page = await add_page(session, body)
    return _page_response(page)


@router.get("/folders", response_model=list[FolderResponse])
async def list_folders_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[FolderResponse]:
    """Distinct folders used by tracked pages."""
    folders = await list_folders(session)
    return [FolderResponse(path=folder.path, name=folder.name) for folder in folders]


@router.post("/sync", response_model=SyncReportResponse)
async def sync_all_endpoint(
    settings: Annotated[Settings, Depends(get_settings)],
    session: Annotated[AsyncSession, Depends(get_session)],
    origin_client: Annotated[httpx.AsyncClient, Depends(get_origin_client)],
    github: Annotated[GitHubAccess, Depends(require_github)],
) -> SyncReportResponse:
    """Sync every tracked page in order."""
    pages = await list_pages(session)
    report = await sync_pages(
        session,
        pages,
        origin_client=origin_client,
        github=github.client,
        credentials=github.credentials,
        user_agent=settings.page_user_agent,
        continue_on_error=settings.sync_continue_on_error,
    )
    return SyncReportResponse(
        synced=report.count(PageSyncStatus.SYNCED),
        failed=report.count(PageSyncStatus.FAILED),
        results=[_result_response(result) for result in report.results],
    )


@router.post("/{page_id}/sync", response_model=PageSyncResultResponse)
async def sync_page_endpoint(
    page_id: int,
    settings: Annotated[Settings, Depends(get_settings)],
    session: Annotated[AsyncSession, Depends(get_session)],
    origin_client: Annotated[httpx.AsyncClient, Depends(get_origin_client)],
    github: Annotated[GitHubAccess, Depends(require_github)],
) -> PageSyncResultResponse:
    """Fetch one tracked page and commit it to its repository file."""
    page = await get_page(session, page_id)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    result = await sync_page(
        session,
        page,
        origin_client=origin_client,
        github=github.client,
        credentials=github.credentials,
        user_agent=settings.page_user_agent,
    )
    return _result_response(result)


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_page_endpoint(
    page_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    """Stop tracking a page. The repository file is left untouched."""
    if not await remove_page(session, page_id):
        raise HTTPException(status_code=404, detail="Page not found")
