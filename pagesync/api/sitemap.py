"""Sitemap API endpoints: preview and reconciliation scan."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pagesync.api.deps import (
    GitHubAccess,
    get_origin_client,
    get_session,
    get_settings,
    optional_github,
)
from pagesync.config import Settings
from pagesync.remote.sitemap import parse_sitemap
from pagesync.schemas.sitemap import (
    CandidatePageResponse,
    ScanOutcomeResponse,
    SitemapParseResponse,
    SitemapRequest,
    SitemapScanResponse,
)
from pagesync.services.config_service import get_sitemap_url
from pagesync.services.reconcile_service import ScanStatus, scan_sitemap

if TYPE_CHECKING:
    from pagesync.remote.sitemap import CandidatePage

router = APIRouter(prefix="/api/sitemap", tags=["sitemap"])


def _candidate_response(page: CandidatePage) -> CandidatePageResponse:
    return CandidatePageResponse(
        url=page.url,
        name=page.name,
        file_path=page.file_path,
        file_extension=page.file_extension,
        folder_path=page.folder_path,
        folder_name=page.folder_name,
    )


@router.post("/parse", response_model=SitemapParseResponse)
async def parse_sitemap_endpoint(
    body: SitemapRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    origin_client: Annotated[httpx.AsyncClient, Depends(get_origin_client)],
) -> SitemapParseResponse:
    """List the pages of a sitemap with their derived file paths, without storing anything."""
    result = await parse_sitemap(
        origin_client, body.sitemap_url, user_agent=settings.page_user_agent
    )
    return SitemapParseResponse(
        sitemap_url=(body.sitemap_url or "").strip(),
        total_urls=result.total_urls,
        pages=[_candidate_response(page) for page in result.pages],
    )


@router.post("/scan", response_model=SitemapScanResponse)
async def scan_sitemap_endpoint(
    body: SitemapRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    session: Annotated[AsyncSession, Depends(get_session)],
    origin_client: Annotated[httpx.AsyncClient, Depends(get_origin_client)],
    github: Annotated[GitHubAccess | None, Depends(optional_github)],
) -> SitemapScanResponse:
    """Track every sitemap page not tracked yet, linking pages whose file already exists.

    Uses the stored sitemap URL when the request names none.
    """
    sitemap_url = body.sitemap_url
    if not (sitemap_url or "").strip():
        sitemap_url = await get_sitemap_url(session)

    report = await scan_sitemap(
        session,
        origin_client,
        sitemap_url,
        github=github.client if github is not None else None,
        credentials=github.credentials if github is not None else None,
        user_agent=settings.page_user_agent,
    )
    return SitemapScanResponse(
        sitemap_url=report.sitemap_url,
        total_urls=report.total_urls,
        added=report.count(ScanStatus.ADDED),
        exists=report.count(ScanStatus.EXISTS),
        errors=report.count(ScanStatus.ERROR),
        repository_checked=report.repository_checked,
        truncated=report.truncated,
        results=[
            ScanOutcomeResponse(
                page=_candidate_response(outcome.page),
                status=outcome.status,
                message=outcome.message,
                tracked_page_id=outcome.tracked_page_id,
                linked=outcome.linked,
            )
            for outcome in report.outcomes
        ],
    )
