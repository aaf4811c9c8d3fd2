"""Page fetch endpoint."""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends

from pagesync.api.deps import get_origin_client, get_settings
from pagesync.config import Settings
from pagesync.remote.fetcher import fetch_page
from pagesync.schemas.sitemap import FetchPageRequest, FetchPageResponse

router = APIRouter(prefix="/api/fetch", tags=["fetch"])


@router.post("", response_model=FetchPageResponse)
async def fetch_page_endpoint(
    body: FetchPageRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    origin_client: Annotated[httpx.AsyncClient, Depends(get_origin_client)],
) -> FetchPageResponse:
    """Fetch the raw HTML of a page without storing it."""
    content = await fetch_page(origin_client, body.url, user_agent=settings.page_user_agent)
    return FetchPageResponse(url=body.url.strip(), content=content)
