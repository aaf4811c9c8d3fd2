"""Configuration API endpoints: GitHub repository and sitemap URL."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pagesync.api.deps import get_session, get_settings
from pagesync.config import Settings
from pagesync.schemas.config import (
    GitHubConfigResponse,
    GitHubConfigUpdate,
    SitemapSettingRequest,
    SitemapSettingResponse,
)
from pagesync.services.config_service import (
    get_github_config,
    get_sitemap_setting,
    save_github_config,
    save_sitemap_url,
)
from pagesync.services.crypto_service import decrypt_token, mask_token
from pagesync.services.datetime_service import to_iso

if TYPE_CHECKING:
    from pagesync.models.config import GitHubConfig

router = APIRouter(prefix="/api/config", tags=["config"])


def _github_response(row: GitHubConfig | None, secret_key: str) -> GitHubConfigResponse:
    if row is None:
        return GitHubConfigResponse(configured=False)
    token = decrypt_token(row.token, secret_key)
    return GitHubConfigResponse(
        configured=bool(token and row.owner and row.repo),
        owner=row.owner,
        repo=row.repo,
        branch=row.branch,
        has_token=bool(token),
        token_hint=mask_token(token),
        updated_at=to_iso(row.updated_at),
    )


@router.get("/github", response_model=GitHubConfigResponse)
async def get_github_config_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> GitHubConfigResponse:
    """Get the GitHub configuration with the token masked."""
    row = await get_github_config(session)
    return _github_response(row, settings.secret_key)


@router.put("/github", response_model=GitHubConfigResponse)
async def save_github_config_endpoint(
    body: GitHubConfigUpdate,
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> GitHubConfigResponse:
    """Save the GitHub configuration. An omitted token keeps the stored one."""
    row = await save_github_config(session, body, settings.secret_key)
    return _github_response(row, settings.secret_key)


@router.get("/sitemap", response_model=SitemapSettingResponse)
async def get_sitemap_setting_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SitemapSettingResponse:
    row = await get_sitemap_setting(session)
    if row is None:
        return SitemapSettingResponse()
    return SitemapSettingResponse(sitemap_url=row.sitemap_url, updated_at=to_iso(row.updated_at))


@router.put("/sitemap", response_model=SitemapSettingResponse)
async def save_sitemap_setting_endpoint(
    body: SitemapSettingRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SitemapSettingResponse:
    url = await save_sitemap_url(session, body.sitemap_url)
    row = await get_sitemap_setting(session)
    return SitemapSettingResponse(
        sitemap_url=url, updated_at=to_iso(row.updated_at) if row is not None else None
    )
