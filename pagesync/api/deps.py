"""Shared API dependencies: settings, DB session, HTTP clients, GitHub access."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pagesync.config import Settings
from pagesync.github.client import GitHubClient
from pagesync.services.config_service import (
    GitHubCredentials,
    load_github_credentials,
    require_github_credentials,
)


@dataclass(frozen=True)
class GitHubAccess:
    """A GitHub client bound to the stored repository configuration."""

    client: GitHubClient
    credentials: GitHubCredentials


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


def get_origin_client(request: Request) -> httpx.AsyncClient:
    """HTTP client for pages and sitemaps on arbitrary origins."""
    client: httpx.AsyncClient = request.app.state.origin_client
    return client


def get_github_http_client(request: Request) -> httpx.AsyncClient:
    """HTTP client for the GitHub REST API."""
    client: httpx.AsyncClient = request.app.state.github_http_client
    return client


def build_github_access(
    http_client: httpx.AsyncClient, credentials: GitHubCredentials, settings: Settings
) -> GitHubAccess:
    client = GitHubClient(
        http_client,
        credentials.token,
        api_url=settings.github_api_url,
        user_agent=settings.github_user_agent,
    )
    return GitHubAccess(client=client, credentials=credentials)


async def require_github(
    settings: Annotated[Settings, Depends(get_settings)],
    session: Annotated[AsyncSession, Depends(get_session)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_github_http_client)],
) -> GitHubAccess:
    """GitHub access for the configured repository. Raises if not fully configured."""
    credentials = await require_github_credentials(session, settings.secret_key)
    return build_github_access(http_client, credentials, settings)


async def optional_github(
    settings: Annotated[Settings, Depends(get_settings)],
    session: Annotated[AsyncSession, Depends(get_session)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_github_http_client)],
) -> GitHubAccess | None:
    """GitHub access when the configuration is complete, otherwise None."""
    credentials = await load_github_credentials(session, settings.secret_key)
    if credentials is None or not credentials.is_complete:
        return None
    return build_github_access(http_client, credentials, settings)
