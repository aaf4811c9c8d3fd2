"""Configuration service: GitHub credentials and the sitemap URL."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pagesync.exceptions import ConfigurationMissingError, ValidationError
from pagesync.models.config import CONFIG_ROW_ID, GitHubConfig, SitemapSetting
from pagesync.remote.fetcher import validate_http_url
from pagesync.services.crypto_service import decrypt_token, encrypt_token
from pagesync.services.datetime_service import stored_now
from pagesync.services.persistence import commit_or_raise

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from pagesync.schemas.config import GitHubConfigUpdate

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class GitHubCredentials:
    """Decrypted GitHub configuration."""

    token: str
    owner: str
    repo: str
    branch: str

    @property
    def is_complete(self) -> bool:
        return bool(self.token and self.owner and self.repo)


async def get_github_config(session: AsyncSession) -> GitHubConfig | None:
    return await session.get(GitHubConfig, CONFIG_ROW_ID)


async def load_github_credentials(
    session: AsyncSession, secret_key: str
) -> GitHubCredentials | None:
    """Return the stored configuration with the token decrypted, or None."""
    row = await get_github_config(session)
    if row is None:
        return None
    return GitHubCredentials(
        token=decrypt_token(row.token, secret_key),
        owner=row.owner,
        repo=row.repo,
        branch=row.branch,
    )


async def require_github_credentials(
    session: AsyncSession, secret_key: str
) -> GitHubCredentials:
    """Like load_github_credentials but the configuration must be complete."""
    credentials = await load_github_credentials(session, secret_key)
    if credentials is None:
        raise ConfigurationMissingError("GitHub configuration not found")
    if not credentials.is_complete:
        raise ConfigurationMissingError("Incomplete GitHub configuration")
    return credentials


async def save_github_config(
    session: AsyncSession,
    data: GitHubConfigUpdate,
    secret_key: str,
) -> GitHubConfig:
    """Create or update the single GitHub configuration row.

    A token of None keeps the stored token; an empty string clears it.
    """
    owner = data.owner.strip()
    repo = data.repo.strip()
    if not owner or not repo:
        raise ValidationError("Repository owner and name are required")
    branch = data.branch.strip() or DEFAULT_BRANCH

    now = stored_now()
    row = await get_github_config(session)
    if row is None:
        row = GitHubConfig(
            id=CONFIG_ROW_ID,
            token=encrypt_token((data.token or "").strip(), secret_key),
            owner=owner,
            repo=repo,
            branch=branch,
            created_at=now,
            updated_at=now,
        )
        session.add(row)
    else:
        row.owner = owner
        row.repo = repo
        row.branch = branch
        row.updated_at = now
        if data.token is not None:
            row.token = encrypt_token(data.token.strip(), secret_key)

    await commit_or_raise(session, "save GitHub configuration")
    logger.info("Saved GitHub configuration for %s/%s@%s", owner, repo, branch)
    return row


async def get_sitemap_setting(session: AsyncSession) -> SitemapSetting | None:
    return await session.get(SitemapSetting, CONFIG_ROW_ID)


async def get_sitemap_url(session: AsyncSession) -> str | None:
    row = await get_sitemap_setting(session)
    return row.sitemap_url if row is not None else None


async def save_sitemap_url(session: AsyncSession, sitemap_url: str | None) -> str:
    """Validate and store the sitemap URL."""
    url = validate_http_url(
        sitemap_url,
        missing_message="Please provide a sitemap URL",
        invalid_message="Invalid sitemap URL format",
    )
    row = await session.get(SitemapSetting, CONFIG_ROW_ID)
    if row is None:
        session.add(SitemapSetting(id=CONFIG_ROW_ID, sitemap_url=url, updated_at=stored_now()))
    else:
        row.sitemap_url = url
        row.updated_at = stored_now()
    await commit_or_raise(session, "save sitemap URL")
    return url
