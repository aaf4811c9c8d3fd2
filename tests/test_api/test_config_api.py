"""Tests for the configuration endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pagesync.models.config import GitHubConfig

if TYPE_CHECKING:
    from httpx import AsyncClient

    from pagesync.config import Settings


class TestGitHubConfigApi:
    async def test_unconfigured(self, client: AsyncClient) -> None:
        resp = await client.get("/api/config/github")
        assert resp.status_code == 200
        assert resp.json()["configured"] is False
        assert resp.json()["has_token"] is False

    async def test_save_masks_token(self, client: AsyncClient, test_settings: Settings) -> None:
        resp = await client.put(
            "/api/config/github",
            json={"token": "ghp_supersecret9876", "owner": "octo", "repo": "site"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data == {
            "configured": True,
            "owner": "octo",
            "repo": "site",
            "branch": "main",
            "has_token": True,
            "token_hint": "...9876",
            "updated_at": data["updated_at"],
        }
        assert "ghp_supersecret9876" not in resp.text

        engine = create_async_engine(test_settings.database_url)
        try:
            async with async_sessionmaker(engine, class_=AsyncSession)() as session:
                row = (await session.execute(select(GitHubConfig))).scalar_one()
        finally:
            await engine.dispose()
        assert "ghp_supersecret9876" not in row.token

    async def test_update_without_token_keeps_it(self, client: AsyncClient) -> None:
        await client.put(
            "/api/config/github",
            json={"token": "ghp_supersecret9876", "owner": "octo", "repo": "site"},
        )
        resp = await client.put(
            "/api/config/github", json={"owner": "octo", "repo": "docs", "branch": "gh-pages"}
        )
        data = resp.json()
        assert data["token_hint"] == "...9876"
        assert data["repo"] == "docs"
        assert data["branch"] == "gh-pages"

        resp = await client.get("/api/config/github")
        assert resp.json()["repo"] == "docs"

    async def test_missing_owner(self, client: AsyncClient) -> None:
        resp = await client.put("/api/config/github", json={"token": "t", "repo": "site"})
        assert resp.status_code == 400
        assert resp.json() == {
            "detail": "Repository owner and name are required",
            "category": "validation",
        }

    async def test_wrong_field_type(self, client: AsyncClient) -> None:
        resp = await client.put("/api/config/github", json={"owner": ["x"], "repo": "site"})
        assert resp.status_code == 422
        assert resp.json()["detail"][0]["field"] == "owner"


class TestSitemapConfigApi:
    async def test_roundtrip(self, client: AsyncClient) -> None:
        resp = await client.get("/api/config/sitemap")
        assert resp.json() == {"sitemap_url": None, "updated_at": None}

        resp = await client.put(
            "/api/config/sitemap", json={"sitemap_url": "https://x.com/sitemap.xml"}
        )
        assert resp.status_code == 200
        assert resp.json()["sitemap_url"] == "https://x.com/sitemap.xml"

        resp = await client.get("/api/config/sitemap")
        assert resp.json()["sitemap_url"] == "https://x.com/sitemap.xml"
        assert resp.json()["updated_at"] is not None

    async def test_invalid_url(self, client: AsyncClient) -> None:
        resp = await client.put("/api/config/sitemap", json={"sitemap_url": "not-a-url"})
        assert resp.status_code == 400
        assert resp.json()["category"] == "invalid_url"
