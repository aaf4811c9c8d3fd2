"""Configuration schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GitHubConfigUpdate(BaseModel):
    """Request to save the GitHub repository configuration."""

    token: str | None = Field(
        default=None, description="Personal access token; omit to keep the stored token"
    )
    owner: str = Field(default="", description="Repository owner (user or organization)")
    repo: str = Field(default="", description="Repository name")
    branch: str = Field(default="main", description="Branch that receives synced pages")


class GitHubConfigResponse(BaseModel):
    """Stored GitHub configuration. The token itself is never returned."""

    configured: bool
    owner: str = ""
    repo: str = ""
    branch: str = "main"
    has_token: bool = False
    token_hint: str | None = None
    updated_at: str | None = None


class SitemapSettingRequest(BaseModel):
    sitemap_url: str = Field(default="", description="Absolute http(s) URL of the sitemap")


class SitemapSettingResponse(BaseModel):
    sitemap_url: str | None = None
    updated_at: str | None = None
