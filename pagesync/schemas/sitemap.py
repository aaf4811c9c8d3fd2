"""Sitemap and page fetch schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FetchPageRequest(BaseModel):
    url: str = Field(default="", description="Absolute http(s) URL of the page")


class FetchPageResponse(BaseModel):
    url: str
    content: str


class SitemapRequest(BaseModel):
    """Sitemap to parse or scan; scan falls back to the stored URL when omitted."""

    sitemap_url: str | None = Field(default=None, description="Absolute http(s) sitemap URL")


class CandidatePageResponse(BaseModel):
    url: str
    name: str
    file_path: str
    file_extension: str
    folder_path: str | None = None
    folder_name: str | None = None


class SitemapParseResponse(BaseModel):
    sitemap_url: str
    total_urls: int
    pages: list[CandidatePageResponse]


class ScanOutcomeResponse(BaseModel):
    """What a scan did with one sitemap page."""

    page: CandidatePageResponse
    status: str
    message: str
    tracked_page_id: int | None = None
    linked: bool = False


class SitemapScanResponse(BaseModel):
    sitemap_url: str
    total_urls: int
    added: int
    exists: int
    errors: int
    repository_checked: bool
    truncated: bool
    results: list[ScanOutcomeResponse]
