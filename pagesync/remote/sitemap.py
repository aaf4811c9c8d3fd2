"""Sitemap parsing and candidate page derivation."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import urlsplit
from xml.etree import ElementTree as ET

from pagesync.remote.fetcher import (
    DEFAULT_PAGE_USER_AGENT,
    fetch_text,
    is_absolute_url,
    validate_http_url,
)
from pagesync.services.path_service import split_url_path

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

_LOC_PATTERN = re.compile(r"<loc>(.*?)</loc>")


@dataclass(frozen=True)
class CandidatePage:
    """A page discovered in a sitemap, not yet tracked."""

    url: str
    name: str
    file_path: str
    file_extension: str
    folder_path: str | None = None
    folder_name: str | None = None


@dataclass
class SitemapParseResult:
    pages: list[CandidatePage] = field(default_factory=list)
    total_urls: int = 0


def _local_name(tag: object) -> str | None:
    if not isinstance(tag, str):
        return None
    return tag.rsplit("}", 1)[-1]


def extract_locations(document: str) -> list[str]:
    """Return every ``loc`` value in document order.

    Well-formed XML is walked structurally, so namespace-prefixed tags are
    found too. Malformed documents fall back to matching ``<loc>...</loc>``
    literally.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        logger.info("Sitemap is not well-formed XML (%s); using pattern extraction", exc)
        raw = [html.unescape(match) for match in _LOC_PATTERN.findall(document)]
    else:
        raw = [
            element.text or ""
            for element in root.iter()
            if _local_name(element.tag) == "loc"
        ]
    return [value.strip() for value in raw if value.strip()]


def derive_candidate(url: str) -> CandidatePage | None:
    """Derive the repository file path for a sitemap URL.

    Returns None when ``url`` is not an absolute URL.
    """
    if not is_absolute_url(url):
        return None
    parts = split_url_path(urlsplit(url).path)
    return CandidatePage(
        url=url,
        name=parts.name,
        file_path=parts.file_path,
        file_extension=parts.extension,
        folder_path=parts.folder_path,
        folder_name=parts.folder_name,
    )


async def parse_sitemap(
    client: httpx.AsyncClient,
    sitemap_url: str | None,
    *,
    user_agent: str = DEFAULT_PAGE_USER_AGENT,
) -> SitemapParseResult:
    """Fetch a sitemap and derive a candidate page for each listed URL.

    URLs that cannot be parsed are dropped without failing the batch.
    """
    target = validate_http_url(
        sitemap_url,
        missing_message="Sitemap URL is required",
        invalid_message="Invalid sitemap URL format",
    )
    logger.info("Fetching sitemap from %s", target)
    document = await fetch_text(client, target, user_agent=user_agent, what="sitemap")

    locations = extract_locations(document)
    pages: list[CandidatePage] = []
    for location in locations:
        candidate = derive_candidate(location)
        if candidate is None:
            logger.warning("Skipping unparseable sitemap URL %r", location)
            continue
        pages.append(candidate)

    logger.info("Sitemap %s: %d URLs, %d valid pages", target, len(locations), len(pages))
    return SitemapParseResult(pages=pages, total_urls=len(locations))
