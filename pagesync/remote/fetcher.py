"""Remote page fetcher: one GET per page, no retry."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import httpx

from pagesync.exceptions import InvalidUrlError, UpstreamFetchError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_USER_AGENT = "Mozilla/5.0 (compatible; WebpageSync/1.0)"


def is_absolute_url(url: str) -> bool:
    """True when ``url`` parses with both a scheme and a host, and any port is numeric."""
    try:
        parts = urlsplit(url)
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def validate_http_url(
    url: str | None,
    *,
    missing_message: str = "URL is required",
    invalid_message: str = "Invalid URL format",
) -> str:
    """Return the trimmed URL or raise before any network access."""
    candidate = (url or "").strip()
    if not candidate:
        raise ValidationError(missing_message)
    if not is_absolute_url(candidate) or urlsplit(candidate).scheme.lower() not in (
        "http",
        "https",
    ):
        raise InvalidUrlError(invalid_message)
    return candidate


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    user_agent: str,
    what: str,
) -> str:
    """GET ``url`` and return the body as text.

    Raises UpstreamFetchError with the upstream status text on a non-success
    response and on transport failures, and InvalidUrlError when httpx cannot
    build a request for ``url``.
    """
    try:
        response = await client.get(url, headers={"User-Agent": user_agent})
    except httpx.InvalidURL as exc:
        logger.warning("Refusing to fetch %s %s: %s", what, url, exc)
        msg = f"Invalid {what} URL: {exc}"
        raise InvalidUrlError(msg) from exc
    except httpx.HTTPError as exc:
        logger.warning("Failed to fetch %s %s: %s", what, url, exc)
        msg = f"Failed to fetch {what}: {exc}"
        raise UpstreamFetchError(msg, url=url) from exc

    if not response.is_success:
        logger.warning("Failed to fetch %s %s: HTTP %d", what, url, response.status_code)
        msg = f"Failed to fetch {what}: {response.reason_phrase}"
        raise UpstreamFetchError(msg, url=url, upstream_status=response.status_code)

    return response.text


async def fetch_page(
    client: httpx.AsyncClient,
    url: str | None,
    *,
    user_agent: str = DEFAULT_PAGE_USER_AGENT,
) -> str:
    """Fetch the raw HTML of a page."""
    target = validate_http_url(url)
    content = await fetch_text(client, target, user_agent=user_agent, what="page")
    logger.debug("Fetched %d characters from %s", len(content), target)
    return content
