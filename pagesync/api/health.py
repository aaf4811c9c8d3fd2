"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagesync.api.deps import get_session
from pagesync.models.page import TrackedPage
from pagesync.services.config_service import get_github_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    github_configured: bool = False
    tracked_pages: int | None = None


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Report database reachability, whether a repository is configured and the page count.

    The token is not decrypted here; a configured owner and repository is enough.
    """
    try:
        tracked_pages = await session.scalar(select(func.count()).select_from(TrackedPage))
        config = await get_github_config(session)
    except SQLAlchemyError:
        logger.warning("Health check database query failed", exc_info=True)
        return HealthResponse(status="degraded", version="0.1.0", database="error")

    return HealthResponse(
        status="ok",
        version="0.1.0",
        database="ok",
        github_configured=config is not None and bool(config.owner and config.repo),
        tracked_pages=tracked_pages or 0,
    )
