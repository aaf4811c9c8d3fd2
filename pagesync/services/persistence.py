"""Commit helper that turns datastore failures into PersistenceError."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from pagesync.exceptions import PersistenceError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def commit_or_raise(session: AsyncSession, action: str) -> None:
    """Commit the session; on failure roll back and raise PersistenceError."""
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        logger.error("Failed to %s: %s", action, exc)
        await session.rollback()
        msg = f"Failed to {action}"
        raise PersistenceError(msg) from exc
