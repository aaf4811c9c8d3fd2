"""Tracked page model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from pagesync.models.base import Base


class TrackedPage(Base):
    """A source URL whose HTML is snapshotted into the repository."""

    __tablename__ = "tracked_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    folder_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    folder_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    repo_file_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_synced_at: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(folder_path IS NULL AND folder_name IS NULL)"
            " OR (folder_path IS NOT NULL AND folder_name IS NOT NULL)",
            name="ck_tracked_pages_folder_pair",
        ),
        Index("idx_tracked_pages_url", "url"),
    )
