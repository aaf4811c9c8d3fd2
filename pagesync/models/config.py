"""Single-row configuration models."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pagesync.models.base import Base

# Both configuration tables hold at most one row, always under this key.
CONFIG_ROW_ID = 1


class GitHubConfig(Base):
    """GitHub repository coordinates and the (encrypted) access token."""

    __tablename__ = "github_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CONFIG_ROW_ID)
    token: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner: Mapped[str] = mapped_column(String, nullable=False)
    repo: Mapped[str] = mapped_column(String, nullable=False)
    branch: Mapped[str] = mapped_column(String, nullable=False, default="main")
    created_at: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (CheckConstraint(f"id = {CONFIG_ROW_ID}", name="ck_github_config_single_row"),)


class SitemapSetting(Base):
    """The sitemap URL used for scans."""

    __tablename__ = "sitemap_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CONFIG_ROW_ID)
    sitemap_url: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint(f"id = {CONFIG_ROW_ID}", name="ck_sitemap_settings_single_row"),
    )
