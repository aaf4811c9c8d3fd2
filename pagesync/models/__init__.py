"""SQLAlchemy ORM models for PageSync."""

from pagesync.models.base import Base
from pagesync.models.config import CONFIG_ROW_ID, GitHubConfig, SitemapSetting
from pagesync.models.page import TrackedPage

__all__ = [
    "CONFIG_ROW_ID",
    "Base",
    "GitHubConfig",
    "SitemapSetting",
    "TrackedPage",
]
