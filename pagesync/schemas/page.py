"""Tracked page schemas."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class LinkMode(StrEnum):
    """How a manually added page chooses its repository file."""

    NEW = "new"
    EXISTING = "existing"


class TrackedPageCreate(BaseModel):
    """Request to start tracking a page."""

    url: str = Field(default="", description="Absolute http(s) URL of the page")
    mode: LinkMode = Field(
        default=LinkMode.NEW, description="'new' derives the file path, 'existing' links one"
    )
    name: str | None = Field(default=None, description="Base name of the new file")
    folder_path: str | None = Field(default=None, description="Folder of the new file")
    folder_name: str | None = Field(default=None, description="Display name of the folder")
    repo_file_path: str | None = Field(
        default=None, description="Existing repository file to link (mode 'existing')"
    )


class TrackedPageResponse(BaseModel):
    id: int
    url: str
    name: str
    folder_path: str | None = None
    folder_name: str | None = None
    repo_file_path: str | None = None
    resolved_file_path: str
    last_synced_at: str | None = None
    created_at: str | None = None


class TrackedPageListResponse(BaseModel):
    items: list[TrackedPageResponse]


class FolderResponse(BaseModel):
    path: str
    name: str


class PageSyncResultResponse(BaseModel):
    """Outcome of syncing one page."""

    page_id: int
    url: str
    file_path: str
    status: str
    message: str
    category: str | None = None
    synced_at: str | None = None
    created: bool = False


class SyncReportResponse(BaseModel):
    """Outcome of syncing every tracked page."""

    synced: int
    failed: int
    results: list[PageSyncResultResponse]
