"""Repository tree and contents schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TreeEntryResponse(BaseModel):
    path: str
    type: str
    sha: str
    size: int | None = None
    synced: bool = False


class TreeFolderResponse(BaseModel):
    """One folder of the reconstructed tree; ``""`` is the root."""

    path: str
    name: str
    files: list[str]
    subfolders: list[str]


class RepositoryTreeResponse(BaseModel):
    owner: str
    repo: str
    branch: str
    truncated: bool
    entries: list[TreeEntryResponse]
    folders: list[TreeFolderResponse]


class WriteFileRequest(BaseModel):
    """Request to create or update one repository file."""

    path: str = Field(default="", description="Repository path of the file")
    content: str = Field(default="", description="UTF-8 file content")
    message: str | None = Field(default=None, description="Commit message")
    branch: str | None = Field(
        default=None, description="Target branch; defaults to the configured branch"
    )


class CommitResponse(BaseModel):
    committed: bool
    path: str
    content_sha: str | None = None
    commit_sha: str | None = None
    created: bool = False
