"""Repository API endpoints: tree browsing and direct file writes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pagesync.api.deps import GitHubAccess, get_session, require_github
from pagesync.github.tree import build_folder_structure, filter_files
from pagesync.schemas.repository import (
    CommitResponse,
    RepositoryTreeResponse,
    TreeEntryResponse,
    TreeFolderResponse,
    WriteFileRequest,
)
from pagesync.services.page_service import list_pages
from pagesync.services.path_service import resolve_page_path

router = APIRouter(prefix="/api/repository", tags=["repository"])


@router.get("/tree", response_model=RepositoryTreeResponse)
async def get_tree_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
    github: Annotated[GitHubAccess, Depends(require_github)],
    branch: Annotated[str | None, Query(description="Branch; configured branch if omitted")] = None,
    q: Annotated[str | None, Query(description="Case-insensitive file path filter")] = None,
) -> RepositoryTreeResponse:
    """List the repository tree, flat and grouped by folder.

    Files that are the destination of a tracked page are marked ``synced``.
    With ``q`` only matching files (and their folders) are returned.
    """
    credentials = github.credentials
    tree = await github.client.get_tree(
        credentials.owner,
        credentials.repo,
        (branch or "").strip() or credentials.branch or None,
    )
    tracked_paths = {resolve_page_path(page) for page in await list_pages(session)}

    entries = filter_files(tree.entries, q) if q else tree.entries
    structure = build_folder_structure(entries)
    return RepositoryTreeResponse(
        owner=credentials.owner,
        repo=credentials.repo,
        branch=tree.branch,
        truncated=tree.truncated,
        entries=[
            TreeEntryResponse(
                path=entry.path,
                type=entry.type,
                sha=entry.sha,
                size=entry.size,
                synced=entry.path in tracked_paths,
            )
            for entry in entries
        ],
        folders=[
            TreeFolderResponse(
                path=node.path,
                name=node.name,
                files=[entry.path for entry in node.files],
                subfolders=node.subfolders,
            )
            for node in structure.values()
        ],
    )


@router.put("/contents", response_model=CommitResponse)
async def write_file_endpoint(
    body: WriteFileRequest,
    github: Annotated[GitHubAccess, Depends(require_github)],
) -> CommitResponse:
    """Create or update one file in the configured repository."""
    credentials = github.credentials
    result = await github.client.write_file(
        credentials.owner,
        credentials.repo,
        (body.branch or "").strip() or credentials.branch or None,
        body.path.strip().strip("/"),
        body.content,
        message=body.message,
    )
    return CommitResponse(
        committed=result.committed,
        path=result.path,
        content_sha=result.content_sha,
        commit_sha=result.commit_sha,
        created=result.created,
    )
