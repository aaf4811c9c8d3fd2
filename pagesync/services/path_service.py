"""Repository path derivation for tracked and candidate pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pagesync.models.page import TrackedPage

DEFAULT_EXTENSION = ".html"
INDEX_NAME = "index"


@dataclass(frozen=True)
class PathParts:
    """A repository file path split into folder and base name."""

    name: str
    extension: str
    folder_path: str | None = None
    folder_name: str | None = None

    @property
    def file_path(self) -> str:
        return build_file_path(self.name, self.folder_path, self.extension)


def build_file_path(
    name: str, folder_path: str | None = None, extension: str = DEFAULT_EXTENSION
) -> str:
    """Join folder, base name and extension: ``{folder}/{name}{ext}`` or ``{name}{ext}``."""
    if folder_path:
        return f"{folder_path}/{name}{extension}"
    return f"{name}{extension}"


def split_url_path(path: str) -> PathParts:
    """Derive base name, extension and folder grouping from a URL path.

    - no segments: ``index``, no folder
    - one segment: that segment, no folder
    - more: last segment; folder path is the rest, folder name the parent segment
    - a dot in the base name splits off the last suffix as the extension,
      otherwise the extension is ``.html``
    """
    segments = [segment for segment in path.split("/") if segment]

    folder_path: str | None = None
    folder_name: str | None = None
    if not segments:
        name = INDEX_NAME
    elif len(segments) == 1:
        name = segments[0]
    else:
        folder_path = "/".join(segments[:-1])
        folder_name = segments[-2]
        name = segments[-1]

    extension = DEFAULT_EXTENSION
    if "." in name:
        name, suffix = name.rsplit(".", 1)
        extension = f".{suffix}"

    return PathParts(
        name=name,
        extension=extension,
        folder_path=folder_path,
        folder_name=folder_name,
    )


def split_repo_file_path(repo_file_path: str) -> PathParts:
    """Split an existing repository file path for linking a page to it.

    Only a trailing ``.html`` is removed from the name; other extensions stay
    part of the name since the file path itself is stored verbatim.
    """
    segments = repo_file_path.split("/")
    file_name = segments[-1]
    name = file_name.removesuffix(DEFAULT_EXTENSION)
    extension = DEFAULT_EXTENSION if file_name.endswith(DEFAULT_EXTENSION) else ""
    if len(segments) > 1:
        return PathParts(
            name=name,
            extension=extension,
            folder_path="/".join(segments[:-1]),
            folder_name=segments[-2],
        )
    return PathParts(name=name, extension=extension)


def resolve_page_path(page: TrackedPage) -> str:
    """Destination path of a tracked page, derived when none is stored."""
    if page.repo_file_path:
        return page.repo_file_path
    return build_file_path(page.name, page.folder_path)
