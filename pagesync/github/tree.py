"""Folder structure reconstruction from a flat git tree listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pagesync.github.client import TreeEntryType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pagesync.github.client import RepositoryTreeEntry

ROOT = ""


@dataclass
class FolderNode:
    """A folder with its direct files and direct subfolder paths."""

    path: str
    files: list[RepositoryTreeEntry] = field(default_factory=list)
    subfolders: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1] if self.path else ROOT


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ROOT


def build_folder_structure(entries: Iterable[RepositoryTreeEntry]) -> dict[str, FolderNode]:
    """Map every folder path (``""`` is the root) to its node.

    Folders that only appear as a file's parent, or as an ancestor of another
    folder, are created as needed.
    """
    entries = list(entries)
    structure: dict[str, FolderNode] = {ROOT: FolderNode(ROOT)}

    for entry in entries:
        if entry.type is TreeEntryType.DIRECTORY and entry.path not in structure:
            structure[entry.path] = FolderNode(entry.path)

    for entry in entries:
        if entry.type is not TreeEntryType.FILE:
            continue
        folder_path = _parent(entry.path)
        node = structure.setdefault(folder_path, FolderNode(folder_path))
        node.files.append(entry)

    for folder_path in list(structure):
        current = folder_path
        while current != ROOT:
            parent = _parent(current)
            parent_node = structure.setdefault(parent, FolderNode(parent))
            if current not in parent_node.subfolders:
                parent_node.subfolders.append(current)
            current = parent

    return structure


def filter_files(
    entries: Iterable[RepositoryTreeEntry], query: str | None = None
) -> list[RepositoryTreeEntry]:
    """File entries whose path contains ``query`` (case-insensitive)."""
    needle = (query or "").lower()
    return [
        entry
        for entry in entries
        if entry.type is TreeEntryType.FILE and (not needle or needle in entry.path.lower())
    ]
