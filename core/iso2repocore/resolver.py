import logging
from typing import Optional

from .tree import Entry
from .utils import PathNotFoundError, split_path

logger = logging.getLogger(__name__)


def _find_child(level: list[Entry], name: str, onlyDirectories: bool = False) -> Optional[Entry]:
    for entry in level:
        if entry.name == name and (entry.isDir or not onlyDirectories):
            return entry
    return None


def sort_listing(level: list[Entry]) -> list[Entry]:
    """Returns directories sorted by name followed by files sorted by name."""
    # Python compares strings by code point, which is the same order as comparing their UTF-8 encodings bytewise.
    directories = sorted((entry for entry in level if entry.isDir), key=lambda entry: entry.name)
    files = sorted((entry for entry in level if not entry.isDir), key=lambda entry: entry.name)
    return directories + files


def read_path(root: Entry, path: str) -> tuple[Optional[Entry], list[Entry]]:
    """
    Resolves a path relative to the given root. The empty path and '/' refer to the root itself.

    Returns (file entry, []) if the path points to a file, or (None, sorted listing) if it points to a directory.
    Raises PathNotFoundError if any path segment could not be found.
    """
    parts = split_path(path)
    level = root.children

    for part in parts[:-1]:
        entry = _find_child(level, part, onlyDirectories=True)
        if entry is None:
            logger.debug("Path not found: '%s'", path)
            raise PathNotFoundError(f"Path not found: '{path}'")
        level = entry.children

    if parts:
        entry = _find_child(level, parts[-1])
        if entry is None:
            logger.debug("Path not found: '%s'", path)
            raise PathNotFoundError(f"Path not found: '{path}'")
        if not entry.isDir:
            return entry, []
        level = entry.children

    return None, sort_listing(level)


def lookup_entry(root: Entry, path: str) -> Optional[Entry]:
    """Returns the node for the given path, i.e., also the metadata for directories, or None if it does not exist."""
    parts = split_path(path)
    entry: Optional[Entry] = root
    for i, part in enumerate(parts):
        if entry is None or not entry.isDir:
            return None
        entry = _find_child(entry.children, part, onlyDirectories=i < len(parts) - 1)
    return entry


def find_directory(root: Entry, path: str) -> Optional[list[Entry]]:
    """
    Returns the unsorted children of the directory at the given path. In contrast to read_path,
    all segments including the last one have to be directories, else None is returned.
    """
    level = root.children
    for part in split_path(path):
        entry = _find_child(level, part, onlyDirectories=True)
        if entry is None:
            return None
        level = entry.children
    return level
