"""
In-memory file tree of one archive image.

The tree consists of Entry nodes. Each node stores the name of exactly one path segment and an ordered list of
children. Directories are unique by name among their siblings while files are simply appended, which means that
listings containing the same file path twice result in two sibling entries with the same name.
"""

import dataclasses
from collections.abc import Iterator, Sequence


@dataclasses.dataclass
class Entry:
    # fmt: off
    name     : str
    isDir    : bool          = False
    size     : int           = 0
    # Creation timestamp in seconds since the epoch as reported by the listing. 0 if unknown.
    mtime    : float         = 0
    children : list['Entry'] = dataclasses.field(default_factory=list)
    isRoot   : bool          = False
    # fmt: on


def create_root() -> Entry:
    return Entry(name="", isDir=True, size=0, mtime=0, children=[], isRoot=True)


def _find_directory(level: list[Entry], name: str) -> int:
    for i, entry in enumerate(level):
        if entry.isDir and entry.name == name:
            return i
    return -1


def insert_path(pathParts: Sequence[Entry], level: list[Entry], position: int = 0) -> list[Entry]:
    """
    Inserts the segment chain pathParts[position:] into the given level of the tree and returns that level.

    pathParts: One Entry per path segment. All but the last one are expected to be directories. The last one
               carries the metadata of the listing line.
    level: The children list to insert into, e.g., root.children.
    """
    if position >= len(pathParts):
        return level

    part = pathParts[position]
    if not part.isDir:
        # Files are never merged, even when an equally named file already exists.
        level.append(Entry(name=part.name, isDir=False, size=part.size, mtime=part.mtime, children=[]))
        return level

    isLast = position == len(pathParts) - 1
    index = _find_directory(level, part.name)
    if index < 0:
        directory = Entry(name=part.name, isDir=True, mtime=part.mtime if isLast else 0, children=[])
        directory.children = insert_path(pathParts, directory.children, position + 1)
        level.append(directory)
        return level

    directory = level[index]
    # Parent folders are created without metadata when a child is listed first.
    if isLast and not directory.mtime:
        directory.mtime = part.mtime
    directory.children = insert_path(pathParts, directory.children, position + 1)
    return level


def walk(entry: Entry) -> Iterator[Entry]:
    """Yields all nodes below the given one in depth-first pre-order, excluding the given node itself."""
    for child in entry.children:
        yield child
        if child.isDir:
            yield from walk(child)
