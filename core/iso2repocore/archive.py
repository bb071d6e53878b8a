import logging
import os
from typing import IO, Optional

from .listing import parse_listing
from .repository import RepositoryDescriptor, detect_repository
from .resolver import lookup_entry, read_path
from .sevenzip import SevenZip, VersionNotifier
from .tree import Entry, walk
from .utils import split_path

logger = logging.getLogger(__name__)


class ArchiveImage:
    """
    Immutable view of one ISO or TAR archive. Use open_archive to create it.

    path: Path to the archive file.
    root: Root of the file tree built from the listing.
    pathPrefix: Prefix of all paths inside the archive, e.g., "./" for TAR files and "" for ISO files.
    repository: The detected repository or None if detection was skipped.
    """

    def __init__(
        self,
        path: str,
        root: Entry,
        tool: SevenZip,
        pathPrefix: str = '',
        version: str = '',
        repository: Optional[RepositoryDescriptor] = None,
    ) -> None:
        # fmt: off
        self.path       = path
        self.name       = os.path.basename(path)
        self.root       = root
        self.tool       = tool
        self.pathPrefix = pathPrefix
        self.version    = version
        self.repository = repository
        # fmt: on

    def read_path(self, path: str) -> tuple[Optional[Entry], list[Entry]]:
        """
        Returns (file entry, []) for files and (None, sorted listing) for folders.
        Raises PathNotFoundError for non-existing paths.
        """
        return read_path(self.root, path)

    def lookup(self, path: str) -> Optional[Entry]:
        return lookup_entry(self.root, path)

    def read_file(self, path: str, sink: IO[bytes]) -> None:
        """Streams the file at the given path, relative to the archive root, into sink."""
        self.tool.read_file(self.path, self.pathPrefix + '/'.join(split_path(path)), sink)

    def source_string(self) -> str:
        return str(self.repository) if self.repository else ''

    def __repr__(self) -> str:
        return f"ArchiveImage({self.path!r}, repository={self.source_string()!r})"


def open_archive(
    path: str,
    tool: Optional[SevenZip] = None,
    notifier: Optional[VersionNotifier] = None,
    detectRepository: bool = True,
) -> ArchiveImage:
    """
    Lists the archive with 7z, builds its file tree, and detects the contained repository.

    Raises NotRepositoryError if the archive does not contain a repository, MalformedRepositoryError if it
    contains a broken one, ProcessFailureError if 7z failed, and OSError if the archive itself is not accessible.
    """
    os.stat(path)

    if tool is None:
        tool = SevenZip()

    version = tool.version()
    if notifier is None:
        notifier = VersionNotifier()
    notifier.check(version)

    root, pathPrefix = parse_listing(tool.list_contents(path))
    archive = ArchiveImage(path, root, tool, pathPrefix=pathPrefix, version=version)
    if logger.isEnabledFor(logging.DEBUG):
        entries = list(walk(root))
        folderCount = sum(1 for entry in entries if entry.isDir)
        logger.debug(
            "Read %d folders and %d files from '%s' with prefix '%s'.",
            folderCount,
            len(entries) - folderCount,
            path,
            pathPrefix,
        )

    if detectRepository:
        archive.repository = detect_repository(root, archive.name, archive.read_file)
    return archive
