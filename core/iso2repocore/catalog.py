import logging
from collections.abc import Iterable
from typing import Optional

from .archive import ArchiveImage, open_archive
from .discovery import ARCHIVE_EXTENSIONS, collect_archives
from .mountsource.archive import ArchiveMountSource
from .mountsource.subvolumes import SubvolumesMountSource
from .sevenzip import SevenZip, VersionNotifier
from .utils import Iso2RepoError, NotRepositoryError

logger = logging.getLogger(__name__)


class Catalog:
    """The set of published repository archives, addressable by their file names."""

    def __init__(self, archives: Iterable[ArchiveImage]) -> None:
        self.archives: dict[str, ArchiveImage] = {}
        for archive in archives:
            if archive.name in self.archives:
                raise Iso2RepoError(f"Archive name is not unique: '{archive.name}'")
            self.archives[archive.name] = archive

    def __len__(self) -> int:
        return len(self.archives)

    def __contains__(self, name: str) -> bool:
        return name in self.archives

    def get(self, name: str) -> Optional[ArchiveImage]:
        return self.archives.get(name)

    def sources_list(self, host: str = '127.0.0.1', port: Optional[int] = None, architecture: str = '') -> list[str]:
        """Returns one sources.list line per archive with the placeholder address replaced by the given host."""
        return [
            archive.repository.to_source_line(host, port=port, architecture=architecture)
            for archive in self.archives.values()
            if archive.repository
        ]

    def create_mount_source(self) -> SubvolumesMountSource:
        return SubvolumesMountSource({name: ArchiveMountSource(archive) for name, archive in self.archives.items()})


def open_catalog(
    paths: Iterable[str],
    tool: Optional[SevenZip] = None,
    extensions: Iterable[str] = ARCHIVE_EXTENSIONS,
    **options,
) -> Catalog:
    """
    Opens all archives given directly or found inside the given folders, one after another.
    Archives that are not repositories are skipped silently, archives that fail to open are skipped with a warning.

    options: Forwarded to SevenZip if no tool is given, i.e., binary, timeout, maxConcurrentReads, encoding.
    """
    archivePaths = collect_archives(paths, extensions)
    for path in archivePaths:
        logger.info("Found archive: %s", path)

    if tool is None:
        # fmt: off
        tool = SevenZip(
            binary             = options.get('binary'),
            timeout            = options.get('timeout'),
            maxConcurrentReads = options.get('maxConcurrentReads'),
            encoding           = options.get('encoding', 'utf-8'),
        )
        # fmt: on
    notifier = VersionNotifier()

    archives = []
    for path in archivePaths:
        try:
            archives.append(open_archive(path, tool=tool, notifier=notifier))
        except NotRepositoryError as exception:
            logger.info("'%s' is not a repository: %s", path, exception)
        except (Iso2RepoError, OSError) as exception:
            logger.warning(
                "Failed to open archive '%s' because of: %s", path, exception, exc_info=logger.isEnabledFor(logging.DEBUG)
            )

    if archivePaths and not archives:
        logger.warning("None of the %d archives contains a repository.", len(archivePaths))

    return Catalog(archives)
