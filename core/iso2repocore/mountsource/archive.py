import logging
import os
import tempfile
from typing import IO, Optional

from iso2repocore.archive import ArchiveImage
from iso2repocore.mountsource import DIRECTORY_MODE, FILE_MODE, FileInfo, MountSource
from iso2repocore.tree import Entry
from iso2repocore.utils import PathNotFoundError, overrides

logger = logging.getLogger(__name__)


class ArchiveMountSource(MountSource):
    """
    Exposes an ArchiveImage as read-only MountSource. Opening a file extracts it completely with 7z into a spooled
    temporary file because the 7z output can only be streamed from the start and seeking is needed for FUSE.
    """

    # Files up to this size are held in memory after extraction, larger ones spill over to a temporary file.
    MAX_IN_MEMORY_SIZE = 16 * 1024 * 1024

    def __init__(self, archive: ArchiveImage) -> None:
        self.archive = archive
        archiveStats = os.stat(archive.path)
        self._uid = archiveStats.st_uid
        self._gid = archiveStats.st_gid
        self._mtime = archiveStats.st_mtime

    def _entry_to_file_info(self, entry: Entry, path: str) -> FileInfo:
        # fmt: off
        return FileInfo(
            size     = 0 if entry.isDir else entry.size,
            mtime    = entry.mtime if entry.mtime else self._mtime,
            mode     = DIRECTORY_MODE if entry.isDir else FILE_MODE,
            uid      = self._uid,
            gid      = self._gid,
            userdata = [path],
        )
        # fmt: on

    @overrides(MountSource)
    def is_immutable(self) -> bool:
        return True

    @overrides(MountSource)
    def lookup(self, path: str) -> Optional[FileInfo]:
        entry = self.archive.lookup(path)
        return None if entry is None else self._entry_to_file_info(entry, path.strip('/'))

    @overrides(MountSource)
    def list(self, path: str) -> Optional[dict[str, FileInfo]]:
        try:
            fileEntry, listing = self.archive.read_path(path)
        except PathNotFoundError:
            return None
        if fileEntry is not None:
            return None

        # Duplicate file names collapse into the last one because the result is a dictionary.
        folder = path.strip('/')
        return {
            entry.name: self._entry_to_file_info(entry, f"{folder}/{entry.name}" if folder else entry.name)
            for entry in listing
        }

    @overrides(MountSource)
    def list_mode(self, path: str) -> Optional[dict[str, int]]:
        try:
            fileEntry, listing = self.archive.read_path(path)
        except PathNotFoundError:
            return None
        if fileEntry is not None:
            return None
        return {entry.name: DIRECTORY_MODE if entry.isDir else FILE_MODE for entry in listing}

    @overrides(MountSource)
    def open(self, fileInfo: FileInfo, buffering=-1) -> IO[bytes]:
        path = fileInfo.userdata[-1]
        logger.debug("Extract '%s' from %s", path, self.archive.path)
        file = tempfile.SpooledTemporaryFile(max_size=self.MAX_IN_MEMORY_SIZE)
        try:
            self.archive.read_file(path, file)
        except Exception:
            file.close()
            raise
        file.seek(0)
        return file  # type: ignore

    def __repr__(self) -> str:
        return f"ArchiveMountSource({self.archive.path!r})"
