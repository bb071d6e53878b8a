import dataclasses
import os
import stat
import time
from abc import ABC, abstractmethod
from typing import IO, Any, Optional

# Archive contents are published read-only, i.e., r-x for folders and r-- for files for everyone.
DIRECTORY_MODE = 0o555 | stat.S_IFDIR
FILE_MODE = 0o444 | stat.S_IFREG


@dataclasses.dataclass
class FileInfo:
    # fmt: off
    size     : int
    mtime    : float
    mode     : int
    uid      : int
    gid      : int
    # Each MountSource in a hierarchy appends what it needs to find the file again, e.g., the path inside the archive
    # or the subvolume name. A MountSource reads the last element and pops it before forwarding to a nested one.
    userdata : list[Any]
    # fmt: on

    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    def clone(self) -> 'FileInfo':
        return dataclasses.replace(self, userdata=self.userdata[:])


class MountSource(ABC):
    """
    Read-only folder hierarchy with just enough operations for serving it via FUSE.

    Paths are absolute inside the mount source, i.e., '/' is its root. A missing leading slash is treated
    as if it was there. Symbolic links and hard links do not exist in archives published by iso2repo.
    """

    @abstractmethod
    def lookup(self, path: str) -> Optional[FileInfo]:
        """Returns the metadata for the file or folder at path or None if it does not exist."""

    @abstractmethod
    def list(self, path: str) -> Optional[dict[str, FileInfo]]:
        """Returns the folder contents as name to metadata mapping or None if path is not an existing folder."""

    def list_mode(self, path: str) -> Optional[dict[str, int]]:
        result = self.list(path)
        return None if result is None else {name: fileInfo.mode for name, fileInfo in result.items()}

    @abstractmethod
    def open(self, fileInfo: FileInfo, buffering=-1) -> IO[bytes]:
        """Returns a seekable binary file object for a FileInfo returned by lookup or list."""

    def read(self, fileInfo: FileInfo, size: int, offset: int) -> bytes:
        with self.open(fileInfo, buffering=0) as file:
            file.seek(offset)
            return file.read(size)

    @abstractmethod
    def is_immutable(self) -> bool:
        """True if all methods return the same results for the same arguments for the whole lifetime."""

    def exists(self, path: str) -> bool:
        return self.lookup(path) is not None

    def is_dir(self, path: str) -> bool:
        fileInfo = self.lookup(path)
        return fileInfo is not None and fileInfo.is_dir()

    def __enter__(self):
        return self

    def __exit__(self, exception_type, exception_value, exception_traceback):
        pass


def create_root_file_info(userdata: list[Any]) -> FileInfo:
    """Metadata for synthetic folders that do not exist in any archive, e.g., the mount point root."""
    # fmt: off
    return FileInfo(
        size     = 0,
        mtime    = time.time(),
        mode     = DIRECTORY_MODE,
        uid      = os.getuid() if hasattr(os, 'getuid') else 0,
        gid      = os.getgid() if hasattr(os, 'getgid') else 0,
        userdata = userdata,
    )
    # fmt: on
