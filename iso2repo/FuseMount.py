import errno
import logging
import os
from typing import IO, Any, Optional

from iso2repocore.mountsource import FileInfo, MountSource
from iso2repocore.utils import ceil_div, overrides

from .fuse import fuse

logger = logging.getLogger(__name__)


class FuseMount(fuse.Operations):
    """
    This class implements the fusepy interface in order to create a mounted, read-only file system view
    to a MountSource, normally the SubvolumesMountSource of all published repository archives.

    All path arguments for overridden fusepy methods do have a leading slash ('/')!
    """

    # Reads are answered from completely extracted files, so larger reads only reduce the call overhead.
    MINIMUM_BLOCK_SIZE = 256 * 1024

    use_ns = True

    def __init__(self, mountSource: MountSource, mountPoint: str) -> None:
        self.mountSource = mountSource
        self.mountPoint = os.path.realpath(mountPoint)  # Strip trailing slashes and normalizes.
        self.mountPointWasCreated = False

        # Maps handles to opened I/O objects.
        self.openedFiles: dict[int, IO[bytes]] = {}
        self.lastFileHandle: int = 0  # It will be incremented before being returned. It can't hurt to never return 0.

        if os.path.exists(self.mountPoint) and not os.path.isdir(self.mountPoint):
            raise ValueError(f"Mount point '{self.mountPoint}' must either not exist or be a directory!")

        if not os.path.exists(self.mountPoint):
            os.mkdir(self.mountPoint)
            self.mountPointWasCreated = True

        statResults = os.lstat(self.mountPoint)
        self.mountPointInfo = {key: getattr(statResults, key) for key in dir(statResults) if key.startswith('st_')}

        logger.info("Created mount point at: %s", self.mountPoint)

    def __enter__(self):
        return self

    def __exit__(self, exception_type, exception_value, exception_traceback):
        self._close()

    def _close(self) -> None:
        for openedFile in self.openedFiles.values():
            try:
                openedFile.close()
            except Exception as exception:
                logger.warning(
                    "Failed to close file because of: %s", exception, exc_info=logger.isEnabledFor(logging.DEBUG)
                )
        self.openedFiles.clear()

        try:
            if self.mountPointWasCreated:
                os.rmdir(self.mountPoint)
                self.mountPointWasCreated = False
        except Exception as exception:
            logger.warning(
                "Failed to remove the created mount point directory %s because of: %s",
                self.mountPoint,
                exception,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )

        try:
            self.mountSource.__exit__(None, None, None)
        except Exception as exception:
            logger.warning(
                "Failed to close mount source because of: %s", exception, exc_info=logger.isEnabledFor(logging.DEBUG)
            )

    def _add_new_handle(self, handle: IO[bytes]) -> int:
        self.lastFileHandle += 1
        self.openedFiles[self.lastFileHandle] = handle
        return self.lastFileHandle

    def _lookup(self, path: str) -> FileInfo:
        fileInfo = self.mountSource.lookup(path)
        if fileInfo is None:
            raise fuse.FuseOSError(errno.ENOENT)
        return fileInfo

    @overrides(fuse.Operations)
    def getattr(self, path: str, fh=None) -> dict[str, Any]:
        fileInfo = self._lookup(path)
        return {
            'st_size': fileInfo.size,
            'st_mode': fileInfo.mode,
            'st_uid': fileInfo.uid,
            'st_gid': fileInfo.gid,
            'st_mtime': int(fileInfo.mtime * 1e9),
            'st_nlink': 1,
            'st_blksize': FuseMount.MINIMUM_BLOCK_SIZE,
            # Number of 512 B (!) blocks irrespective of st_blksize!
            'st_blocks': ceil_div(fileInfo.size, 512),
        }

    @overrides(fuse.Operations)
    def readdir(self, path: str, fh):
        files = self.mountSource.list_mode(path)
        if files is None:
            raise fuse.FuseOSError(errno.ENOTDIR if self.mountSource.exists(path) else errno.ENOENT)

        # FUSE automatically expands these and will not ask for paths like /../foo/./../bar.
        yield '.', self.getattr(path)['st_mode'], 0
        if path == '/':
            yield '..', self.mountPointInfo['st_mode'], 0
        else:
            yield '..', self.getattr(path.rsplit('/', 1)[0] or '/')['st_mode'], 0

        for name, mode in files.items():
            yield name, mode, 0

    @overrides(fuse.Operations)
    def open(self, path: str, flags: int) -> int:
        """Returns file handle of opened path."""

        if flags & (os.O_WRONLY | os.O_RDWR):
            raise fuse.FuseOSError(errno.EROFS)

        fileInfo = self._lookup(path)

        try:
            return self._add_new_handle(self.mountSource.open(fileInfo, buffering=0))
        except Exception as exception:
            logger.error(
                "Caught exception when trying to open file: %s", path, exc_info=logger.isEnabledFor(logging.DEBUG)
            )
            raise fuse.FuseOSError(errno.EIO) from exception

    @overrides(fuse.Operations)
    def release(self, path: str, fh) -> int:
        openedFile: Optional[IO[bytes]] = self.openedFiles.pop(fh, None)
        if openedFile is None:
            raise fuse.FuseOSError(errno.ESTALE)
        openedFile.close()
        return 0

    @overrides(fuse.Operations)
    def read(self, path: str, size: int, offset: int, fh) -> bytes:
        if fh in self.openedFiles:
            openedFile = self.openedFiles[fh]
            openedFile.seek(offset)
            return openedFile.read(size)

        logger.warning("Given file handle does not exist. Will extract the file before reading, which might be slow.")

        fileInfo = self._lookup(path)

        try:
            return self.mountSource.read(fileInfo, size, offset)
        except Exception as exception:
            logger.error(
                "Caught exception %s when trying to extract data from the archive! Returning errno.EIO.",
                exception,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise fuse.FuseOSError(errno.EIO) from exception

    @overrides(fuse.Operations)
    def statfs(self, path: str):
        return {
            'f_bsize': FuseMount.MINIMUM_BLOCK_SIZE,
            'f_frsize': FuseMount.MINIMUM_BLOCK_SIZE,
            'f_bfree': 0,
            'f_bavail': 0,
            'f_ffree': 0,
            'f_favail': 0,
            'f_namemax': 255,
        }
