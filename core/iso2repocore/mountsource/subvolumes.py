from typing import IO, Callable, Optional, TypeVar

from iso2repocore.mountsource import FileInfo, MountSource, create_root_file_info
from iso2repocore.utils import Iso2RepoError, overrides

T = TypeVar('T')


class SubvolumesMountSource(MountSource):
    """
    Shows each given MountSource as a top-level folder. The catalog uses it to publish one folder per repository
    archive named like the archive file, so that /debian.iso/dists/... matches the paths in sources.list lines.
    """

    def __init__(self, mountSources: dict[str, MountSource]) -> None:
        self.mountSources: dict[str, MountSource] = {}
        self.rootFileInfo = create_root_file_info(userdata=[None])

        for name, target in mountSources.items():
            self.mount(name, target)

    def mount(self, name: str, target: MountSource) -> None:
        name = name.strip('/')
        if not name or '/' in name:
            raise Iso2RepoError(f"Subvolume names must be non-empty and may not contain slashes: '{name}'")
        if name in self.mountSources:
            raise Iso2RepoError(f"Subvolume already exists: '{name}'")
        self.mountSources[name] = target

    def _split(self, path: str) -> tuple[str, str]:
        """Returns the subvolume name and the remaining path, e.g., ('debian.iso', '/dists') for /debian.iso/dists."""
        subvolume, _, subpath = path.strip('/').partition('/')
        return subvolume, '/' + subpath

    def _forward(self, fileInfo: FileInfo, call: Callable[[MountSource], T]) -> T:
        subvolume = fileInfo.userdata.pop()
        try:
            if subvolume not in self.mountSources:
                raise ValueError(f"FileInfo does not belong to a subvolume: {fileInfo}")
            return call(self.mountSources[subvolume])
        finally:
            fileInfo.userdata.append(subvolume)

    @overrides(MountSource)
    def is_immutable(self) -> bool:
        return all(mountSource.is_immutable() for mountSource in self.mountSources.values())

    @overrides(MountSource)
    def lookup(self, path: str) -> Optional[FileInfo]:
        subvolume, subpath = self._split(path)
        if not subvolume:
            return self.rootFileInfo.clone()
        if subvolume not in self.mountSources:
            return None

        fileInfo = self.mountSources[subvolume].lookup(subpath)
        if fileInfo is not None:
            fileInfo.userdata.append(subvolume)
        return fileInfo

    @overrides(MountSource)
    def list(self, path: str) -> Optional[dict[str, FileInfo]]:
        subvolume, subpath = self._split(path)
        if not subvolume:
            return {name: self.rootFileInfo.clone() for name in sorted(self.mountSources)}
        mountSource = self.mountSources.get(subvolume)
        return None if mountSource is None else mountSource.list(subpath)

    @overrides(MountSource)
    def list_mode(self, path: str) -> Optional[dict[str, int]]:
        subvolume, subpath = self._split(path)
        if not subvolume:
            return {name: self.rootFileInfo.mode for name in sorted(self.mountSources)}
        mountSource = self.mountSources.get(subvolume)
        return None if mountSource is None else mountSource.list_mode(subpath)

    @overrides(MountSource)
    def open(self, fileInfo: FileInfo, buffering=-1) -> IO[bytes]:
        return self._forward(fileInfo, lambda mountSource: mountSource.open(fileInfo, buffering=buffering))

    @overrides(MountSource)
    def read(self, fileInfo: FileInfo, size: int, offset: int) -> bytes:
        return self._forward(fileInfo, lambda mountSource: mountSource.read(fileInfo, size, offset))

    @overrides(MountSource)
    def __exit__(self, exception_type, exception_value, exception_traceback):
        for mountSource in self.mountSources.values():
            mountSource.__exit__(exception_type, exception_value, exception_traceback)
