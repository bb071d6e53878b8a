"""
This module offers a MountSource interface, which has methods for listing paths and getting file metadata and
contents. File lookup returns a FileInfo object, which identifies the file and can be used to open it.

 - ArchiveMountSource: Exposes the file tree of one ArchiveImage. File contents are extracted with 7z on open.
 - SubvolumesMountSource: Takes multiple MountSource implementations and mounts each in a separate subfolder,
                          e.g., one folder per published repository archive.

Example:

    from iso2repocore.archive import open_archive
    from iso2repocore.mountsource.archive import ArchiveMountSource

    mountSource = ArchiveMountSource(open_archive("debian.iso"))
    mountSource.list("/dists")
    info = mountSource.lookup("/dists/bookworm/Release")

    with mountSource.open(info) as file:
        print(file.read())
"""

from .MountSource import DIRECTORY_MODE, FILE_MODE, FileInfo, MountSource, create_root_file_info
