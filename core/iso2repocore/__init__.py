"""iso2repo Core

This is the backend of iso2repo. It is intended to be used as a library.

It lists ISO and TAR archives with the external 7z tool, builds an in-memory file tree for each of them, and
detects Debian-style package repositories inside them, which can then be published under a network address.

Example:

    from iso2repocore.archive import open_archive

    archive = open_archive("debian.iso")
    print(archive.repository.to_source_line("192.168.0.2", port=4309))

    fileEntry, listing = archive.read_path("dists")
    with open("Release", "wb") as file:
        archive.read_file("dists/bookworm/Release", file)
"""

from .version import __version__
