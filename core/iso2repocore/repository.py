"""
Detection of Debian-style package repositories inside an archive tree.

A repository is recognized by this layout:

    dists/<distribution>/Release
    dists/<distribution>/<component>/...

where the Release file contains a line like "Components: main contrib non-free".
"""

import dataclasses
import io
import logging
from typing import IO, Callable, Optional

from .resolver import find_directory
from .tree import Entry
from .utils import MalformedRepositoryError, NotRepositoryError, remove_duplicates_stable

logger = logging.getLogger(__name__)


DISTS_FOLDER = 'dists'
RELEASE_FILE = 'Release'
COMPONENTS_KEY = 'components:'
PLACEHOLDER_HOST = '0.0.0.0'


@dataclasses.dataclass(frozen=True)
class RepositoryDescriptor:
    archiveName: str
    distribution: str
    components: tuple[str, ...]

    def to_source_line(self, host: str = PLACEHOLDER_HOST, port: Optional[int] = None, architecture: str = '') -> str:
        """Returns a line for APT's sources.list pointing to the given host."""
        address = f"{host}:{port}" if port else host
        options = f" [arch={architecture}]" if architecture else ''
        return (
            f"deb{options} http://{address}/repo/{self.archiveName} {self.distribution} {' '.join(self.components)}"
        )

    def __str__(self) -> str:
        return self.to_source_line()


def parse_components(release: str) -> list[str]:
    """Returns the de-duplicated component names of the first components line in the Release file contents."""
    for line in release.split('\n'):
        line = line.strip()
        if line.lower().startswith(COMPONENTS_KEY):
            parts = line[len(COMPONENTS_KEY) :].replace('\t', ' ').split(' ')
            return remove_duplicates_stable(part.strip() for part in parts if part.strip())
    return []


def detect_repository(
    root: Entry, archiveName: str, readFile: Callable[[str, IO[bytes]], None]
) -> RepositoryDescriptor:
    """
    Raises NotRepositoryError if the tree does not look like a repository at all and MalformedRepositoryError
    if the repository markers exist but no component listed in the Release file exists.

    readFile: Callback to extract a file given by its path relative to the archive root into a binary sink.
    """
    distsContents = find_directory(root, DISTS_FOLDER)
    if distsContents is None:
        raise NotRepositoryError(f"'{archiveName}' contains no '{DISTS_FOLDER}' folder.")

    # If there are multiple distributions, the last one in listing order is used.
    distribution = ''
    for entry in distsContents:
        if entry.isDir:
            distribution = entry.name
    if not distribution:
        raise NotRepositoryError(f"'{archiveName}' contains no distribution folder in '{DISTS_FOLDER}'.")

    distributionPath = f"{DISTS_FOLDER}/{distribution}"
    distributionContents = find_directory(root, distributionPath) or []
    if not any(entry.name == RELEASE_FILE and not entry.isDir for entry in distributionContents):
        raise NotRepositoryError(f"'{archiveName}' contains no '{distributionPath}/{RELEASE_FILE}' file.")

    releasePath = f"{distributionPath}/{RELEASE_FILE}"
    buffer = io.BytesIO()
    readFile(releasePath, buffer)
    release = buffer.getvalue().decode('utf-8', errors='replace')

    components = []
    for component in parse_components(release):
        if find_directory(root, f"{distributionPath}/{component}") is None:
            logger.debug("Ignore component '%s' of '%s' because it has no folder.", component, archiveName)
            continue
        components.append(component)

    if not components:
        raise MalformedRepositoryError(f"No usable '{COMPONENTS_KEY}' line found in '{archiveName}:{releasePath}'.")

    return RepositoryDescriptor(archiveName=archiveName, distribution=distribution, components=tuple(sorted(components)))
