import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)


ARCHIVE_EXTENSIONS = ('.iso', '.tar')


def find_archives(folder: str, extensions: Iterable[str] = ARCHIVE_EXTENSIONS) -> list[str]:
    """
    Recursively searches the folder for archive files with one of the given extensions. Archives with an already
    found base name, compared case-insensitively, are skipped because they would be published under the same name.
    """
    if not os.path.isdir(folder):
        raise FileNotFoundError(f"Folder not found: '{folder}'")

    extensions = tuple(extension.lower() for extension in extensions)
    baseNames: set[str] = set()
    result: list[str] = []

    for parent, folders, files in os.walk(folder):
        folders.sort()
        for name in sorted(files):
            if not name.lower().endswith(extensions):
                continue
            if name.lower() in baseNames:
                logger.info("Skip archive with duplicate name: %s", os.path.join(parent, name))
                continue
            baseNames.add(name.lower())
            result.append(os.path.join(parent, name))

    return result


def collect_archives(paths: Iterable[str], extensions: Iterable[str] = ARCHIVE_EXTENSIONS) -> list[str]:
    """Expands folders into the archives found inside them and keeps archive files as they are."""
    extensions = tuple(extensions)
    result: list[str] = []
    baseNames: set[str] = set()
    for path in paths:
        candidates = find_archives(path, extensions) if os.path.isdir(path) else [path]
        for candidate in candidates:
            if not os.path.isfile(candidate):
                raise FileNotFoundError(f"Archive not found: '{candidate}'")
            name = os.path.basename(candidate).lower()
            if name in baseNames:
                logger.info("Skip archive with duplicate name: %s", candidate)
                continue
            baseNames.add(name)
            result.append(candidate)
    return result
