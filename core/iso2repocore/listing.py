"""
Parser for the textual output of the external archive tool.

Example of the relevant part of "7z l archive.iso":

    2018-06-20 20:32:10 D....                            boot
    2018-06-20 20:52:22 D....                            boot\\grub\\i386-efi
    2018-06-20 18:50:00 .....         5188         5188  pool\\main\\libp\\libparsec_0.13.8_amd64.deb
    ------------------- ----- ------------ ------------  ------------------------
    2022-07-22 12:33:04         5916878426   5917296640  407 files, 91 folders

Only lines matching LINE_PATTERN are used. Everything else, e.g., the header and the summary, is skipped
because the surrounding output format is not specified and may differ between tool versions.

The columns have a fixed width. The date and time are followed by five attribute characters, two right-aligned
size columns with 12 characters each, and the name after two spaces. Both size columns are empty for folders,
so names like "2019 photos" can only be told apart from the sizes by their column.
"""

import datetime
import logging
import re
from typing import Optional

from .tree import Entry, create_root, insert_path

logger = logging.getLogger(__name__)


LINE_PATTERN = re.compile(
    r"""
    ^(?P<date>\d+-\d+-\d+)
    [ ](?P<time>\d+:\d+:\d+)
    [ ](?P<type>\S)[.RHSA]{4}
    [ ](?P<size>[ \d]{12})
    [ ](?P<packedSize>[ \d]{12})
    [ ][ ](?P<path>.+)$
    """,
    re.VERBOSE,
)

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# TAR listings contain the archive root itself as "." and all further paths are prefixed with "./".
ROOT_MARKER = '.'
TAR_PATH_PREFIX = './'

VERSION_PATTERNS = [
    # 7-Zip 22.01 (x64) : Copyright (c) 1999-2022 Igor Pavlov : 2022-07-15
    re.compile(r'^[0-9a-zA-Z-]+\s+(\d+\.\d+)'),
    # 7-Zip [64] 16.02 : Copyright (c) 1999-2016 Igor Pavlov : 2016-05-21
    re.compile(r'^[0-9a-zA-Z-]+\s+\[\d+\]\s+(\d+\.\d+)'),
]

UNKNOWN_VERSION = '0.0.0'


def parse_timestamp(date: str, time: str) -> float:
    try:
        parsed = datetime.datetime.strptime(f"{date} {time}", TIMESTAMP_FORMAT)
    except ValueError:
        logger.warning("Failed to parse the creation time of a file or folder: '%s %s'", date, time)
        return 0
    return parsed.replace(tzinfo=datetime.timezone.utc).timestamp()


class ListingParser:
    """
    Turns listing lines into Entry chains and inserts them into one tree. One parser instance per archive
    because it remembers whether the listing uses the TAR path prefix.
    """

    def __init__(self) -> None:
        self.root = create_root()
        self.pathPrefix = ''

    def parse_line(self, line: str) -> Optional[list[Entry]]:
        """
        Returns the chain of entries, one per path segment, described by the given line or None if the line
        does not describe a file or folder.
        """
        # Trailing spaces may belong to the name.
        match = LINE_PATTERN.match(line.lstrip().rstrip('\r\n'))
        if not match:
            if line.strip():
                logger.debug("Skip listing line: %s", line.strip())
            return None

        path = match.group('path').replace('\\', '/')
        if path == ROOT_MARKER:
            self.pathPrefix = TAR_PATH_PREFIX
            return None

        if self.pathPrefix and path.startswith(self.pathPrefix):
            path = path[len(self.pathPrefix) :]
        segments = path.strip('/').split('/')
        if not segments[-1]:
            logger.debug("Skip listing line without path: %s", line.strip())
            return None

        isDir = match.group('type') == 'D'
        size = match.group('size').strip()
        # fmt: off
        entry = Entry(
            name  = segments[-1],
            isDir = isDir,
            size  = 0 if isDir or not size else int(size),
            mtime = parse_timestamp(match.group('date'), match.group('time')),
        )
        # fmt: on

        return [Entry(name=segment, isDir=True) for segment in segments[:-1]] + [entry]

    def add_line(self, line: str) -> bool:
        """Parses the line and inserts it into the tree. Returns false if the line was skipped."""
        pathParts = self.parse_line(line)
        if pathParts is None:
            return False
        insert_path(pathParts, self.root.children)
        return True

    def add_listing(self, output: str) -> None:
        for line in output.split('\n'):
            self.add_line(line)


def parse_listing(output: str) -> tuple[Entry, str]:
    """Returns the tree root built from the complete listing output and the detected path prefix."""
    parser = ListingParser()
    parser.add_listing(output)
    return parser.root, parser.pathPrefix


def parse_version(output: str) -> str:
    """
    Returns the normalized tool version, e.g., "22.1.0" for "7-Zip 22.01 (x64) ...", or UNKNOWN_VERSION.
    Only the first line of the banner is looked at.
    """
    lines = output.strip().split('\n')
    if not lines:
        return UNKNOWN_VERSION

    firstLine = lines[0].strip()
    for pattern in VERSION_PATTERNS:
        match = pattern.match(firstLine)
        if match:
            return '.'.join([str(int(part)) for part in match.group(1).split('.')] + ['0'])
    return UNKNOWN_VERSION
