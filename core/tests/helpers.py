import json
import os
import stat
import sys
from typing import Optional

DEFAULT_BANNER = "7-Zip [64] 16.02 : Copyright (c) 1999-2016 Igor Pavlov : 2016-05-21"

# Emulates the 7z calls used by iso2repo: the banner when called without arguments, "l" for listings and "e -so"
# for extraction. The fake archives are JSON files containing the listing and the file contents.
FAKE_SEVENZIP_SCRIPT = '''#!{python}
import json
import sys
import time

args = sys.argv[1:]
if not args:
    print({banner!r})
    print()
    print("Usage: 7z <command> [<switches>...] <archive_name> [<file_names>...]")
    sys.exit(0)

with open(args[1], 'rb') as file:
    archive = json.load(file)

if archive.get('sleep'):
    time.sleep(archive['sleep'])

if args[0] == 'l':
    sys.stdout.write({banner!r} + "\\n\\nScanning the drive for archives:\\n\\n")
    sys.stdout.write(archive['listing'])
    sys.exit(archive.get('listExitCode', 0))

if args[0] == 'e' and args[2] == '-so':
    files = archive.get('files', {{}})
    if args[3] not in files:
        sys.stderr.write("No files to process\\n")
        sys.exit(2)
    sys.stdout.buffer.write(files[args[3]].encode())
    sys.exit(0)

sys.exit(7)
'''


def write_fake_sevenzip(folder, banner: str = DEFAULT_BANNER, name: str = '7z') -> str:
    path = os.path.join(str(folder), name)
    with open(path, 'wt', encoding='utf-8') as file:
        file.write(FAKE_SEVENZIP_SCRIPT.format(python=sys.executable, banner=banner))
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def listing_line(path: str, isDir: bool = False, size: int = 0, timestamp: str = "2018-06-20 20:32:10") -> str:
    attributes = 'D....' if isDir else '....A'
    sizeColumn = '' if isDir else str(size)
    packedColumn = '' if isDir else str(size)
    return f"{timestamp} {attributes} {sizeColumn:>12} {packedColumn:>12}  {path}"


def create_listing(folders: list[str], files: dict[str, str], prefix: str = '', separator: str = '\\') -> str:
    """
    Returns a 7z-like listing including header and footer. Use prefix='./' to emulate TAR listings, which
    also contain the archive root itself as '.'.
    """
    lines = [
        "Path = archive",
        "Type = Iso",
        "",
        "   Date      Time    Attr         Size   Compressed  Name",
        "------------------- ----- ------------ ------------  ------------------------",
    ]
    if prefix:
        lines.append(listing_line('.', isDir=True))
    for folder in folders:
        lines.append(listing_line(prefix + folder.replace('/', separator), isDir=True))
    for path, contents in files.items():
        lines.append(listing_line(prefix + path.replace('/', separator), size=len(contents.encode())))
    lines.append("------------------- ----- ------------ ------------  ------------------------")
    lines.append(f"2022-07-22 12:33:04                 1234         1234  {len(files)} files, {len(folders)} folders")
    return '\n'.join(lines) + '\n'


def write_fake_archive(
    path,
    folders: list[str],
    files: dict[str, str],
    prefix: str = '',
    listing: Optional[str] = None,
    **options,
) -> str:
    """
    Writes a JSON file that the fake 7z script understands. File contents are stored under the path notation
    used inside the archive, i.e., including the prefix and with forward slashes.
    """
    archive = {
        'listing': create_listing(folders, files, prefix=prefix) if listing is None else listing,
        'files': {prefix + name: contents for name, contents in files.items()},
    }
    archive.update(options)
    with open(str(path), 'wt', encoding='utf-8') as file:
        json.dump(archive, file)
    return str(path)


DEBIAN_RELEASE = """Origin: Debian
Label: Debian
Suite: stable
Codename: bookworm
Architectures: amd64
Components: main contrib
Description: Debian 12.0.0 bookworm - Official amd64 DVD Binary-1
"""

DEBIAN_FOLDERS = [
    'dists',
    'dists/bookworm',
    'dists/bookworm/main',
    'dists/bookworm/main/binary-amd64',
    'pool',
    'pool/main',
]

DEBIAN_FILES = {
    'dists/bookworm/Release': DEBIAN_RELEASE,
    'dists/bookworm/main/binary-amd64/Packages': "Package: hello\nVersion: 2.10\n",
    'pool/main/hello_2.10_amd64.deb': "not really a deb",
    'README.txt': "Debian installer image\n",
}


def write_debian_archive(path, prefix: str = '', **options) -> str:
    return write_fake_archive(path, DEBIAN_FOLDERS, DEBIAN_FILES, prefix=prefix, **options)
