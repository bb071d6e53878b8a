#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# PYTHON_ARGCOMPLETE_OK

# We explicitly do want to import everything as late as possible here in order to speed up calls by argcomplete!
# pylint: disable=import-outside-toplevel

import argparse
import os
import sys
import traceback
from typing import Optional

from iso2repocore.utils import Iso2RepoError

try:
    import argcomplete
except ImportError:
    pass


DEFAULT_PORT = 4309


class _CustomFormatter(argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter):
    def add_arguments(self, actions):
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super().add_arguments(actions)


class PrintVersionAction(argparse.Action):
    def __call__(self, parser, args, values, option_string=None):
        from .CLIHelpers import print_versions

        print_versions(getattr(args, 'sevenzip_binary', None))
        parser.exit()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='iso2repo',
        formatter_class=_CustomFormatter,
        add_help=False,
        description='''\
Publishes Debian package repositories stored inside ISO and TAR archives. With iso2repo, you can:
  - Find all archives in a folder that contain a repository
  - Print sources.list lines for APT pointing to the host serving the repositories
  - Browse and extract files inside the archives
  - Mount all repository archives to a folder for read-only access, e.g., to serve them with any web server

The 7z command line tool is required for listing and extracting the archives.
''',
        epilog='''\
Examples:

 - iso2repo /srv/iso
 - iso2repo --sources-list 192.168.0.2 --port 80 /srv/iso > /etc/apt/sources.list.d/iso2repo.list
 - iso2repo --list debian-12.iso/dists debian-12.iso
 - iso2repo --extract debian-12.iso/dists/bookworm/Release debian-12.iso
 - iso2repo --mount /var/www/html/repo /srv/iso
 - iso2repo --unmount /var/www/html/repo
''',
    )

    commonGroup = parser.add_argument_group("Optional Arguments")
    positionalGroup = parser.add_argument_group("Positional Options")
    actionGroup = parser.add_argument_group("Actions")
    sourcesGroup = parser.add_argument_group("Sources List Options")
    advancedGroup = parser.add_argument_group("Advanced Options")

    # fmt: off
    commonGroup.add_argument(
        '-h', '--help', action='help', default=argparse.SUPPRESS,
        help='Show this help message and exit.')

    commonGroup.add_argument(
        '-v', '--version', action=PrintVersionAction, nargs=0, default=argparse.SUPPRESS,
        help='Print version information and exit.')

    commonGroup.add_argument(
        '-d', '--debug', type=int, default=1,
        help='Sets the debugging level. Higher means more output. Currently, 3 is the highest.')

    commonGroup.add_argument(
        '--log-file', type=str, default='',
        help='Specifies a file to append the log output to in addition to printing it.')

    # Actions

    actionGroup.add_argument(
        '-s', '--sources-list', type=str, nargs='?', const='127.0.0.1', default=None, metavar='HOST',
        help='Print one sources.list line for each repository archive, pointing to the given host.')

    actionGroup.add_argument(
        '-l', '--list', type=str, default=None, metavar='PATH',
        help='List the folder at the given path. The first path component is the archive name. '
             'Use "/" to list all repository archives.')

    actionGroup.add_argument(
        '-x', '--extract', type=str, default=None, metavar='PATH',
        help='Write the contents of the file at the given path to stdout. '
             'The first path component is the archive name.')

    actionGroup.add_argument(
        '-m', '--mount', type=str, default=None, metavar='MOUNT_POINT',
        help='Mount all repository archives as subfolders of the given folder via FUSE.')

    actionGroup.add_argument(
        '-u', '--unmount', type=str, nargs='+', default=None, metavar='MOUNT_POINT',
        help='Unmount the given mount point(s). Equivalent to calling "fusermount -u" for each mount point.')

    # Sources List Options

    sourcesGroup.add_argument(
        '-p', '--port', type=int, default=DEFAULT_PORT,
        help='Port to add to the host in printed sources.list lines. A value of 0 omits the port.')

    sourcesGroup.add_argument(
        '--arch', type=str, default='',
        help='If specified, adds an [arch=<ARCH>] option to the printed sources.list lines, e.g., amd64.')

    # Advanced Options

    advancedGroup.add_argument(
        '--7z', dest='sevenzip_binary', type=str, default=os.environ.get('ISO2REPO_7Z', ''),
        help='Name of or path to the 7z binary. Can also be set with the ISO2REPO_7Z environment variable. '
             'If empty, it will be searched for in PATH.')

    advancedGroup.add_argument(
        '--timeout', type=float, default=0,
        help='Timeout in seconds for each 7z call. A value of 0 disables the timeout.')

    advancedGroup.add_argument(
        '--max-concurrent-reads', type=int, default=0,
        help='Maximum number of files extracted at the same time. A value of 0 uses the number of cores.')

    advancedGroup.add_argument(
        '--extensions', type=str, default='iso,tar',
        help='Comma-separated list of file extensions of archives to search for in folders.')

    advancedGroup.add_argument(
        '-e', '--encoding', type=str, default='utf-8',
        help='Encoding of the 7z output, e.g., for non-ASCII file names.')

    advancedGroup.add_argument(
        '-o', '--fuse', type=str, default='',
        help='Comma separated FUSE options. See "man mount.fuse" for help. '
             'Example: --fuse "allow_other,entry_timeout=2.8,gid=0". ')

    advancedGroup.add_argument(
        '-f', '--foreground', action='store_true', default=False,
        help='Keeps the python program in foreground so it can print debug '
             'output when the mounted path is accessed.')

    # Positional Arguments

    positionalGroup.add_argument(
        'archive_source', nargs='*',
        help='Archive files or folders to search for archives recursively. Defaults to the current folder.')
    # fmt: on

    return parser


def _parse_args(rawArgs: Optional[list[str]] = None):
    parser = create_parser()
    if 'argcomplete' in sys.modules:
        argcomplete.autocomplete(parser)
    return parser.parse_args(rawArgs)


def cli(rawArgs: Optional[list[str]] = None) -> int:
    """
    Command line interface for iso2repo. Call with args = [ '--help' ] for a description.

    rawArgs: In general, rawArgs is None, meaning sys.argv is used. When used programmatically with a custom
             list of arguments, the first argument should not be the path to the script / the executable,
             i.e., call either cli() or cli(sys.argv[1:])!
    """

    # Manually parse --debug argument in case argument parsing with argparse itself goes wrong.
    tmpArgs = rawArgs if rawArgs else sys.argv
    debug = 1
    for i in range(len(tmpArgs) - 1):
        if tmpArgs[i] in ['-d', '--debug'] and tmpArgs[i + 1].isdecimal():
            debug = int(tmpArgs[i + 1])

    try:
        args = _parse_args(rawArgs)
        from .actions import process_parsed_arguments

        return process_parsed_arguments(args)
    except (FileNotFoundError, Iso2RepoError, argparse.ArgumentTypeError, ValueError) as exception:
        print("[Error]", exception, file=sys.stderr)
        if debug >= 3:
            traceback.print_exc()

    return 1


if __name__ == '__main__':
    sys.exit(cli())
