import argparse
import logging
import os
import shutil
import subprocess
import sys
import time

from iso2repocore.catalog import Catalog, open_catalog
from iso2repocore.utils import PathNotFoundError, split_path

from iso2repo import CLIHelpers

logger = logging.getLogger(__name__)


def unmount(mountPoint: str) -> None:
    # Do not test with os.path.ismount or anything other because if the FUSE process was killed without
    # unmounting, then any file system query might return with errors.
    try:
        subprocess.run(["fusermount", "-u", mountPoint], check=True, capture_output=True)
        logger.info("Successfully called fusermount -u.")
        return
    except Exception as exception:
        logger.info("fusermount -u %s failed with: %s", mountPoint, exception)

    fusermountPath = shutil.which("fusermount3")
    if fusermountPath and os.path.ismount(mountPoint):
        try:
            subprocess.run([fusermountPath, "-u", mountPoint], check=True, capture_output=True)
            logger.info("Successfully called %s -u '%s'.", fusermountPath, mountPoint)
            return
        except Exception as exception:
            logger.info("%s -u %s failed with: %s", fusermountPath, mountPoint, exception)

    if os.path.ismount(mountPoint):
        try:
            subprocess.run(["umount", mountPoint], check=True, capture_output=True)
            logger.info("Successfully called umount '%s'.", mountPoint)
            return
        except Exception as exception:
            logger.info("umount %s failed with: %s", mountPoint, exception)


def unmount_list_checked(mountPoints: list[str]) -> int:
    for mountPoint in mountPoints:
        unmount(mountPoint)

    errorPrinted = False
    if any(os.path.ismount(mountPoint) for mountPoint in mountPoints):
        time.sleep(1)
        for mountPoint in mountPoints:
            if not os.path.ismount(mountPoint):
                continue
            if not errorPrinted:
                logger.error(
                    "Failed to unmount the given mount point. Alternatively, the process providing the "
                    "mount point can be looked for and killed, e.g., with this command:"
                )
                errorPrinted = True
            logger.error("""    pkill --full 'iso2repo.*%s' -G "$( id -g )" --newest""", mountPoint)

    return 1 if errorPrinted else 0


def _split_catalog_path(catalog: Catalog, path: str):
    parts = split_path(path)
    if not parts:
        return None, ''
    archive = catalog.get(parts[0])
    if archive is None:
        raise PathNotFoundError(f"No repository archive named '{parts[0]}' found.")
    return archive, '/'.join(parts[1:])


def print_summary(catalog: Catalog) -> int:
    if not catalog.archives:
        print("No repository archives found.")
        return 1

    for name, archive in catalog.archives.items():
        print(f"{name}: {archive.source_string()}")
    return 0


def print_listing(catalog: Catalog, path: str) -> int:
    archive, subpath = _split_catalog_path(catalog, path)
    if archive is None:
        for name in sorted(catalog.archives):
            print(name + '/')
        return 0

    fileEntry, listing = archive.read_path(subpath)
    if fileEntry is not None:
        print(f"{fileEntry.size:>12} {fileEntry.name}")
        return 0

    for entry in listing:
        print(f"{'':>12} {entry.name}/" if entry.isDir else f"{entry.size:>12} {entry.name}")
    return 0


def extract_file(catalog: Catalog, path: str) -> int:
    archive, subpath = _split_catalog_path(catalog, path)
    if archive is None:
        raise argparse.ArgumentTypeError("A path to a file inside an archive must be specified for --extract!")

    fileEntry, _ = archive.read_path(subpath)
    if fileEntry is None:
        raise argparse.ArgumentTypeError(f"Cannot extract a folder: {path}")

    archive.read_file(subpath, sys.stdout.buffer)
    sys.stdout.buffer.flush()
    return 0


def create_fuse_mount(args, catalog: Catalog) -> int:
    # Import late to avoid requiring libfuse for all other actions.
    # pylint: disable=import-outside-toplevel
    from .fuse import fuse
    from .FuseMount import FuseMount

    # Convert the comma separated list of key[=value] options into a dictionary for fusepy
    fusekwargs = (
        dict(option.split('=', 1) if '=' in option else (option, True) for option in args.fuse.split(','))
        if args.fuse
        else {}
    )

    with FuseMount(catalog.create_mount_source(), args.mount) as fuseOperationsObject:
        try:
            fuse.FUSE(
                operations=fuseOperationsObject,
                mountpoint=fuseOperationsObject.mountPoint,
                foreground=args.foreground,
                nothreads=True,
                ro=True,
                **fusekwargs,
            )
        except RuntimeError as exception:
            raise ValueError("FUSE mountpoint could not be created. See previous output for more information.") from (
                exception
            )
    return 0


def process_parsed_arguments(args) -> int:
    CLIHelpers.setup_logging(args.debug, args.log_file)

    if args.unmount:
        return unmount_list_checked(args.unmount)

    CLIHelpers.process_trivial_parsed_arguments(args)
    options = CLIHelpers.parsed_args_to_options(args)
    catalog = open_catalog(options.pop('paths'), **options)

    if args.sources_list is not None:
        for line in catalog.sources_list(args.sources_list, port=args.port or None, architecture=args.arch):
            print(line)
        return 0

    if args.list:
        return print_listing(catalog, args.list)

    if args.extract:
        return extract_file(catalog, args.extract)

    if args.mount:
        return create_fuse_mount(args, catalog)

    return print_summary(catalog)
