import argparse
import logging
import os
from typing import Any, Optional

from iso2repocore.utils import Iso2RepoError

logger = logging.getLogger(__name__)


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def debug_level_to_log_level(debug: int) -> int:
    if debug <= 0:
        return logging.ERROR
    if debug == 1:
        return logging.WARNING
    if debug == 2:
        return logging.INFO
    return logging.DEBUG


# Handlers installed on the root logger by setup_logging. Replaced on each call.
LOG_HANDLERS: list[logging.Handler] = []


def remove_log_handlers() -> None:
    rootLogger = logging.getLogger()
    for handler in LOG_HANDLERS:
        rootLogger.removeHandler(handler)
        handler.close()
    LOG_HANDLERS.clear()


def setup_logging(debug: int, logFile: str = '') -> None:
    remove_log_handlers()

    LOG_HANDLERS.append(logging.StreamHandler())
    if logFile:
        LOG_HANDLERS.append(logging.FileHandler(logFile, encoding='utf-8'))

    rootLogger = logging.getLogger()
    for handler in LOG_HANDLERS:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        rootLogger.addHandler(handler)
    rootLogger.setLevel(debug_level_to_log_level(debug))


def parse_extensions(extensions: str) -> list[str]:
    result = ['.' + extension.strip().lstrip('.').lower() for extension in extensions.split(',') if extension.strip()]
    if not result:
        raise argparse.ArgumentTypeError("At least one archive extension must be specified!")
    return result


def process_trivial_parsed_arguments(args) -> None:
    """
    Checks and post-processes 'trivial' arguments, i.e., those that do not depend on others or require
    filesystem access for checks.
    """
    if not args.archive_source:
        args.archive_source = ['.']

    for path in args.archive_source:
        if not os.path.exists(path):
            raise argparse.ArgumentTypeError(f"Archive or folder does not exist: {path}")

    if args.port < 0 or args.port > 65535:
        raise argparse.ArgumentTypeError(f"Invalid port: {args.port}")

    if args.timeout < 0:
        raise argparse.ArgumentTypeError(f"Timeout may not be negative: {args.timeout}")

    actions = [args.sources_list is not None, bool(args.list), bool(args.extract), bool(args.mount)]
    if sum(actions) > 1:
        raise argparse.ArgumentTypeError("Only one of --sources-list, --list, --extract, and --mount may be given!")

    args.extensions = parse_extensions(args.extensions)


def parsed_args_to_options(args) -> dict[str, Any]:
    # fmt: off
    return {
        'paths'              : args.archive_source,
        'extensions'         : args.extensions,
        'binary'             : args.sevenzip_binary or None,
        'timeout'            : args.timeout or None,
        'maxConcurrentReads' : args.max_concurrent_reads or None,
        'encoding'           : args.encoding,
    }
    # fmt: on


def print_versions(binary: Optional[str] = None) -> None:
    # pylint: disable=import-outside-toplevel
    from iso2repocore.sevenzip import SevenZip
    from iso2repocore.version import __version__ as coreVersion

    from .version import __version__

    print("iso2repo", __version__)
    print("iso2repocore", coreVersion)

    try:
        tool = SevenZip(binary or None)
        print("7z", tool.version(), tool.binary)
    except Iso2RepoError as exception:
        print("7z not available:", exception)
