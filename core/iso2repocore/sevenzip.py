"""
Thin wrapper around the 7-Zip command line tool, which is used to list and extract ISO and TAR archives.

Every call starts a new process. Listing and version queries buffer the whole output, file extraction streams
the standard output of the process into a given binary file object.
"""

import logging
import os
import shutil
import subprocess
import threading
from typing import IO, Optional

from .listing import UNKNOWN_VERSION, parse_version
from .utils import ProcessFailureError, ProcessTimeoutError, ToolNotFoundError

logger = logging.getLogger(__name__)


SEVENZIP_BINARY_NAMES = ['7z', '7zz']
SEVENZIP_FOLDER_NAME = '7-Zip'


def find_sevenzip(binary: Optional[str] = None) -> str:
    """
    Returns the path to the 7z binary. An explicitly given binary, which may be a name or path, takes precedence.
    Else, PATH is searched and on Windows also the default installation folders.
    """
    if binary:
        path = shutil.which(binary)
        if path is None:
            raise ToolNotFoundError(f"The specified 7z binary could not be found: {binary}")
        return path

    for name in SEVENZIP_BINARY_NAMES:
        path = shutil.which(name)
        if path:
            return path

    for variable in ['ProgramFiles', 'ProgramFiles(x86)']:
        folder = os.environ.get(variable, '')
        if not folder:
            continue
        path = os.path.join(folder, SEVENZIP_FOLDER_NAME, '7z.exe')
        if os.path.isfile(path):
            return path

    raise ToolNotFoundError("Could not find 7z. Please install it, e.g., with: apt install p7zip-full")


class VersionNotifier:
    """Warns about unknown or untested 7z versions at most once per kind for all archives it is given to."""

    TESTED_MAJOR_VERSIONS = range(16, 23)

    def __init__(self) -> None:
        self.warnedUnknownVersion = False
        self.warnedUntestedVersion = False

    def check(self, version: str) -> None:
        if version == UNKNOWN_VERSION:
            if not self.warnedUnknownVersion:
                logger.warning("Could not determine the 7z version. Results are not guaranteed.")
                self.warnedUnknownVersion = True
            return

        if int(version.split('.')[0]) not in self.TESTED_MAJOR_VERSIONS:
            if not self.warnedUntestedVersion:
                logger.warning("7z version %s has not been tested. Results are not guaranteed.", version)
                self.warnedUntestedVersion = True


class SevenZip:
    """
    binary: Path to the 7z executable. If not given, it will be searched for with find_sevenzip.
    timeout: Maximum time in seconds for each started process. None means no limit.
    maxConcurrentReads: Maximum number of extraction processes running at the same time.
                        Further read_file calls block until a slot frees up.
    encoding: Encoding of the textual tool output.
    """

    DEFAULT_CHUNK_SIZE = 1024 * 1024

    def __init__(
        self,
        binary: Optional[str] = None,
        timeout: Optional[float] = None,
        maxConcurrentReads: Optional[int] = None,
        encoding: str = 'utf-8',
    ) -> None:
        self.binary = find_sevenzip(binary)
        self.timeout = timeout if timeout and timeout > 0 else None
        self.encoding = encoding

        if not maxConcurrentReads or maxConcurrentReads <= 0:
            maxConcurrentReads = os.cpu_count() or 1
        self.maxConcurrentReads = maxConcurrentReads
        self._readSlots = threading.BoundedSemaphore(maxConcurrentReads)

    def exec_once(self, args: list[str]) -> str:
        """
        Runs 7z with the given arguments and returns the combined stdout and stderr output with surrounding
        whitespace stripped. 7z sometimes returns a nonzero exit code even though the output contains usable
        results. Therefore, an error is only raised when the process failed and did not output anything.
        """
        command = [self.binary, *args]
        logger.debug("exec - %s", ' '.join(command))

        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exception:
            raise ProcessTimeoutError(exception.timeout, command) from exception

        output = result.stdout.decode(self.encoding, errors='replace').strip()
        if result.returncode != 0:
            logger.debug("exec - exit code %d, output size %d", result.returncode, len(output))
            if output:
                return output
            raise ProcessFailureError(result.returncode, command)

        return output

    def version(self) -> str:
        """Returns the normalized version of the tool, e.g., "16.2.0", or "0.0.0" if it could not be determined."""
        return parse_version(self.exec_once([]))

    def list_contents(self, archivePath: str) -> str:
        return self.exec_once(['l', archivePath])

    def read_file(self, archivePath: str, path: str, sink: IO[bytes]) -> None:
        """
        Extracts the file at the given path inside the archive and writes its contents to sink.
        The path must be given in the notation used inside the archive, i.e., including any path prefix.
        """
        command = [self.binary, 'e', archivePath, '-so', path]

        with self._readSlots:
            logger.debug("exec - %s", ' '.join(command))
            with subprocess.Popen(
                command, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, stdin=subprocess.DEVNULL
            ) as process:
                timedOut = threading.Event()

                def kill_on_timeout():
                    timedOut.set()
                    process.kill()

                timer = threading.Timer(self.timeout, kill_on_timeout) if self.timeout else None
                if timer:
                    timer.start()

                try:
                    assert process.stdout is not None
                    shutil.copyfileobj(process.stdout, sink, self.DEFAULT_CHUNK_SIZE)
                    returncode = process.wait()
                except BaseException:
                    process.kill()
                    raise
                finally:
                    if timer:
                        timer.cancel()

        # The timer may fire after the process already exited successfully. The complete output was written then.
        if returncode == 0:
            return
        if timedOut.is_set():
            raise ProcessTimeoutError(self.timeout or 0, command)
        raise ProcessFailureError(returncode, command)
