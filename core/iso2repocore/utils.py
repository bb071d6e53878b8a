import os
import platform
from collections.abc import Iterable
from typing import Optional, get_type_hints


class Iso2RepoError(Exception):
    """Base exception for iso2repo module."""


class NotRepositoryError(Iso2RepoError):
    """Exception for archives that simply do not contain a package repository. Not meant to be reported loudly."""


class MalformedRepositoryError(Iso2RepoError):
    """Exception for archives containing repository markers but no usable components in the Release file."""


class PathNotFoundError(Iso2RepoError, FileNotFoundError):
    """Exception for paths that could not be resolved inside an archive."""


class ToolNotFoundError(Iso2RepoError):
    """Exception for a missing external archive tool."""


class ProcessFailureError(Iso2RepoError):
    """Exception for the external archive tool exiting with an error and no usable output."""

    def __init__(self, returncode: Optional[int], command: list[str]):
        self.returncode = -1 if returncode is None else returncode
        self.command = command
        super().__init__(f"Exit code {self.returncode} for: {' '.join(command)}")


class ProcessTimeoutError(ProcessFailureError):
    """Exception for the external archive tool being killed after the configured timeout."""

    def __init__(self, timeout: float, command: list[str]):
        self.timeout = timeout
        super().__init__(None, command)
        self.args = (f"Timed out after {timeout} s: {' '.join(command)}",)


def overrides(parentClass):
    """Simple decorator that checks that a method with the same name exists in the parent class"""

    def overrider(method):
        if platform.python_implementation() == 'PyPy':
            return method

        assert method.__name__ in dir(parentClass)
        parentMethod = getattr(parentClass, method.__name__)
        assert callable(parentMethod)

        if os.getenv('ISO2REPO_CHECK_OVERRIDES', '').lower() not in ('1', 'yes', 'on', 'enable', 'enabled'):
            return method

        parentTypes = get_type_hints(parentMethod)
        # If the parent is not typed, e.g., fusepy, then do not show errors for the typed derived class.
        for argument, argumentType in get_type_hints(method).items():
            if argument in parentTypes:
                parentType = parentTypes[argument]
                assert argumentType == parentType, f"{method.__name__}: {argument}: {argumentType} != {parentType}"

        return method

    return overrider


def ceil_div(dividend, divisor):
    return -(dividend // -divisor)


def remove_duplicates_stable(iterable: Iterable):
    seen = set()
    deduplicated = []
    for x in iterable:
        if x not in seen:
            deduplicated.append(x)
            seen.add(x)
    return deduplicated


def split_path(path: str) -> list[str]:
    """
    Splits a path inside an archive into its segments. Backslashes count as separators. The empty path, i.e.,
    the root, returns an empty list.
    """
    path = path.replace('\\', '/').strip().strip('/')
    return path.split('/') if path else []
