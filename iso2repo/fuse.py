# Provides the 'fuse' symbol. Only imported when actually mounting so that all other actions work without libfuse.
# pylint: disable=unused-import

from iso2repocore.utils import Iso2RepoError

try:
    import mfusepy as fuse  # type: ignore
except (ImportError, OSError) as mfusepyException:
    try:
        import fuse  # type: ignore
    except (ImportError, OSError) as fuseException:
        raise Iso2RepoError(
            "Did not find any FUSE installation. Please install it, e.g., with: pip install mfusepy and "
            f"apt install libfuse2. Exception for mfusepy: {mfusepyException}, exception for fuse: {fuseException}"
        ) from fuseException
