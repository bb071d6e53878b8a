"""iso2repo

This is the frontend for iso2repo.
It is normally not intended to be used as a library.

The installed iso2repo script will load this module and call its 'cli' function,
which could also be done programmatically.

Example:

    from iso2repo.cli import cli

    cli(["--sources-list", "192.168.0.2", "/srv/iso"])
"""

from .version import __version__
