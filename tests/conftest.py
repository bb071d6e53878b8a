import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../core')))

from iso2repo.CLIHelpers import remove_log_handlers  # noqa: E402


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Each CLI call installs log handlers on the root logger, which would print into the output of other tests."""
    level = logging.getLogger().level
    yield
    remove_log_handlers()
    logging.getLogger().setLevel(level)
