#!/usr/bin/env python3

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from helpers import write_fake_sevenzip  # noqa: E402

from iso2repocore.sevenzip import SevenZip  # noqa: E402

assertion_count = 0


def pytest_assertion_pass(item, lineno, orig, expl):
    global assertion_count
    assertion_count += 1


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    print(f'{assertion_count} assertions tested.')


@pytest.fixture(name="sevenzip")
def fixture_sevenzip(tmp_path):
    """SevenZip instance calling a fake 7z script, which reads the JSON archives written by the helpers module."""
    return SevenZip(write_fake_sevenzip(tmp_path))
