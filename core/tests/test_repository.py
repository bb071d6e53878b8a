# pylint: disable=wrong-import-position

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from helpers import create_listing  # noqa: E402

from iso2repocore.listing import parse_listing  # noqa: E402
from iso2repocore.repository import RepositoryDescriptor, detect_repository, parse_components  # noqa: E402
from iso2repocore.utils import MalformedRepositoryError, NotRepositoryError  # noqa: E402


def _detect(folders, files, name='debian.iso'):
    root, _ = parse_listing(create_listing(folders, files))
    readPaths = []

    def read_file(path, sink):
        readPaths.append(path)
        sink.write(files[path].encode())

    return detect_repository(root, name, read_file), readPaths


def test_debian_layout():
    descriptor, readPaths = _detect(
        ['dists', 'dists/bookworm', 'dists/bookworm/main', 'dists/bookworm/contrib'],
        {'dists/bookworm/Release': "Suite: stable\nComponents: main contrib non-free\n"},
    )
    assert readPaths == ['dists/bookworm/Release']
    assert descriptor == RepositoryDescriptor('debian.iso', 'bookworm', ('contrib', 'main'))
    assert str(descriptor) == "deb http://0.0.0.0/repo/debian.iso bookworm contrib main"


def test_no_dists_folder():
    with pytest.raises(NotRepositoryError):
        _detect(['pool', 'boot'], {'README': "hello"})


def test_dists_is_a_file():
    with pytest.raises(NotRepositoryError):
        _detect([], {'dists': "not a folder"})


def test_no_distribution_folder():
    with pytest.raises(NotRepositoryError):
        _detect(['dists'], {'dists/README': "nothing here"})


def test_missing_release_file():
    with pytest.raises(NotRepositoryError):
        _detect(['dists', 'dists/bookworm', 'dists/bookworm/main'], {'dists/bookworm/InRelease': "Components: main"})


def test_last_distribution_is_used():
    descriptor, readPaths = _detect(
        ['dists', 'dists/bookworm', 'dists/bookworm/main', 'dists/bullseye', 'dists/bullseye/main'],
        {'dists/bookworm/Release': "Components: main", 'dists/bullseye/Release': "Components: main"},
    )
    assert descriptor.distribution == 'bullseye'
    assert readPaths == ['dists/bullseye/Release']


def test_no_existing_component():
    with pytest.raises(MalformedRepositoryError):
        _detect(['dists', 'dists/bookworm'], {'dists/bookworm/Release': "Components: main"})


def test_no_components_line():
    with pytest.raises(MalformedRepositoryError):
        _detect(['dists', 'dists/bookworm', 'dists/bookworm/main'], {'dists/bookworm/Release': "Suite: stable"})


def test_component_must_be_folder():
    with pytest.raises(MalformedRepositoryError):
        _detect(['dists', 'dists/bookworm'], {'dists/bookworm/Release': "Components: main", 'dists/bookworm/main': ""})


@pytest.mark.parametrize(
    'release, components',
    [
        ("Components: main contrib", ['main', 'contrib']),
        ("Components:\tmain\tcontrib", ['main', 'contrib']),
        ("  components:   main  main   contrib  ", ['main', 'contrib']),
        ("Origin: Ubuntu\r\nComponents: main restricted\r\n", ['main', 'restricted']),
        ("Components: first\nComponents: second", ['first']),
        ("Components:", []),
        ("Suite: stable", []),
        ("", []),
    ],
)
def test_parse_components(release, components):
    assert parse_components(release) == components


def test_source_line():
    descriptor = RepositoryDescriptor('ubuntu.iso', 'jammy', ('main', 'restricted'))
    assert descriptor.to_source_line() == "deb http://0.0.0.0/repo/ubuntu.iso jammy main restricted"
    assert descriptor.to_source_line('192.168.0.2') == "deb http://192.168.0.2/repo/ubuntu.iso jammy main restricted"
    assert (
        descriptor.to_source_line('192.168.0.2', port=4309, architecture='amd64')
        == "deb [arch=amd64] http://192.168.0.2:4309/repo/ubuntu.iso jammy main restricted"
    )
