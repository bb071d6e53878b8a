# pylint: disable=wrong-import-position

import itertools
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from iso2repocore.tree import Entry, create_root, insert_path, walk  # noqa: E402


def _chain(path: str, isDir: bool = False, size: int = 0, mtime: float = 0):
    segments = path.split('/')
    return [Entry(name=segment, isDir=True) for segment in segments[:-1]] + [
        Entry(name=segments[-1], isDir=isDir, size=size, mtime=mtime)
    ]


def _describe(level):
    return [(entry.name, entry.isDir, _describe(entry.children)) for entry in level]


def test_root():
    root = create_root()
    assert root.isRoot
    assert root.isDir
    assert root.name == ''
    assert root.children == []


def test_file_and_folder_with_same_name():
    root = create_root()
    insert_path(_chain('a/b/c', size=3), root.children)
    insert_path(_chain('a/b/c', isDir=True), root.children)

    assert len(root.children) == 1
    a = root.children[0]
    assert a.name == 'a' and a.isDir
    assert len(a.children) == 1
    b = a.children[0]
    assert [(entry.name, entry.isDir) for entry in b.children] == [('c', False), ('c', True)]


def test_duplicate_files_are_kept():
    root = create_root()
    insert_path(_chain('pool/x.deb', size=1), root.children)
    insert_path(_chain('pool/x.deb', size=2), root.children)

    pool = root.children[0]
    assert [(entry.name, entry.size) for entry in pool.children] == [('x.deb', 1), ('x.deb', 2)]


def test_duplicate_folders_are_merged():
    root = create_root()
    insert_path(_chain('dists/bookworm', isDir=True, mtime=5), root.children)
    insert_path(_chain('dists/bookworm', isDir=True, mtime=7), root.children)
    insert_path(_chain('dists', isDir=True, mtime=3), root.children)

    assert _describe(root.children) == [('dists', True, [('bookworm', True, [])])]
    dists = root.children[0]
    assert dists.mtime == 3
    assert dists.children[0].mtime == 5


def test_insert_returns_level():
    level = []
    assert insert_path(_chain('a/b'), level) is level
    assert insert_path([], level) is level


def test_order_independence():
    chains = [
        ('dists', True),
        ('dists/bookworm', True),
        ('dists/bookworm/Release', False),
        ('dists/bookworm/main', True),
        ('dists/bookworm/main/binary-amd64/Packages', False),
    ]

    def build(order):
        root = create_root()
        for path, isDir in order:
            insert_path(_chain(path, isDir=isDir), root.children)
        return root

    def normalize(level):
        return sorted((entry.name, entry.isDir, normalize(entry.children)) for entry in level)

    expected = normalize(build(chains).children)
    for order in itertools.permutations(chains):
        assert normalize(build(order).children) == expected


def test_folder_and_file_counts():
    folderCount = 7
    filesPerFolder = 5

    root = create_root()
    for i in range(folderCount):
        insert_path(_chain(f"pool/folder{i}", isDir=True), root.children)
        for j in range(filesPerFolder):
            insert_path(_chain(f"pool/folder{i}/file{j}", size=j), root.children)

    nodes = list(walk(root))
    assert sum(1 for node in nodes if node.isDir) == folderCount + 1
    assert sum(1 for node in nodes if not node.isDir) == folderCount * filesPerFolder
    assert all(node.children == [] for node in nodes if not node.isDir)


def test_walk_order():
    root = create_root()
    insert_path(_chain('a/b'), root.children)
    insert_path(_chain('c'), root.children)
    assert [entry.name for entry in walk(root)] == ['a', 'b', 'c']
