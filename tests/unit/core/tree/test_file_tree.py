from __future__ import annotations

"""
Unit tests for the path-indexed FileTree.

Verifies:
1. Insertion with automatic creation of intermediate directories.
2. Lookup semantics (hits, misses, paths crossing files).
3. Duplicate-name policy (overwrite files, merge directories, reject clashes).
4. Deterministic display output.
"""

import pytest

from rdatree.core.tree.file_tree import FileTree
from rdatree.domain.errors import TreeInsertionError
from rdatree.domain.tree_models import EMPTY, DirectoryNode, EmptyNode, FileNode


@pytest.fixture
def tree() -> FileTree:
    return FileTree()


def test_new_tree_is_empty(tree: FileTree) -> None:
    """A fresh tree holds the Empty sentinel and renders it."""
    assert tree.is_empty
    assert isinstance(tree.root, EmptyNode)
    assert tree.display() == "EMPTY"
    assert list(tree.iter_files()) == []


def test_push_creates_intermediate_directories(tree: FileTree) -> None:
    """Pushing under a missing path auto-creates the directory chain."""
    tree.push(["a", "b"], FileNode(name="c", content=b"x"))

    assert not tree.is_empty
    assert isinstance(tree.root, DirectoryNode)
    assert isinstance(tree.lookup(["a"]), DirectoryNode)
    assert isinstance(tree.lookup(["a", "b"]), DirectoryNode)
    assert tree.lookup(["a", "b", "c"]) == FileNode(name="c", content=b"x")
    assert tree.display() == "/\na [ b [ c [1 B], ], ]"


def test_display_keeps_insertion_order() -> None:
    """File first, then a new directory holding an empty directory."""
    tree = FileTree()
    tree.push([], FileNode(name="testfile.txt", content=b"hello, world"))
    tree.push(["test"], DirectoryNode(name="dir"))

    root = tree.root
    assert isinstance(root, DirectoryNode)
    assert [child.name for child in root.children] == ["testfile.txt", "test"]
    assert tree.display() == "/\ntestfile.txt [12 B]\ntest [ dir [ ], ]"


def test_push_through_file_fails(tree: FileTree) -> None:
    """An intermediate component that is a file is an insertion error."""
    tree.push(["a"], FileNode(name="b", content=b"1"))

    with pytest.raises(TreeInsertionError) as exc:
        tree.push(["a", "b"], FileNode(name="c", content=b"2"))

    assert exc.value.path == ["a", "b"]
    assert tree.lookup(["a", "b"]) == FileNode(name="b", content=b"1")


def test_push_empty_node_is_rejected(tree: FileTree) -> None:
    """The Empty placeholder can never become a child."""
    with pytest.raises(TreeInsertionError):
        tree.push(["x"], EMPTY)
    with pytest.raises(TreeInsertionError):
        tree.push([], DirectoryNode(name="d", children=[EmptyNode()]))
    assert tree.is_empty


def test_push_rejects_empty_components(tree: FileTree) -> None:
    """Path components and node names must be non-empty strings."""
    with pytest.raises(TreeInsertionError):
        tree.push(["a", ""], FileNode(name="f"))
    with pytest.raises(TreeInsertionError):
        tree.push(["a"], FileNode(name=""))
    assert tree.lookup(["a"]) is None


def test_file_reinsertion_overwrites_in_place(tree: FileTree) -> None:
    """A later file with the same name replaces the earlier one, keeping its slot."""
    tree.push([], FileNode(name="one", content=b"old"))
    tree.push([], FileNode(name="two", content=b"2"))
    tree.push([], FileNode(name="one", content=b"new!"))

    root = tree.root
    assert isinstance(root, DirectoryNode)
    assert [child.name for child in root.children] == ["one", "two"]
    assert tree.lookup(["one"]) == FileNode(name="one", content=b"new!")


def test_directory_reinsertion_merges(tree: FileTree) -> None:
    """Pushing an existing directory merges children instead of duplicating it."""
    tree.push(["d"], FileNode(name="a", content=b"a"))
    tree.push([], DirectoryNode(name="d", children=[FileNode(name="b", content=b"b")]))

    directory = tree.lookup(["d"])
    assert isinstance(directory, DirectoryNode)
    assert [child.name for child in directory.children] == ["a", "b"]


def test_kind_clash_is_rejected(tree: FileTree) -> None:
    """A file cannot replace a directory of the same name, nor the reverse."""
    tree.push(["d"], FileNode(name="a"))
    with pytest.raises(TreeInsertionError):
        tree.push([], FileNode(name="d"))

    tree.push([], FileNode(name="f"))
    with pytest.raises(TreeInsertionError):
        tree.push([], DirectoryNode(name="f"))


def test_duplicate_children_of_pushed_directory_are_resolved(tree: FileTree) -> None:
    """Siblings inside a pushed directory follow the same duplicate-name policy."""
    tree.push([], DirectoryNode(name="d", children=[
        FileNode(name="a", content=b"1"),
        FileNode(name="a", content=b"22"),
    ]))

    directory = tree.lookup(["d"])
    assert isinstance(directory, DirectoryNode)
    assert len(directory.children) == 1
    assert tree.lookup(["d", "a"]) == FileNode(name="a", content=b"22")
    assert tree.display() == "/\nd [ a [2 B], ]"


def test_kind_clash_inside_pushed_directory_is_rejected(tree: FileTree) -> None:
    with pytest.raises(TreeInsertionError) as exc:
        tree.push(["new"], DirectoryNode(name="d", children=[
            FileNode(name="a"),
            DirectoryNode(name="a"),
        ]))

    assert exc.value.path == ["new", "d", "a"]
    assert tree.is_empty


def test_pushed_directory_is_copied(tree: FileTree) -> None:
    """The same directory pushed twice yields two independent entries."""
    shared = DirectoryNode(name="d")
    tree.push([], shared)
    tree.push(["x"], shared)
    tree.push(["x", "d"], FileNode(name="f", content=b"1"))

    assert tree.lookup(["d", "f"]) is None
    assert tree.lookup(["x", "d", "f"]) == FileNode(name="f", content=b"1")
    assert shared.children == []
    assert tree.display() == "/\nd [ ]\nx [ d [ f [1 B], ], ]"


def test_merge_does_not_mutate_caller_node(tree: FileTree) -> None:
    """Later pushes under a pushed directory never reach the caller's object."""
    incoming = DirectoryNode(name="d", children=[FileNode(name="b", content=b"b")])
    tree.push([], incoming)
    tree.push(["d"], FileNode(name="c", content=b"c"))
    tree.push([], DirectoryNode(name="d", children=[FileNode(name="e")]))

    assert [child.name for child in incoming.children] == ["b"]


def test_failed_merge_leaves_tree_unchanged(tree: FileTree) -> None:
    """A kind clash found mid-merge is reported before anything is modified."""
    tree.push(["d"], FileNode(name="a", content=b"old"))
    tree.push(["d", "sub"], FileNode(name="x", content=b"x"))
    before = tree.display()

    with pytest.raises(TreeInsertionError) as exc:
        tree.push([], DirectoryNode(name="d", children=[
            FileNode(name="a", content=b"new"),
            DirectoryNode(name="b", children=[FileNode(name="y")]),
            FileNode(name="sub"),
        ]))

    assert exc.value.path == ["d", "sub"]
    assert tree.display() == before
    assert tree.lookup(["d", "a"]) == FileNode(name="a", content=b"old")
    assert tree.lookup(["d", "b"]) is None


def test_lookup_misses(tree: FileTree) -> None:
    """Missing components and paths running through files return None."""
    tree.push(["a"], FileNode(name="b", content=b"1"))

    assert tree.lookup(["nope"]) is None
    assert tree.lookup(["a", "missing"]) is None
    assert tree.lookup(["a", "b", "deeper"]) is None
    assert tree.lookup([]) is tree.root


def test_lookup_on_empty_tree(tree: FileTree) -> None:
    assert tree.lookup(["anything"]) is None


def test_iter_files_is_depth_first(tree: FileTree) -> None:
    tree.push([], FileNode(name="top", content=b"t"))
    tree.push(["a", "b"], FileNode(name="deep", content=b"d"))
    tree.push(["a"], FileNode(name="mid", content=b"m"))

    paths = [path for path, _ in tree.iter_files()]
    assert paths == [["top"], ["a", "b", "deep"], ["a", "mid"]]


def test_custom_root_name() -> None:
    tree = FileTree(root_name="archive")
    tree.push([], FileNode(name="f", content=b""))
    assert tree.display() == "archive\nf [0 B]"
