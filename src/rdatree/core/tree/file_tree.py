from __future__ import annotations

"""
Path-Indexed File Tree.

Holds decoded archive entries in a hierarchy addressable by sequences of
path components. The tree knows nothing about the archive format.

Duplicate names are resolved as follows: a file replaces an existing file
of the same name in place, a directory merges its children into an
existing directory, and any file/directory clash is rejected. The same
rules apply between the children of a pushed directory. Pushed directories
are copied into the tree, and a rejected push changes nothing.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from rdatree.core.tree.tree_renderer import render_tree_lines
from rdatree.domain.constants import DEFAULT_ROOT_NAME
from rdatree.domain.errors import TreeInsertionError
from rdatree.domain.tree_models import EMPTY, DirectoryNode, EmptyNode, FileNode, Node

logger = logging.getLogger(__name__)


class FileTree:
    """
    Owns exactly one root node.

    The root starts as the Empty sentinel and becomes a directory on the
    first insertion.
    """

    def __init__(self, root_name: str = DEFAULT_ROOT_NAME) -> None:
        self._root_name = root_name
        self.root: Node = EMPTY

    def __repr__(self) -> str:
        return f"FileTree(root={self.root!r})"

    @property
    def is_empty(self) -> bool:
        return isinstance(self.root, EmptyNode)

    # -------------------------------------------------------------------------
    # MUTATION
    # -------------------------------------------------------------------------

    def push(self, path: Sequence[str], node: Node) -> None:
        """
        Insert `node` under the directory identified by `path`.

        Missing directories along `path` are created. An empty `path`
        inserts at root level.

        Args:
            path: Parent directory components (non-empty strings).
            node: File or directory to insert; keeps its own name.

        Raises:
            TreeInsertionError: Empty node, invalid component, or a
                                non-directory along the path.
        """
        parent_path = list(path)
        _check_insertable(node, parent_path)
        prepared = _detached(node, parent_path + [node.name])

        parent = self._ensure_directory(parent_path)
        _insert_child(parent, prepared, parent_path)

    def _ensure_directory(self, path: Sequence[str]) -> DirectoryNode:
        """Walk `path` from the root, creating directories as needed."""
        for depth, component in enumerate(path, start=1):
            _check_name(component, path[:depth])

        if isinstance(self.root, EmptyNode):
            self.root = DirectoryNode(name=self._root_name)

        current = self.root
        if not isinstance(current, DirectoryNode):
            raise TreeInsertionError("Tree root is not a directory")

        walked: List[str] = []
        for component in path:
            walked.append(component)

            index = current.find_child(component)
            if index < 0:
                created = DirectoryNode(name=component)
                current.children.append(created)
                current = created
                continue

            child = current.children[index]
            if not isinstance(child, DirectoryNode):
                raise TreeInsertionError("Not a directory", walked)
            current = child

        return current

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def lookup(self, path: Sequence[str]) -> Optional[Node]:
        """
        Resolve a full path (parent components plus entry name).

        An empty path returns the root itself.

        Returns:
            Optional[Node]: The node, or None if any component is missing or
                            a non-directory is hit before the path ends.
        """
        current: Node = self.root
        for component in path:
            if not isinstance(current, DirectoryNode):
                return None
            index = current.find_child(component)
            if index < 0:
                return None
            current = current.children[index]
        return current

    def iter_files(self) -> Iterator[Tuple[List[str], FileNode]]:
        """Yield `(full_path, file_node)` pairs depth-first in listing order."""
        if isinstance(self.root, DirectoryNode):
            yield from _walk_files(self.root, [])

    def display(self) -> str:
        """Deterministic text rendering: root label, then one line per top-level entry."""
        return "\n".join(render_tree_lines(self.root))


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _check_name(name: str, path: Sequence[str]) -> None:
    if not isinstance(name, str) or not name:
        raise TreeInsertionError("Path components must be non-empty strings", path)


def _check_insertable(node: Node, parent_path: List[str]) -> None:
    """Reject Empty placeholders and unnamed entries anywhere in `node`."""
    if isinstance(node, EmptyNode):
        raise TreeInsertionError("The Empty placeholder cannot be inserted", parent_path)
    if not isinstance(node, (FileNode, DirectoryNode)):
        raise TypeError(f"Unknown node type: {type(node).__name__}")

    node_path = parent_path + [node.name]
    _check_name(node.name, node_path)
    if isinstance(node, DirectoryNode):
        for child in node.children:
            _check_insertable(child, node_path)


def _insert_child(parent: DirectoryNode, node: Node, parent_path: List[str]) -> None:
    """
    Add `node` to `parent`, applying the duplicate-name policy.

    Directories are copied, never stored by reference. A merge is built on
    a copy of the existing directory and swapped in only once it succeeded,
    so a kind clash leaves `parent` untouched.
    """
    target_path = parent_path + [node.name]
    index = parent.find_child(node.name)
    if index < 0:
        parent.children.append(_detached(node, target_path))
        return

    existing = parent.children[index]

    if isinstance(existing, FileNode) and isinstance(node, FileNode):
        logger.debug(f"Overwriting file: {'/'.join(target_path)}")
        parent.children[index] = node
        return

    if isinstance(existing, DirectoryNode) and isinstance(node, DirectoryNode):
        merged = _detached(existing, target_path)
        for child in node.children:
            _insert_child(merged, child, target_path)
        parent.children[index] = merged
        return

    raise TreeInsertionError("Name already used by an entry of another kind", target_path)


def _detached(node: Node, node_path: List[str]) -> Node:
    """Copy of `node` owned by the tree, with duplicate children resolved."""
    if not isinstance(node, DirectoryNode):
        return node
    copy = DirectoryNode(name=node.name)
    for child in node.children:
        _insert_child(copy, child, node_path)
    return copy


def _walk_files(directory: DirectoryNode, prefix: List[str]) -> Iterator[Tuple[List[str], FileNode]]:
    for child in directory.children:
        if isinstance(child, FileNode):
            yield prefix + [child.name], child
        elif isinstance(child, DirectoryNode):
            yield from _walk_files(child, prefix + [child.name])
