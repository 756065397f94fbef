from __future__ import annotations

"""
File Tree Data Models.

Defines the three node variants held by a FileTree: decoded files,
directories with ordered children, and the Empty sentinel used for an
uninitialized root.
"""

from dataclasses import dataclass, field
from typing import List, Union

from rdatree.domain.constants import EMPTY_NODE_NAME

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileNode:
    """
    Leaf entry holding decoded content.

    Attributes:
        name: Entry name within its parent directory.
        content: Fully decoded file bytes.
    """
    name: str
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class DirectoryNode:
    """
    Directory entry. Children keep insertion order.

    Attributes:
        name: Entry name within its parent directory.
        children: Ordered child nodes.
    """
    name: str
    children: List["Node"] = field(default_factory=list)

    def find_child(self, name: str) -> int:
        """Return the index of the child called `name`, or -1."""
        for index, child in enumerate(self.children):
            if child.name == name:
                return index
        return -1


@dataclass(frozen=True)
class EmptyNode:
    """Placeholder root of a tree that has not received any content."""
    name: str = EMPTY_NODE_NAME


EMPTY = EmptyNode()

Node = Union[FileNode, DirectoryNode, EmptyNode]
