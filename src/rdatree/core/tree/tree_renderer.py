from __future__ import annotations

"""
Tree Renderer.

Converts FileTree nodes into their deterministic textual form. Directories
render as `name [ child, child, ]` and files as `name [<size>]`.
"""

from typing import List

from rdatree.domain.tree_models import DirectoryNode, EmptyNode, FileNode, Node

KIB = 1024
MIB = KIB * KIB
GIB = KIB * MIB

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def format_length(length: int) -> str:
    """
    Render a byte count with the largest unit it strictly exceeds.

    The comparison is strict, so exactly 1024 bytes stays "1024 B" and
    only 1025 bytes moves up to KIB.

    Args:
        length: Number of bytes.

    Returns:
        str: Human readable size, three decimals for scaled units.
    """
    if length > GIB:
        return f"{length / GIB:.3f} GIB"
    if length > MIB:
        return f"{length / MIB:.3f} MIB"
    if length > KIB:
        return f"{length / KIB:.3f} KIB"
    return f"{length} B"


def render_node(node: Node) -> str:
    """Render a single node and, for directories, all of its descendants."""
    if isinstance(node, FileNode):
        return f"{node.name} [{format_length(node.size)}]"

    if isinstance(node, DirectoryNode):
        parts = [f"{node.name} [ "]
        for child in node.children:
            parts.append(render_node(child))
            parts.append(", ")
        parts.append("]")
        return "".join(parts)

    if isinstance(node, EmptyNode):
        return node.name

    raise TypeError(f"Unknown node type: {type(node).__name__}")


def render_tree_lines(root: Node) -> List[str]:
    """
    Produce the display lines for a tree root.

    The first line is the root label; each top-level entry follows on its
    own line.
    """
    if isinstance(root, DirectoryNode):
        lines = [root.name]
        lines.extend(render_node(child) for child in root.children)
        return lines
    return [render_node(root)]
