from __future__ import annotations

"""
Load Result Domain Models.

Defines the result object used to report a complete archive load to the
interface layer, plus factory functions for the success and error cases.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from rdatree.core.tree.file_tree import FileTree

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LoadResult:
    """
    Unified result of one archive load.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        error_kind: Exception class name of the failure, empty on success.
        archive_path: Path of the archive that was loaded.
        tree: The populated tree (None on failure; partial trees are dropped).
        summary: Traversal statistics (blocks, files, tombstones, bytes).
    """
    ok: bool
    error: str
    archive_path: str
    error_kind: str = ""
    tree: Optional[FileTree] = None
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view without the tree payload."""
        return {
            "ok": self.ok,
            "error": self.error,
            "error_kind": self.error_kind,
            "archive_path": self.archive_path,
            "summary": dict(self.summary),
        }

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_success_result(
        archive_path: str,
        tree: FileTree,
        summary: Dict[str, Any],
) -> LoadResult:
    """Build a successful LoadResult."""
    return LoadResult(
        ok=True,
        error="",
        archive_path=archive_path,
        tree=tree,
        summary=dict(summary),
    )


def create_error_result(
        archive_path: str,
        error: BaseException,
        summary: Optional[Dict[str, Any]] = None,
) -> LoadResult:
    """Build a failed LoadResult from the exception that aborted the load."""
    return LoadResult(
        ok=False,
        error=str(error),
        error_kind=type(error).__name__,
        archive_path=archive_path,
        summary=dict(summary or {}),
    )
