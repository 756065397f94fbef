from __future__ import annotations

"""
Archive Loading Engine.

Top-level entry points. Validates the configuration, runs a ChainWalker
over a seekable byte source and returns the completed FileTree. Partial
trees are never handed out: any failure surfaces as an ArchiveError (or a
failed LoadResult).
"""

import logging
import os
from typing import Any, BinaryIO, Dict, Optional, Union

from rdatree.core.loader.chain_walker import ChainWalker
from rdatree.core.loader.validator import validate_config
from rdatree.core.tree.file_tree import FileTree
from rdatree.domain.errors import ArchiveError, IoFailure
from rdatree.domain.load_models import LoadResult, create_error_result, create_success_result

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def load_archive(stream: BinaryIO, config: Optional[Dict[str, Any]] = None) -> FileTree:
    """
    Load an archive from an open, seekable binary stream.

    Args:
        stream: Readable and seekable byte source.
        config: Optional loader configuration overrides.

    Returns:
        FileTree: Tree holding every live file of the archive.

    Raises:
        ArchiveError: Any I/O, format, chain, decode or insertion failure.
    """
    walker = ChainWalker(stream, _resolve_config(config))
    tree = walker.run()
    logger.info(
        f"Loaded {walker.stats['files_inserted']} files from "
        f"{walker.stats['blocks_visited']} blocks"
    )
    return tree


def read_archive(path: PathLike, config: Optional[Dict[str, Any]] = None) -> FileTree:
    """
    Open the archive at `path` and load it.

    Raises:
        IoFailure: The file cannot be opened.
        ArchiveError: Any load failure.
    """
    logger.info(f"Reading archive: {os.fspath(path)}")
    with _open_archive(path) as handle:
        return load_archive(handle, config)


def run_load(path: PathLike, config: Optional[Dict[str, Any]] = None) -> LoadResult:
    """
    Load the archive at `path` and report the outcome as a LoadResult.

    ArchiveError is converted into a failed result; other exceptions
    propagate.
    """
    archive_path = os.fspath(path)
    walker: Optional[ChainWalker] = None
    try:
        with _open_archive(path) as handle:
            walker = ChainWalker(handle, _resolve_config(config))
            tree = walker.run()
    except ArchiveError as e:
        logger.error(f"Failed to load '{archive_path}': {e}")
        return create_error_result(archive_path, e, walker.stats if walker else None)

    logger.info(f"Loaded {walker.stats['files_inserted']} files from '{archive_path}'")
    return create_success_result(archive_path, tree, walker.stats)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _resolve_config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    clean, warnings = validate_config(config if config is not None else {}, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")
    return clean


def _open_archive(path: PathLike) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as e:
        raise IoFailure(f"Cannot open archive '{os.fspath(path)}': {e}") from e
