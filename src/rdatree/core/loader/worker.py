from __future__ import annotations

"""
Atomic Payload Decode Worker.

Encapsulates the decoding of a single file payload so it can run inside a
ThreadPoolExecutor. Tasks carry only the bytes and flags they need; the
file headers they were planned from are discarded by the walker.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from rdatree.core.codec.payload_decoder import PayloadDecoder
from rdatree.domain.archive_models import BlockFlags
from rdatree.domain.constants import PATH_SEPARATOR
from rdatree.domain.tree_models import FileNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeTask:
    """
    One planned payload decode.

    Attributes:
        parent: Directory components the decoded file is inserted under.
        name: File name.
        raw: Payload bytes as stored in the archive.
        flags: Effective flags (block defaults resolved).
        expected_size: Declared decoded size.
    """
    parent: Tuple[str, ...]
    name: str
    raw: bytes
    flags: BlockFlags
    expected_size: int

    @property
    def rel_path(self) -> str:
        return PATH_SEPARATOR.join(self.parent + (self.name,))


def decode_file_task(task: DecodeTask, decoder: PayloadDecoder) -> FileNode:
    """
    Decode a planned payload into a FileNode.

    Errors from the decoder propagate to whoever collects the result.

    Args:
        task: Planned decode.
        decoder: Shared decode pipeline.

    Returns:
        FileNode: The decoded file, named after the task.
    """
    content = decoder.decode(
        task.raw,
        task.flags,
        task.expected_size,
        what=f"payload of '{task.rel_path}'",
    )
    logger.debug(f"Decoded {task.rel_path}: {len(task.raw)} -> {len(content)} bytes")
    return FileNode(name=task.name, content=content)
