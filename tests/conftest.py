from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory archive builder used to craft block chains for tests.
3. Logging reset helpers for tests that configure the root logger.
"""

import logging
import os
import struct
import sys
import zlib
from logging.handlers import QueueListener
from typing import Any, Dict, List, Optional, Sequence

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from rdatree.core.codec.cipher import apply_keystream  # noqa: E402
from rdatree.domain.archive_models import BlockFlags  # noqa: E402
from rdatree.domain.constants import (  # noqa: E402
    BLOCK_HEADER_STRUCT,
    DEFAULT_ENCRYPTION_SEED,
    FILE_HEADER_STRUCT,
    FILE_PATH_FIELD_SIZE,
    FIRST_BLOCK_POINTER_OFFSET,
    MAGIC,
)


# -----------------------------------------------------------------------------
# Archive Builder (test-only writer)
# -----------------------------------------------------------------------------
class ArchiveBuilder:
    """
    Assemble archive bytes block by block.

    File entries are `(path, content)` or `(path, content, flags)` tuples, or
    dicts with the keys `path`, `content`, `flags`, plus `stored` (raw bytes
    written instead of the encoded content) and `declared_size` (overrides
    the uncompressed size in the header).
    """

    def __init__(self, seed: int = DEFAULT_ENCRYPTION_SEED) -> None:
        self.seed = seed
        self.blocks: List[Dict[str, Any]] = []
        self.block_offsets: List[int] = []

    def add_block(
            self,
            files: Sequence[Any],
            flags: int = 0,
            next_to: Optional[int] = None,
            next_offset: Optional[int] = None,
    ) -> int:
        self.blocks.append({
            "files": [_normalize_entry(f) for f in files],
            "flags": int(flags),
            "next_to": next_to,
            "next_offset": next_offset,
        })
        return len(self.blocks) - 1

    def build(self, first_offset: Optional[int] = None) -> bytes:
        out = bytearray(MAGIC.ljust(FIRST_BLOCK_POINTER_OFFSET, b"\x00"))
        out += struct.pack("<q", 0)

        self.block_offsets = [self._append_block(out, block) for block in self.blocks]
        end = len(out)

        for index, block in enumerate(self.blocks):
            if block["next_offset"] is not None:
                target = block["next_offset"]
            elif block["next_to"] is not None:
                target = self.block_offsets[block["next_to"]]
            elif index + 1 < len(self.blocks):
                target = self.block_offsets[index + 1]
            else:
                target = end
            struct.pack_into("<q", out, self.block_offsets[index] + 24, target)

        if first_offset is None:
            first_offset = self.block_offsets[0] if self.blocks else end
        struct.pack_into("<q", out, FIRST_BLOCK_POINTER_OFFSET, first_offset)
        return bytes(out)

    def _encode(self, data: bytes, flags: int) -> bytes:
        if flags & BlockFlags.IS_COMPRESSED:
            data = zlib.compress(data)
        if flags & BlockFlags.IS_ENCRYPTED:
            data = apply_keystream(data, self.seed)
        return data

    def _append_block(self, out: bytearray, block: Dict[str, Any]) -> int:
        block_flags = block["flags"]
        contiguous = bool(block_flags & BlockFlags.HAS_CONTIGUOUS_DATA_SECTION)

        stored: List[bytes] = []
        for entry in block["files"]:
            if entry["stored"] is not None:
                stored.append(entry["stored"])
                continue
            if entry["flags"] & BlockFlags.OVERRIDES_BLOCK:
                effective = entry["flags"]
            else:
                effective = block_flags | entry["flags"]
            stored.append(self._encode(entry["content"], effective))

        offsets: List[int] = []
        position = 0
        for payload in stored:
            if contiguous:
                offsets.append(position)
                position += len(payload)
            else:
                offsets.append(len(out))
                out += payload

        section = b"".join(
            FILE_HEADER_STRUCT.pack(
                entry["path"].encode("utf-16-le").ljust(FILE_PATH_FIELD_SIZE, b"\x00"),
                offset,
                len(payload),
                entry["declared_size"] if entry["declared_size"] is not None else len(entry["content"]),
                entry["timestamp"],
                entry["flags"],
            )
            for entry, offset, payload in zip(block["files"], offsets, stored)
        )
        raw_size = len(section)
        section = self._encode(section, block_flags & (BlockFlags.IS_COMPRESSED | BlockFlags.IS_ENCRYPTED))

        block_offset = len(out)
        out += BLOCK_HEADER_STRUCT.pack(block_flags, len(block["files"]), len(section), raw_size, 0)
        out += section
        if contiguous:
            out += b"".join(stored)
        return block_offset


def _normalize_entry(entry: Any) -> Dict[str, Any]:
    if isinstance(entry, dict):
        normalized = dict(entry)
    else:
        path, content, *rest = entry
        normalized = {"path": path, "content": content, "flags": rest[0] if rest else 0}
    normalized.setdefault("content", b"")
    normalized.setdefault("flags", 0)
    normalized.setdefault("stored", None)
    normalized.setdefault("declared_size", None)
    normalized.setdefault("timestamp", 1_700_000_000)
    normalized["flags"] = int(normalized["flags"])
    return normalized


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def archive_builder() -> ArchiveBuilder:
    """Return a fresh archive builder using the default cipher seed."""
    return ArchiveBuilder()


@pytest.fixture
def sample_archive_bytes(archive_builder: ArchiveBuilder) -> bytes:
    """
    A small two-block archive.

    Block 0 (plain):      readme.txt, data/config.xml
    Block 1 (zlib + XOR): data/gfx/icon.dds, data/old.bin (deleted)
    """
    archive_builder.add_block([
        ("readme.txt", b"hello, world"),
        ("data/config.xml", b"<config/>"),
    ])
    archive_builder.add_block(
        [
            ("data/gfx/icon.dds", b"\x00\x01" * 700),
            ("data/old.bin", b"gone", BlockFlags.IS_DELETED),
        ],
        flags=BlockFlags.IS_COMPRESSED | BlockFlags.IS_ENCRYPTED,
    )
    return archive_builder.build()


@pytest.fixture
def sample_archive_path(tmp_path, sample_archive_bytes: bytes) -> str:
    """Write the sample archive to disk and return its path."""
    path = tmp_path / "sample.rda"
    path.write_bytes(sample_archive_bytes)
    return str(path)


@pytest.fixture
def reset_logging():
    """Remove root logger handlers and listeners before and after a test."""
    from rdatree.infra.logging import _QUEUE_LISTENER_ATTR

    def _reset() -> None:
        root = logging.getLogger()
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if listener and isinstance(listener, QueueListener):
            if getattr(listener, "_thread", None) is not None:
                listener.stop()
            setattr(root, _QUEUE_LISTENER_ATTR, None)
        for h in list(root.handlers):
            if getattr(h, "_rdatree_handler", False):
                root.removeHandler(h)
                h.close()
        if hasattr(root, "_rdatree_configured"):
            delattr(root, "_rdatree_configured")

    _reset()
    yield
    _reset()
