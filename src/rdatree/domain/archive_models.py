from __future__ import annotations

"""
Archive Header Data Models.

Transient records decoded from the block chain. They live only for the
duration of one block's processing and are never stored in the tree.
"""

import enum
from dataclasses import dataclass
from typing import List

from rdatree.domain.constants import BLOCK_HEADER_SIZE


class BlockFlags(enum.IntFlag):
    """Per-block (and per-file) processing flags."""
    NONE = 0
    IS_COMPRESSED = 1
    IS_ENCRYPTED = 2
    HAS_CONTIGUOUS_DATA_SECTION = 4
    IS_DELETED = 8
    # File headers only: own bits replace the block defaults
    OVERRIDES_BLOCK = 0x8000_0000

    @classmethod
    def from_bits_truncate(cls, value: int) -> "BlockFlags":
        """Build flags from a raw integer, silently dropping unknown bits."""
        known = 0
        for member in cls:
            known |= member.value
        return cls(value & known)


PAYLOAD_FLAGS = BlockFlags.IS_COMPRESSED | BlockFlags.IS_ENCRYPTED | BlockFlags.IS_DELETED


@dataclass(frozen=True)
class BlockHeader:
    """
    Fixed 32-byte header found at the start of every block.

    Attributes:
        flags: Block-level default flags.
        offset: Stream position of this block (informational).
        num_files: Number of file headers in the header section.
        compressed_header_bytes: On-disk size of the header section.
        uncompressed_header_bytes: Size of the header section once decoded.
        next_block_offset: Chain pointer to the following block.
    """
    flags: BlockFlags
    offset: int
    num_files: int
    compressed_header_bytes: int
    uncompressed_header_bytes: int
    next_block_offset: int

    @property
    def header_section_offset(self) -> int:
        return self.offset + BLOCK_HEADER_SIZE

    @property
    def data_section_offset(self) -> int:
        return self.header_section_offset + self.compressed_header_bytes


@dataclass(frozen=True)
class FileHeader:
    """
    Per-file record decoded from a block's header section.

    Attributes:
        relative_path: Path components, the last one being the file name.
        content_offset: Payload position (absolute, or relative to the
                        contiguous data section).
        compressed_size: On-disk payload size.
        uncompressed_size: Payload size after decoding.
        timestamp: Modification time in Unix seconds.
        flags: The file's own flags, before block inheritance.
    """
    relative_path: List[str]
    content_offset: int
    compressed_size: int
    uncompressed_size: int
    timestamp: int
    flags: BlockFlags

    @property
    def name(self) -> str:
        return self.relative_path[-1]

    @property
    def parent(self) -> List[str]:
        return self.relative_path[:-1]

    def effective_flags(self, block_flags: BlockFlags) -> BlockFlags:
        """Resolve the flags that drive this file's decoding."""
        if self.flags & BlockFlags.OVERRIDES_BLOCK:
            return self.flags & PAYLOAD_FLAGS
        return (block_flags | self.flags) & PAYLOAD_FLAGS
