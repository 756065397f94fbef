from __future__ import annotations

"""
Binary Header Codec.

Pure decoding of the archive's fixed-layout structures: the magic string,
the first-block pointer, block headers and file headers. Stream helpers
here only read; deciding where to read is left to the chain walker.
"""

import io
import struct
import sys
from typing import BinaryIO, List

from rdatree.domain.archive_models import BlockFlags, BlockHeader, FileHeader
from rdatree.domain.constants import (
    BLOCK_HEADER_SIZE,
    BLOCK_HEADER_STRUCT,
    FILE_HEADER_SIZE,
    FILE_HEADER_STRUCT,
    FIRST_BLOCK_POINTER_OFFSET,
    MAGIC,
    MAGIC_SIZE,
    PATH_SEPARATOR,
)
from rdatree.domain.errors import FormatError, IoFailure

_I64 = struct.Struct("<q")

# Largest size a bounded read or inflate can be asked for
_MAX_DECLARED_SIZE = sys.maxsize - 1

# -----------------------------------------------------------------------------
# STREAM ACCESS
# -----------------------------------------------------------------------------

def read_exact(stream: BinaryIO, offset: int, size: int) -> bytes:
    """
    Read exactly `size` bytes starting at absolute `offset`.

    Raises:
        IoFailure: On seek/read errors or a short read.
    """
    try:
        stream.seek(offset)
        data = stream.read(size)
    except OSError as e:
        raise IoFailure(f"Read of {size} bytes at {offset} failed: {e}") from e

    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise IoFailure(f"Short read at {offset}: expected {size} bytes, got {got}")
    return data


def stream_size(stream: BinaryIO) -> int:
    """Return the total length of a seekable stream."""
    try:
        current = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(current)
    except OSError as e:
        raise IoFailure(f"Stream is not seekable: {e}") from e
    return end


def verify_magic(stream: BinaryIO) -> None:
    """
    Compare the 18 bytes at the current position with the archive magic.

    Raises:
        FormatError: Mismatch or truncated input.
        IoFailure: The stream could not be read.
    """
    try:
        position = stream.tell()
        header = stream.read(MAGIC_SIZE)
    except OSError as e:
        raise IoFailure(f"Unable to read archive magic: {e}") from e

    if header != MAGIC:
        raise FormatError(f"Bad archive magic {header!r}", position)


def read_first_block_offset(stream: BinaryIO) -> int:
    """Read the i64 first-block pointer stored at byte 784."""
    data = read_exact(stream, FIRST_BLOCK_POINTER_OFFSET, _I64.size)
    return _I64.unpack(data)[0]

# -----------------------------------------------------------------------------
# RECORD DECODING
# -----------------------------------------------------------------------------

def decode_block_header(data: bytes, offset: int = 0) -> BlockHeader:
    """
    Decode the 32-byte block header found at stream position `offset`.

    Layout: flags u32, num_files u32, compressed_header_bytes i64,
    uncompressed_header_bytes i64, next_block_offset i64.
    """
    if len(data) != BLOCK_HEADER_SIZE:
        raise FormatError(f"Block header must be {BLOCK_HEADER_SIZE} bytes, got {len(data)}", offset)

    flags, num_files, compressed, uncompressed, next_offset = BLOCK_HEADER_STRUCT.unpack(data)
    if compressed < 0 or uncompressed < 0:
        raise FormatError("Negative header section size in block header", offset)
    if max(compressed, uncompressed) > _MAX_DECLARED_SIZE:
        raise FormatError("Implausible header section size in block header", offset)

    return BlockHeader(
        flags=BlockFlags.from_bits_truncate(flags),
        offset=offset,
        num_files=num_files,
        compressed_header_bytes=compressed,
        uncompressed_header_bytes=uncompressed,
        next_block_offset=next_offset,
    )


def decode_file_header(data: bytes, position: int = 0) -> FileHeader:
    """
    Decode one 560-byte file header.

    Args:
        data: Exactly FILE_HEADER_SIZE bytes.
        position: Diagnostic position reported on errors.
    """
    if len(data) != FILE_HEADER_SIZE:
        raise FormatError(f"File header must be {FILE_HEADER_SIZE} bytes, got {len(data)}", position)

    raw_path, offset, compressed, uncompressed, timestamp, flags = FILE_HEADER_STRUCT.unpack(data)
    if offset < 0 or compressed < 0 or uncompressed < 0:
        raise FormatError("Negative offset or size in file header", position)
    if max(offset, compressed, uncompressed) > _MAX_DECLARED_SIZE:
        raise FormatError("Implausible offset or size in file header", position)

    return FileHeader(
        relative_path=_decode_path(raw_path, position),
        content_offset=offset,
        compressed_size=compressed,
        uncompressed_size=uncompressed,
        timestamp=timestamp,
        flags=BlockFlags.from_bits_truncate(flags),
    )


def decode_file_headers(section: bytes, num_files: int, position: int = 0) -> List[FileHeader]:
    """
    Split a decoded header section into `num_files` file headers.

    The section length must match the record count exactly.
    """
    expected = num_files * FILE_HEADER_SIZE
    if len(section) != expected:
        raise FormatError(
            f"Header section holds {len(section)} bytes, {num_files} file headers need {expected}",
            position,
        )

    headers: List[FileHeader] = []
    for index in range(num_files):
        start = index * FILE_HEADER_SIZE
        headers.append(decode_file_header(section[start:start + FILE_HEADER_SIZE], position))
    return headers

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _decode_path(raw: bytes, position: int) -> List[str]:
    """Decode the NUL padded UTF-16LE path field into components."""
    try:
        text = raw.decode("utf-16-le")
    except UnicodeDecodeError as e:
        raise FormatError(f"File path is not valid UTF-16: {e}", position) from e

    text = text.split("\x00", 1)[0].replace("\\", PATH_SEPARATOR)
    components = [part for part in text.split(PATH_SEPARATOR) if part]
    if not components:
        raise FormatError("File header has an empty path", position)
    return components
