from __future__ import annotations

"""
Payload Decoder.

Turns raw on-disk bytes into final content according to a file's
effective flags: the XOR cipher is reversed first, then zlib data is
inflated, and the result is checked against the declared size. Where the
bytes came from (interleaved or contiguous layout) is not its concern.
"""

import sys
import zlib
from typing import Optional

from rdatree.core.codec.cipher import apply_keystream
from rdatree.domain.archive_models import BlockFlags
from rdatree.domain.constants import DEFAULT_ENCRYPTION_SEED
from rdatree.domain.errors import DecodeError, SizeMismatch


class PayloadDecoder:
    """
    Stateless decode pipeline bound to one cipher seed.

    Safe to share between worker threads.
    """

    def __init__(self, encryption_seed: int = DEFAULT_ENCRYPTION_SEED) -> None:
        self.encryption_seed = encryption_seed

    def decode(
            self,
            raw: bytes,
            flags: BlockFlags,
            expected_size: Optional[int] = None,
            what: str = "payload",
    ) -> bytes:
        """
        Apply decryption and decompression as selected by `flags`.

        Args:
            raw: Bytes as stored in the archive.
            flags: Effective flags of the entry.
            expected_size: Declared decoded size; checked when given.
            what: Label used in error messages.

        Returns:
            bytes: Decoded content.

        Raises:
            DecodeError: Corrupt compressed data.
            SizeMismatch: Decoded length differs from `expected_size`.
        """
        data = raw
        if flags & BlockFlags.IS_ENCRYPTED:
            data = apply_keystream(data, self.encryption_seed)

        if flags & BlockFlags.IS_COMPRESSED:
            data = _inflate(data, expected_size, what)

        if expected_size is not None and len(data) != expected_size:
            raise SizeMismatch(expected_size, len(data), what)
        return data


def _inflate(data: bytes, expected_size: Optional[int], what: str) -> bytes:
    """Decompress a zlib stream, never producing more than one byte past the declared size."""
    inflater = zlib.decompressobj()
    try:
        if expected_size is None:
            out = inflater.decompress(data) + inflater.flush()
        else:
            out = inflater.decompress(data, min(expected_size + 1, sys.maxsize))
    except zlib.error as e:
        raise DecodeError(f"Corrupt compressed {what}: {e}") from e

    if expected_size is not None and len(out) > expected_size:
        # actual length is only known to exceed the declared one
        raise SizeMismatch(expected_size, len(out), what)
    if not inflater.eof:
        raise DecodeError(f"Truncated compressed {what}")
    return out
