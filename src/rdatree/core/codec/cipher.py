from __future__ import annotations

"""
Archive Stream Cipher.

The archive obfuscates header sections and payloads by XOR-ing every
little-endian 16-bit word with the output of an MSVC rand() style linear
congruential generator. The keystream restarts from the seed for every
buffer, and a trailing odd byte is left as is. Applying the transform
twice returns the original bytes.
"""

import array
import sys

from rdatree.domain.constants import DEFAULT_ENCRYPTION_SEED, LCG_INCREMENT, LCG_MULTIPLIER


def apply_keystream(data: bytes, seed: int = DEFAULT_ENCRYPTION_SEED) -> bytes:
    """
    XOR `data` with the LCG keystream derived from `seed`.

    Args:
        data: Buffer to transform.
        seed: 32-bit generator seed.

    Returns:
        bytes: Transformed buffer of the same length.
    """
    word_count = len(data) // 2
    if word_count == 0:
        return bytes(data)

    words = array.array("H")
    words.frombytes(bytes(data[:word_count * 2]))
    if sys.byteorder == "big":
        words.byteswap()

    state = seed & 0xFFFFFFFF
    for i in range(word_count):
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) & 0xFFFFFFFF
        words[i] ^= (state >> 16) & 0x7FFF

    if sys.byteorder == "big":
        words.byteswap()
    return words.tobytes() + bytes(data[word_count * 2:])
