from __future__ import annotations

"""
Archive Format Constants.

Centralizes the fixed offsets, record sizes and struct layouts of the
resource archive (RDA V2.2) container. All integers are little-endian.
"""

import struct

MAGIC = b"Resource File V2.2"
MAGIC_SIZE = len(MAGIC)

# Absolute position of the i64 pointer to the first block
FIRST_BLOCK_POINTER_OFFSET = 784
PREAMBLE_SIZE = FIRST_BLOCK_POINTER_OFFSET + 8

BLOCK_HEADER_STRUCT = struct.Struct("<IIqqq")
BLOCK_HEADER_SIZE = BLOCK_HEADER_STRUCT.size  # 32

# path (UTF-16LE, 260 code units), offset, compressed, uncompressed, timestamp, flags
FILE_HEADER_STRUCT = struct.Struct("<520sqqqqI4x")
FILE_HEADER_SIZE = FILE_HEADER_STRUCT.size  # 560
FILE_PATH_FIELD_SIZE = 520
PATH_SEPARATOR = "/"

END_OF_CHAIN = 0

# MSVC rand() parameters used by the archive's XOR stream cipher
DEFAULT_ENCRYPTION_SEED = 0x71C71C71
LCG_MULTIPLIER = 214013
LCG_INCREMENT = 2531011

DEFAULT_ROOT_NAME = "/"
EMPTY_NODE_NAME = "EMPTY"
