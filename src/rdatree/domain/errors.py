from __future__ import annotations

"""
Archive Loading Error Hierarchy.

Every failure raised while loading an archive derives from ArchiveError,
so callers can abort a load with a single except clause while still
inspecting the specific kind and its diagnostic payload.
"""

from typing import Optional, Sequence


class ArchiveError(Exception):
    """Base class for all archive loading failures."""


class IoFailure(ArchiveError):
    """An underlying read or seek failed, or returned fewer bytes than required."""


class FormatError(ArchiveError):
    """
    Structurally invalid archive data.

    Attributes:
        position: Byte position in the stream where the problem was detected.
    """

    def __init__(self, message: str, position: int = 0) -> None:
        super().__init__(f"{message} (at byte {position})")
        self.position = position


class ChainIntegrityError(ArchiveError):
    """
    The block chain points outside the stream or loops back on itself.

    Attributes:
        offset: The offending block offset.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (offset {offset})")
        self.offset = offset


class DecodeError(ArchiveError):
    """Decompression or decryption of a payload failed."""


class SizeMismatch(DecodeError):
    """Decoded length differs from the size declared in the header."""

    def __init__(self, expected: int, actual: int, what: str = "payload") -> None:
        super().__init__(f"Decoded {what} is {actual} bytes, header declares {expected}")
        self.expected = expected
        self.actual = actual


class TreeInsertionError(ArchiveError):
    """
    A node could not be placed in the file tree.

    Attributes:
        path: Components of the path that was being resolved.
    """

    def __init__(self, message: str, path: Optional[Sequence[str]] = None) -> None:
        self.path = list(path or [])
        where = "/".join(self.path)
        super().__init__(f"{message}: '{where}'" if where else message)
