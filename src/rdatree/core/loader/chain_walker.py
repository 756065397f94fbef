from __future__ import annotations

"""
Block Chain Walker.

Drives a complete archive traversal as an explicit state machine:

    START -> VERIFYING_MAGIC -> LOCATING_FIRST_BLOCK -> PROCESSING_BLOCK (loop)
          -> DONE | FAILED

Block discovery is sequential because every block's position comes from
the previous header. Payload decoding is handed to a thread pool as soon as
the bytes are read; the walker thread alone inserts the results, in header
order, once the chain has ended.
"""

import enum
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, BinaryIO, Dict, List, Optional, Set, Tuple, Union

from rdatree.core.codec.header_codec import (
    decode_block_header,
    decode_file_headers,
    read_exact,
    read_first_block_offset,
    stream_size,
    verify_magic,
)
from rdatree.core.codec.payload_decoder import PayloadDecoder
from rdatree.core.loader.worker import DecodeTask, decode_file_task
from rdatree.core.tree.file_tree import FileTree
from rdatree.domain.archive_models import BlockFlags, BlockHeader, FileHeader
from rdatree.domain.config import get_default_config
from rdatree.domain.constants import BLOCK_HEADER_SIZE, END_OF_CHAIN, PREAMBLE_SIZE
from rdatree.domain.errors import ArchiveError, ChainIntegrityError, FormatError, IoFailure
from rdatree.domain.tree_models import FileNode

logger = logging.getLogger(__name__)

_Pending = List[Tuple[DecodeTask, Union["Future[FileNode]", FileNode]]]


class WalkerState(enum.Enum):
    START = "start"
    VERIFYING_MAGIC = "verifying_magic"
    LOCATING_FIRST_BLOCK = "locating_first_block"
    PROCESSING_BLOCK = "processing_block"
    DONE = "done"
    FAILED = "failed"


class ChainWalker:
    """
    Single-use traversal of one archive stream.

    Attributes:
        state: Current WalkerState.
        error: The ArchiveError that moved the walker to FAILED.
        tree: Tree being populated.
        stats: Counters describing the traversal.
    """

    def __init__(self, stream: BinaryIO, config: Optional[Dict[str, Any]] = None) -> None:
        cfg = config if config is not None else get_default_config()

        self._stream = stream
        self._decoder = PayloadDecoder(cfg["encryption_seed"])
        self._max_workers = cfg["max_workers"]
        self._strict_chain = cfg["strict_chain"]
        self._visited: Set[int] = set()
        self._size = 0

        self.state = WalkerState.START
        self.error: Optional[ArchiveError] = None
        self.tree = FileTree(cfg["root_name"])
        self.stats: Dict[str, int] = {
            "blocks_visited": 0,
            "blocks_deleted": 0,
            "files_inserted": 0,
            "files_deleted": 0,
            "bytes_decoded": 0,
        }

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def run(self) -> FileTree:
        """
        Walk the whole chain and return the populated tree.

        Raises:
            ArchiveError: Any failure; the walker is left in FAILED.
            RuntimeError: The walker was already used.
        """
        if self.state is not WalkerState.START:
            raise RuntimeError("ChainWalker instances are single-use")

        executor = self._create_executor()
        try:
            self._size = stream_size(self._stream)
            self._rewind()

            self.state = WalkerState.VERIFYING_MAGIC
            verify_magic(self._stream)

            self.state = WalkerState.LOCATING_FIRST_BLOCK
            next_offset = self._first_offset(read_first_block_offset(self._stream))

            pending: _Pending = []
            while next_offset is not None:
                self.state = WalkerState.PROCESSING_BLOCK
                block = self._process_block(next_offset, executor, pending)
                next_offset = self._next_offset(block)

            self._insert_results(pending)

        except ArchiveError as e:
            self.state = WalkerState.FAILED
            self.error = e
            raise
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        self.state = WalkerState.DONE
        return self.tree

    # -------------------------------------------------------------------------
    # CHAIN NAVIGATION
    # -------------------------------------------------------------------------

    def _first_offset(self, offset: int) -> Optional[int]:
        """Validate the pointer stored in the preamble."""
        if offset == END_OF_CHAIN or offset == self._size:
            logger.info("Archive contains no blocks")
            return None
        if not self._is_valid_block_offset(offset):
            raise ChainIntegrityError("First block offset lies outside the archive", offset)
        return offset

    def _next_offset(self, block: BlockHeader) -> Optional[int]:
        """Decide whether the walk continues after `block`."""
        candidate = block.next_block_offset
        if candidate == END_OF_CHAIN or candidate == self._size:
            return None
        if candidate in self._visited:
            return self._chain_anomaly("Block chain loops back to a visited block", candidate)
        if not self._is_valid_block_offset(candidate):
            return self._chain_anomaly("Next block offset lies outside the archive", candidate)
        return candidate

    def _chain_anomaly(self, message: str, offset: int) -> None:
        if self._strict_chain:
            raise ChainIntegrityError(message, offset)
        logger.warning(f"{message} (offset {offset}); ending traversal")
        return None

    def _is_valid_block_offset(self, offset: int) -> bool:
        return PREAMBLE_SIZE <= offset and offset + BLOCK_HEADER_SIZE <= self._size

    # -------------------------------------------------------------------------
    # BLOCK PROCESSING
    # -------------------------------------------------------------------------

    def _process_block(
            self,
            offset: int,
            executor: Optional[ThreadPoolExecutor],
            pending: _Pending,
    ) -> BlockHeader:
        """Decode one block and queue the decoding of its live files."""
        self._visited.add(offset)
        block = decode_block_header(read_exact(self._stream, offset, BLOCK_HEADER_SIZE), offset)
        self.stats["blocks_visited"] += 1
        logger.debug(
            f"Block at {offset}: flags={block.flags!r} files={block.num_files} "
            f"next={block.next_block_offset}"
        )

        if block.flags & BlockFlags.IS_DELETED:
            self.stats["blocks_deleted"] += 1
            logger.debug(f"Skipping deleted block at {offset}")
            return block
        if block.num_files == 0:
            return block

        headers = self._read_file_headers(block)
        data_section = None
        if block.flags & BlockFlags.HAS_CONTIGUOUS_DATA_SECTION:
            data_section = self._read_data_section(block, headers)

        for header in headers:
            flags = header.effective_flags(block.flags)
            if flags & BlockFlags.IS_DELETED:
                self.stats["files_deleted"] += 1
                logger.debug(f"Skipping deleted entry: {'/'.join(header.relative_path)}")
                continue

            task = DecodeTask(
                parent=tuple(header.parent),
                name=header.name,
                raw=self._read_payload(block, header, data_section),
                flags=flags,
                expected_size=header.uncompressed_size,
            )
            if executor is None:
                pending.append((task, decode_file_task(task, self._decoder)))
            else:
                pending.append((task, executor.submit(decode_file_task, task, self._decoder)))

        return block

    def _read_file_headers(self, block: BlockHeader) -> List[FileHeader]:
        """Read, decode and split the block's header section."""
        position = block.header_section_offset
        if block.data_section_offset > self._size:
            raise FormatError("Header section extends past the end of the archive", block.offset)
        if (not block.flags & BlockFlags.IS_COMPRESSED
                and block.compressed_header_bytes != block.uncompressed_header_bytes):
            raise FormatError("Uncompressed header section declares two different sizes", block.offset)

        raw = read_exact(self._stream, position, block.compressed_header_bytes)
        section = self._decoder.decode(
            raw,
            block.flags & (BlockFlags.IS_COMPRESSED | BlockFlags.IS_ENCRYPTED),
            block.uncompressed_header_bytes,
            what="header section",
        )
        return decode_file_headers(section, block.num_files, position)

    def _read_data_section(self, block: BlockHeader, headers: List[FileHeader]) -> bytes:
        """Read the contiguous payload region that follows the header section once."""
        start = block.data_section_offset
        length = 0
        for header in headers:
            if not header.effective_flags(block.flags) & BlockFlags.IS_DELETED:
                length = max(length, header.content_offset + header.compressed_size)

        if start + length > self._size:
            raise FormatError("Data section extends past the end of the archive", start)
        return read_exact(self._stream, start, length)

    def _read_payload(
            self,
            block: BlockHeader,
            header: FileHeader,
            data_section: Optional[bytes],
    ) -> bytes:
        """Fetch the raw bytes of one file according to the block layout."""
        start = header.content_offset
        end = start + header.compressed_size
        if data_section is not None:
            return data_section[start:end]

        if end > self._size:
            raise FormatError(
                f"Payload of '{'/'.join(header.relative_path)}' extends past the end of the archive",
                block.header_section_offset,
            )
        return read_exact(self._stream, start, header.compressed_size)

    # -------------------------------------------------------------------------
    # TREE ASSEMBLY
    # -------------------------------------------------------------------------

    def _insert_results(self, pending: _Pending) -> None:
        """Collect decoded files in header order and insert them."""
        for task, outcome in pending:
            node = outcome.result() if isinstance(outcome, Future) else outcome
            self.tree.push(task.parent, node)
            self.stats["files_inserted"] += 1
            self.stats["bytes_decoded"] += node.size

    def _rewind(self) -> None:
        try:
            self._stream.seek(0)
        except OSError as e:
            raise IoFailure(f"Unable to rewind archive stream: {e}") from e

    def _create_executor(self) -> Optional[ThreadPoolExecutor]:
        if self._max_workers <= 1:
            return None
        return ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="PayloadDecoder")
