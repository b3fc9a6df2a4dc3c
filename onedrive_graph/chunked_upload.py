"""
Chunked Upload - upload session byte-range sequencing

Large files go through a Graph upload session: one POST creates the session,
then the file is PUT in contiguous byte ranges against the session URL.

    Start ─▶ ChunkReady ─▶ Transferring ─▶ ChunkReady ...
                  │
                  ├──▶ FinalChunk ─▶ Done
                  └──▶ Fatal (contract violation / transfer failure)

Classes:
    - UploadProgress: byte counters owned by one sequencer
    - ChunkPlan: one planned range transfer
    - ChunkSequencer: drives the transfer loop to completion
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Union,
    TYPE_CHECKING,
)

from .onedrive_errors import (
    ChunkAlignmentError,
    FragmentSizeError,
    IncompleteUploadError,
)

if TYPE_CHECKING:
    from .upload_types import UploadSession

logger = logging.getLogger(__name__)

UPLOAD_ALIGNMENT = 320 * 1024  # 320 KiB
# Largest aligned fragment below the 60 MiB per-request limit
MAX_FRAGMENT_SIZE = 191 * UPLOAD_ALIGNMENT
DEFAULT_CHUNK_SIZE = 10 * UPLOAD_ALIGNMENT  # 3.2 MiB

BlockSource = Union[Iterable[bytes], AsyncIterable[bytes]]

# (upload_url, data, start_byte, end_byte, file_size) -> response body
RangeTransfer = Callable[[str, bytes, int, int, int], Awaitable[Dict[str, Any]]]


class SequencerState(str, Enum):
    START = "start"
    CHUNK_READY = "chunk_ready"
    TRANSFERRING = "transferring"
    FINAL_CHUNK = "final_chunk"
    DONE = "done"
    FATAL = "fatal"


@dataclass
class UploadProgress:
    """Byte counters for one upload; end_byte is -1 until a chunk lands."""
    file_size: int
    start_byte: int = 0
    end_byte: int = -1
    remaining_bytes: int = field(init=False)

    def __post_init__(self):
        self.remaining_bytes = self.file_size - self.start_byte

    @property
    def transferred_bytes(self) -> int:
        return self.start_byte

    @property
    def percent(self) -> float:
        if self.file_size == 0:
            return 100.0
        return self.start_byte / self.file_size * 100

    def advance(self, length: int):
        self.end_byte = self.start_byte + length - 1
        self.start_byte += length
        self.remaining_bytes -= length


@dataclass(frozen=True)
class ChunkPlan:
    start_byte: int
    end_byte: int
    data: bytes
    is_final: bool

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def content_range(self) -> str:
        return f"{self.start_byte}-{self.end_byte}"


def plan_chunk(progress: UploadProgress, block: bytes, max_fragment_size: int = MAX_FRAGMENT_SIZE) -> ChunkPlan:
    """
    Compute the byte range the next block occupies

    Args:
        progress: current counters (not modified)
        block: next block from the caller
        max_fragment_size: per-request upper bound

    Returns:
        ChunkPlan; a block longer than the remaining bytes is truncated and final

    Raises:
        FragmentSizeError: block exceeds max_fragment_size
    """
    if len(block) > max_fragment_size:
        raise FragmentSizeError(len(block), max_fragment_size, progress.start_byte)

    remaining = progress.remaining_bytes
    if remaining < len(block):
        data = bytes(block[:remaining])
        is_final = True
    else:
        data = bytes(block)
        is_final = remaining == len(block)

    start = progress.start_byte
    return ChunkPlan(start_byte=start, end_byte=start + len(data) - 1, data=data, is_final=is_final)


async def _iterate_blocks(blocks: BlockSource) -> AsyncIterator[bytes]:
    if hasattr(blocks, "__aiter__"):
        async for block in blocks:
            yield block
    else:
        for block in blocks:
            yield block


def iter_bytes_blocks(content: bytes, block_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Split in-memory content into block_size pieces"""
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    view = memoryview(content)
    for offset in range(0, len(content), block_size):
        yield bytes(view[offset:offset + block_size])


def iter_file_blocks(path: Union[str, "os.PathLike[str]"], block_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Read a local file lazily in block_size pieces"""
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    with open(path, "rb") as f:
        while True:
            block = f.read(block_size)
            if not block:
                break
            yield block


class ChunkSequencer:
    """
    Sequential byte-range upload loop for one upload session

    Transfers are strictly one at a time: transfer N+1 is only issued after
    transfer N returned. Nothing is retried and a failed session is not
    cleaned up; the caller restarts the whole upload.
    """

    def __init__(
        self,
        transfer: RangeTransfer,
        file_size: int,
        max_fragment_size: int = MAX_FRAGMENT_SIZE,
        enforce_alignment: bool = False,
        alignment: int = UPLOAD_ALIGNMENT,
        on_progress: Optional[Callable[[UploadProgress], Any]] = None,
    ):
        """
        Args:
            transfer: coroutine performing one range PUT
            file_size: declared total size in bytes
            max_fragment_size: blocks above this abort the upload
            enforce_alignment: raise instead of warn for misaligned non-final chunks
            alignment: alignment unit for non-final chunks
            on_progress: called with the counters after every completed chunk
        """
        if file_size < 0:
            raise ValueError("file_size must not be negative")
        self._transfer = transfer
        self.file_size = file_size
        self.max_fragment_size = max_fragment_size
        self.enforce_alignment = enforce_alignment
        self.alignment = alignment
        self.on_progress = on_progress

        self.state = SequencerState.START
        self.progress = UploadProgress(file_size=file_size)
        self.transferred_ranges: List[Tuple[int, int]] = []

    def _check_alignment(self, chunk: ChunkPlan):
        if chunk.is_final or chunk.length % self.alignment == 0:
            return
        if self.enforce_alignment:
            raise ChunkAlignmentError(chunk.length, self.alignment, chunk.start_byte)
        logger.warning(
            f"Chunk {chunk.content_range} ({chunk.length} bytes) is not a multiple of "
            f"{self.alignment} bytes; the service may reject it"
        )

    async def run(self, upload_session: "UploadSession", blocks: BlockSource) -> Dict[str, Any]:
        """
        Upload every block to the session

        Args:
            upload_session: session returned by the initiator
            blocks: lazy block sequence (sync or async iterable)

        Returns:
            response body of the final chunk (the created/updated item)

        Raises:
            CallerContractViolation: oversized/misaligned block, or too few bytes supplied
            ChunkTransferError: a range transfer failed
        """
        if self.state is not SequencerState.START:
            raise RuntimeError("ChunkSequencer instances are single-use")
        if self.file_size == 0:
            self.state = SequencerState.FATAL
            raise IncompleteUploadError(0, 0)

        upload_url = upload_session.upload_url
        self.state = SequencerState.CHUNK_READY

        try:
            return await self._run_blocks(upload_url, blocks)
        except BaseException:
            self.state = SequencerState.FATAL
            raise

    async def _run_blocks(self, upload_url: str, blocks: BlockSource) -> Dict[str, Any]:
        async for block in _iterate_blocks(blocks):
            if not block:
                logger.debug("Skipping empty block")
                continue

            chunk = plan_chunk(self.progress, block, self.max_fragment_size)
            self._check_alignment(chunk)

            if chunk.length < len(block):
                logger.warning(
                    f"Final block truncated from {len(block)} to {chunk.length} bytes "
                    f"to match declared size {self.file_size}"
                )
            self.state = SequencerState.FINAL_CHUNK if chunk.is_final else SequencerState.TRANSFERRING

            body = await self._transfer(
                upload_url, chunk.data, chunk.start_byte, chunk.end_byte, self.file_size
            )

            self.progress.advance(chunk.length)
            self.transferred_ranges.append((chunk.start_byte, chunk.end_byte))
            logger.debug(
                f"Chunk bytes {chunk.content_range}/{self.file_size} uploaded "
                f"({self.progress.percent:.1f}%)"
            )
            if self.on_progress:
                self.on_progress(self.progress)

            if chunk.is_final:
                self.state = SequencerState.DONE
                return body

            self.state = SequencerState.CHUNK_READY

        raise IncompleteUploadError(self.progress.transferred_bytes, self.file_size)
