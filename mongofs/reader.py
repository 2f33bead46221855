"""Chunked reader: a seekable byte stream over a stored file's chunks."""

import io

from common.logging_config import get_logger
from common.types import FileRecord
from mongofs.exceptions import CorruptFileError
from mongofs.repositories.chunk_repository import ChunkRepository

logger = get_logger(__name__)


class ChunkedReader(io.RawIOBase):
    """
    Raw binary stream over a finalized file.

    The stream keeps a single absolute position; the chunk index and the
    offset inside it are position // chunk_size and position % chunk_size.
    Chunks are fetched from chunk_repo one at a time, only when the
    position moves into a chunk other than the loaded one.
    """

    def __init__(self, record: FileRecord, chunk_repo=ChunkRepository):
        super().__init__()
        self._record = record
        self._chunk_repo = chunk_repo
        self._position = 0
        self._chunk_n = -1
        self._chunk = b""

    @property
    def record(self) -> FileRecord:
        return self._record

    @property
    def file_id(self) -> str:
        return self._record.file_id

    @property
    def length(self) -> int:
        return self._record.length

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def _load_chunk(self, n: int) -> None:
        data = self._chunk_repo.get_chunk(self._record.file_id, n)
        if data is None:
            raise CorruptFileError(f"Chunk {n} of file {self._record.file_id} is missing")

        expected = self._record.expected_chunk_length(n)
        if len(data) != expected:
            raise CorruptFileError(
                f"Chunk {n} of file {self._record.file_id} has {len(data)} bytes, expected {expected}"
            )

        logger.debug(f"Loaded chunk {n} of file {self._record.file_id}")
        self._chunk_n = n
        self._chunk = data

    def _move_to(self, target: int) -> None:
        if target < self._record.length:
            n = target // self._record.chunk_size
            if n != self._chunk_n:
                self._load_chunk(n)
        self._position = target

    def readinto(self, buffer) -> int:
        self._check_open()
        with memoryview(buffer) as view, view.cast("B") as target:
            written = 0
            while written < len(target) and self._position < self._record.length:
                n, offset = divmod(self._position, self._record.chunk_size)
                if n != self._chunk_n:
                    self._load_chunk(n)

                count = min(len(self._chunk) - offset, len(target) - written)
                target[written:written + count] = self._chunk[offset:offset + count]
                written += count
                self._position += count
            return written

    def skip(self, n: int) -> int:
        """
        Skip forward up to ``n`` bytes.

        Args:
            n: Number of bytes to skip; zero or negative skips nothing

        Returns:
            Number of bytes actually skipped, less than n only at end of file
        """
        self._check_open()
        if n <= 0:
            return 0

        start = self._position
        target = min(start + n, self._record.length)
        if target <= start:
            return 0
        self._move_to(target)
        return target - start

    def available(self) -> int:
        """
        Bytes left in the currently loaded chunk.

        This is not the number of bytes left in the file.
        """
        self._check_open()
        if self._chunk_n < 0:
            return 0

        chunk_start = self._chunk_n * self._record.chunk_size
        chunk_end = chunk_start + len(self._chunk)
        if not chunk_start <= self._position <= chunk_end:
            return 0
        return chunk_end - self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._position + offset
        elif whence == io.SEEK_END:
            target = self._record.length + offset
        else:
            raise ValueError(f"invalid whence ({whence}, should be 0, 1 or 2)")

        if target < 0:
            raise ValueError(f"negative seek position {target}")

        self._move_to(target)
        return self._position

    def tell(self) -> int:
        self._check_open()
        return self._position

    def remaining(self) -> int:
        """Bytes left before end of file."""
        return max(0, self._record.length - self._position)
