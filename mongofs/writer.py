"""Chunked writer: splits a byte stream into chunk rows and finalizes the file record."""

from enum import Enum
from typing import Any, BinaryIO, Dict, Optional, Union

from common.logging_config import get_logger
from common.types import FileRecord
from mongofs.checksum_validator import IncrementalChecksumCalculator
from mongofs.exceptions import ConfigurationError, InvalidArgumentError, WriterStateError
from mongofs.repositories.chunk_repository import ChunkRepository
from mongofs.repositories.file_repository import FileRepository
from mongofs.utils import generate_uuid, get_current_timestamp

logger = get_logger(__name__)

Source = Union[bytes, bytearray, memoryview, BinaryIO]


class WriterState(Enum):
    OPEN = "open"
    WRITING = "writing"
    FINALIZED = "finalized"
    FAILED = "failed"
    ABORTED = "aborted"


def _check_chunk_size(chunk_size) -> int:
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be greater than zero, got {chunk_size!r}")
    return chunk_size


class FileWriter:
    """
    Writable stream that stores a new file as a sequence of chunks.

    Every time the internal buffer reaches chunk_size bytes it is persisted
    as the next chunk. The file record is only written by finalize(), so a
    file is invisible to readers until then. Use as a context manager to
    finalize on success and discard on error:

        with service.create_file(filename="report.pdf") as writer:
            writer.write(data)
    """

    def __init__(
        self,
        chunk_size: int,
        file_id=None,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        compressed: bool = False,
        source: Optional[Source] = None,
        file_repo=FileRepository,
        chunk_repo=ChunkRepository,
    ):
        self._chunk_size = _check_chunk_size(chunk_size)
        self._file_id = str(file_id) if file_id is not None else generate_uuid()
        self.filename = filename
        self.content_type = content_type
        self.metadata = dict(metadata or {})
        self.compressed = compressed
        self._source = source
        self._file_repo = file_repo
        self._chunk_repo = chunk_repo

        self._state = WriterState.OPEN
        self._buffer = bytearray()
        self._next_n = 0
        self._length = 0
        self._checksum = IncrementalChecksumCalculator()
        self._record: Optional[FileRecord] = None

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def file_id(self) -> str:
        return self._file_id

    @file_id.setter
    def file_id(self, value) -> None:
        if value is None or str(value) == "":
            raise InvalidArgumentError("file_id cannot be empty")
        self._check_not_started("file_id")
        self._file_id = str(value)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @chunk_size.setter
    def chunk_size(self, value: int) -> None:
        _check_chunk_size(value)
        self._check_not_started("chunk_size")
        self._chunk_size = value

    @property
    def length(self) -> int:
        """Number of bytes written so far."""
        return self._length

    @property
    def record(self) -> Optional[FileRecord]:
        """The persisted file record, once finalized."""
        return self._record

    @property
    def closed(self) -> bool:
        return self._state in (WriterState.FINALIZED, WriterState.ABORTED)

    def writable(self) -> bool:
        return self._state in (WriterState.OPEN, WriterState.WRITING)

    def _check_not_started(self, what: str) -> None:
        if self._state is not WriterState.OPEN:
            raise WriterStateError(f"Cannot change {what} once writing has started [file_id={self._file_id}]")

    def _check_writable(self) -> None:
        if not self.writable():
            raise WriterStateError(f"Writer is {self._state.value} [file_id={self._file_id}]")

    def write(self, data) -> int:
        """
        Append bytes to the file.

        Args:
            data: Bytes-like object

        Returns:
            Number of bytes accepted
        """
        self._check_writable()
        view = memoryview(data).cast("B")
        if not view:
            return 0

        self._state = WriterState.WRITING
        self._checksum.update(view)
        self._length += len(view)

        offset = 0
        while offset < len(view):
            room = self._chunk_size - len(self._buffer)
            piece = view[offset:offset + room]
            self._buffer += piece
            offset += len(piece)
            if len(self._buffer) == self._chunk_size:
                self._flush_chunk()

        return len(view)

    def flush(self) -> None:
        # partial chunks are only persisted by finalize()
        pass

    def _flush_chunk(self) -> None:
        if not self._buffer:
            return
        try:
            self._chunk_repo.insert_chunk(self._file_id, self._next_n, bytes(self._buffer))
        except Exception:
            self._state = WriterState.FAILED
            raise
        self._next_n += 1
        self._buffer.clear()

    def _drain_source(self) -> None:
        source, self._source = self._source, None
        if isinstance(source, (bytes, bytearray, memoryview)):
            self.write(source)
            return

        while True:
            piece = source.read(self._chunk_size)
            if not piece:
                break
            self.write(piece)

    def finalize(self, chunk_size: Optional[int] = None) -> FileRecord:
        """
        Persist the trailing chunk and the file record.

        Args:
            chunk_size: Optional chunk size override, only allowed before any byte was written

        Returns:
            The persisted FileRecord

        Raises:
            ConfigurationError: If chunk_size is not positive
            WriterStateError: If the writer is not writable or the override comes too late
        """
        if chunk_size is not None:
            _check_chunk_size(chunk_size)
        self._check_writable()

        if chunk_size is not None and chunk_size != self._chunk_size:
            self._check_not_started("chunk_size")
            self._chunk_size = chunk_size

        if self._source is not None:
            self._drain_source()

        self._flush_chunk()

        record = FileRecord(
            file_id=self._file_id,
            filename=self.filename,
            length=self._length,
            chunk_size=self._chunk_size,
            upload_date=get_current_timestamp(),
            checksum=self._checksum.finalize(),
            content_type=self.content_type,
            compressed=self.compressed,
            metadata=self.metadata,
        )

        try:
            self._file_repo.insert_file(record)
        except Exception:
            self._state = WriterState.FAILED
            raise

        self._record = record
        self._state = WriterState.FINALIZED
        logger.info(
            f"Finalized file {self._file_id}: {self._length} bytes in {self._next_n} chunks "
            f"of {self._chunk_size}"
        )
        return record

    def discard(self) -> int:
        """
        Abort the write and delete any chunks already persisted.

        Returns:
            Number of chunks removed; only chunks this writer stored are deleted

        Raises:
            WriterStateError: If the file was already finalized
        """
        if self._state is WriterState.FINALIZED:
            raise WriterStateError(f"Cannot discard finalized file {self._file_id}")

        self._state = WriterState.ABORTED
        self._buffer.clear()
        self._source = None
        removed = self._chunk_repo.delete_chunks(self._file_id, below=self._next_n)
        logger.info(f"Discarded write of file {self._file_id} ({removed} chunks removed)")
        return removed

    def close(self) -> None:
        """Finalize the file unless it is already finalized or aborted."""
        if not self.closed:
            self.finalize()

    def __enter__(self) -> "FileWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.close()
            return False

        if self._state is not WriterState.FINALIZED:
            try:
                self.discard()
            except Exception as e:
                logger.error(f"Failed to discard chunks of file {self._file_id}: {e}", exc_info=True)
        return False
