"""File service: create, find, read, describe and remove stored files."""

import gzip
import mimetypes
from typing import Any, BinaryIO, Dict, List, Optional, Union

from common.constants import DEFAULT_MEDIA_TYPE, LOCATOR_SCHEME
from common.logging_config import get_logger, setup_logging
from common.types import FileRecord
from mongofs import config
from mongofs.checksum_validator import IncrementalChecksumCalculator
from mongofs.chunk_size import ChunkSize
from mongofs.database import get_db_connection, init_database
from mongofs.exceptions import (
    ChecksumMismatchError,
    ConfigurationError,
    CorruptFileError,
    InvalidArgumentError,
    InvalidLocatorError,
    StoredFileNotFoundError,
)
from mongofs.locator import FileLocator
from mongofs.media_types import is_compressible
from mongofs.reader import ChunkedReader
from mongofs.repositories.chunk_repository import ChunkRepository
from mongofs.repositories.file_repository import FileRepository
from mongofs.schemas.files import ChunkInfo, StoredFileResponse
from mongofs.writer import FileWriter, Source

logger = get_logger(__name__)

Target = Union[str, FileLocator, Dict[str, Any]]


def _copy_stream(source: Source, sink, piece_size: int) -> int:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return sink.write(source)

    total = 0
    while True:
        piece = source.read(piece_size)
        if not piece:
            break
        sink.write(piece)
        total += len(piece)
    return total


class FileService:
    """
    Entry point for storing and reading chunked files.

    Creating a service configures the mongofs loggers and creates the
    database schema if it does not exist yet.
    """

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        file_repo=None,
        chunk_repo=None,
        connection_factory=None,
    ):
        setup_logging("mongofs")
        self.file_repo = file_repo or FileRepository()
        self.chunk_repo = chunk_repo or ChunkRepository()
        self.connection_factory = connection_factory or get_db_connection

        if chunk_size is None:
            chunk_size = ChunkSize.from_name(config.DEFAULT_CHUNK_PRESET).chunk_size
        if chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be greater than zero, got {chunk_size}")
        self.chunk_size = chunk_size

        init_database()

    def create_file(
        self,
        source: Optional[Source] = None,
        filename: Optional[str] = None,
        file_id=None,
        chunk_size: Optional[int] = None,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        compressed: bool = False,
    ) -> FileWriter:
        """
        Start a new file.

        Args:
            source: Optional bytes or binary file object consumed on finalize()
            filename: Display name or logical path
            file_id: Custom id, a UUID4 is generated when omitted
            chunk_size: Chunk size for this file, defaults to the service's
            content_type: Media type of the content
            metadata: Extra JSON-serializable attributes
            compressed: Whether the bytes written are gzip-compressed

        Returns:
            FileWriter in the open state
        """
        return FileWriter(
            chunk_size=chunk_size if chunk_size is not None else self.chunk_size,
            file_id=file_id,
            filename=filename,
            content_type=content_type,
            metadata=metadata,
            compressed=compressed,
            source=source,
            file_repo=self.file_repo,
            chunk_repo=self.chunk_repo,
        )

    def find(self, query: Optional[Dict[str, Any]] = None) -> List[FileRecord]:
        return self.file_repo.find(query)

    def find_one(self, target: Target) -> Optional[FileRecord]:
        """
        Look up a file record.

        Args:
            target: File id, FileLocator, locator string, or query dict

        Returns:
            Matching FileRecord or None

        Raises:
            InvalidArgumentError: If target is empty
        """
        if target is None or (isinstance(target, (str, dict)) and not target):
            raise InvalidArgumentError("A file id, locator or query is required")

        if isinstance(target, dict):
            records = self.file_repo.find(target)
            return records[0] if records else None

        if isinstance(target, str) and target.startswith(f"{LOCATOR_SCHEME}:"):
            target = FileLocator.parse(target)

        if isinstance(target, FileLocator):
            return self.file_repo.get_by_id(target.storage_id)

        return self.file_repo.get_by_id(str(target))

    def _require(self, target: Target) -> FileRecord:
        record = self.find_one(target)
        if record is None:
            raise StoredFileNotFoundError(f"File {target} not found")
        return record

    def open(self, target: Target) -> ChunkedReader:
        """
        Open a stored file for reading.

        Raises:
            StoredFileNotFoundError: If no file matches target
        """
        return ChunkedReader(self._require(target), chunk_repo=self.chunk_repo)

    def open_locator(self, locator: Union[str, FileLocator]) -> BinaryIO:
        """
        Open the file a locator points at, decompressing gzip-stored content.

        Args:
            locator: FileLocator or locator string

        Returns:
            Binary file object yielding the original content
        """
        if not isinstance(locator, FileLocator):
            locator = FileLocator.parse(locator)

        reader = self.open(locator)
        if locator.is_stored_compressed:
            return gzip.GzipFile(fileobj=reader, mode="rb")
        return reader

    def store(
        self,
        source: Source,
        path: str,
        media_type: Optional[str] = None,
        compress: Optional[bool] = None,
        file_id=None,
        chunk_size: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> FileLocator:
        """
        Store content under a logical path and return its locator.

        Args:
            source: Bytes or binary file object
            path: Logical file path
            media_type: MIME type, guessed from the path when omitted
            compress: gzip the content in the store; defaults to whether the media type is compressible
            file_id: Custom id
            chunk_size: Chunk size for this file
            metadata: Extra JSON-serializable attributes

        Returns:
            FileLocator of the stored file
        """
        if media_type is None:
            media_type = mimetypes.guess_type(path)[0] or DEFAULT_MEDIA_TYPE
        if compress is None:
            compress = is_compressible(media_type)

        writer = self.create_file(
            filename=path,
            file_id=file_id,
            chunk_size=chunk_size,
            content_type=media_type,
            metadata=metadata,
            compressed=compress,
        )
        locator = FileLocator.build(writer.file_id, path, media_type, compress)

        with writer:
            if compress:
                with gzip.GzipFile(filename=locator.file_name, mode="wb", fileobj=writer, mtime=0) as gz:
                    _copy_stream(source, gz, writer.chunk_size)
            else:
                _copy_stream(source, writer, writer.chunk_size)

        logger.info(f"Stored {path} as {locator}")
        return locator

    def locator_for(self, record: FileRecord) -> FileLocator:
        if not record.filename:
            raise InvalidLocatorError(f"File {record.file_id} has no filename to build a locator from")
        return FileLocator.build(record.file_id, record.filename, record.content_type, record.compressed)

    def describe(self, target: Target) -> StoredFileResponse:
        record = self._require(target)

        locator = None
        if record.filename:
            try:
                locator = str(self.locator_for(record))
            except InvalidLocatorError as e:
                logger.debug(f"No locator for file {record.file_id}: {e}")

        return StoredFileResponse(
            file_id=record.file_id,
            filename=record.filename,
            length=record.length,
            chunk_size=record.chunk_size,
            chunk_count=record.chunk_count,
            upload_date=record.upload_date.isoformat(),
            checksum=record.checksum,
            content_type=record.content_type,
            compressed=record.compressed,
            metadata=record.metadata,
            locator=locator,
            chunks=[
                ChunkInfo(n=chunk.n, size=chunk.size)
                for chunk in self.chunk_repo.list_chunks(record.file_id)
            ],
        )

    def write_to(self, target: Target, sink: BinaryIO) -> int:
        """
        Copy a stored file's bytes into sink.

        Returns:
            Number of bytes written
        """
        with self.open(target) as reader:
            return _copy_stream(reader, sink, reader.record.chunk_size)

    def verify(self, target: Target) -> bool:
        """
        Check a stored file's chunk layout and checksum.

        Returns:
            True when the file is intact

        Raises:
            CorruptFileError: If chunks are missing, extra or wrongly sized
            ChecksumMismatchError: If the content does not match the recorded checksum
        """
        record = self._require(target)

        chunks = self.chunk_repo.list_chunks(record.file_id)
        if [chunk.n for chunk in chunks] != list(range(record.chunk_count)):
            raise CorruptFileError(
                f"File {record.file_id} should have {record.chunk_count} chunks, found {len(chunks)}"
            )
        for chunk in chunks:
            if chunk.size != record.expected_chunk_length(chunk.n):
                raise CorruptFileError(f"Chunk {chunk.n} of file {record.file_id} has {chunk.size} bytes")

        calculator = IncrementalChecksumCalculator()
        with ChunkedReader(record, chunk_repo=self.chunk_repo) as reader:
            while True:
                piece = reader.read(record.chunk_size)
                if not piece:
                    break
                calculator.update(piece)

        actual = calculator.finalize()
        if actual != record.checksum:
            raise ChecksumMismatchError(
                f"File {record.file_id} checksum {actual} does not match recorded {record.checksum}"
            )
        return True

    def remove(self, target: Target) -> List[str]:
        """
        Delete files and all their chunks.

        Each file's chunks and record are deleted in one transaction, chunks first.

        Args:
            target: File id, FileLocator, locator string, or query dict

        Returns:
            Ids of the removed file records

        Raises:
            InvalidArgumentError: If target is None or empty
        """
        if target is None or (isinstance(target, (str, dict)) and not target):
            raise InvalidArgumentError("A file id, locator or query is required for removal")

        if isinstance(target, dict):
            file_ids = [record.file_id for record in self.file_repo.find(target)]
        else:
            if isinstance(target, str) and target.startswith(f"{LOCATOR_SCHEME}:"):
                target = FileLocator.parse(target)
            file_ids = [target.storage_id if isinstance(target, FileLocator) else str(target)]

        removed = []
        with self.connection_factory() as conn:
            try:
                for file_id in file_ids:
                    self.chunk_repo.delete_chunks(file_id, conn=conn)
                    if self.file_repo.delete_file(file_id, conn=conn):
                        removed.append(file_id)
                conn.commit()
            except Exception:
                conn.rollback()
                raise

        logger.info(f"Removed {len(removed)} files: {removed}")
        return removed
