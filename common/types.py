"""Shared data type definitions (FileRecord, ChunkDescriptor)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Metadata for a single persisted chunk, without its data.
    """
    file_id: str
    n: int
    size: int


@dataclass(frozen=True)
class FileRecord:
    """
    File-level document describing a finalized stored file.
    """
    file_id: str
    filename: Optional[str]
    length: int
    chunk_size: int
    upload_date: datetime
    checksum: str
    content_type: Optional[str] = None
    compressed: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def chunk_count(self) -> int:
        """Number of chunks the file's content occupies."""
        if self.length == 0:
            return 0
        return (self.length + self.chunk_size - 1) // self.chunk_size

    def expected_chunk_length(self, n: int) -> int:
        """
        Size in bytes chunk ``n`` must have.

        Args:
            n: Zero-based chunk sequence number

        Returns:
            chunk_size for every chunk but the last, the remainder for the last
        """
        return min(self.chunk_size, self.length - n * self.chunk_size)
