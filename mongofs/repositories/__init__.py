"""Repository layer for data access."""

from mongofs.repositories.file_repository import FileRepository
from mongofs.repositories.chunk_repository import ChunkRepository

__all__ = [
    "FileRepository",
    "ChunkRepository",
]
