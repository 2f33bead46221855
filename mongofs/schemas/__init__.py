"""Pydantic schemas describing stored files."""

from mongofs.schemas.files import ChunkInfo, StoredFileResponse

__all__ = [
    "ChunkInfo",
    "StoredFileResponse",
]
