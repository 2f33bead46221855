"""Pydantic schemas for stored file descriptions."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ChunkInfo(BaseModel):
    """Size of one persisted chunk."""
    n: int
    size: int


class StoredFileResponse(BaseModel):
    """Description of a stored file, ready for rendering or transfer."""
    file_id: str
    filename: Optional[str] = None
    length: int
    chunk_size: int
    chunk_count: int
    upload_date: str
    checksum: str
    content_type: Optional[str] = None
    compressed: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)
    locator: Optional[str] = None
    chunks: List[ChunkInfo] = Field(default_factory=list)
