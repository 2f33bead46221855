"""Service layer for business logic."""

from mongofs.services.file_service import FileService

__all__ = [
    "FileService",
]
