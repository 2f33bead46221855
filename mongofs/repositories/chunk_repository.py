"""Chunk repository for database operations."""

from typing import List, Optional

from common.logging_config import get_logger
from common.types import ChunkDescriptor
from mongofs.database import get_db_connection

logger = get_logger(__name__)


class ChunkRepository:
    @staticmethod
    def insert_chunk(file_id: str, n: int, data: bytes, conn=None) -> None:
        if conn is None:
            with get_db_connection() as conn:
                ChunkRepository.insert_chunk(file_id, n, data, conn=conn)
                conn.commit()
            return

        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO chunks (file_id, n, data) VALUES (?, ?, ?)",
                (file_id, n, bytes(data))
            )
            logger.debug(f"Stored chunk {n} ({len(data)} bytes) [file_id={file_id}]")
        except Exception as e:
            logger.error(f"Failed to store chunk {n} [file_id={file_id}]: {e}", exc_info=True)
            raise

    @staticmethod
    def get_chunk(file_id: str, n: int) -> Optional[bytes]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT data FROM chunks WHERE file_id = ? AND n = ?",
                (file_id, n)
            )
            row = cursor.fetchone()

            if row is None:
                return None
            return bytes(row["data"])

    @staticmethod
    def list_chunks(file_id: str) -> List[ChunkDescriptor]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT file_id, n, length(data) AS size
                FROM chunks
                WHERE file_id = ?
                ORDER BY n
                """,
                (file_id,)
            )
            rows = cursor.fetchall()

            return [
                ChunkDescriptor(
                    file_id=row["file_id"],
                    n=row["n"],
                    size=row["size"],
                )
                for row in rows
            ]

    @staticmethod
    def delete_chunks(file_id: str, below: Optional[int] = None, conn=None) -> int:
        """
        Delete a file's chunks.

        Args:
            file_id: Owning file id
            below: Only delete chunks with a sequence number under this bound
            conn: Optional shared connection; the caller commits

        Returns:
            Number of chunks deleted
        """
        if conn is None:
            with get_db_connection() as conn:
                deleted = ChunkRepository.delete_chunks(file_id, below=below, conn=conn)
                conn.commit()
            return deleted

        logger.debug(f"Deleting chunks [file_id={file_id}, below={below}]")
        try:
            cursor = conn.cursor()
            if below is None:
                cursor.execute("DELETE FROM chunks WHERE file_id = ?", (file_id,))
            else:
                cursor.execute("DELETE FROM chunks WHERE file_id = ? AND n < ?", (file_id, below))
            deleted = cursor.rowcount

            logger.info(f"Deleted {deleted} chunks [file_id={file_id}]")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete chunks [file_id={file_id}]: {e}", exc_info=True)
            raise

    @staticmethod
    def count(file_id: Optional[str] = None) -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            if file_id is None:
                cursor.execute("SELECT COUNT(*) AS total FROM chunks")
            else:
                cursor.execute("SELECT COUNT(*) AS total FROM chunks WHERE file_id = ?", (file_id,))
            return cursor.fetchone()["total"]
