"""File record repository for database operations."""

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from common.logging_config import get_logger
from common.types import FileRecord
from mongofs.database import get_db_connection
from mongofs.exceptions import InvalidArgumentError

logger = get_logger(__name__)

QUERY_FIELDS = frozenset({
    "file_id",
    "filename",
    "length",
    "chunk_size",
    "checksum",
    "content_type",
    "compressed",
})

METADATA_PREFIX = "metadata."

_SELECT_COLUMNS = """
    file_id, filename, length, chunk_size, upload_date, checksum,
    content_type, compressed, metadata
"""


def build_where_clause(query: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """
    Translate an equality query into an SQL WHERE clause.

    Args:
        query: Mapping of field name to expected value. Fields are record
            columns or 'metadata.<key>' for a metadata lookup.

    Returns:
        Tuple of (clause, parameters); clause is empty for an empty query

    Raises:
        InvalidArgumentError: If a field is not queryable
    """
    clauses = []
    params: List[Any] = []

    for field, value in query.items():
        if field.startswith(METADATA_PREFIX):
            key = field[len(METADATA_PREFIX):]
            if not key or '"' in key:
                raise InvalidArgumentError(f"Invalid metadata query field: {field!r}")
            column = "json_extract(metadata, ?)"
            params.append(f'$."{key}"')
        elif field in QUERY_FIELDS:
            column = field
        else:
            raise InvalidArgumentError(f"Cannot query file records by {field!r}")

        if value is None:
            clauses.append(f"{column} IS NULL")
        else:
            clauses.append(f"{column} = ?")
            params.append(int(value) if isinstance(value, bool) else value)

    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


def _row_to_record(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        file_id=row["file_id"],
        filename=row["filename"],
        length=row["length"],
        chunk_size=row["chunk_size"],
        upload_date=datetime.fromisoformat(row["upload_date"]),
        checksum=row["checksum"],
        content_type=row["content_type"],
        compressed=bool(row["compressed"]),
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
    )


class FileRepository:
    @staticmethod
    def insert_file(record: FileRecord, conn=None) -> FileRecord:
        if conn is None:
            with get_db_connection() as conn:
                FileRepository.insert_file(record, conn=conn)
                conn.commit()
            return record

        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO files (file_id, filename, length, chunk_size, upload_date, checksum,
                                   content_type, compressed, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.file_id,
                    record.filename,
                    record.length,
                    record.chunk_size,
                    record.upload_date.isoformat(),
                    record.checksum,
                    record.content_type,
                    int(record.compressed),
                    json.dumps(record.metadata),
                )
            )
            logger.info(f"Stored file record [file_id={record.file_id}, length={record.length}]")
            return record
        except Exception as e:
            logger.error(f"Failed to store file record [file_id={record.file_id}]: {e}", exc_info=True)
            raise

    @staticmethod
    def get_by_id(file_id: str) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_SELECT_COLUMNS} FROM files WHERE file_id = ?",
                (file_id,)
            )
            row = cursor.fetchone()

            if row is None:
                return None
            return _row_to_record(row)

    @staticmethod
    def find(query: Optional[Dict[str, Any]] = None, conn=None) -> List[FileRecord]:
        where, params = build_where_clause(query or {})
        sql = f"SELECT {_SELECT_COLUMNS} FROM files {where} ORDER BY upload_date, file_id"

        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            return [_row_to_record(row) for row in cursor.fetchall()]

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            return [_row_to_record(row) for row in cursor.fetchall()]

    @staticmethod
    def delete_file(file_id: str, conn=None) -> bool:
        if conn is None:
            with get_db_connection() as conn:
                deleted = FileRepository.delete_file(file_id, conn=conn)
                conn.commit()
            return deleted

        logger.debug(f"Deleting file record [file_id={file_id}]")
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
            return cursor.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to delete file record [file_id={file_id}]: {e}", exc_info=True)
            raise

    @staticmethod
    def count() -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS total FROM files")
            return cursor.fetchone()["total"]
