"""Integration tests for database repositories."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from common.types import ChunkDescriptor, FileRecord
from mongofs.database import get_db_connection
from mongofs.exceptions import InvalidArgumentError
from mongofs.repositories.chunk_repository import ChunkRepository
from mongofs.repositories.file_repository import FileRepository, build_where_clause

BASE_DATE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_record(file_id: str, offset: int = 0, **overrides) -> FileRecord:
    values = dict(
        file_id=file_id,
        filename=f"{file_id}.bin",
        length=10,
        chunk_size=4,
        upload_date=BASE_DATE + timedelta(seconds=offset),
        checksum="0" * 32,
    )
    values.update(overrides)
    return FileRecord(**values)


class TestConnections:
    """Connection handling of repository calls."""

    def test_connection_uses_row_factory_and_closes(self, test_db):
        with get_db_connection() as conn:
            row = conn.execute("SELECT 1 AS one").fetchone()
            assert row["one"] == 1

        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")

    def test_standalone_writes_are_committed(self, test_db):
        FileRepository.insert_file(make_record("file-1"))
        ChunkRepository.insert_chunk("file-1", 0, b"abcd")

        conn = sqlite3.connect(test_db)
        try:
            assert conn.execute("SELECT COUNT(*) FROM files").fetchone()[0] == 1
            assert conn.execute("SELECT COUNT(*) FROM chunks").fetchone()[0] == 1
        finally:
            conn.close()

    def test_standalone_deletes_are_committed(self, test_db):
        FileRepository.insert_file(make_record("file-1"))
        ChunkRepository.insert_chunk("file-1", 0, b"abcd")

        assert ChunkRepository.delete_chunks("file-1") == 1
        assert FileRepository.delete_file("file-1") is True

        conn = sqlite3.connect(test_db)
        try:
            assert conn.execute("SELECT COUNT(*) FROM files").fetchone()[0] == 0
            assert conn.execute("SELECT COUNT(*) FROM chunks").fetchone()[0] == 0
        finally:
            conn.close()

    def test_shared_connection_is_not_committed(self, test_db):
        with get_db_connection() as conn:
            ChunkRepository.insert_chunk("file-1", 0, b"abcd", conn=conn)
            ChunkRepository.delete_chunks("file-2", conn=conn)

        assert ChunkRepository.count() == 0


class TestBuildWhereClause:
    """Translation of queries into SQL."""

    def test_empty_query(self):
        assert build_where_clause({}) == ("", [])

    def test_column_equality(self):
        clause, params = build_where_clause({"filename": "a.txt", "length": 3})

        assert clause == "WHERE filename = ? AND length = ?"
        assert params == ["a.txt", 3]

    def test_none_and_bool_values(self):
        clause, params = build_where_clause({"content_type": None, "compressed": True})

        assert clause == "WHERE content_type IS NULL AND compressed = ?"
        assert params == [1]

    def test_metadata_field(self):
        clause, params = build_where_clause({"metadata.owner": "ana"})

        assert clause == "WHERE json_extract(metadata, ?) = ?"
        assert params == ['$."owner"', "ana"]

    @pytest.mark.parametrize("field", ["owner", "data", "metadata.", 'metadata.a"b'])
    def test_rejects_unknown_fields(self, field):
        with pytest.raises(InvalidArgumentError):
            build_where_clause({field: 1})


class TestFileRepository:
    """Test FileRepository operations."""

    def test_insert_and_get(self, test_db):
        record = make_record(
            "file-1",
            content_type="text/plain",
            compressed=True,
            metadata={"owner": "ana", "tags": ["a", "b"]},
        )

        FileRepository.insert_file(record)
        stored = FileRepository.get_by_id("file-1")

        assert stored == record
        assert stored.upload_date.tzinfo is not None

    def test_get_by_id_nonexistent(self, test_db):
        assert FileRepository.get_by_id("missing") is None

    def test_duplicate_id_rejected(self, test_db):
        FileRepository.insert_file(make_record("file-1"))

        with pytest.raises(sqlite3.IntegrityError):
            FileRepository.insert_file(make_record("file-1"))

    def test_find_orders_by_upload_date(self, test_db):
        FileRepository.insert_file(make_record("late", offset=20))
        FileRepository.insert_file(make_record("early", offset=0))
        FileRepository.insert_file(make_record("middle", offset=10))

        assert [r.file_id for r in FileRepository.find()] == ["early", "middle", "late"]

    def test_find_with_query(self, test_db):
        FileRepository.insert_file(make_record("a", content_type="text/plain", metadata={"owner": "ana"}))
        FileRepository.insert_file(make_record("b", content_type="image/png", metadata={"owner": "ben"}))
        FileRepository.insert_file(make_record("c", compressed=True, metadata={"owner": "ana"}))

        assert [r.file_id for r in FileRepository.find({"metadata.owner": "ana"})] == ["a", "c"]
        assert [r.file_id for r in FileRepository.find({"content_type": "image/png"})] == ["b"]
        assert [r.file_id for r in FileRepository.find({"content_type": None})] == ["c"]
        assert [r.file_id for r in FileRepository.find({"compressed": True})] == ["c"]
        assert FileRepository.find({"metadata.missing": "x"}) == []

    def test_find_with_shared_connection(self, test_db):
        with get_db_connection() as conn:
            FileRepository.insert_file(make_record("file-1"), conn=conn)

            assert [r.file_id for r in FileRepository.find(conn=conn)] == ["file-1"]
            conn.rollback()

        assert FileRepository.count() == 0

    def test_delete_file(self, test_db):
        FileRepository.insert_file(make_record("file-1"))

        assert FileRepository.delete_file("file-1") is True
        assert FileRepository.delete_file("file-1") is False
        assert FileRepository.count() == 0


class TestChunkRepository:
    """Test ChunkRepository operations."""

    def test_insert_and_get_chunk(self, test_db):
        ChunkRepository.insert_chunk("file-1", 0, b"abcd")

        assert ChunkRepository.get_chunk("file-1", 0) == b"abcd"
        assert ChunkRepository.get_chunk("file-1", 1) is None

    def test_duplicate_chunk_rejected(self, test_db):
        ChunkRepository.insert_chunk("file-1", 0, b"abcd")

        with pytest.raises(sqlite3.IntegrityError):
            ChunkRepository.insert_chunk("file-1", 0, b"efgh")

    def test_list_chunks_ordered(self, test_db):
        ChunkRepository.insert_chunk("file-1", 2, b"ij")
        ChunkRepository.insert_chunk("file-1", 0, b"abcd")
        ChunkRepository.insert_chunk("file-1", 1, b"efgh")
        ChunkRepository.insert_chunk("file-2", 0, b"zz")

        assert ChunkRepository.list_chunks("file-1") == [
            ChunkDescriptor(file_id="file-1", n=0, size=4),
            ChunkDescriptor(file_id="file-1", n=1, size=4),
            ChunkDescriptor(file_id="file-1", n=2, size=2),
        ]

    def test_delete_and_count(self, test_db):
        for n in range(3):
            ChunkRepository.insert_chunk("file-1", n, b"x")
        ChunkRepository.insert_chunk("file-2", 0, b"y")

        assert ChunkRepository.count() == 4
        assert ChunkRepository.count("file-1") == 3
        assert ChunkRepository.delete_chunks("file-1") == 3
        assert ChunkRepository.delete_chunks("file-1") == 0
        assert ChunkRepository.count() == 1

    def test_accepts_memoryview(self, test_db):
        ChunkRepository.insert_chunk("file-1", 0, memoryview(b"view"))

        assert ChunkRepository.get_chunk("file-1", 0) == b"view"

    def test_delete_chunks_below_bound(self, test_db):
        for n in range(4):
            ChunkRepository.insert_chunk("file-1", n, b"x")

        assert ChunkRepository.delete_chunks("file-1", below=2) == 2
        assert [c.n for c in ChunkRepository.list_chunks("file-1")] == [2, 3]
        assert ChunkRepository.delete_chunks("file-1", below=0) == 0
