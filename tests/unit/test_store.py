"""Tests for receipt_extractor.store."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import psycopg
import pytest

from receipt_extractor import store
from receipt_extractor.builder import build_record
from receipt_extractor.errors import PersistenceError
from receipt_extractor.store import (
    INSERT_RECEIPT_SQL,
    RECEIPT_COLUMNS,
    PostgresReceiptSink,
    deliver,
)

if TYPE_CHECKING:
    from receipt_extractor.models import RawMessage, ReceiptRecord


@pytest.fixture
def record(sample_raw_message: RawMessage) -> ReceiptRecord:
    return build_record(sample_raw_message, {})


@pytest.fixture
def get_connection(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Patch get_connection to hand out a mock connection."""
    conn = MagicMock()
    conn.__enter__.return_value = conn
    conn.__exit__.return_value = False
    factory = MagicMock(return_value=conn)
    monkeypatch.setattr(store, "get_connection", factory)
    return factory


class TestInsertSql:
    """Tests for the INSERT statement."""

    def test_has_a_placeholder_per_column(self) -> None:
        for column in RECEIPT_COLUMNS:
            assert f"%({column})s" in INSERT_RECEIPT_SQL

    def test_columns_match_record_fields(self, record: ReceiptRecord) -> None:
        assert set(RECEIPT_COLUMNS) == set(record.to_row())


class TestPostgresReceiptSink:
    """Tests for PostgresReceiptSink."""

    def test_insert_executes_statement(
        self, record: ReceiptRecord, get_connection: MagicMock
    ) -> None:
        PostgresReceiptSink("postgresql://localhost/test").insert(record)

        get_connection.assert_called_once_with("postgresql://localhost/test")
        conn = get_connection.return_value
        conn.execute.assert_called_once_with(INSERT_RECEIPT_SQL, record.to_row())

    def test_database_error_becomes_persistence_error(
        self, record: ReceiptRecord, get_connection: MagicMock
    ) -> None:
        conn = get_connection.return_value
        conn.execute.side_effect = psycopg.OperationalError("server closed")

        with pytest.raises(PersistenceError, match="test-123"):
            PostgresReceiptSink("postgresql://localhost/test").insert(record)


class TestDeliver:
    """Tests for deliver()."""

    def test_success(self, record: ReceiptRecord) -> None:
        sink = MagicMock()
        assert deliver(record, sink) is True
        sink.insert.assert_called_once_with(record)

    def test_failure_is_reported_not_raised(self, record: ReceiptRecord) -> None:
        sink = MagicMock()
        sink.insert.side_effect = PersistenceError("duplicate key")
        assert deliver(record, sink) is False
        sink.insert.assert_called_once()
