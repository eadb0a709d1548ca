"""Receipt sink abstraction and PostgreSQL implementation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import psycopg

from receipt_extractor.db import get_connection
from receipt_extractor.errors import PersistenceError

if TYPE_CHECKING:
    from receipt_extractor.models import ReceiptRecord

logger = logging.getLogger(__name__)

RECEIPT_COLUMNS = (
    "vendor",
    "vendor_name",
    "total_amount",
    "amount",
    "order_date",
    "form_of_payment",
    "card_type",
    "card_last4",
    "category",
    "tracking_number",
    "email_sender",
    "subject",
    "body_text",
    "body_html",
    "message_id",
    "received_at",
)

INSERT_RECEIPT_SQL = "INSERT INTO receipts ({columns}) VALUES ({values})".format(
    columns=", ".join(RECEIPT_COLUMNS),
    values=", ".join(f"%({name})s" for name in RECEIPT_COLUMNS),
)


class ReceiptSink(Protocol):
    """Protocol for receipt persistence backends."""

    def insert(self, record: ReceiptRecord) -> None: ...


class PostgresReceiptSink:
    """Insert receipt records into the ``receipts`` table."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url

    def insert(self, record: ReceiptRecord) -> None:
        """Insert one row; raise PersistenceError if the database refuses it."""
        row = record.to_row()
        try:
            with get_connection(self.database_url) as conn:
                conn.execute(INSERT_RECEIPT_SQL, row)
        except psycopg.Error as exc:
            msg = f"Failed to insert receipt {record.message_id or '<unknown>'}"
            raise PersistenceError(msg) from exc


def deliver(record: ReceiptRecord, sink: ReceiptSink) -> bool:
    """Hand a record to the sink once, reporting success as a bool."""
    try:
        sink.insert(record)
    except PersistenceError:
        logger.error("Could not store receipt %s", record.message_id, exc_info=True)
        return False
    logger.info("Stored receipt %s", record.message_id)
    return True
