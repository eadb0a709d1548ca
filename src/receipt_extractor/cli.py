"""CLI entry point for receipt-extractor."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import click

from receipt_extractor.config import get_database_url, get_pipeline_config
from receipt_extractor.errors import PipelineError
from receipt_extractor.models import RawMessage
from receipt_extractor.pipeline import ReceiptPipeline
from receipt_extractor.store import PostgresReceiptSink, deliver

if TYPE_CHECKING:
    from typing import TextIO


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Receipt Extractor: structured purchase data from receipt emails."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def _read(stream: TextIO | None) -> str:
    return stream.read() if stream is not None else ""


@cli.command()
@click.option("--sender", required=True, help="Sender address.")
@click.option("--subject", default="", help="Subject line.")
@click.option("--text", "text_file", type=click.File("r"), help="Plain-text body.")
@click.option("--html", "html_file", type=click.File("r"), help="HTML body.")
@click.option("--ocr", "ocr_file", type=click.File("r"), help="OCR-derived text.")
@click.option("--message-id", default=None, help="External message identifier.")
@click.option(
    "--received-at",
    type=click.DateTime(formats=["%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S"]),
    default=None,
    help="ISO 8601 receipt time (default: now).",
)
@click.option("--no-model", is_flag=True, help="Skip the completion model.")
@click.option("--sources", is_flag=True, help="Include per-field provenance.")
@click.option("--store", is_flag=True, help="Insert the record into DATABASE_URL.")
def extract(
    sender: str,
    subject: str,
    text_file: TextIO | None,
    html_file: TextIO | None,
    ocr_file: TextIO | None,
    message_id: str | None,
    received_at: datetime | None,
    no_model: bool,
    sources: bool,
    store: bool,
) -> None:
    """Extract a receipt record from one email and print it as JSON."""
    try:
        config = get_pipeline_config(use_model=not no_model)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    ocr_text = _read(ocr_file)
    raw = RawMessage(
        sender=sender,
        subject=subject,
        received_at=received_at or datetime.now(tz=UTC),
        text_body=_read(text_file),
        html_body=_read(html_file),
        ocr_text=ocr_text or None,
        message_id=message_id,
    )

    try:
        processed = ReceiptPipeline(config).run(raw)
    except PipelineError as exc:
        raise click.ClickException(str(exc)) from exc

    record = processed.record
    if sources:
        payload = {
            "record": record.model_dump(mode="json"),
            "provenance": {k: str(v) for k, v in processed.provenance.items()},
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(record.model_dump_json(indent=2))

    if store:
        try:
            sink = PostgresReceiptSink(get_database_url())
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        if not deliver(record, sink):
            raise click.ClickException("Failed to store receipt")


@cli.command("check-config")
def check_config() -> None:
    """Validate the environment configuration."""
    try:
        config = get_pipeline_config()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    if config.model is not None:
        click.echo(f"Model: {config.model.model} (timeout {config.model.timeout}s)")
    click.echo(f"Low-value threshold: {config.low_value_threshold} chars")
