"""Ordered strategy chains shared by the deterministic extractors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from receipt_extractor.models import ABSENT, ExtractionResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from receipt_extractor.models import Source
    from receipt_extractor.text import MessageView

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named matcher that returns a value or None."""

    name: str
    source: Source
    func: Callable[[MessageView], T | None]


def run_strategies(
    field: str, strategies: Sequence[Strategy[T]], view: MessageView
) -> ExtractionResult[T]:
    """Try strategies in priority order and return the first match."""
    for strategy in strategies:
        value = strategy.func(view)
        if value is not None:
            logger.debug("%s matched by %s: %r", field, strategy.name, value)
            return ExtractionResult(value, strategy.source, strategy.name)
    logger.debug("%s: no strategy matched", field)
    return ABSENT
