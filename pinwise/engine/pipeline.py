"""Turn pipeline — classify, extract, reconcile, detect.

Usage::

    from pinwise.engine import process_turn

    result = process_turn(
        "Connect an MPU6050",
        reply_text,
        current_allocations,
    )
    result.allocations   # new map
    result.warnings      # incomplete devices
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, Field

from pinwise.engine.completeness import detect_incomplete
from pinwise.engine.extraction import extract
from pinwise.engine.intent import Intent, classify_intent
from pinwise.engine.reconciliation import reconcile
from pinwise.models.allocation import Allocation, AllocationMap
from pinwise.models.pins import pin_sort_key
from pinwise.models.results import (
    ChangeSummary,
    ExtractionResult,
    IncompleteWarning,
)

logger = logging.getLogger(__name__)


class TurnResult(BaseModel):
    """Everything one processed turn produced."""

    intent: Intent
    extraction: ExtractionResult = Field(default_factory=ExtractionResult)
    allocations: AllocationMap = Field(default_factory=dict)
    summary: ChangeSummary = Field(default_factory=ChangeSummary)
    warnings: list[IncompleteWarning] = Field(default_factory=list)


def process_turn(
    utterance: str,
    reply_text: str,
    current: Mapping[str, Allocation],
    tool_payload: Sequence[Any] | None = None,
    *,
    intent: Intent | None = None,
) -> TurnResult:
    """Run one conversation turn through the allocation engine.

    Informational turns never reach the extractor: the map comes back
    unchanged.  No I/O happens here; the caller owns persistence.

    Parameters
    ----------
    utterance:
        The user's message.
    reply_text:
        The assistant's reply to it.
    current:
        The session's allocation map before the turn.
    tool_payload:
        Optional ``allocate_pins`` entries returned by the model.
    intent:
        A precomputed classification; computed from *utterance* if omitted.
    """
    if intent is None:
        intent = classify_intent(utterance)

    if intent is Intent.INFORMATIONAL:
        logger.debug("Informational turn; skipping extraction")
        return _unchanged(intent, current, ExtractionResult())

    extraction = extract(reply_text, tool_payload, utterance)
    if extraction.is_empty:
        return _unchanged(intent, current, extraction)

    reconciled = reconcile(current, extraction.candidates)
    summary = reconciled.summary
    if summary.changed:
        logger.info(
            "Turn changed allocations: +%s -%s ~%s",
            summary.added, summary.removed, summary.updated,
        )

    return TurnResult(
        intent=intent,
        extraction=extraction,
        allocations=reconciled.allocations,
        summary=summary,
        warnings=detect_incomplete(reconciled.allocations),
    )


def _unchanged(
    intent: Intent,
    current: Mapping[str, Allocation],
    extraction: ExtractionResult,
) -> TurnResult:
    allocations = dict(current)
    return TurnResult(
        intent=intent,
        extraction=extraction,
        allocations=allocations,
        summary=ChangeSummary(unchanged=sorted(allocations, key=pin_sort_key)),
        warnings=detect_incomplete(allocations),
    )
