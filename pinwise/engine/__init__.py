"""Allocation engine — intent gating, tiered extraction, reconciliation, completeness."""

from pinwise.engine.completeness import detect_incomplete
from pinwise.engine.extraction import extract, extract_candidates, payload_from_tool_calls
from pinwise.engine.intent import Intent, classify_intent
from pinwise.engine.pipeline import TurnResult, process_turn
from pinwise.engine.reconciliation import reconcile

__all__ = [
    "Intent",
    "TurnResult",
    "classify_intent",
    "detect_incomplete",
    "extract",
    "extract_candidates",
    "payload_from_tool_calls",
    "process_turn",
    "reconcile",
]
