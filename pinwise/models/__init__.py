"""Data models: pins, allocations, engine results, sessions."""

from pinwise.models.allocation import (
    Allocation,
    AllocationMap,
    CandidateAllocation,
    Tier,
    dump_allocations,
    group_by_device,
    load_allocations,
)
from pinwise.models.pins import MalformedPin, PinId, normalize_pin
from pinwise.models.results import (
    ChangeSummary,
    ConflictDropped,
    DroppedEntry,
    ExtractionResult,
    IncompleteWarning,
    ReconcileResult,
)
from pinwise.models.session import ChatMessage, Session

__all__ = [
    "Allocation",
    "AllocationMap",
    "CandidateAllocation",
    "ChangeSummary",
    "ChatMessage",
    "ConflictDropped",
    "DroppedEntry",
    "ExtractionResult",
    "IncompleteWarning",
    "MalformedPin",
    "PinId",
    "ReconcileResult",
    "Session",
    "Tier",
    "dump_allocations",
    "group_by_device",
    "load_allocations",
    "normalize_pin",
]
