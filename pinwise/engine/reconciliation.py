"""Reconciliation — merge extracted candidates into a session's allocation map.

Rules, applied per turn:

* Candidates are grouped by device; device-less candidates stand alone.
* A device that already holds pins is **reassigned** when the candidate
  pin set differs in membership from its stored pin set: all of its
  stored pins are released before the new ones are inserted.  With an
  identical pin set the device is **updated in place**: a stored pin is
  only replaced when the candidate changes its function, device or notes.
* A candidate whose pin still belongs to a *different* device is dropped
  and reported as a conflict; the existing allocation is left alone.
* Everything else in the prior map is carried forward unchanged.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from pinwise.models.allocation import (
    Allocation,
    AllocationMap,
    CandidateAllocation,
    device_key,
)
from pinwise.models.pins import pin_sort_key
from pinwise.models.results import ChangeSummary, ConflictDropped, ReconcileResult

logger = logging.getLogger(__name__)


def reconcile(
    current: Mapping[str, Allocation],
    candidates: Iterable[CandidateAllocation],
) -> ReconcileResult:
    """Merge *candidates* into *current* and return the new map + summary.

    *current* is never mutated.

    Parameters
    ----------
    current:
        The session's allocation map before this turn.
    candidates:
        Extractor output for this turn.

    Returns
    -------
    ReconcileResult
        The new allocation map and a :class:`ChangeSummary`.
    """
    candidates = _last_per_pin(candidates)
    merged: AllocationMap = dict(current)
    conflicts: list[ConflictDropped] = []

    # Release the stored pins of every device whose pin set changed.
    released: list[str] = []
    for key, group in _group_candidates(candidates).items():
        stored = {pin for pin, alloc in current.items() if device_key(alloc.device) == key}
        if not stored:
            continue
        wanted = {c.pin for c in group}
        if stored != wanted:
            for pin in stored:
                merged.pop(pin, None)
            released.append(group[0].device)  # type: ignore[arg-type]
            logger.info(
                "Reassigning %s: %s -> %s",
                group[0].device,
                sorted(stored, key=pin_sort_key),
                sorted(wanted, key=pin_sort_key),
            )

    for candidate in candidates:
        existing = merged.get(candidate.pin)
        if existing is not None and _held_by_other(existing, candidate):
            conflicts.append(ConflictDropped(
                pin=candidate.pin,
                requested_device=candidate.device,
                requested_function=candidate.function,
                held_by=existing.device,
            ))
            logger.info(
                "Dropping %s for %s: pin already belongs to %s",
                candidate.pin, candidate.device or "(no device)", existing.device,
            )
            continue
        if existing is None or _changes(existing, candidate):
            merged[candidate.pin] = candidate.to_allocation()

    summary = summarize(current, merged)
    summary.conflicts = conflicts
    summary.reassigned = [
        device for device in released
        if _pins_of(current, device) != _pins_of(merged, device)
    ]
    return ReconcileResult(allocations=merged, summary=summary)


def summarize(
    before: Mapping[str, Allocation],
    after: Mapping[str, Allocation],
) -> ChangeSummary:
    """Diff two allocation maps pin by pin."""
    summary = ChangeSummary()
    for pin in sorted(set(before) | set(after), key=pin_sort_key):
        if pin not in before:
            summary.added.append(pin)
        elif pin not in after:
            summary.removed.append(pin)
        elif before[pin] != after[pin]:
            summary.updated.append(pin)
        else:
            summary.unchanged.append(pin)
    return summary


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _last_per_pin(candidates: Iterable[CandidateAllocation]) -> list[CandidateAllocation]:
    """Collapse repeated pins; the last mention of a pin wins."""
    by_pin: dict[str, CandidateAllocation] = {}
    for candidate in candidates:
        by_pin[candidate.pin] = candidate
    return list(by_pin.values())


def _group_candidates(
    candidates: list[CandidateAllocation],
) -> dict[str, list[CandidateAllocation]]:
    groups: dict[str, list[CandidateAllocation]] = {}
    for candidate in candidates:
        key = device_key(candidate.device)
        if key is not None:
            groups.setdefault(key, []).append(candidate)
    return groups


def _held_by_other(existing: Allocation, candidate: CandidateAllocation) -> bool:
    """True when *existing* belongs to a device other than the candidate's."""
    owner = device_key(existing.device)
    return owner is not None and owner != device_key(candidate.device)


def _changes(existing: Allocation, candidate: CandidateAllocation) -> bool:
    if existing.function != candidate.function:
        return True
    if device_key(existing.device) != device_key(candidate.device):
        return True
    return candidate.notes is not None and candidate.notes != existing.notes


def _pins_of(allocations: Mapping[str, Allocation], device: str) -> set[str]:
    key = device_key(device)
    return {pin for pin, alloc in allocations.items() if device_key(alloc.device) == key}
