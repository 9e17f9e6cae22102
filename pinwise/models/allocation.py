"""Allocation models — the per-pin bindings tracked for a session.

An :data:`AllocationMap` maps a canonical pin (``'PB6'``) to the
:class:`Allocation` currently bound to it.  Allocations are frozen:
a pin's binding is only ever replaced wholesale.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pinwise.models.pins import PinId, normalize_pin, pin_sort_key

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    """Extraction strategy that produced a candidate."""

    TOOL = "tool"
    STRUCTURED_BLOCK = "structured-block"
    HEURISTIC = "heuristic"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class Allocation(BaseModel):
    """One pin's current binding."""

    model_config = ConfigDict(frozen=True)

    function: str = Field(min_length=1)
    """Peripheral role label, e.g. 'SCL', 'TX', 'GPIO'."""

    device: str | None = None
    """Device the pin is wired to, e.g. 'MPU6050'."""

    notes: str | None = None
    """Wiring notes, e.g. '4.7k pull-up needed'."""

    @field_validator("function", mode="before")
    @classmethod
    def _strip_function(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("device", "notes", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CandidateAllocation(Allocation):
    """Transient extractor output: an allocation plus its pin and source tier."""

    pin: str
    source: Tier

    @field_validator("pin")
    @classmethod
    def _normalize(cls, value: str) -> PinId:
        return normalize_pin(value)

    def to_allocation(self) -> Allocation:
        return Allocation(function=self.function, device=self.device, notes=self.notes)


AllocationMap = Dict[str, Allocation]
"""Canonical pin -> Allocation.  One per session."""


def device_key(device: str | None) -> str | None:
    """Identity used when comparing device names (trimmed, case-insensitive)."""
    if device is None:
        return None
    key = device.strip().casefold()
    return key or None


def group_by_device(allocations: Mapping[str, Allocation]) -> dict[str, list[str]]:
    """Return ``{device_name: [pins]}`` for allocations that name a device.

    Devices are grouped by :func:`device_key`; the first spelling seen is
    used as the group's display name.  Pins are sorted naturally.
    """
    names: dict[str, str] = {}
    groups: dict[str, list[str]] = {}
    for pin, alloc in allocations.items():
        key = device_key(alloc.device)
        if key is None:
            continue
        names.setdefault(key, alloc.device)  # type: ignore[arg-type]
        groups.setdefault(key, []).append(pin)
    return {
        names[key]: sorted(pins, key=pin_sort_key)
        for key, pins in groups.items()
    }


def dump_allocations(allocations: Mapping[str, Allocation]) -> dict[str, dict[str, Any]]:
    """Serialize an allocation map to plain JSON-ready dicts."""
    return {
        pin: allocations[pin].model_dump(exclude_none=True)
        for pin in sorted(allocations, key=pin_sort_key)
    }


def load_allocations(data: Mapping[str, Any] | None) -> AllocationMap:
    """Validate a persisted or user-supplied mapping into an :data:`AllocationMap`.

    Entries with a malformed pin or an invalid body are dropped with a
    warning rather than failing the whole map.
    """
    result: AllocationMap = {}
    if not data:
        return result
    for raw_pin, body in data.items():
        try:
            pin = normalize_pin(raw_pin)
            alloc = body if isinstance(body, Allocation) else Allocation.model_validate(body)
        except (ValueError, ValidationError) as exc:
            logger.warning("Dropping invalid allocation for %r: %s", raw_pin, exc)
            continue
        result[pin] = alloc
    return result
