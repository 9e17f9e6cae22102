"""Incompleteness detection — multi-pin devices with only partial role coverage."""

from __future__ import annotations

import re
from typing import Mapping

from pinwise.engine.vocabulary import DEVICE_NAME_RE, canonical_role
from pinwise.models.allocation import Allocation, group_by_device
from pinwise.models.results import IncompleteWarning
from pinwise.reference.seed import DEVICE_PATTERNS

# Roles a multi-pin interface needs before it can work.  SPI chip select is
# left out on purpose: it may be tied low or driven from any GPIO.
EXPECTED_ROLES: dict[str, tuple[str, ...]] = {
    "I2C": ("SCL", "SDA"),
    "SPI": ("SCK", "MISO", "MOSI"),
    "UART": ("TX", "RX"),
}


def _name_key(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.casefold())


def _known_devices() -> dict[str, str]:
    """Device name (and part-number keywords) -> interface, from the seed patterns."""
    known: dict[str, str] = {}
    for pattern in DEVICE_PATTERNS:
        interface = pattern["interface_type"]
        if interface not in EXPECTED_ROLES:
            continue
        known[_name_key(pattern["device_name"])] = interface
        for token in pattern.get("keywords", "").split():
            if DEVICE_NAME_RE.fullmatch(token):
                known.setdefault(_name_key(token), interface)
    return known


KNOWN_DEVICE_INTERFACES: dict[str, str] = _known_devices()


def interface_for(device: str, roles: set[str]) -> str | None:
    """Decide which multi-pin interface a device uses, if any.

    A known device name wins; otherwise the interface sharing the most
    roles with what is allocated.
    """
    known = KNOWN_DEVICE_INTERFACES.get(_name_key(device))
    if known is not None:
        return known

    best: tuple[int, str] | None = None
    for interface, expected in EXPECTED_ROLES.items():
        overlap = len(roles.intersection(expected))
        if overlap and (best is None or overlap > best[0]):
            best = (overlap, interface)
    return best[1] if best else None


def detect_incomplete(allocations: Mapping[str, Allocation]) -> list[IncompleteWarning]:
    """Flag devices whose allocated roles do not cover their interface.

    Advisory only: the map is never modified.  Devices without a known
    multi-pin interface are never flagged.
    """
    warnings: list[IncompleteWarning] = []

    for device, pins in sorted(group_by_device(allocations).items()):
        roles = {
            role for role in (canonical_role(allocations[pin].function) for pin in pins)
            if role is not None
        }
        interface = interface_for(device, roles)
        if interface is None:
            continue
        expected = EXPECTED_ROLES[interface]
        missing = [role for role in expected if role not in roles]
        if missing:
            warnings.append(IncompleteWarning(
                device=device,
                interface=interface,
                missing_roles=missing,
                present_roles=[role for role in expected if role in roles],
            ))

    return warnings
