"""Pin identifier normalization — canonical ``PinId`` values."""

from __future__ import annotations

import re

from pinwise.config import MAX_PIN_NUMBER, PORT_LETTERS

_PIN_RE = re.compile(rf"^P([{PORT_LETTERS}])(\d{{1,2}})$", re.I)

# Tokens in free text that look like they could be a pin (used by the heuristic tier)
PIN_TOKEN_RE = re.compile(r"\bP[A-Z]\d{1,3}\b")


class MalformedPin(ValueError):
    """Raised when a token does not match the pin grammar."""

    def __init__(self, raw: object) -> None:
        self.raw = raw
        super().__init__(f"Malformed pin identifier: {raw!r}")


class PinId(str):
    """Canonical pin identifier, e.g. ``'PB6'``.

    Constructing a ``PinId`` normalizes the raw token: ``PinId("pb06")``
    equals ``"PB6"``.  Invalid tokens raise :class:`MalformedPin`.
    """

    __slots__ = ()

    def __new__(cls, raw: str) -> PinId:
        if isinstance(raw, PinId):
            return raw
        return super().__new__(cls, _canonical(raw))

    @property
    def port(self) -> str:
        return self[1]

    @property
    def number(self) -> int:
        return int(self[2:])

    def __repr__(self) -> str:
        return f"PinId({str.__repr__(self)})"


def _canonical(raw: object) -> str:
    if not isinstance(raw, str):
        raise MalformedPin(raw)
    match = _PIN_RE.match(raw.strip())
    if match is None:
        raise MalformedPin(raw)
    number = int(match.group(2))
    if number > MAX_PIN_NUMBER:
        raise MalformedPin(raw)
    return f"P{match.group(1).upper()}{number}"


def normalize_pin(raw: object) -> PinId:
    """Return the canonical :class:`PinId` for *raw* or raise :class:`MalformedPin`."""
    return PinId(raw)  # type: ignore[arg-type]


def is_pin(raw: object) -> bool:
    """Return *True* if *raw* normalizes to a valid pin."""
    try:
        normalize_pin(raw)
    except MalformedPin:
        return False
    return True


def pin_sort_key(pin: str) -> tuple[str, int]:
    """Sort pins by port letter, then numerically (PA2 before PA10)."""
    return (pin[1], int(pin[2:])) if is_pin(pin) else (pin, -1)
