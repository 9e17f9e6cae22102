"""Lexical tables shared by the intent classifier, extractor and detector."""

from __future__ import annotations

import re

from pinwise.config import MCU_FAMILY, MCU_NAME
from pinwise.models.pins import is_pin

# ---------------------------------------------------------------------------
# Peripheral roles
# ---------------------------------------------------------------------------

# Canonical role -> spellings seen in function labels and prose
ROLE_ALIASES: dict[str, tuple[str, ...]] = {
    "SCL": ("SCL",),
    "SDA": ("SDA",),
    "SCK": ("SCK", "SCLK"),
    "MISO": ("MISO",),
    "MOSI": ("MOSI",),
    "CS": ("CS", "NSS", "SS", "CSN"),
    "TX": ("TX", "TXD"),
    "RX": ("RX", "RXD"),
    "CE": ("CE",),
    "ADC": ("ADC", "AIN"),
    "PWM": ("PWM",),
    "INT": ("INT", "IRQ"),
}

_ALIAS_TO_ROLE: dict[str, str] = {
    alias: role for role, aliases in ROLE_ALIASES.items() for alias in aliases
}

_LABEL_SPLIT_RE = re.compile(r"[^A-Z0-9]+")

# Upper-case role tokens in prose, also inside labels like "I2C1_SCL"
ROLE_TOKEN_RE = re.compile(
    r"(?<![A-Za-z0-9])("
    + "|".join(sorted(_ALIAS_TO_ROLE, key=len, reverse=True))
    + r")\d?(?![A-Za-z])",
)


def canonical_role(label: str | None) -> str | None:
    """Map a function label to its canonical role.

    ``'I2C1_SCL'`` -> ``'SCL'``, ``'USART1 TX'`` -> ``'TX'``,
    ``'SPI1_SCLK'`` -> ``'SCK'``.  Returns *None* for labels naming no
    known role (e.g. ``'GPIO'``).
    """
    if not label:
        return None
    for token in _LABEL_SPLIT_RE.split(label.upper()):
        if not token:
            continue
        role = _ALIAS_TO_ROLE.get(token) or _ALIAS_TO_ROLE.get(token.rstrip("0123456789"))
        if role:
            return role
    return None


# ---------------------------------------------------------------------------
# Intent signals
# ---------------------------------------------------------------------------

INFORMATIONAL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b(which|what)\s+(pins?|gpios?|ports?)\b", re.I),
    re.compile(r"\blist\b", re.I),
    re.compile(r"\b(can|could)\s+i\s+use\b", re.I),
    re.compile(r"\b(available|options?)\b", re.I),
    re.compile(r"\btoleran(t|ce)\b", re.I),
    re.compile(r"\bdoes\s+(it|this|the\s+\w+)\s+(have|support)\b", re.I),
    re.compile(r"\bhow\s+many\b", re.I),
]

WIRING_VERB_RE = re.compile(
    r"\b(connect\w*|wir(e|es|ed|ing)|hook(s|ed|ing)?\s+up|attach\w*|interfac\w*)\b",
    re.I,
)

# Upper-case alphabetic prefix (>= 2) followed by >= 2 digits: MPU6050, HC-05, BMP280
DEVICE_NAME_RE = re.compile(r"(?<![A-Za-z0-9])([A-Z]{2,}-?\d{2,}[A-Z]?\d*)(?![A-Za-z0-9])")

# Simple components named by common noun rather than part number
COMPONENT_RE = re.compile(
    r"\b(LED|button|switch|motor|relay|buzzer|servo|potentiometer)s?\b", re.I,
)


def find_device_names(text: str) -> list[str]:
    """Return part-number style device names in *text*, in order.

    Pin identifiers (``PB10``) and the target microcontroller's own part
    number (``STM32``, ``STM32F103``) match the same shape and are excluded.
    """
    names: list[str] = []
    for match in DEVICE_NAME_RE.finditer(text or ""):
        name = match.group(1)
        if is_pin(name) or _is_mcu_name(name) or name in names:
            continue
        names.append(name)
    return names


def _is_mcu_name(name: str) -> bool:
    upper = name.upper()
    return upper.startswith(MCU_FAMILY) or MCU_NAME.startswith(upper)


def find_component(text: str) -> str | None:
    """Return the first simple component noun in *text* (``'LED'``, ``'Button'``)."""
    match = COMPONENT_RE.search(text or "")
    if match is None:
        return None
    word = match.group(1)
    return word.upper() if word.upper() == "LED" else word.capitalize()


# ---------------------------------------------------------------------------
# Heuristic tier cues
# ---------------------------------------------------------------------------

NEGATION_RE = re.compile(
    r"\b(avoid\w*|instead|don'?t\s+use|do\s+not\s+use|not\s+recommended|"
    r"alternative\w*|alternatively|remap\w*|reserved|conflicts?\s+with)\b",
    re.I,
)

WIRING_CUE_RE = re.compile(
    r"\b(connect\w*|wire[sd]?|wiring|attach\w*|hook\w*|goes\s+to|route[sd]?\s+to)\b|->|→",
    re.I,
)
