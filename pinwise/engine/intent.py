"""Intent classification — should this turn allocate pins at all?"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pinwise.engine.vocabulary import (
    INFORMATIONAL_PATTERNS,
    WIRING_VERB_RE,
    find_device_names,
)


class Intent(str, Enum):
    """Whether a user turn is a question or a request to wire something."""

    INFORMATIONAL = "informational"
    CONNECTION = "connection-intent"


@dataclass(frozen=True)
class IntentSignals:
    """Lexical signals found in an utterance."""

    informational: bool
    wiring_verb: bool
    device_names: tuple[str, ...]

    @property
    def intent(self) -> Intent:
        # Informational questions never allocate, even when they name a device.
        if self.informational:
            return Intent.INFORMATIONAL
        if self.wiring_verb or self.device_names:
            return Intent.CONNECTION
        return Intent.INFORMATIONAL


def detect_signals(utterance: str) -> IntentSignals:
    text = utterance or ""
    return IntentSignals(
        informational=any(p.search(text) for p in INFORMATIONAL_PATTERNS),
        wiring_verb=WIRING_VERB_RE.search(text) is not None,
        device_names=tuple(find_device_names(text)),
    )


def classify_intent(utterance: str) -> Intent:
    """Return :attr:`Intent.CONNECTION` only for turns that commit to wiring.

    Querying language ("which pins...", "can I use...", "list...",
    "available", tolerance and capability questions) wins over wiring
    verbs and device names.  With no signal at all the turn is treated as
    informational.
    """
    return detect_signals(utterance).intent
