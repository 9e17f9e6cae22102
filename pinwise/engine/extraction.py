"""Tiered extraction of candidate allocations from an assistant reply.

Tiers are tried in order and extraction stops at the first tier that
yields at least one candidate:

1. **tool** — a structured ``allocate_pins`` payload from the model.
2. **structured-block** — a ``---PIN_ALLOCATIONS---`` block in the reply.
   A block that is present but yields nothing stops extraction with no
   candidates: an explicit empty block means "no allocations intended".
3. **heuristic** — a conservative scan of the prose for pin tokens.

Malformed entries are dropped and recorded on the result; extraction
never raises for bad model output.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from pinwise.config import (
    ALLOCATE_TOOL_NAME,
    ALLOCATION_BLOCK_END,
    ALLOCATION_BLOCK_START,
    DEFAULT_ROLE,
    HEURISTIC_WINDOW,
)
from pinwise.engine.vocabulary import (
    NEGATION_RE,
    ROLE_TOKEN_RE,
    WIRING_CUE_RE,
    canonical_role,
    find_component,
    find_device_names,
)
from pinwise.models.allocation import CandidateAllocation, Tier
from pinwise.models.pins import PIN_TOKEN_RE, MalformedPin, normalize_pin
from pinwise.models.results import DroppedEntry, ExtractionResult

logger = logging.getLogger(__name__)

_BLOCK_FIELD_RE = re.compile(r"(?:^|\|)\s*(PIN|FUNCTION|DEVICE|NOTES)\s*:", re.I)
_BULLET_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def extract(
    reply_text: str,
    tool_payload: Sequence[Any] | None = None,
    utterance: str = "",
) -> ExtractionResult:
    """Run the tier chain over one assistant reply.

    Parameters
    ----------
    reply_text:
        The assistant's free-form reply.
    tool_payload:
        Optional list of ``{pin, function, device, notes}`` entries from a
        structured tool invocation.
    utterance:
        The user's message, used by the heuristic tier to name the device.

    Returns
    -------
    ExtractionResult
        Candidates, the tier that produced them, and dropped entries.
    """
    result = ExtractionResult()

    if tool_payload:
        candidates, dropped = parse_tool_payload(tool_payload)
        result.dropped.extend(dropped)
        if candidates:
            result.candidates = candidates
            result.tier = Tier.TOOL
            logger.debug("Tool tier produced %d candidate(s)", len(candidates))
            return result

    blocks = find_allocation_blocks(reply_text or "")
    if blocks is not None:
        candidates, dropped = parse_allocation_blocks(blocks)
        result.dropped.extend(dropped)
        result.block_present = True
        if candidates:
            result.candidates = candidates
            result.tier = Tier.STRUCTURED_BLOCK
            logger.debug("Structured block produced %d candidate(s)", len(candidates))
        else:
            logger.debug("Allocation block present but empty; not falling through")
        return result

    candidates = scan_prose(reply_text or "", utterance)
    if candidates:
        result.candidates = candidates
        result.tier = Tier.HEURISTIC
        logger.debug("Heuristic tier produced %d candidate(s)", len(candidates))

    return result


def extract_candidates(
    reply_text: str,
    tool_payload: Sequence[Any] | None = None,
    utterance: str = "",
) -> list[CandidateAllocation]:
    """Return only the candidate list from :func:`extract`."""
    return extract(reply_text, tool_payload, utterance).candidates


# ---------------------------------------------------------------------------
# Tier 1: tool payload
# ---------------------------------------------------------------------------


def payload_from_tool_calls(tool_calls: Iterable[Any] | None) -> list[Any]:
    """Flatten ``allocate_pins`` tool calls into a single payload list.

    ``arguments`` may be a dict or a JSON string, and its ``allocations``
    value may itself be a JSON string.  Calls that cannot be decoded are
    skipped with a warning.
    """
    payload: list[Any] = []
    for call in tool_calls or ():
        if not isinstance(call, Mapping):
            continue
        function = call.get("function")
        if isinstance(function, Mapping):
            # OpenAI/Ollama shape: {"function": {"name": ..., "arguments": ...}}
            call = function
        if call.get("name") != ALLOCATE_TOOL_NAME:
            continue
        try:
            args = _decode_json(call.get("arguments"))
            allocations = _decode_json(args.get("allocations") if isinstance(args, Mapping) else None)
        except (json.JSONDecodeError, TypeError) as exc:
            logger.warning("Could not decode %s arguments: %s", ALLOCATE_TOOL_NAME, exc)
            continue
        if isinstance(allocations, list):
            payload.extend(allocations)
        else:
            logger.warning("%s call carried no allocation list", ALLOCATE_TOOL_NAME)
    return payload


def parse_tool_payload(
    payload: Sequence[Any],
) -> tuple[list[CandidateAllocation], list[DroppedEntry]]:
    """Validate each payload entry; invalid entries are dropped, not fatal."""
    found: dict[str, CandidateAllocation] = {}
    dropped: list[DroppedEntry] = []

    for entry in payload:
        if not isinstance(entry, Mapping) or "pin" not in entry or "function" not in entry:
            dropped.append(_drop(Tier.TOOL, entry, "entry needs at least pin and function"))
            logger.warning("Dropping tool entry without pin/function: %r", entry)
            continue
        try:
            candidate = CandidateAllocation(
                pin=entry["pin"],
                function=entry["function"],
                device=entry.get("device"),
                notes=entry.get("notes"),
                source=Tier.TOOL,
            )
        except ValidationError as exc:
            dropped.append(_drop(Tier.TOOL, entry, _first_error(exc)))
            logger.warning("Dropping tool entry %r: %s", entry, _first_error(exc))
            continue
        found[candidate.pin] = candidate

    return list(found.values()), dropped


# ---------------------------------------------------------------------------
# Tier 2: structured block
# ---------------------------------------------------------------------------


def find_allocation_blocks(text: str) -> list[str] | None:
    """Return the bodies of every allocation block, or *None* if there is none.

    A block whose end marker is missing (a truncated reply) runs to the
    end of the text.
    """
    start = text.find(ALLOCATION_BLOCK_START)
    if start == -1:
        return None

    blocks: list[str] = []
    while start != -1:
        body_start = start + len(ALLOCATION_BLOCK_START)
        end = text.find(ALLOCATION_BLOCK_END, body_start)
        if end == -1:
            blocks.append(text[body_start:])
            break
        blocks.append(text[body_start:end])
        start = text.find(ALLOCATION_BLOCK_START, end + len(ALLOCATION_BLOCK_END))
    return blocks


def parse_allocation_blocks(
    blocks: Iterable[str],
) -> tuple[list[CandidateAllocation], list[DroppedEntry]]:
    """Parse block lines of the form ``PIN: PB6 | FUNCTION: SCL | DEVICE: ... | NOTES: ...``."""
    found: dict[str, CandidateAllocation] = {}
    dropped: list[DroppedEntry] = []

    for block in blocks:
        for line in block.splitlines():
            if not line.strip():
                continue
            fields = parse_block_line(line)
            try:
                if "PIN" not in fields:
                    raise ValueError("no PIN field")
                if not fields.get("FUNCTION"):
                    raise ValueError("no FUNCTION field")
                candidate = CandidateAllocation(
                    pin=fields["PIN"],
                    function=fields["FUNCTION"],
                    device=fields.get("DEVICE"),
                    notes=fields.get("NOTES"),
                    source=Tier.STRUCTURED_BLOCK,
                )
            except ValidationError as exc:
                dropped.append(_drop(Tier.STRUCTURED_BLOCK, line, _first_error(exc)))
                logger.debug("Skipping block line %r: %s", line, _first_error(exc))
                continue
            except ValueError as exc:
                dropped.append(_drop(Tier.STRUCTURED_BLOCK, line, str(exc)))
                logger.debug("Skipping block line %r: %s", line, exc)
                continue
            found[candidate.pin] = candidate

    return list(found.values()), dropped


def parse_block_line(line: str) -> dict[str, str]:
    """Split one block line into its upper-cased field names and values."""
    line = _BULLET_RE.sub("", line.strip())
    matches = list(_BLOCK_FIELD_RE.finditer(line))
    fields: dict[str, str] = {}
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(line)
        value = line[match.end():end].strip().strip("|").strip()
        fields.setdefault(match.group(1).upper(), value)
    return fields


# ---------------------------------------------------------------------------
# Tier 3: heuristic prose scan
# ---------------------------------------------------------------------------


def scan_prose(reply_text: str, utterance: str = "") -> list[CandidateAllocation]:
    """Conservatively infer allocations from pin mentions in prose.

    A pin is kept only when its surrounding window carries wiring
    language and no negation or alternative language ("avoid",
    "instead", "don't use").  A pin negated anywhere in the reply is
    discarded entirely.
    """
    user_device = _device_from_text(utterance)
    accepted: dict[str, CandidateAllocation] = {}
    rejected: set[str] = set()

    for match in PIN_TOKEN_RE.finditer(reply_text):
        try:
            pin = normalize_pin(match.group(0))
        except MalformedPin:
            logger.debug("Ignoring pin-like token %r", match.group(0))
            continue

        window, offset = _window(reply_text, match.start(), match.end())
        if NEGATION_RE.search(window):
            logger.debug("Discarding %s: negation near mention", pin)
            rejected.add(pin)
            accepted.pop(pin, None)
            continue
        if pin in rejected or pin in accepted:
            continue

        role = _bound_role(window, match.start() - offset, match.end() - offset)
        if role is None and not WIRING_CUE_RE.search(window):
            continue

        if role is None:
            role = _nearest_role(window, match.start() - offset, match.end() - offset)

        accepted[pin] = CandidateAllocation(
            pin=pin,
            function=role or DEFAULT_ROLE,
            device=user_device or _device_from_text(window),
            source=Tier.HEURISTIC,
        )

    return list(accepted.values())


def _window(text: str, start: int, end: int) -> tuple[str, int]:
    """Return the text around ``text[start:end]``, clipped to its line."""
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    if line_end == -1:
        line_end = len(text)
    lo = max(line_start, start - HEURISTIC_WINDOW)
    hi = min(line_end, end + HEURISTIC_WINDOW)
    return text[lo:hi], lo


def _bound_role(window: str, pin_start: int, pin_end: int) -> str | None:
    """Return a role explicitly bound to the pin: ``SCL to PB6``, ``PB6 (SCL)``."""
    before = window[:pin_start]
    after = window[pin_end:]

    match = re.search(
        ROLE_TOKEN_RE.pattern + r"\s*(?:->|→|:|=|\bto\b|\bon\b|\bpin\b)\s*(?:pin\s+)?$",
        before,
    )
    if match:
        return _role_of(match.group(1))

    match = re.match(r"^\s*(?:\(|:|=|->|→|\bas\b|\bfor\b)\s*" + ROLE_TOKEN_RE.pattern, after)
    if match:
        return _role_of(match.group(1))
    return None


def _nearest_role(window: str, pin_start: int, pin_end: int) -> str | None:
    best: tuple[int, str] | None = None
    for match in ROLE_TOKEN_RE.finditer(window):
        if match.end() <= pin_start:
            distance = pin_start - match.end()
        elif match.start() >= pin_end:
            distance = match.start() - pin_end
        else:
            continue
        if best is None or distance < best[0]:
            best = (distance, match.group(1))
    return _role_of(best[1]) if best else None


def _role_of(token: str) -> str:
    return canonical_role(token) or token


def _device_from_text(text: str) -> str | None:
    names = find_device_names(text)
    if names:
        return names[0]
    return find_component(text)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decode_json(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', '')}" if loc else first.get("msg", "")


def _drop(tier: Tier, raw: Any, reason: str) -> DroppedEntry:
    return DroppedEntry(tier=tier, raw=raw if isinstance(raw, str) else repr(raw), reason=reason)
