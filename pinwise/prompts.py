"""Prompt assembly — system prompt, message list, and reply clean-up."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

from pinwise.config import (
    ALLOCATE_TOOL_NAME,
    ALLOCATION_BLOCK_END,
    ALLOCATION_BLOCK_START,
    BOARD_NAME,
    MAX_PROMPT_HISTORY,
    MCU_NAME,
)
from pinwise.engine.intent import Intent
from pinwise.models.allocation import Allocation, group_by_device
from pinwise.models.pins import pin_sort_key
from pinwise.models.results import IncompleteWarning
from pinwise.models.session import ChatMessage
from pinwise.reference.records import ReferenceContext

ALLOCATE_PINS_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": ALLOCATE_TOOL_NAME,
        "description": (
            f"Allocate one or more pins for device connections on the {MCU_NAME}. "
            "Use this only when giving specific pin connections for a device the "
            "user is actually wiring up."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "allocations": {
                    "type": "array",
                    "description": "List of pin allocations to make",
                    "items": {
                        "type": "object",
                        "properties": {
                            "pin": {"type": "string", "description": "Pin name, e.g. PB6"},
                            "function": {"type": "string", "description": "Role, e.g. SCL, TX, GPIO"},
                            "device": {"type": "string", "description": "Device name, e.g. MPU6050"},
                            "notes": {"type": "string", "description": "Wiring notes"},
                        },
                        "required": ["pin", "function", "device"],
                    },
                },
            },
            "required": ["allocations"],
        },
    },
}

_INTRO = f"""\
You are an expert assistant for the {MCU_NAME} microcontroller ({BOARD_NAME} board).
You know its pinout, peripherals, clock configuration and common use cases.

SCOPE:
Only answer questions about the {MCU_NAME} and hardware connected to it: pinout,
peripherals (I2C, SPI, UART, GPIO, ADC, timers), wiring and compatible modules.
For unrelated topics, say that you only help with the {MCU_NAME}.
"""

_BLOCK_RULES = f"""
PIN ALLOCATION BLOCK:
When you give specific pin connections for a device the user is actually
connecting, end your reply with an allocation block:
{ALLOCATION_BLOCK_START}
PIN: <pin> | FUNCTION: <function> | DEVICE: <device> | NOTES: <notes>
{ALLOCATION_BLOCK_END}

Include every device that uses a pin (sensors, LEDs, buttons, modules).
Do NOT include a block for informational questions such as
"Which pins are 5V tolerant?" or "How many ADC channels are there?".

Example for an MPU6050:
{ALLOCATION_BLOCK_START}
PIN: PB6 | FUNCTION: SCL | DEVICE: MPU6050 | NOTES: 4.7k pull-up needed
PIN: PB7 | FUNCTION: SDA | DEVICE: MPU6050 | NOTES: 4.7k pull-up needed
{ALLOCATION_BLOCK_END}
"""

_KEY_FACTS = f"""
KEY FACTS ABOUT THE {MCU_NAME}:
- 64KB Flash, 20KB SRAM, 72MHz max clock, 48-pin LQFP package
- 2x SPI, 2x I2C, 3x USART, USB, CAN, 2x ADC, 4 timers; 3.3V logic
- I2C1: PB6 (SCL), PB7 (SDA), remappable to PB8/PB9
- I2C2: PB10 (SCL), PB11 (SDA), shares pins with USART3
- USART1: PA9 (TX), PA10 (RX), remappable to PB6/PB7
- USART2: PA2 (TX), PA3 (RX)
- SPI1: PA5 (SCK), PA6 (MISO), PA7 (MOSI), PA4 (NSS)
- SPI2: PB13 (SCK), PB14 (MISO), PB15 (MOSI), PB12 (NSS)
- USB: PA11 (D-), PA12 (D+), shared with CAN
- ADC: PA0-PA7, PB0-PB1 (channels 0-9)
- 5V tolerant: PA8-PA15, PB2-PB4, PB6-PB15 (NOT PA0-PA7, PB0-PB1)
"""

_ALLOCATION_RULES = """
RULES FOR EXISTING ALLOCATIONS:
1. Do not reuse these pins for new devices.
2. If a device looks incomplete (e.g. I2C with only SCL), tell the user and offer
   to complete or remove it.
3. To move a device, output its complete new pin set; its old pins are released
   automatically.
"""

_CONNECTION_STEPS = """
CONNECTION INSTRUCTIONS:
The user wants to connect hardware. Use a two-step process:
STEP 1 - If the user has not said which breakout board or module they have, ask.
  Give only generic information about the chip and do NOT output an allocation block yet.
STEP 2 - Once the user confirms their hardware, give the specific connections
  (interface, pins, voltage, pull-ups, I2C address) and include the allocation
  block. Breakout boards usually have built-in pull-ups; bare chips need 4.7k pull-ups.
Use the device name the user mentioned.
"""

_REMINDER = """
REMINDER: include the allocation block only when the user is connecting devices,
never for informational questions.
"""


def build_system_prompt(
    allocations: Mapping[str, Allocation],
    warnings: Sequence[IncompleteWarning] = (),
    intent: Intent = Intent.INFORMATIONAL,
    context: ReferenceContext | None = None,
) -> str:
    """Assemble the system message for one turn.

    Session state (current allocations and incomplete-device alerts) and
    reference rows are appended after the fixed instructions; the
    hardware-confirmation steps are only included for connection turns.
    """
    parts = [_INTRO, _BLOCK_RULES, _KEY_FACTS]

    if allocations:
        parts.append(_format_allocations(allocations))
        parts.append(_ALLOCATION_RULES)

    if warnings:
        lines = ["", "INCOMPLETE DEVICES (alert the user):"]
        lines.extend(f"- {warning.message}" for warning in warnings)
        parts.append("\n".join(lines) + "\n")

    if intent is Intent.CONNECTION:
        parts.append(_CONNECTION_STEPS)

    if context is not None and not context.is_empty:
        parts.append(_format_context(context))

    parts.append(_REMINDER)
    return "".join(parts)


def build_messages(
    system_prompt: str,
    history: Iterable[ChatMessage],
    utterance: str,
) -> list[dict[str, str]]:
    """System prompt, the most recent history, then the new user message."""
    recent = list(history)[-MAX_PROMPT_HISTORY:]
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": msg.role, "content": msg.content} for msg in recent)
    messages.append({"role": "user", "content": utterance})
    return messages


_BLOCK_STRIP_RE = re.compile(
    re.escape(ALLOCATION_BLOCK_START) + r".*?(?:" + re.escape(ALLOCATION_BLOCK_END) + r"|\Z)",
    re.DOTALL,
)


def strip_allocation_blocks(text: str) -> str:
    """Remove every allocation block from a reply before showing it.

    An unterminated block is removed up to the end of the text.
    """
    stripped = _BLOCK_STRIP_RE.sub("", text)
    return re.sub(r"\n{3,}", "\n\n", stripped).strip()


# -- Formatting ----------------------------------------------------------


def _format_allocations(allocations: Mapping[str, Allocation]) -> str:
    lines = ["", "CURRENT PIN ALLOCATIONS IN THIS SESSION:"]
    for device, pins in group_by_device(allocations).items():
        lines.append(f"{device}:")
        lines.extend(f"  - {pin} ({allocations[pin].function})" for pin in pins)

    ungrouped = sorted(
        (pin for pin, alloc in allocations.items() if alloc.device is None),
        key=pin_sort_key,
    )
    if ungrouped:
        lines.append("Other pins:")
        lines.extend(f"  - {pin}: {allocations[pin].function}" for pin in ungrouped)
    return "\n".join(lines) + "\n"


def _format_context(context: ReferenceContext) -> str:
    lines: list[str] = []
    if context.devices:
        lines += ["", "KNOWN DEVICE CONNECTION PATTERNS:"]
        for device in context.devices:
            pins = ", ".join(f"{role}={pin}" for role, pin in device.default_pins.items())
            lines.append(f"{device.device_name} ({device.interface_type}): {pins}")
            if device.requirements:
                lines.append(f"  Requirements: {device.requirements}")
            if device.notes:
                lines.append(f"  Notes: {device.notes}")
    if context.pins:
        lines += ["", "RELEVANT PIN DATA:"]
        lines.extend(
            f"- {pin.pin} (LQFP48 pin {pin.lqfp48}): {pin.notes}" for pin in context.pins
        )
    if context.knowledge:
        lines += ["", "RELEVANT KNOWLEDGE:"]
        lines.extend(f"- {chunk.content}" for chunk in context.knowledge)
    return "\n".join(lines) + "\n"
