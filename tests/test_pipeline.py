"""Tests for the per-turn pipeline: classify, extract, reconcile, detect."""

from __future__ import annotations

from pinwise.engine.intent import Intent
from pinwise.engine.pipeline import process_turn
from pinwise.models.allocation import Allocation, Tier

MPU_REPLY = """\
For the GY-521 breakout:
- SCL to PB6
- SDA to PB7

---PIN_ALLOCATIONS---
PIN: PB6 | FUNCTION: SCL | DEVICE: MPU6050 | NOTES: GY-521 has built-in pull-ups
PIN: PB7 | FUNCTION: SDA | DEVICE: MPU6050 | NOTES: GY-521 has built-in pull-ups
---END_ALLOCATIONS---
"""


class TestProcessTurn:
    def test_connection_turn_allocates(self) -> None:
        result = process_turn("Connect an MPU6050", MPU_REPLY, {})
        assert result.intent is Intent.CONNECTION
        assert result.extraction.tier is Tier.STRUCTURED_BLOCK
        assert set(result.allocations) == {"PB6", "PB7"}
        assert result.summary.added == ["PB6", "PB7"]
        assert result.warnings == []

    def test_informational_turn_never_extracts(self) -> None:
        current = {"PA1": Allocation(function="GPIO", device="LED")}
        result = process_turn("Which pins are 5V tolerant?", MPU_REPLY, current)
        assert result.intent is Intent.INFORMATIONAL
        assert result.extraction.candidates == []
        assert result.allocations == current
        assert result.summary.unchanged == ["PA1"]
        assert not result.summary.changed

    def test_precomputed_intent_used(self) -> None:
        result = process_turn("anything", MPU_REPLY, {}, intent=Intent.INFORMATIONAL)
        assert result.allocations == {}

    def test_empty_extraction_keeps_map(self) -> None:
        current = {"PB6": Allocation(function="SCL", device="MPU6050")}
        result = process_turn("Connect an MPU6050", "Which breakout board are you using?", current)
        assert result.extraction.is_empty
        assert result.allocations == current
        # the partial device is still reported
        assert [w.device for w in result.warnings] == ["MPU6050"]

    def test_tool_payload_preferred(self) -> None:
        payload = [
            {"pin": "PA9", "function": "TX", "device": "HC-05"},
            {"pin": "PA10", "function": "RX", "device": "HC-05"},
        ]
        result = process_turn("Connect an HC-05", MPU_REPLY, {}, payload)
        assert result.extraction.tier is Tier.TOOL
        assert set(result.allocations) == {"PA9", "PA10"}

    def test_reassignment_over_two_turns(self) -> None:
        first = process_turn("Connect an MPU6050", MPU_REPLY, {})
        reply = (
            "Moved to the remapped pins.\n"
            "---PIN_ALLOCATIONS---\n"
            "PIN: PB8 | FUNCTION: SCL | DEVICE: MPU6050\n"
            "PIN: PB9 | FUNCTION: SDA | DEVICE: MPU6050\n"
            "---END_ALLOCATIONS---"
        )
        second = process_turn("Move the MPU6050 to PB8 and PB9", reply, first.allocations)
        assert set(second.allocations) == {"PB8", "PB9"}
        assert second.summary.reassigned == ["MPU6050"]

    def test_incomplete_device_warned(self) -> None:
        reply = "---PIN_ALLOCATIONS---\nPIN: PB6 | FUNCTION: SCL | DEVICE: MPU6050\n---END_ALLOCATIONS---"
        result = process_turn("Connect an MPU6050", reply, {})
        (warning,) = result.warnings
        assert warning.missing_roles == ["SDA"]

    def test_conflict_reported(self) -> None:
        current = {"PB6": Allocation(function="SCL", device="MPU6050")}
        reply = "---PIN_ALLOCATIONS---\nPIN: PB6 | FUNCTION: SCL | DEVICE: BMP280\n---END_ALLOCATIONS---"
        result = process_turn("Connect a BMP280", reply, current)
        assert result.allocations == current
        assert [c.pin for c in result.summary.conflicts] == ["PB6"]

    def test_microcontroller_mentions_do_not_evict(self) -> None:
        first = process_turn(
            "I'm using an STM32 Blue Pill, connect an LED to PC13",
            "Connect the LED anode to PC13 through a 330 ohm resistor.",
            {},
        )
        assert first.extraction.tier is Tier.HEURISTIC
        assert first.allocations == {"PC13": Allocation(function="GPIO", device="LED")}

        second = process_turn(
            "On my STM32, connect a button to PA0",
            "Connect the button between PA0 and GND.",
            first.allocations,
        )
        assert second.allocations == {
            "PA0": Allocation(function="GPIO", device="Button"),
            "PC13": Allocation(function="GPIO", device="LED"),
        }
        assert second.summary.added == ["PA0"]
        assert second.summary.removed == []
        assert second.summary.reassigned == []
