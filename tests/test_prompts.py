"""Tests for prompt assembly."""

from __future__ import annotations

from pinwise.engine.intent import Intent
from pinwise.models.allocation import Allocation
from pinwise.models.results import IncompleteWarning
from pinwise.models.session import ChatMessage
from pinwise.prompts import (
    ALLOCATE_PINS_TOOL,
    build_messages,
    build_system_prompt,
    strip_allocation_blocks,
)
from pinwise.reference.records import DevicePattern, KnowledgeChunk, PinInfo, ReferenceContext


class TestSystemPrompt:
    def test_base_prompt(self) -> None:
        prompt = build_system_prompt({})
        assert "STM32F103C8T6" in prompt
        assert "---PIN_ALLOCATIONS---" in prompt
        assert "---END_ALLOCATIONS---" in prompt
        assert "PIN: <pin> | FUNCTION: <function> | DEVICE: <device> | NOTES: <notes>" in prompt
        assert "CURRENT PIN ALLOCATIONS" not in prompt
        assert "CONNECTION INSTRUCTIONS" not in prompt

    def test_allocations_grouped_by_device(self) -> None:
        allocations = {
            "PB7": Allocation(function="SDA", device="MPU6050"),
            "PB6": Allocation(function="SCL", device="MPU6050"),
            "PC13": Allocation(function="GPIO"),
        }
        prompt = build_system_prompt(allocations)
        assert "CURRENT PIN ALLOCATIONS IN THIS SESSION:" in prompt
        assert "MPU6050:\n  - PB6 (SCL)\n  - PB7 (SDA)" in prompt
        assert "Other pins:\n  - PC13: GPIO" in prompt
        assert "Do not reuse these pins" in prompt

    def test_incomplete_alerts(self) -> None:
        warning = IncompleteWarning(
            device="MPU6050", interface="I2C", missing_roles=["SDA"], present_roles=["SCL"],
        )
        prompt = build_system_prompt({"PB6": Allocation(function="SCL", device="MPU6050")}, [warning])
        assert "INCOMPLETE DEVICES" in prompt
        assert "MPU6050 (I2C) only has SCL allocated; missing SDA." in prompt

    def test_connection_steps_only_for_connection_intent(self) -> None:
        assert "CONNECTION INSTRUCTIONS" in build_system_prompt({}, intent=Intent.CONNECTION)
        assert "CONNECTION INSTRUCTIONS" not in build_system_prompt({}, intent=Intent.INFORMATIONAL)

    def test_reference_context(self) -> None:
        context = ReferenceContext(
            pins=[PinInfo(pin="PB6", port="B", number=6, lqfp48=42, notes="I2C1 SCL")],
            knowledge=[KnowledgeChunk(id="k", topic="i2c", content="Pull-ups are required.")],
            devices=[DevicePattern(
                id="mpu6050", device_name="MPU6050", interface_type="I2C",
                default_pins={"SCL": "PB6", "SDA": "PB7"}, requirements="4.7k pull-ups",
            )],
        )
        prompt = build_system_prompt({}, context=context)
        assert "MPU6050 (I2C): SCL=PB6, SDA=PB7" in prompt
        assert "Requirements: 4.7k pull-ups" in prompt
        assert "- PB6 (LQFP48 pin 42): I2C1 SCL" in prompt
        assert "- Pull-ups are required." in prompt


class TestMessages:
    def test_order_and_roles(self) -> None:
        history = [
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="hello"),
        ]
        messages = build_messages("SYS", history, "Connect an LED")
        assert messages == [
            {"role": "system", "content": "SYS"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "Connect an LED"},
        ]

    def test_history_capped_at_thirty(self) -> None:
        history = [ChatMessage(role="user", content=str(i)) for i in range(45)]
        messages = build_messages("SYS", history, "now")
        assert len(messages) == 32
        assert messages[1]["content"] == "15"
        assert messages[-2]["content"] == "44"


class TestStripBlocks:
    def test_block_removed(self) -> None:
        text = (
            "Connect SCL to PB6.\n\n"
            "---PIN_ALLOCATIONS---\nPIN: PB6 | FUNCTION: SCL | DEVICE: MPU6050\n---END_ALLOCATIONS---\n\n"
            "Anything else?"
        )
        assert strip_allocation_blocks(text) == "Connect SCL to PB6.\n\nAnything else?"

    def test_unterminated_block_removed(self) -> None:
        text = "Wiring below.\n---PIN_ALLOCATIONS---\nPIN: PA1 | FUNCTION: GPIO"
        assert strip_allocation_blocks(text) == "Wiring below."

    def test_no_block(self) -> None:
        assert strip_allocation_blocks("  plain reply \n") == "plain reply"


def test_tool_schema_names_allocate_pins() -> None:
    function = ALLOCATE_PINS_TOOL["function"]
    assert function["name"] == "allocate_pins"
    item = function["parameters"]["properties"]["allocations"]["items"]
    assert item["required"] == ["pin", "function", "device"]
