"""Tests for reconciliation of candidates into the allocation map."""

from __future__ import annotations

import pytest

from pinwise.engine.reconciliation import reconcile, summarize
from pinwise.models.allocation import Allocation, CandidateAllocation, Tier


def cand(pin: str, function: str, device: str | None = None, notes: str | None = None) -> CandidateAllocation:
    return CandidateAllocation(
        pin=pin, function=function, device=device, notes=notes, source=Tier.STRUCTURED_BLOCK,
    )


@pytest.fixture
def mpu_map() -> dict[str, Allocation]:
    return {
        "PB6": Allocation(function="SCL", device="MPU6050", notes="4.7k pull-up"),
        "PB7": Allocation(function="SDA", device="MPU6050", notes="4.7k pull-up"),
    }


# ---------------------------------------------------------------------------
# Basic merging
# ---------------------------------------------------------------------------


class TestMerge:
    def test_add_to_empty_map(self) -> None:
        result = reconcile({}, [cand("PB6", "SCL", "MPU6050"), cand("PB7", "SDA", "MPU6050")])
        assert set(result.allocations) == {"PB6", "PB7"}
        assert result.allocations["PB6"] == Allocation(function="SCL", device="MPU6050")
        assert result.summary.added == ["PB6", "PB7"]
        assert result.summary.changed

    def test_unrelated_devices_carried_forward(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PA1", "GPIO", "LED")])
        assert set(result.allocations) == {"PA1", "PB6", "PB7"}
        assert result.summary.unchanged == ["PB6", "PB7"]

    def test_input_map_not_mutated(self, mpu_map) -> None:
        before = dict(mpu_map)
        reconcile(mpu_map, [cand("PB8", "SCL", "MPU6050"), cand("PB9", "SDA", "MPU6050")])
        assert mpu_map == before

    def test_idempotent(self, mpu_map) -> None:
        candidates = [cand("PB6", "SCL", "MPU6050"), cand("PB7", "SDA", "MPU6050"), cand("PA1", "GPIO", "LED")]
        once = reconcile(mpu_map, candidates).allocations
        twice = reconcile(once, candidates)
        assert twice.allocations == once
        assert not twice.summary.changed

    def test_no_candidates_is_no_change(self, mpu_map) -> None:
        result = reconcile(mpu_map, [])
        assert result.allocations == mpu_map
        assert not result.summary.changed

    def test_device_less_candidate(self) -> None:
        result = reconcile({}, [cand("PC13", "GPIO")])
        assert result.allocations["PC13"].device is None

    def test_duplicate_candidates_last_wins(self) -> None:
        result = reconcile({}, [cand("PA1", "GPIO", "LED"), cand("PA1", "PWM", "LED")])
        assert result.allocations["PA1"].function == "PWM"


# ---------------------------------------------------------------------------
# Reassignment and in-place updates
# ---------------------------------------------------------------------------


class TestReassignment:
    def test_pin_set_change_releases_old_pins(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB8", "SCL", "MPU6050"), cand("PB9", "SDA", "MPU6050")])
        assert set(result.allocations) == {"PB8", "PB9"}
        assert result.summary.removed == ["PB6", "PB7"]
        assert result.summary.added == ["PB8", "PB9"]
        assert result.summary.reassigned == ["MPU6050"]

    def test_device_match_ignores_case_and_whitespace(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB8", "SCL", " mpu6050 "), cand("PB9", "SDA", "MPU6050")])
        assert set(result.allocations) == {"PB8", "PB9"}

    def test_partial_restatement_reassigns(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB6", "SCL", "MPU6050")])
        assert set(result.allocations) == {"PB6"}
        assert result.summary.removed == ["PB7"]

    def test_same_pin_set_updates_in_place(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB6", "SCL", "MPU6050", notes="x"), cand("PB7", "SDA", "MPU6050")])
        assert result.allocations["PB6"].notes == "x"
        assert result.allocations["PB7"] is mpu_map["PB7"]
        assert result.summary.updated == ["PB6"]
        assert result.summary.unchanged == ["PB7"]
        assert result.summary.reassigned == []

    def test_function_change_replaces_pin(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB6", "SDA", "MPU6050"), cand("PB7", "SCL", "MPU6050")])
        assert result.allocations["PB6"].function == "SDA"
        assert result.allocations["PB6"].notes is None
        assert result.summary.updated == ["PB6", "PB7"]


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class TestConflicts:
    def test_pin_held_by_other_device_is_not_taken(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB6", "SCL", "BMP280"), cand("PB7", "SDA", "BMP280")])
        assert result.allocations == mpu_map
        assert [c.pin for c in result.summary.conflicts] == ["PB6", "PB7"]
        conflict = result.summary.conflicts[0]
        assert conflict.held_by == "MPU6050"
        assert conflict.requested_device == "BMP280"

    def test_conflicting_and_free_pins_mixed(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB6", "SCL", "BMP280"), cand("PB10", "SDA", "BMP280")])
        assert result.allocations["PB6"].device == "MPU6050"
        assert result.allocations["PB10"].device == "BMP280"

    def test_device_less_candidate_cannot_take_device_pin(self, mpu_map) -> None:
        result = reconcile(mpu_map, [cand("PB6", "GPIO")])
        assert result.allocations["PB6"].device == "MPU6050"
        assert len(result.summary.conflicts) == 1

    def test_device_less_pin_can_be_claimed(self) -> None:
        current = {"PC13": Allocation(function="GPIO")}
        result = reconcile(current, [cand("PC13", "GPIO", "LED")])
        assert result.allocations["PC13"].device == "LED"

    def test_pins_released_in_same_turn_can_be_claimed(self, mpu_map) -> None:
        result = reconcile(mpu_map, [
            cand("PB8", "SCL", "MPU6050"),
            cand("PB9", "SDA", "MPU6050"),
            cand("PB6", "SCL", "BMP280"),
            cand("PB7", "SDA", "BMP280"),
        ])
        assert result.allocations["PB6"].device == "BMP280"
        assert result.allocations["PB8"].device == "MPU6050"
        assert result.summary.conflicts == []


class TestSummarize:
    def test_diff(self) -> None:
        before = {"PA1": Allocation(function="GPIO"), "PA2": Allocation(function="TX")}
        after = {"PA2": Allocation(function="RX"), "PA10": Allocation(function="GPIO")}
        summary = summarize(before, after)
        assert summary.added == ["PA10"]
        assert summary.removed == ["PA1"]
        assert summary.updated == ["PA2"]
        assert summary.unchanged == []
