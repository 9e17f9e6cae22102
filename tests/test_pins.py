"""Tests for pin identifier normalization."""

from __future__ import annotations

import pytest

from pinwise.models.pins import MalformedPin, PinId, is_pin, normalize_pin, pin_sort_key


class TestNormalizePin:
    @pytest.mark.parametrize("raw", ["PB6", "pb6", "PB06", " Pb6 ", "pB06"])
    def test_spellings_of_pb6_are_equal(self, raw: str) -> None:
        assert normalize_pin(raw) == "PB6"

    def test_result_is_pin_id(self) -> None:
        pin = normalize_pin("pa10")
        assert isinstance(pin, PinId)
        assert pin.port == "A"
        assert pin.number == 10

    def test_idempotent(self) -> None:
        pin = normalize_pin("PC13")
        assert normalize_pin(pin) == pin
        assert normalize_pin(str(pin)) == pin

    @pytest.mark.parametrize("raw", ["PZ99", "PA16", "PF1", "P6", "B6", "PB", "", "GPIO", "PB6x"])
    def test_malformed_tokens_rejected(self, raw: str) -> None:
        with pytest.raises(MalformedPin):
            normalize_pin(raw)

    @pytest.mark.parametrize("raw", [None, 6, ["PB6"]])
    def test_non_strings_rejected(self, raw: object) -> None:
        with pytest.raises(MalformedPin):
            normalize_pin(raw)

    def test_malformed_pin_is_value_error(self) -> None:
        with pytest.raises(ValueError) as excinfo:
            normalize_pin("PZ99")
        assert excinfo.value.raw == "PZ99"

    def test_highest_pin_in_port(self) -> None:
        assert normalize_pin("pe15") == "PE15"


class TestPinHelpers:
    def test_is_pin(self) -> None:
        assert is_pin("pb6")
        assert not is_pin("PZ99")

    def test_sort_key_is_numeric_within_port(self) -> None:
        pins = ["PB1", "PA10", "PA2", "PC13", "PA0"]
        assert sorted(pins, key=pin_sort_key) == ["PA0", "PA2", "PA10", "PB1", "PC13"]

    def test_pin_id_hashes_like_str(self) -> None:
        allocations = {normalize_pin("pb06"): "SCL"}
        assert allocations["PB6"] == "SCL"
