"""Tests for the incompleteness detector."""

from __future__ import annotations

from pinwise.engine.completeness import KNOWN_DEVICE_INTERFACES, detect_incomplete, interface_for
from pinwise.models.allocation import Allocation


class TestDetectIncomplete:
    def test_i2c_device_missing_sda(self) -> None:
        warnings = detect_incomplete({"PB6": Allocation(function="SCL", device="MPU6050")})
        assert len(warnings) == 1
        warning = warnings[0]
        assert warning.device == "MPU6050"
        assert warning.interface == "I2C"
        assert warning.missing_roles == ["SDA"]
        assert warning.present_roles == ["SCL"]
        assert warning.message == "MPU6050 (I2C) only has SCL allocated; missing SDA."

    def test_complete_device_not_flagged(self) -> None:
        allocations = {
            "PB6": Allocation(function="SCL", device="MPU6050"),
            "PB7": Allocation(function="SDA", device="MPU6050"),
        }
        assert detect_incomplete(allocations) == []

    def test_function_labels_with_peripheral_prefix(self) -> None:
        allocations = {
            "PB6": Allocation(function="I2C1_SCL", device="BMP280"),
            "PB7": Allocation(function="I2C1_SDA", device="BMP280"),
        }
        assert detect_incomplete(allocations) == []

    def test_spi_chip_select_optional(self) -> None:
        allocations = {
            "PA5": Allocation(function="SCK", device="SD Card"),
            "PA7": Allocation(function="MOSI", device="SD Card"),
        }
        (warning,) = detect_incomplete(allocations)
        assert warning.interface == "SPI"
        assert warning.missing_roles == ["MISO"]

    def test_known_device_with_no_role_pins(self) -> None:
        (warning,) = detect_incomplete({"PB0": Allocation(function="GPIO", device="HC-05")})
        assert warning.interface == "UART"
        assert warning.missing_roles == ["TX", "RX"]
        assert warning.message == "HC-05 (UART) has no TX, RX allocated."

    def test_unknown_device_inferred_from_roles(self) -> None:
        (warning,) = detect_incomplete({"PA2": Allocation(function="TX", device="Widget")})
        assert warning.interface == "UART"
        assert warning.missing_roles == ["RX"]

    def test_single_pin_devices_never_flagged(self) -> None:
        allocations = {
            "PA1": Allocation(function="GPIO", device="LED"),
            "PA0": Allocation(function="ADC", device="Potentiometer"),
            "PC13": Allocation(function="GPIO"),
        }
        assert detect_incomplete(allocations) == []

    def test_device_names_grouped_case_insensitively(self) -> None:
        allocations = {
            "PB6": Allocation(function="SCL", device="MPU6050"),
            "PB7": Allocation(function="SDA", device="mpu6050"),
        }
        assert detect_incomplete(allocations) == []

    def test_sorted_by_device(self) -> None:
        allocations = {
            "PB6": Allocation(function="SCL", device="MPU6050"),
            "PA9": Allocation(function="TX", device="GPS Module"),
        }
        assert [w.device for w in detect_incomplete(allocations)] == ["GPS Module", "MPU6050"]


class TestInterfaceFor:
    def test_known_devices_include_keyword_part_numbers(self) -> None:
        assert KNOWN_DEVICE_INTERFACES["mpu6050"] == "I2C"
        assert KNOWN_DEVICE_INTERFACES["gy521"] == "I2C"
        assert KNOWN_DEVICE_INTERFACES["nrf24l01"] == "SPI"

    def test_name_normalized(self) -> None:
        assert interface_for("gy-521", set()) == "I2C"

    def test_no_interface(self) -> None:
        assert interface_for("Relay Module", {"PWM"}) is None
