"""Seed data for the reference database: STM32F103C8T6 pins, knowledge, device patterns."""

from __future__ import annotations

from typing import Any

# pin, port, number, lqfp48, type, five_tolerant, reset_state, functions, notes
PINS: list[dict[str, Any]] = [
    {"pin": "PC13", "lqfp48": 2, "five_tolerant": False, "functions": ["GPIO", "TAMPER-RTC"],
     "notes": "Drives the on-board LED on the Blue Pill (active low). Sink only, max 3 mA."},
    {"pin": "PC14", "lqfp48": 3, "five_tolerant": False, "functions": ["GPIO", "OSC32_IN"],
     "notes": "32.768 kHz LSE crystal input. Low drive strength."},
    {"pin": "PC15", "lqfp48": 4, "five_tolerant": False, "functions": ["GPIO", "OSC32_OUT"],
     "notes": "32.768 kHz LSE crystal output. Low drive strength."},
    {"pin": "PD0", "lqfp48": 5, "five_tolerant": True, "functions": ["OSC_IN"],
     "notes": "8 MHz HSE crystal input on the Blue Pill."},
    {"pin": "PD1", "lqfp48": 6, "five_tolerant": True, "functions": ["OSC_OUT"],
     "notes": "8 MHz HSE crystal output on the Blue Pill."},
    {"pin": "PA0", "lqfp48": 10, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN0", "TIM2_CH1_ETR", "USART2_CTS", "WKUP"],
     "notes": "ADC channel 0. Wake-up pin. Not 5V tolerant."},
    {"pin": "PA1", "lqfp48": 11, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN1", "TIM2_CH2", "USART2_RTS"],
     "notes": "ADC channel 1. Not 5V tolerant."},
    {"pin": "PA2", "lqfp48": 12, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN2", "TIM2_CH3", "USART2_TX"],
     "notes": "USART2 TX. ADC channel 2. Not 5V tolerant."},
    {"pin": "PA3", "lqfp48": 13, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN3", "TIM2_CH4", "USART2_RX"],
     "notes": "USART2 RX. ADC channel 3. Not 5V tolerant."},
    {"pin": "PA4", "lqfp48": 14, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN4", "SPI1_NSS", "USART2_CK"],
     "notes": "SPI1 NSS (chip select). ADC channel 4. Not 5V tolerant."},
    {"pin": "PA5", "lqfp48": 15, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN5", "SPI1_SCK"],
     "notes": "SPI1 SCK. ADC channel 5. Not 5V tolerant."},
    {"pin": "PA6", "lqfp48": 16, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN6", "SPI1_MISO", "TIM3_CH1"],
     "notes": "SPI1 MISO. ADC channel 6. Not 5V tolerant."},
    {"pin": "PA7", "lqfp48": 17, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN7", "SPI1_MOSI", "TIM3_CH2"],
     "notes": "SPI1 MOSI. ADC channel 7. Not 5V tolerant."},
    {"pin": "PB0", "lqfp48": 18, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN8", "TIM3_CH3"],
     "notes": "ADC channel 8. Not 5V tolerant."},
    {"pin": "PB1", "lqfp48": 19, "five_tolerant": False,
     "functions": ["GPIO", "ADC12_IN9", "TIM3_CH4"],
     "notes": "ADC channel 9. Not 5V tolerant."},
    {"pin": "PB2", "lqfp48": 20, "five_tolerant": True, "functions": ["GPIO", "BOOT1"],
     "notes": "BOOT1 strap. Keep low at reset for normal boot."},
    {"pin": "PB10", "lqfp48": 21, "five_tolerant": True,
     "functions": ["GPIO", "I2C2_SCL", "USART3_TX"],
     "notes": "I2C2 SCL, shared with USART3 TX. 5V tolerant."},
    {"pin": "PB11", "lqfp48": 22, "five_tolerant": True,
     "functions": ["GPIO", "I2C2_SDA", "USART3_RX"],
     "notes": "I2C2 SDA, shared with USART3 RX. 5V tolerant."},
    {"pin": "PB12", "lqfp48": 25, "five_tolerant": True,
     "functions": ["GPIO", "SPI2_NSS", "I2C2_SMBA", "TIM1_BKIN"],
     "notes": "SPI2 NSS. 5V tolerant."},
    {"pin": "PB13", "lqfp48": 26, "five_tolerant": True,
     "functions": ["GPIO", "SPI2_SCK", "TIM1_CH1N"],
     "notes": "SPI2 SCK. 5V tolerant."},
    {"pin": "PB14", "lqfp48": 27, "five_tolerant": True,
     "functions": ["GPIO", "SPI2_MISO", "TIM1_CH2N"],
     "notes": "SPI2 MISO. 5V tolerant."},
    {"pin": "PB15", "lqfp48": 28, "five_tolerant": True,
     "functions": ["GPIO", "SPI2_MOSI", "TIM1_CH3N"],
     "notes": "SPI2 MOSI. 5V tolerant."},
    {"pin": "PA8", "lqfp48": 29, "five_tolerant": True,
     "functions": ["GPIO", "TIM1_CH1", "MCO", "USART1_CK"],
     "notes": "TIM1 CH1 / MCO clock output. 5V tolerant."},
    {"pin": "PA9", "lqfp48": 30, "five_tolerant": True,
     "functions": ["GPIO", "USART1_TX", "TIM1_CH2"],
     "notes": "USART1 TX (bootloader serial). 5V tolerant."},
    {"pin": "PA10", "lqfp48": 31, "five_tolerant": True,
     "functions": ["GPIO", "USART1_RX", "TIM1_CH3"],
     "notes": "USART1 RX (bootloader serial). 5V tolerant."},
    {"pin": "PA11", "lqfp48": 32, "five_tolerant": True,
     "functions": ["GPIO", "USB_DM", "CAN_RX", "TIM1_CH4"],
     "notes": "USB D-, shared with CAN RX. 5V tolerant."},
    {"pin": "PA12", "lqfp48": 33, "five_tolerant": True,
     "functions": ["GPIO", "USB_DP", "CAN_TX", "TIM1_ETR"],
     "notes": "USB D+ (1.5k pull-up on the Blue Pill), shared with CAN TX. 5V tolerant."},
    {"pin": "PA13", "lqfp48": 34, "five_tolerant": True, "functions": ["SWDIO", "GPIO"],
     "notes": "SWD data. Reusing it as GPIO disables debugging."},
    {"pin": "PA14", "lqfp48": 37, "five_tolerant": True, "functions": ["SWCLK", "GPIO"],
     "notes": "SWD clock. Reusing it as GPIO disables debugging."},
    {"pin": "PA15", "lqfp48": 38, "five_tolerant": True,
     "functions": ["JTDI", "GPIO", "TIM2_CH1_ETR", "SPI1_NSS"],
     "notes": "JTAG TDI after reset; free once JTAG is disabled (SWD kept)."},
    {"pin": "PB3", "lqfp48": 39, "five_tolerant": True,
     "functions": ["JTDO", "GPIO", "TIM2_CH2", "SPI1_SCK"],
     "notes": "JTAG TDO after reset; free once JTAG is disabled."},
    {"pin": "PB4", "lqfp48": 40, "five_tolerant": True,
     "functions": ["NJTRST", "GPIO", "TIM3_CH1", "SPI1_MISO"],
     "notes": "JTAG NTRST after reset; free once JTAG is disabled."},
    {"pin": "PB5", "lqfp48": 41, "five_tolerant": False,
     "functions": ["GPIO", "I2C1_SMBA", "TIM3_CH2", "SPI1_MOSI"],
     "notes": "General purpose. Not 5V tolerant."},
    {"pin": "PB6", "lqfp48": 42, "five_tolerant": True,
     "functions": ["GPIO", "I2C1_SCL", "TIM4_CH1", "USART1_TX"],
     "notes": "I2C1 SCL (default). Remappable USART1 TX. 5V tolerant."},
    {"pin": "PB7", "lqfp48": 43, "five_tolerant": True,
     "functions": ["GPIO", "I2C1_SDA", "TIM4_CH2", "USART1_RX"],
     "notes": "I2C1 SDA (default). Remappable USART1 RX. 5V tolerant."},
    {"pin": "PB8", "lqfp48": 45, "five_tolerant": True,
     "functions": ["GPIO", "TIM4_CH3", "I2C1_SCL", "CAN_RX"],
     "notes": "Remapped I2C1 SCL. 5V tolerant."},
    {"pin": "PB9", "lqfp48": 46, "five_tolerant": True,
     "functions": ["GPIO", "TIM4_CH4", "I2C1_SDA", "CAN_TX"],
     "notes": "Remapped I2C1 SDA. 5V tolerant."},
]

for _row in PINS:
    _row["port"] = _row["pin"][1]
    _row["number"] = int(_row["pin"][2:])
    _row["type"] = "I/O"
    _row["reset_state"] = "Floating input"
del _row


KNOWLEDGE: list[dict[str, Any]] = [
    {"id": "i2c-basics", "topic": "i2c",
     "keywords": ["i2c", "scl", "sda", "pull-up", "mpu6050", "bmp280", "oled"],
     "content": "I2C1 uses PB6 (SCL) and PB7 (SDA), remappable to PB8/PB9. I2C2 uses "
                "PB10 (SCL) and PB11 (SDA). Both lines need pull-ups (4.7k typical) "
                "unless the breakout board provides them."},
    {"id": "spi-basics", "topic": "spi",
     "keywords": ["spi", "sck", "miso", "mosi", "nss", "cs", "sd card", "display"],
     "content": "SPI1: PA5 (SCK), PA6 (MISO), PA7 (MOSI), PA4 (NSS). SPI2: PB13 (SCK), "
                "PB14 (MISO), PB15 (MOSI), PB12 (NSS). Chip select may be any GPIO."},
    {"id": "uart-basics", "topic": "uart",
     "keywords": ["uart", "usart", "serial", "tx", "rx", "gps", "bluetooth"],
     "content": "USART1: PA9 (TX), PA10 (RX). USART2: PA2 (TX), PA3 (RX). USART3: "
                "PB10 (TX), PB11 (RX), shared with I2C2. Cross TX/RX between devices."},
    {"id": "adc-basics", "topic": "adc",
     "keywords": ["adc", "analog", "potentiometer", "ldr", "voltage"],
     "content": "ADC channels 0-9 are on PA0-PA7, PB0 and PB1. Input range is 0-3.3V; "
                "these pins are not 5V tolerant."},
    {"id": "five-volt", "topic": "power",
     "keywords": ["5v", "tolerant", "voltage", "level", "3.3v"],
     "content": "5V tolerant pins: PA8-PA15, PB2-PB4, PB6-PB15. PA0-PA7, PB0, PB1 and "
                "PB5 are not 5V tolerant. The MCU runs at 3.3V."},
    {"id": "usb-can", "topic": "usb",
     "keywords": ["usb", "can", "pa11", "pa12"],
     "content": "USB uses PA11 (D-) and PA12 (D+); CAN shares the same pins, so USB and "
                "CAN cannot be used at the same time without remapping CAN to PB8/PB9."},
    {"id": "debug-pins", "topic": "debug",
     "keywords": ["swd", "jtag", "debug", "st-link", "pa13", "pa14"],
     "content": "SWD uses PA13 (SWDIO) and PA14 (SWCLK). Disabling JTAG while keeping "
                "SWD frees PA15, PB3 and PB4 as GPIO."},
    {"id": "boot-pins", "topic": "boot",
     "keywords": ["boot", "boot0", "boot1", "bootloader", "flash"],
     "content": "BOOT0 high with BOOT1 (PB2) low starts the system bootloader on "
                "USART1 (PA9/PA10). Normal boot needs BOOT0 low."},
    {"id": "led-pc13", "topic": "gpio",
     "keywords": ["led", "pc13", "gpio", "blink", "output"],
     "content": "The Blue Pill's on-board LED is on PC13 and is active low. External "
                "LEDs need a 220-330 ohm series resistor."},
]


# default_pins maps role -> suggested pin
DEVICE_PATTERNS: list[dict[str, Any]] = [
    {"id": "mpu6050", "device_name": "MPU6050", "device_type": "Gyroscope/Accelerometer",
     "interface_type": "I2C", "default_pins": {"SCL": "PB6", "SDA": "PB7"},
     "requirements": "4.7k pull-up resistors on SCL and SDA",
     "notes": "3.3V or 5V compatible. I2C address: 0x68 or 0x69. Can remap to PB8/PB9.",
     "keywords": "MPU6050 GY-521 gyro accelerometer motion IMU"},
    {"id": "bmp280", "device_name": "BMP280", "device_type": "Pressure/Temperature Sensor",
     "interface_type": "I2C", "default_pins": {"SCL": "PB6", "SDA": "PB7"},
     "requirements": "4.7k pull-up resistors on SCL and SDA",
     "notes": "3.3V compatible. I2C address: 0x76 or 0x77. Also supports SPI.",
     "keywords": "BMP280 pressure temperature barometer sensor"},
    {"id": "oled-i2c", "device_name": "OLED Display (I2C)", "device_type": "Display",
     "interface_type": "I2C", "default_pins": {"SCL": "PB6", "SDA": "PB7"},
     "requirements": "4.7k pull-up resistors recommended",
     "notes": "Common sizes: 0.96\", 1.3\". I2C address usually 0x3C or 0x3D.",
     "keywords": "OLED SSD1306 display screen I2C"},
    {"id": "ds3231", "device_name": "DS3231", "device_type": "RTC",
     "interface_type": "I2C", "default_pins": {"SCL": "PB6", "SDA": "PB7"},
     "requirements": "4.7k pull-up resistors on SCL and SDA",
     "notes": "I2C address: 0x68. 3.3V compatible.",
     "keywords": "DS3231 RTC real-time clock"},
    {"id": "sd-card", "device_name": "SD Card", "device_type": "Storage",
     "interface_type": "SPI",
     "default_pins": {"SCK": "PA5", "MISO": "PA6", "MOSI": "PA7", "CS": "PA4"},
     "requirements": "None",
     "notes": "Use 3.3V. CS pin can be any GPIO. Fast SPI mode supported.",
     "keywords": "SD card storage SPI microSD"},
    {"id": "nrf24l01", "device_name": "nRF24L01", "device_type": "Wireless Transceiver",
     "interface_type": "SPI",
     "default_pins": {"SCK": "PA5", "MISO": "PA6", "MOSI": "PA7", "CS": "PA4", "CE": "PB0"},
     "requirements": "None",
     "notes": "3.3V only. CE and CS pins can be any GPIO.",
     "keywords": "nRF24L01 wireless radio transceiver SPI"},
    {"id": "xbee", "device_name": "XBee", "device_type": "Wireless Module",
     "interface_type": "UART", "default_pins": {"TX": "PA9", "RX": "PA10"},
     "requirements": "None",
     "notes": "3.3V logic levels. Connect XBee TX to STM32 RX and vice versa.",
     "keywords": "XBee zigbee wireless UART serial"},
    {"id": "hc05", "device_name": "HC-05", "device_type": "Bluetooth Module",
     "interface_type": "UART", "default_pins": {"TX": "PA9", "RX": "PA10"},
     "requirements": "Voltage divider for RX (5V to 3.3V)",
     "notes": "Module runs at 5V but TX is 3.3V compatible. RX needs voltage divider.",
     "keywords": "HC-05 HC05 bluetooth serial UART"},
    {"id": "gps", "device_name": "GPS Module", "device_type": "GPS Receiver",
     "interface_type": "UART", "default_pins": {"TX": "PA9", "RX": "PA10"},
     "requirements": "None",
     "notes": "Most GPS modules are 3.3V compatible. Common: NEO-6M, NEO-7M.",
     "keywords": "GPS NEO-6M NEO-7M location UART serial"},
    {"id": "led", "device_name": "LED", "device_type": "Output",
     "interface_type": "GPIO", "default_pins": {"LED": "PA1"},
     "requirements": "220-330 ohm current-limiting resistor",
     "notes": "Any GPIO pin works. Choose 5V-tolerant pins for flexibility.",
     "keywords": "LED light output GPIO"},
    {"id": "button", "device_name": "Button", "device_type": "Input",
     "interface_type": "GPIO", "default_pins": {"BUTTON": "PB0"},
     "requirements": "10k pull-up or pull-down resistor",
     "notes": "Any GPIO pin works. Enable internal pull-up/pull-down in code.",
     "keywords": "button switch input GPIO"},
    {"id": "relay", "device_name": "Relay Module", "device_type": "Output",
     "interface_type": "GPIO", "default_pins": {"RELAY": "PB1"},
     "requirements": "None",
     "notes": "Most relay modules have optoisolation. Any GPIO works.",
     "keywords": "relay switch output GPIO"},
    {"id": "potentiometer", "device_name": "Potentiometer", "device_type": "Analog Input",
     "interface_type": "ADC", "default_pins": {"ADC": "PA0"},
     "requirements": "None",
     "notes": "Use ADC-capable pins: PA0-PA7, PB0-PB1. Not 5V tolerant.",
     "keywords": "potentiometer pot variable resistor analog ADC"},
    {"id": "ldr", "device_name": "LDR (Light Sensor)", "device_type": "Analog Input",
     "interface_type": "ADC", "default_pins": {"ADC": "PA0"},
     "requirements": "10k resistor for voltage divider",
     "notes": "Use ADC pins. Create voltage divider with 10k resistor.",
     "keywords": "LDR photoresistor light sensor analog ADC"},
]
