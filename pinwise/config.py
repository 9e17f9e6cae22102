"""Global configuration: pin grammar, markers, limits, settings."""

# Target microcontroller
MCU_NAME = "STM32F103C8T6"
MCU_FAMILY = "STM32"
BOARD_NAME = "Blue Pill"

# GPIO port letters accepted by the pin grammar (PA0 .. PE15)
PORT_LETTERS = "ABCDE"

# Highest pin number inside a 16-bit GPIO port
MAX_PIN_NUMBER = 15

# Delimiters of the structured allocation block in assistant replies
ALLOCATION_BLOCK_START = "---PIN_ALLOCATIONS---"
ALLOCATION_BLOCK_END = "---END_ALLOCATIONS---"

# Name of the tool the model may call to allocate pins
ALLOCATE_TOOL_NAME = "allocate_pins"

# Role assigned by the heuristic tier when the window names no peripheral role
DEFAULT_ROLE = "GPIO"

# Characters inspected on each side of a pin token by the heuristic tier
HEURISTIC_WINDOW = 60

# Chat input limits
MAX_MESSAGE_LENGTH = 2000

# Conversation history kept per session, and the slice sent to the model
MAX_STORED_HISTORY = 100
MAX_PROMPT_HISTORY = 30

# Sessions idle longer than this are removed by cleanup (seconds)
SESSION_MAX_AGE = 24 * 60 * 60

# Reference lookup limits
CONTEXT_SEARCH_WORDS = 5
CONTEXT_MAX_PINS = 8
CONTEXT_MAX_KNOWLEDGE = 5
CONTEXT_MAX_DEVICES = 3
