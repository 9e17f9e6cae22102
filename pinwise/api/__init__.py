"""Python API — :class:`PinAssistant` is the single entry point."""

from pinwise.api.facade import ChatResponse, InvalidMessage, PinAssistant

__all__ = ["ChatResponse", "InvalidMessage", "PinAssistant"]
