"""Reference records: pin data, knowledge chunks, device connection patterns."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PinInfo(BaseModel):
    """One physical pin of the microcontroller."""

    pin: str
    port: str
    number: int
    lqfp48: int | None = None
    type: str = "I/O"
    five_tolerant: bool = False
    reset_state: str = ""
    functions: list[str] = Field(default_factory=list)
    notes: str = ""


class KnowledgeChunk(BaseModel):
    """A short, topic-tagged fact used as model context."""

    id: str
    topic: str
    content: str
    keywords: list[str] = Field(default_factory=list)


class DevicePattern(BaseModel):
    """How a common device is usually wired to the board."""

    id: str
    device_name: str
    device_type: str = ""
    interface_type: str
    default_pins: dict[str, str] = Field(default_factory=dict)
    requirements: str = ""
    notes: str = ""
    keywords: str = ""


class ReferenceContext(BaseModel):
    """Reference rows gathered for one user message."""

    pins: list[PinInfo] = Field(default_factory=list)
    knowledge: list[KnowledgeChunk] = Field(default_factory=list)
    devices: list[DevicePattern] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.pins or self.knowledge or self.devices)

    def sources(self) -> list[str]:
        """Identifiers of every row used, for display alongside a reply."""
        return (
            [pin.pin for pin in self.pins]
            + [chunk.id for chunk in self.knowledge]
            + [device.id for device in self.devices]
        )
