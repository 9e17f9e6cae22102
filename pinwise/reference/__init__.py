"""Microcontroller reference data — pins, knowledge, device patterns."""

from pinwise.reference.database import ReferenceDatabase
from pinwise.reference.records import (
    DevicePattern,
    KnowledgeChunk,
    PinInfo,
    ReferenceContext,
)

__all__ = [
    "DevicePattern",
    "KnowledgeChunk",
    "PinInfo",
    "ReferenceContext",
    "ReferenceDatabase",
]
