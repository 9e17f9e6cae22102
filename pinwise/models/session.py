"""Session — one conversation's identity, history and allocation map."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from pinwise.models.allocation import AllocationMap


class ChatMessage(BaseModel):
    """A single turn of conversation history."""

    role: Literal["user", "assistant"]
    content: str


class Session(BaseModel):
    """Conversation state owned by the session store.

    Timestamps are Unix epoch seconds.
    """

    id: str
    created_at: float = 0.0
    last_activity: float = 0.0
    allocations: AllocationMap = Field(default_factory=dict)
    history: list[ChatMessage] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
