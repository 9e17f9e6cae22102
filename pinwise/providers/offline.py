"""Offline provider — always available, no model behind it."""

from __future__ import annotations

from typing import Any

from pinwise.providers.base import LLMProvider, OracleReply

OFFLINE_MESSAGE = (
    "The assistant model is currently unavailable, so I can't answer right now. "
    "Your existing pin allocations are unchanged. Please try again shortly."
)


class OfflineProvider(LLMProvider):
    """Answers every turn with a fixed notice and no tool calls.

    Used when the configured provider is unreachable; it never produces
    allocations, so the session's map survives the outage untouched.
    """

    def is_available(self) -> bool:
        """Always available."""
        return True

    def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[dict[str, Any]] | None = None,
    ) -> OracleReply:
        return OracleReply(text=OFFLINE_MESSAGE)
