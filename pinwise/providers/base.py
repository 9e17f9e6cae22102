"""Abstract text-generation provider interface."""

from __future__ import annotations

import abc
from typing import Any

from pydantic import BaseModel, Field

from pinwise.engine.extraction import payload_from_tool_calls


class OracleReply(BaseModel):
    """Reply text plus any raw tool calls the model made."""

    text: str = ""
    tool_calls: list[dict[str, Any]] = Field(default_factory=list)

    def tool_payload(self) -> list[Any] | None:
        """Flattened ``allocate_pins`` entries, or *None* when no tool was called."""
        if not self.tool_calls:
            return None
        return payload_from_tool_calls(self.tool_calls)


class LLMProvider(abc.ABC):
    """Base class for chat providers.

    Implementations must override :meth:`chat`, which accepts a list of
    ``{"role", "content"}`` messages and returns an :class:`OracleReply`,
    or *None* on failure.
    """

    @abc.abstractmethod
    def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[dict[str, Any]] | None = None,
    ) -> OracleReply | None:
        """Send *messages* to the model and return its reply.

        Returns *None* if the provider is unavailable or the call fails,
        signalling the caller to fall back to the offline provider.
        """

    @abc.abstractmethod
    def is_available(self) -> bool:
        """Return *True* if the provider is ready to serve requests."""
