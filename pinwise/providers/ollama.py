"""Ollama/local chat provider — optional, graceful fallback."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from pinwise.providers.base import LLMProvider, OracleReply

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"
_DEFAULT_MODEL = "llama3.1:8b"


class OllamaProvider(LLMProvider):
    """Provider that calls a local Ollama instance's chat endpoint.

    Gracefully returns *None* if Ollama is not running, allowing the
    caller to fall back to the offline provider.
    """

    def __init__(
        self,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        model: str = _DEFAULT_MODEL,
        timeout: float = 60.0,
        max_tokens: int = 800,
        temperature: float = 0.7,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    def is_available(self) -> bool:
        """Check if Ollama is running by hitting the tags endpoint."""
        try:
            req = urllib.request.Request(f"{self.base_url}/api/tags")
            with urllib.request.urlopen(req, timeout=2) as resp:
                return resp.status == 200
        except (urllib.error.URLError, OSError, TimeoutError):
            return False

    def chat(
        self,
        messages: list[dict[str, str]],
        tools: list[dict[str, Any]] | None = None,
    ) -> OracleReply | None:
        """Send a conversation to Ollama and return the reply.

        Returns *None* if Ollama is unreachable or the call fails.
        """
        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        if tools:
            body["tools"] = tools

        req = urllib.request.Request(
            f"{self.base_url}/api/chat",
            data=json.dumps(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except (urllib.error.URLError, OSError, TimeoutError, json.JSONDecodeError) as exc:
            logger.warning("Ollama call failed: %s", exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Unexpected Ollama response type: %s", type(data).__name__)
            return None
        return parse_chat_response(data)


def parse_chat_response(data: dict[str, Any]) -> OracleReply:
    """Build an :class:`OracleReply` from a chat response body.

    Text is read from ``message.content``, ``response`` or ``content``,
    whichever is present first.
    """
    message = data.get("message")
    if not isinstance(message, dict):
        message = {}

    text = message.get("content") or data.get("response") or data.get("content") or ""
    tool_calls = message.get("tool_calls") or data.get("tool_calls") or []
    if not isinstance(tool_calls, list):
        tool_calls = []

    return OracleReply(
        text=str(text),
        tool_calls=[call for call in tool_calls if isinstance(call, dict)],
    )
