"""PinAssistant — the single entry point for pin-allocation conversations.

Usage::

    from pinwise import PinAssistant

    assistant = PinAssistant()
    reply = assistant.chat("Connect an MPU6050 to I2C1")
    reply.response        # text shown to the user
    reply.allocations     # session's pin map after the turn
    reply.warnings        # devices with missing roles
    assistant.remove_pin(reply.session_id, "PB6")
    assistant.cleanup_sessions()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field

from pinwise.config import MAX_MESSAGE_LENGTH
from pinwise.engine.completeness import detect_incomplete
from pinwise.engine.intent import Intent, classify_intent
from pinwise.engine.pipeline import process_turn
from pinwise.models.allocation import AllocationMap, Tier, dump_allocations, load_allocations
from pinwise.models.results import ChangeSummary, IncompleteWarning
from pinwise.models.session import ChatMessage, Session
from pinwise.prompts import (
    ALLOCATE_PINS_TOOL,
    build_messages,
    build_system_prompt,
    strip_allocation_blocks,
)
from pinwise.providers.base import LLMProvider, OracleReply
from pinwise.providers.offline import OfflineProvider
from pinwise.providers.ollama import OllamaProvider
from pinwise.reference.database import ReferenceDatabase
from pinwise.reference.records import DevicePattern, KnowledgeChunk, PinInfo
from pinwise.settings import Settings, load_settings
from pinwise.storage.scheduler import CleanupScheduler
from pinwise.storage.sessions import SessionNotFound, SessionStore, new_session_id

logger = logging.getLogger(__name__)


class InvalidMessage(ValueError):
    """Raised when a chat message is empty, not text, or too long."""


class ChatResponse(BaseModel):
    """What one chat turn returns to the caller."""

    response: str
    session_id: str
    intent: Intent
    tier: Tier | None = None
    allocations: dict[str, dict[str, Any]] = Field(default_factory=dict)
    summary: ChangeSummary = Field(default_factory=ChangeSummary)
    warnings: list[IncompleteWarning] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)


class PinAssistant:
    """The public interface for the pin-allocation assistant.

    Parameters
    ----------
    settings:
        Runtime settings.  If *None*, they are loaded from *project_root*
        (``.pinwise/config.json``, ``.env`` and the environment).
    provider:
        An explicit :class:`LLMProvider`.  If *None*, an
        :class:`OllamaProvider` is built from the settings.  Whenever the
        provider is unavailable or fails, :class:`OfflineProvider` answers.
    project_root:
        Directory searched for configuration files when *settings* is
        not given.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        provider: LLMProvider | None = None,
        project_root: str | Path = ".",
    ) -> None:
        self.settings = settings if settings is not None else load_settings(project_root)
        logging.getLogger("pinwise").setLevel(self.settings.log_level)

        if provider is not None:
            self.provider = provider
        else:
            self.provider = OllamaProvider(
                base_url=self.settings.ollama_host,
                model=self.settings.model,
                max_tokens=self.settings.max_tokens,
            )
        self._fallback = OfflineProvider()

        self.reference = ReferenceDatabase(self.settings.reference_db)
        self.sessions = SessionStore(self.settings.session_db)
        self._scheduler = CleanupScheduler(
            self.sessions,
            max_age=self.settings.session_max_age,
        )

    def close(self) -> None:
        """Stop background cleanup and close both databases."""
        self._scheduler.stop()
        self.sessions.close()
        self.reference.close()

    # -- Chat -----------------------------------------------------------------

    def chat(
        self,
        message: Any,
        session_id: str | None = None,
        user_agent: str | None = None,
    ) -> ChatResponse:
        """Process one user message within a session.

        The session (created if *session_id* is missing or unknown) is
        locked for the whole turn.  The new allocation map and both
        history messages are stored in one write; if that write fails
        the error propagates and the previous map is kept.

        Raises
        ------
        InvalidMessage
            If *message* is not a non-blank string of at most 2000 characters.
        """
        text = _validate_message(message)
        sid = session_id or new_session_id()
        metadata = {"user_agent": user_agent} if user_agent else {}

        with self.sessions.lock(sid):
            session = self.sessions.get_or_create(sid, metadata)
            intent = classify_intent(text)
            context = self.reference.context_for(text)

            system_prompt = build_system_prompt(
                session.allocations,
                detect_incomplete(session.allocations),
                intent,
                context,
            )
            messages = build_messages(system_prompt, session.history, text)
            reply = self._ask(messages)

            turn = process_turn(
                text,
                reply.text,
                session.allocations,
                reply.tool_payload(),
                intent=intent,
            )
            visible = strip_allocation_blocks(reply.text)
            self.sessions.put(
                sid,
                turn.allocations,
                [
                    ChatMessage(role="user", content=text),
                    ChatMessage(role="assistant", content=visible),
                ],
            )

        return ChatResponse(
            response=visible,
            session_id=sid,
            intent=turn.intent,
            tier=turn.extraction.tier,
            allocations=dump_allocations(turn.allocations),
            summary=turn.summary,
            warnings=turn.warnings,
            sources=context.sources(),
        )

    def _ask(self, messages: list[dict[str, str]]) -> OracleReply:
        """Ask the configured provider, falling back to the offline reply."""
        tools = [ALLOCATE_PINS_TOOL] if self.settings.use_tools else None
        if self.provider.is_available():
            reply = self.provider.chat(messages, tools)
            if reply is not None:
                return reply
            logger.warning("Provider returned no reply; answering offline")
        else:
            logger.warning("Provider unavailable; answering offline")
        return self._fallback.chat(messages)

    # -- Sessions -------------------------------------------------------------

    def get_session(self, session_id: str) -> Session:
        """Return a stored session or raise :class:`SessionNotFound`."""
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def replace_allocations(
        self,
        session_id: str,
        allocations: Mapping[str, Any],
    ) -> AllocationMap:
        """Overwrite a session's map with user-edited allocations.

        Entries with malformed pins or bodies are dropped.
        """
        validated = load_allocations(allocations)
        with self.sessions.lock(session_id):
            session = self.sessions.put(session_id, validated)
        return session.allocations

    def remove_pin(self, session_id: str, pin: str) -> bool:
        """Release one pin.  Returns True if it was allocated."""
        with self.sessions.lock(session_id):
            return self.sessions.remove_pin(session_id, pin)

    def clear_allocations(self, session_id: str) -> None:
        """Release every pin in a session, keeping its history."""
        with self.sessions.lock(session_id):
            self.sessions.clear_allocations(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session.  Returns True if it existed."""
        with self.sessions.lock(session_id):
            return self.sessions.delete(session_id)

    def check_completeness(self, session_id: str) -> list[IncompleteWarning]:
        """Incomplete-device warnings for a stored session."""
        return detect_incomplete(self.get_session(session_id).allocations)

    # -- Cleanup --------------------------------------------------------------

    def cleanup_sessions(self, max_age: float | None = None) -> int:
        """Delete idle sessions.  *max_age* defaults to the configured limit (seconds)."""
        if max_age is None:
            max_age = self.settings.session_max_age
        return self.sessions.cleanup_expired(max_age)

    def start_cleanup_schedule(self, interval_hours: float = 1.0) -> None:
        """Run session cleanup in the background every *interval_hours*."""
        self._scheduler.start(interval_hours)

    def stop_cleanup_schedule(self) -> None:
        self._scheduler.stop()

    # -- Reference ------------------------------------------------------------

    def get_pin(self, pin: str) -> PinInfo | None:
        return self.reference.get_pin(pin)

    def search_pins(self, query: str) -> list[PinInfo]:
        return self.reference.search_pins(query)

    def search_knowledge(self, query: str) -> list[KnowledgeChunk]:
        return self.reference.search_knowledge(query)

    def find_device(self, name: str) -> DevicePattern | None:
        """Known wiring pattern for a device name, e.g. ``"mpu6050"``."""
        return self.reference.find_device(name)


def _validate_message(message: Any) -> str:
    if not isinstance(message, str):
        raise InvalidMessage("Message must be a string")
    text = message.strip()
    if not text:
        raise InvalidMessage("Message must not be empty")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise InvalidMessage(f"Message too long (max {MAX_MESSAGE_LENGTH} characters)")
    return text
