"""Pinwise — conversational pin-allocation assistant for the STM32F103C8T6."""

__version__ = "1.0.0"

from pinwise.api.facade import ChatResponse, InvalidMessage, PinAssistant
from pinwise.engine.completeness import detect_incomplete
from pinwise.engine.extraction import extract, extract_candidates
from pinwise.engine.intent import Intent, classify_intent
from pinwise.engine.pipeline import TurnResult, process_turn
from pinwise.engine.reconciliation import reconcile
from pinwise.models.allocation import Allocation, AllocationMap, CandidateAllocation, Tier
from pinwise.models.pins import MalformedPin, PinId, normalize_pin
from pinwise.models.results import ChangeSummary, IncompleteWarning
from pinwise.models.session import ChatMessage, Session
from pinwise.providers.base import LLMProvider, OracleReply
from pinwise.providers.offline import OfflineProvider
from pinwise.providers.ollama import OllamaProvider
from pinwise.reference.database import ReferenceDatabase
from pinwise.settings import Settings, generate_env_template, load_settings
from pinwise.storage.scheduler import CleanupScheduler
from pinwise.storage.sessions import SessionNotFound, SessionStore, SessionStoreError

__all__ = [
    "__version__",
    # Facade
    "ChatResponse",
    "InvalidMessage",
    "PinAssistant",
    # Engine
    "Intent",
    "TurnResult",
    "classify_intent",
    "detect_incomplete",
    "extract",
    "extract_candidates",
    "process_turn",
    "reconcile",
    # Models
    "Allocation",
    "AllocationMap",
    "CandidateAllocation",
    "ChangeSummary",
    "ChatMessage",
    "IncompleteWarning",
    "MalformedPin",
    "PinId",
    "Session",
    "Tier",
    "normalize_pin",
    # Providers
    "LLMProvider",
    "OfflineProvider",
    "OllamaProvider",
    "OracleReply",
    # Storage, reference, settings
    "CleanupScheduler",
    "ReferenceDatabase",
    "SessionNotFound",
    "SessionStore",
    "SessionStoreError",
    "Settings",
    "generate_env_template",
    "load_settings",
]
