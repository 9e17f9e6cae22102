"""Chat provider system — abstract base + concrete providers."""

from pinwise.providers.base import LLMProvider, OracleReply
from pinwise.providers.offline import OfflineProvider
from pinwise.providers.ollama import OllamaProvider

__all__ = ["LLMProvider", "OfflineProvider", "OllamaProvider", "OracleReply"]
