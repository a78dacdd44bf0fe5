"""LLM adapters."""

from lumina_journal.adapters.llm.gemini_client import GeminiClient

__all__ = ["GeminiClient"]
