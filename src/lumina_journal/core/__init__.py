"""Core domain layer."""

from lumina_journal.core.draft import SUGGESTED_TAGS, DraftController
from lumina_journal.core.entities import (
    AiAnalysis,
    AuthMessage,
    BookSuggestion,
    EntryFormData,
    EntryType,
    JournalEntry,
    Session,
    SortOption,
    User,
)
from lumina_journal.core.errors import AuthError, JournalError, PersistenceError
from lumina_journal.core.interfaces import (
    BookLookup,
    EntryRenderer,
    EntryStore,
    KeyValueStorage,
    LLMClient,
    SessionProvider,
)
from lumina_journal.core.view import build_view, collect_tags, empty_state_message

__all__ = [
    "JournalEntry",
    "EntryFormData",
    "EntryType",
    "SortOption",
    "Session",
    "User",
    "AuthMessage",
    "AiAnalysis",
    "BookSuggestion",
    "JournalError",
    "PersistenceError",
    "AuthError",
    "EntryStore",
    "SessionProvider",
    "KeyValueStorage",
    "LLMClient",
    "BookLookup",
    "EntryRenderer",
    "DraftController",
    "SUGGESTED_TAGS",
    "build_view",
    "collect_tags",
    "empty_state_message",
]
