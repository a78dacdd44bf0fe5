"""Core interfaces for adapters."""

import inspect
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

from lumina_journal.core.entities import (
    AiAnalysis,
    AuthMessage,
    BookSuggestion,
    EntryFormData,
    JournalEntry,
    Session,
)

SessionListener = Callable[[Optional[Session]], Union[None, Awaitable[None]]]


class KeyValueStorage(ABC):
    """Durable string-keyed slots (local storage)."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class EntryStore(ABC):
    """Interface for persisting journal entries."""

    @abstractmethod
    async def list(self, user_id: str) -> list[JournalEntry]:
        """Fetch all entries owned by user."""
        pass

    @abstractmethod
    async def create(self, user_id: str, form: EntryFormData) -> JournalEntry:
        """Create new entry for user."""
        pass

    @abstractmethod
    async def update(self, entry_id: str, form: EntryFormData) -> None:
        """Replace editable fields of an entry."""
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> None:
        """Remove entry."""
        pass


class SessionProvider(ABC):
    """Interface for resolving the signed-in user."""

    def __init__(self) -> None:
        self._session: Optional[Session] = None
        self._listeners: list[SessionListener] = []

    def current_session(self) -> Optional[Session]:
        """Return the active session, if any."""
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register change listener. Returns unsubscribe callback."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set_session(self, session: Optional[Session]) -> None:
        """Swap identity and notify listeners."""
        self._session = session
        for listener in list(self._listeners):
            result = listener(session)
            if inspect.isawaitable(result):
                await result

    @abstractmethod
    async def restore(self) -> Optional[Session]:
        """Load persisted session at startup."""
        pass

    @abstractmethod
    async def login(self, email: str) -> AuthMessage:
        """Start login for email."""
        pass

    @abstractmethod
    async def logout(self) -> None:
        """End current session."""
        pass


class LLMClient(ABC):
    """Interface for LLM operations."""

    @abstractmethod
    async def analyze_entry(self, title: str, content: str) -> AiAnalysis:
        """Summarize notes and propose tags. Never raises."""
        pass


class BookLookup(ABC):
    """Interface for searching book metadata."""

    @abstractmethod
    async def search(self, query: str) -> list[BookSuggestion]:
        """Return candidates for free-text query. Never raises."""
        pass


class EntryRenderer(ABC):
    """Interface for rendering entry lists."""

    @abstractmethod
    def render(self, entries: list[JournalEntry], heading: str) -> str:
        pass
