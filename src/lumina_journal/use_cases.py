"""Business logic use cases."""

from typing import Callable, Optional, Union

from lumina_journal.core import (
    EntryFormData,
    EntryStore,
    JournalEntry,
    PersistenceError,
    Session,
    SessionProvider,
    SortOption,
    build_view,
    collect_tags,
    empty_state_message,
)

DELETE_CONFIRMATION = "Are you sure you want to delete this journal entry?"

ErrorReporter = Callable[[str], None]
Confirm = Callable[[], bool]


class JournalService:
    """Service owning the signed-in user's entry collection."""

    def __init__(
        self,
        store: EntryStore,
        sessions: SessionProvider,
        on_error: Optional[ErrorReporter] = None,
    ) -> None:
        self.store = store
        self.sessions = sessions
        self.on_error = on_error
        self._entries: list[JournalEntry] = []
        self._unsubscribe = sessions.subscribe(self._on_session_change)

    @property
    def session(self) -> Optional[Session]:
        return self.sessions.current_session()

    @property
    def entries(self) -> list[JournalEntry]:
        """Copy of the canonical collection."""
        return list(self._entries)

    @property
    def tags(self) -> list[str]:
        """Distinct tags across all entries, sorted."""
        return collect_tags(self._entries)

    def view(
        self,
        search: str = "",
        tag: str = "",
        sort: Union[SortOption, str] = SortOption.NEWEST,
    ) -> list[JournalEntry]:
        """Filtered and sorted projection of the collection."""
        return build_view(self._entries, search=search, tag=tag, sort=sort)

    def empty_state(self, visible: list[JournalEntry]) -> Optional[str]:
        return empty_state_message(len(self._entries), len(visible))

    def get(self, entry_id: str) -> Optional[JournalEntry]:
        return next((e for e in self._entries if e.id == entry_id), None)

    async def start(self) -> Optional[Session]:
        """Restore persisted session; entries load through the change listener."""
        return await self.sessions.restore()

    async def close(self) -> None:
        self._unsubscribe()

    async def refresh(self) -> list[JournalEntry]:
        """Reload entries from the store. Failures keep the current collection."""
        session = self.session
        if session is None:
            self._entries = []
            return self.entries

        try:
            self._entries = await self.store.list(session.user.id)
        except PersistenceError as e:
            print(f"⚠️  Error fetching entries: {e}")

        return self.entries

    async def create_entry(self, form: EntryFormData) -> bool:
        """Create entry for the signed-in user."""
        session = self.session
        if session is None:
            return False

        try:
            await self.store.create(session.user.id, form)
        except PersistenceError as e:
            self._report("Error saving entry", e)
            return False

        await self.refresh()
        return True

    async def update_entry(self, entry_id: str, form: EntryFormData) -> bool:
        """Replace editable fields of an entry."""
        session = self.session
        if session is None:
            return False

        try:
            await self.store.update(entry_id, form)
        except PersistenceError as e:
            self._report("Error updating entry", e)
            return False

        await self.refresh()
        return True

    async def delete_entry(self, entry_id: str, confirm: Confirm) -> bool:
        """Delete entry after explicit confirmation."""
        session = self.session
        if session is None:
            return False

        if not confirm():
            return False

        try:
            await self.store.delete(entry_id)
        except PersistenceError as e:
            self._report("Error deleting entry", e)
            return False

        await self.refresh()
        return True

    async def _on_session_change(self, session: Optional[Session]) -> None:
        if session is None:
            self._entries = []
            return
        await self.refresh()

    def _report(self, message: str, error: Exception) -> None:
        """Log failure and show it to the user."""
        print(f"❌ {message}: {error}")
        if self.on_error:
            self.on_error(message)
