"""Entry store kept in local storage (demo mode)."""

import json
from datetime import datetime, timezone
from typing import Callable, Optional

from lumina_journal.adapters.stores.rows import Rows, parse_rows
from lumina_journal.core import EntryFormData, EntryStore, JournalEntry, KeyValueStorage, PersistenceError
from lumina_journal.core.entities import format_timestamp


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LocalEntryStore(EntryStore):
    """Serialize the whole collection as one blob under a fixed key.

    Every mutation rewrites the full blob. Writers in other processes are not
    synchronized; the last write wins.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = "lumina_entries",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self.clock = clock or utc_now

    async def list(self, user_id: str) -> list[JournalEntry]:
        """Fetch user's entries from the blob."""
        return parse_rows([row for row in self._load_rows() if row.get("user_id") == user_id])

    async def create(self, user_id: str, form: EntryFormData) -> JournalEntry:
        """Prepend new entry, most recent first."""
        rows = self._load_rows()
        now = self.clock()

        entry_id = int(now.timestamp() * 1000)
        existing_ids = {str(row.get("id")) for row in rows}
        while str(entry_id) in existing_ids:
            entry_id += 1

        row = {
            "id": str(entry_id),
            "user_id": user_id,
            "created_at": format_timestamp(now),
            "updated_at": format_timestamp(now),
            **form.to_dict(),
        }
        self._save_rows([row, *rows])

        return parse_rows([row])[0]

    async def update(self, entry_id: str, form: EntryFormData) -> None:
        """Replace editable fields and refresh updated_at."""
        now = format_timestamp(self.clock())
        rows = [
            {**row, **form.to_dict(), "updated_at": now} if str(row.get("id")) == entry_id else row
            for row in self._load_rows()
        ]
        self._save_rows(rows)

    async def delete(self, entry_id: str) -> None:
        rows = [row for row in self._load_rows() if str(row.get("id")) != entry_id]
        self._save_rows(rows)

    def _load_rows(self) -> Rows:
        try:
            stored = self.storage.get_item(self.key)
        except OSError as e:
            raise PersistenceError(f"Could not read local entries: {e}") from e

        if not stored:
            return []

        try:
            rows = json.loads(stored)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupted local entries: {e}") from e

        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise PersistenceError("Corrupted local entries: expected a list of rows")
        return rows

    def _save_rows(self, rows: Rows) -> None:
        try:
            self.storage.set_item(self.key, json.dumps(rows, ensure_ascii=False))
        except OSError as e:
            raise PersistenceError(f"Could not write local entries: {e}") from e
