"""Entry store backed by the Supabase REST API."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx

from lumina_journal.adapters.stores.rows import parse_rows
from lumina_journal.config import Settings
from lumina_journal.core import EntryFormData, EntryStore, JournalEntry, PersistenceError

TokenProvider = Callable[[], Optional[str]]


class RemoteEntryStore(EntryStore):
    """Row store queried by user_id (list, create) or id (update, delete)."""

    def __init__(self, settings: Settings, token_provider: Optional[TokenProvider] = None) -> None:
        self.base_url = f"{settings.supabase_url.rstrip('/')}/rest/v1/{settings.supabase.table}"
        self.anon_key = settings.supabase_anon_key
        self.timeout = settings.supabase.timeout
        self.token_provider = token_provider

    async def list(self, user_id: str) -> list[JournalEntry]:
        """Fetch all rows owned by user."""
        rows = await self._request(
            "GET", params={"select": "*", "user_id": f"eq.{user_id}"}
        )
        return parse_rows(rows or [])

    async def create(self, user_id: str, form: EntryFormData) -> JournalEntry:
        """Insert row and return the stored representation."""
        rows = await self._request(
            "POST",
            json=[{"user_id": user_id, **form.to_dict()}],
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise PersistenceError("Insert returned no rows")
        return parse_rows(rows[:1])[0]

    async def update(self, entry_id: str, form: EntryFormData) -> None:
        await self._request(
            "PATCH",
            params={"id": f"eq.{entry_id}"},
            json={**form.to_dict(), "updated_at": datetime.now(timezone.utc).isoformat()},
        )

    async def delete(self, entry_id: str) -> None:
        await self._request("DELETE", params={"id": f"eq.{entry_id}"})

    async def _request(
        self,
        method: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Send one request. Any failure becomes PersistenceError."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    self.base_url,
                    params=params,
                    json=json,
                    headers={**self._get_headers(), **(headers or {})},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"{method} {self.base_url} failed with {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise PersistenceError(f"{method} {self.base_url} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _get_headers(self) -> dict[str, str]:
        """Get headers for REST requests."""
        token = self.token_provider() if self.token_provider else None
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
        }
