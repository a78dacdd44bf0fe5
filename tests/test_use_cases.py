"""Tests for use cases."""

import json
from datetime import datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import httpx
import pytest

from lumina_journal.adapters.auth import DemoSessionProvider
from lumina_journal.adapters.llm import GeminiClient
from lumina_journal.adapters.llm.gemini_client import FALLBACK_SUMMARY
from lumina_journal.adapters.storage import FileStorage
from lumina_journal.adapters.stores import LocalEntryStore
from lumina_journal.config import DemoConfig, Settings
from lumina_journal.core import (
    DraftController,
    EntryFormData,
    EntryType,
    JournalEntry,
    PersistenceError,
)
from lumina_journal.use_cases import JournalService


def make_entry(entry_id: str, title: str, tags: list[str] | None = None) -> JournalEntry:
    return JournalEntry(
        id=entry_id,
        user_id="demo-user-123",
        title=title,
        type=EntryType.BOOK,
        content="Notes",
        tags=tags or [],
        created_at=datetime(2024, 1, int(entry_id), tzinfo=timezone.utc),
    )


@pytest.fixture
def storage():
    with TemporaryDirectory() as tmpdir:
        yield FileStorage(Path(tmpdir))


@pytest.fixture
def sessions(storage: FileStorage) -> DemoSessionProvider:
    return DemoSessionProvider(storage, DemoConfig(login_delay=0))


@pytest.fixture
def local_journal(storage: FileStorage, sessions: DemoSessionProvider) -> JournalService:
    return JournalService(store=LocalEntryStore(storage), sessions=sessions)


@pytest.fixture
def mock_store() -> AsyncMock:
    store = AsyncMock()
    store.list.return_value = [make_entry("1", "Dune", ["Fiction"])]
    return store


@pytest.mark.asyncio
async def test_login_loads_entries(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    """Test session change triggers a fetch for the new user."""
    journal = JournalService(store=mock_store, sessions=sessions)
    assert journal.entries == []

    await sessions.login()

    assert [e.title for e in journal.entries] == ["Dune"]
    mock_store.list.assert_awaited_once_with("demo-user-123")


@pytest.mark.asyncio
async def test_logout_clears_entries(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    journal = JournalService(store=mock_store, sessions=sessions)
    await sessions.login()

    await sessions.logout()

    assert journal.entries == []
    assert journal.session is None


@pytest.mark.asyncio
async def test_start_restores_session_and_entries(storage: FileStorage, mock_store: AsyncMock) -> None:
    await DemoSessionProvider(storage, DemoConfig(login_delay=0)).login()

    journal = JournalService(store=mock_store, sessions=DemoSessionProvider(storage))
    session = await journal.start()

    assert session is not None
    assert len(journal.entries) == 1


@pytest.mark.asyncio
async def test_fetch_failure_keeps_collection(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    journal = JournalService(store=mock_store, sessions=sessions)
    await sessions.login()

    mock_store.list.side_effect = PersistenceError("offline")
    entries = await journal.refresh()

    assert [e.title for e in entries] == ["Dune"]


@pytest.mark.asyncio
async def test_mutations_require_session(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    journal = JournalService(store=mock_store, sessions=sessions)
    form = EntryFormData(title="Dune", content="Spice")

    assert await journal.create_entry(form) is False
    assert await journal.update_entry("1", form) is False
    assert await journal.delete_entry("1", confirm=lambda: True) is False
    mock_store.create.assert_not_called()
    mock_store.update.assert_not_called()
    mock_store.delete.assert_not_called()


@pytest.mark.asyncio
async def test_create_update_delete_roundtrip(local_journal: JournalService, sessions: DemoSessionProvider) -> None:
    """Test the collection tracks every confirmed mutation."""
    await sessions.login()

    assert await local_journal.create_entry(EntryFormData(title="Dune", content="Spice", tags=["Fiction"]))
    [created] = local_journal.entries
    assert local_journal.tags == ["Fiction"]

    assert await local_journal.update_entry(created.id, EntryFormData(title="Dune Messiah", content="Spice"))
    assert local_journal.get(created.id).title == "Dune Messiah"
    assert local_journal.tags == []

    assert await local_journal.delete_entry(created.id, confirm=lambda: True)
    assert local_journal.entries == []
    assert local_journal.empty_state(local_journal.view()) == "No entries found."


@pytest.mark.asyncio
async def test_delete_declined_makes_no_call(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    journal = JournalService(store=mock_store, sessions=sessions)
    await sessions.login()
    confirm = Mock(return_value=False)

    assert await journal.delete_entry("1", confirm=confirm) is False

    confirm.assert_called_once()
    mock_store.delete.assert_not_called()
    assert len(journal.entries) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("operation, method, message", [
    ("create", "create", "Error saving entry"),
    ("update", "update", "Error updating entry"),
    ("delete", "delete", "Error deleting entry"),
])
async def test_failed_mutation_reports_and_keeps_state(
    sessions: DemoSessionProvider,
    mock_store: AsyncMock,
    operation: str,
    method: str,
    message: str,
) -> None:
    """Test store failures are reported and the collection is unchanged."""
    on_error = Mock()
    journal = JournalService(store=mock_store, sessions=sessions, on_error=on_error)
    await sessions.login()
    before = journal.entries
    getattr(mock_store, method).side_effect = PersistenceError("row level security")

    form = EntryFormData(title="Dune", content="Spice")
    if operation == "create":
        result = await journal.create_entry(form)
    elif operation == "update":
        result = await journal.update_entry("1", form)
    else:
        result = await journal.delete_entry("1", confirm=lambda: True)

    assert result is False
    on_error.assert_called_once_with(message)
    assert journal.entries == before


@pytest.mark.asyncio
async def test_view_and_empty_state(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    mock_store.list.return_value = [make_entry("1", "Dune", ["Fiction"]), make_entry("2", "Emma", ["Classic"])]
    journal = JournalService(store=mock_store, sessions=sessions)
    await sessions.login()

    assert [e.title for e in journal.view(sort="az")] == ["Dune", "Emma"]
    assert [e.title for e in journal.view(tag="Classic")] == ["Emma"]

    visible = journal.view(search="zzz")
    assert visible == []
    assert journal.empty_state(visible) == "No volumes match your query."


@pytest.mark.asyncio
async def test_close_unsubscribes(sessions: DemoSessionProvider, mock_store: AsyncMock) -> None:
    journal = JournalService(store=mock_store, sessions=sessions)
    await journal.close()

    await sessions.login()

    mock_store.list.assert_not_called()
    assert journal.entries == []


@pytest.mark.asyncio
async def test_ai_failure_still_saves_with_fallback(
    local_journal: JournalService, sessions: DemoSessionProvider
) -> None:
    """Test a failing AI call leaves a savable draft carrying the fallback summary."""
    await sessions.login()
    draft = DraftController(llm_client=GeminiClient(Settings(gemini_api_key="test-key")))
    draft.set_field("title", "Dune")
    draft.set_field("content", "Spice must flow")

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        error_response = MagicMock()
        error_response.status_code = 500
        error_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=MagicMock(), response=error_response
        )
        mock_client.post.return_value = error_response
        mock_client_class.return_value = mock_client

        await draft.analyze()

    assert draft.draft.ai_summary == FALLBACK_SUMMARY
    assert draft.draft.tags == ["Reading"]

    form = await draft.submit(local_journal.create_entry)

    assert form is not None
    [saved] = local_journal.entries
    assert saved.ai_summary == FALLBACK_SUMMARY
    assert saved.tags == ["Reading"]
    assert draft.draft == EntryFormData()


@pytest.mark.asyncio
async def test_refresh_failure_after_create_still_succeeds(
    sessions: DemoSessionProvider, mock_store: AsyncMock
) -> None:
    """Test a persisted entry counts as saved even when the reload fails."""
    on_error = Mock()
    journal = JournalService(store=mock_store, sessions=sessions, on_error=on_error)
    await sessions.login()
    before = journal.entries
    mock_store.list.side_effect = PersistenceError("timeout")

    result = await journal.create_entry(EntryFormData(title="Dune", content="Spice"))

    assert result is True
    mock_store.create.assert_awaited_once()
    on_error.assert_not_called()
    assert journal.entries == before


@pytest.mark.asyncio
async def test_malformed_local_row_does_not_break_login(
    storage: FileStorage, sessions: DemoSessionProvider
) -> None:
    """Test one bad stored row leaves the user signed in with the collection unchanged."""
    storage.set_item("lumina_entries", json.dumps([{
        "id": "1",
        "user_id": "demo-user-123",
        "title": "Serial",
        "type": "Podcast",
        "content": "Episode one",
        "created_at": "2024-01-01T00:00:00+00:00",
    }]))
    journal = JournalService(store=LocalEntryStore(storage), sessions=sessions)

    await sessions.login()

    assert journal.session is not None
    assert journal.entries == []
