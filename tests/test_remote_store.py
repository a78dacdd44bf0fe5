"""Tests for the Supabase entry store."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from lumina_journal.adapters.stores import RemoteEntryStore
from lumina_journal.config import Settings
from lumina_journal.core import EntryFormData, PersistenceError

ROW = {
    "id": "7",
    "user_id": "user-1",
    "title": "Dune",
    "author": "Frank Herbert",
    "type": "Book",
    "content": "Spice",
    "url": None,
    "tags": ["Fiction"],
    "ai_summary": None,
    "cover_image": None,
    "created_at": "2024-03-01T10:00:00+00:00",
    "updated_at": None,
}


@pytest.fixture
def settings() -> Settings:
    return Settings(supabase_url="https://project.supabase.co/", supabase_anon_key="anon-key")


@pytest.fixture
def store(settings: Settings) -> RemoteEntryStore:
    return RemoteEntryStore(settings, token_provider=lambda: "user-token")


def mock_http(response_json=None, status_code: int = 200, error: Exception | None = None):
    """Patch httpx.AsyncClient returning one canned response."""
    patcher = patch("httpx.AsyncClient")
    mock_client_class = patcher.start()

    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.content = b"[]" if response_json is not None else b""
    mock_response.json.return_value = response_json

    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    if error is not None:
        mock_client.request.side_effect = error
    else:
        mock_client.request.return_value = mock_response
    mock_client_class.return_value = mock_client

    return patcher, mock_client, mock_response


@pytest.mark.asyncio
async def test_list_filters_by_user(store: RemoteEntryStore) -> None:
    patcher, mock_client, _ = mock_http([ROW])
    try:
        entries = await store.list("user-1")
    finally:
        patcher.stop()

    assert [e.title for e in entries] == ["Dune"]
    method, url = mock_client.request.call_args.args
    kwargs = mock_client.request.call_args.kwargs
    assert method == "GET"
    assert url == "https://project.supabase.co/rest/v1/entries"
    assert kwargs["params"] == {"select": "*", "user_id": "eq.user-1"}
    assert kwargs["headers"]["apikey"] == "anon-key"
    assert kwargs["headers"]["Authorization"] == "Bearer user-token"


@pytest.mark.asyncio
async def test_create_inserts_row_for_user(store: RemoteEntryStore) -> None:
    patcher, mock_client, _ = mock_http([ROW])
    try:
        created = await store.create("user-1", EntryFormData(title="Dune", content="Spice", tags=["Fiction"]))
    finally:
        patcher.stop()

    assert created.id == "7"
    kwargs = mock_client.request.call_args.kwargs
    assert mock_client.request.call_args.args[0] == "POST"
    assert kwargs["json"][0]["user_id"] == "user-1"
    assert kwargs["json"][0]["title"] == "Dune"
    assert kwargs["json"][0]["type"] == "Book"
    assert kwargs["headers"]["Prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_update_targets_id(store: RemoteEntryStore) -> None:
    patcher, mock_client, _ = mock_http(status_code=204)
    try:
        await store.update("7", EntryFormData(title="Dune Messiah", content="Spice"))
    finally:
        patcher.stop()

    kwargs = mock_client.request.call_args.kwargs
    assert mock_client.request.call_args.args[0] == "PATCH"
    assert kwargs["params"] == {"id": "eq.7"}
    assert kwargs["json"]["title"] == "Dune Messiah"
    assert "updated_at" in kwargs["json"]


@pytest.mark.asyncio
async def test_delete_targets_id(store: RemoteEntryStore) -> None:
    patcher, mock_client, _ = mock_http(status_code=204)
    try:
        await store.delete("7")
    finally:
        patcher.stop()

    assert mock_client.request.call_args.args[0] == "DELETE"
    assert mock_client.request.call_args.kwargs["params"] == {"id": "eq.7"}


@pytest.mark.asyncio
async def test_anon_key_used_without_session(settings: Settings) -> None:
    store = RemoteEntryStore(settings, token_provider=lambda: None)
    patcher, mock_client, _ = mock_http([])
    try:
        await store.list("user-1")
    finally:
        patcher.stop()

    assert mock_client.request.call_args.kwargs["headers"]["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_http_error_becomes_persistence_error(store: RemoteEntryStore) -> None:
    """Test rejected requests surface as PersistenceError."""
    patcher, _, mock_response = mock_http(status_code=500)
    mock_response.text = "internal error"
    mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "Server error", request=MagicMock(), response=mock_response
    )
    try:
        with pytest.raises(PersistenceError, match="500"):
            await store.delete("7")
    finally:
        patcher.stop()


@pytest.mark.asyncio
async def test_network_error_becomes_persistence_error(store: RemoteEntryStore) -> None:
    patcher, _, _ = mock_http(error=httpx.ConnectError("offline"))
    try:
        with pytest.raises(PersistenceError, match="offline"):
            await store.list("user-1")
    finally:
        patcher.stop()


@pytest.mark.asyncio
async def test_malformed_row_becomes_persistence_error(store: RemoteEntryStore) -> None:
    patcher, _, _ = mock_http([{**ROW, "type": "Podcast"}])
    try:
        with pytest.raises(PersistenceError, match="Malformed entry row"):
            await store.list("user-1")
    finally:
        patcher.stop()
