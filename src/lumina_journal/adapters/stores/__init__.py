"""Entry store adapters."""

from lumina_journal.adapters.stores.local_store import LocalEntryStore
from lumina_journal.adapters.stores.remote_store import RemoteEntryStore

__all__ = ["LocalEntryStore", "RemoteEntryStore"]
