"""Local durable storage adapters."""

from lumina_journal.adapters.storage.file_storage import FileStorage

__all__ = ["FileStorage"]
