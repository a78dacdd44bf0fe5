"""Book lookup adapters."""

from lumina_journal.adapters.lookup.open_library import OpenLibraryLookup

__all__ = ["OpenLibraryLookup"]
