"""Row parsing shared by the entry stores."""

from lumina_journal.core import JournalEntry, PersistenceError

Rows = list[dict]


def parse_rows(rows: Rows) -> list[JournalEntry]:
    """Build entries from stored rows. Malformed rows raise PersistenceError."""
    try:
        return [JournalEntry.from_dict(row) for row in rows]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"Malformed entry row: {type(e).__name__}: {e}") from e
