"""Derived entry views: search, tag filter, sort."""

import unicodedata
from typing import Optional, Union

from lumina_journal.core.entities import JournalEntry, SortOption

EMPTY_COLLECTION_MESSAGE = "No entries found."
NO_MATCH_MESSAGE = "No volumes match your query."


def matches_search(entry: JournalEntry, term: str) -> bool:
    """
    Check if entry matches a search term.

    Args:
        entry: Entry to check
        term: Search term; blank terms match everything

    Returns:
        True if term is found in title, content, author or any tag (case-insensitive)
    """
    if not term.strip():
        return True

    needle = term.lower()
    if needle in entry.title.lower() or needle in entry.content.lower():
        return True
    if entry.author and needle in entry.author.lower():
        return True
    return any(needle in tag.lower() for tag in entry.tags)


def title_collation_key(title: str) -> tuple[str, str, str]:
    """Locale-style key: base letters first, then accents, then lowercase-before-uppercase."""
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), title.casefold(), title.swapcase()


def build_view(
    entries: list[JournalEntry],
    search: str = "",
    tag: str = "",
    sort: Union[SortOption, str] = SortOption.NEWEST,
) -> list[JournalEntry]:
    """Filter and sort entries for display. The input list is never mutated."""
    sort = SortOption(sort)

    # 1. Search filter
    result = [entry for entry in entries if matches_search(entry, search)]

    # 2. Tag filter
    if tag:
        result = [entry for entry in result if tag in entry.tags]

    # 3. Sort (sorted() is stable, also with reverse=True)
    if sort is SortOption.NEWEST:
        return sorted(result, key=lambda e: e.created_at.timestamp(), reverse=True)
    if sort is SortOption.OLDEST:
        return sorted(result, key=lambda e: e.created_at.timestamp())
    if sort is SortOption.AZ:
        return sorted(result, key=lambda e: title_collation_key(e.title))
    return sorted(result, key=lambda e: title_collation_key(e.title), reverse=True)


def collect_tags(entries: list[JournalEntry]) -> list[str]:
    """All distinct tags across entries, alphabetically sorted."""
    tags: set[str] = set()
    for entry in entries:
        tags.update(entry.tags)
    return sorted(tags)


def empty_state_message(total: int, visible: int) -> Optional[str]:
    """Explain an empty list: nothing stored vs nothing matching."""
    if total == 0:
        return EMPTY_COLLECTION_MESSAGE
    if visible == 0:
        return NO_MATCH_MESSAGE
    return None
