"""Editable draft of one entry (form state)."""

import asyncio
from dataclasses import replace
from typing import Awaitable, Callable, Optional, Union

from lumina_journal.core.entities import (
    FORM_FIELDS,
    BookSuggestion,
    EntryFormData,
    EntryType,
    JournalEntry,
)
from lumina_journal.core.interfaces import BookLookup, LLMClient

SUGGESTED_TAGS = [
    "Productivity", "Philosophy", "Technology", "Science",
    "History", "Business", "Fiction", "Health", "Design", "Psychology",
]

SubmitHandler = Callable[[EntryFormData], Awaitable[bool]]


class DraftController:
    """Own the in-progress form of an entry.

    Title changes drive a debounced book lookup. Every issued lookup gets a
    sequence number; a response is applied only while its number is the latest
    one and the title still equals its query, so late responses never clobber
    newer input.
    """

    def __init__(
        self,
        lookup: Optional[BookLookup] = None,
        llm_client: Optional[LLMClient] = None,
        debounce_seconds: float = 0.5,
        min_lookup_length: int = 2,
    ) -> None:
        self.lookup = lookup
        self.llm_client = llm_client
        self.debounce_seconds = debounce_seconds
        self.min_lookup_length = min_lookup_length
        self.draft = EntryFormData()
        self.suggestions: list[BookSuggestion] = []
        self._lookup_seq = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: set[asyncio.Task] = set()

    # Fields and tags

    def set_field(self, name: str, value: Union[str, EntryType, list, None]) -> None:
        """Set one draft field."""
        if name not in FORM_FIELDS:
            raise ValueError(f"Unknown field: {name}")

        if name == "type":
            value = EntryType(value)
        elif name == "tags":
            value = self._dedupe(value or [])

        setattr(self.draft, name, value)

        if name in ("title", "type"):
            self._schedule_lookup()

    def add_tag(self, text: str) -> bool:
        """Append trimmed tag. Empty strings and duplicates are ignored."""
        tag = text.strip()
        if not tag or tag in self.draft.tags:
            return False
        self.draft.tags.append(tag)
        return True

    def remove_tag(self, tag: str) -> None:
        self.draft.tags = [t for t in self.draft.tags if t != tag]

    def suggested_tags(self, limit: int = 6) -> list[str]:
        """Fixed tag suggestions not yet on the draft."""
        return [t for t in SUGGESTED_TAGS if t not in self.draft.tags][:limit]

    def reset(self, entry: Optional[JournalEntry] = None) -> None:
        """Start over with an empty draft or a copy of an entry."""
        self.draft = entry.to_form() if entry else EntryFormData()
        self.draft.tags = self._dedupe(self.draft.tags)
        self._close_suggestions()

    def form_data(self) -> EntryFormData:
        """Snapshot of the draft."""
        return replace(self.draft, tags=list(self.draft.tags))

    async def submit(self, handler: SubmitHandler) -> Optional[EntryFormData]:
        """Hand the draft to handler. The draft is cleared only on success."""
        form = self.form_data()
        form.validate()

        if not await handler(form):
            return None

        self.reset()
        return form

    # AI enrichment

    async def analyze(self) -> None:
        """Fill AI summary and merge suggested tags."""
        if self.llm_client is None:
            return

        analysis = await self.llm_client.analyze_entry(self.draft.title, self.draft.content)
        self.draft.ai_summary = analysis.summary
        for tag in analysis.tags:
            self.add_tag(tag)

    # Book lookup

    def choose_suggestion(self, suggestion: BookSuggestion) -> None:
        """Apply suggestion to title, author and cover in one step."""
        self.draft.title = suggestion.title
        self.draft.author = suggestion.author
        self.draft.cover_image = suggestion.cover_url
        self._close_suggestions()

    async def settle(self) -> None:
        """Wait for the pending debounce timer and in-flight lookups."""
        while self._timer is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
            else:
                await asyncio.sleep(self.debounce_seconds / 4 or 0.01)

    def _should_lookup(self) -> bool:
        return (
            self.lookup is not None
            and self.draft.type is EntryType.BOOK
            and len(self.draft.title.strip()) > self.min_lookup_length
        )

    def _schedule_lookup(self) -> None:
        """Reset the debounce timer for the current title."""
        self._cancel_timer()

        if not self._should_lookup():
            self.suggestions = []
            self._lookup_seq += 1
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._fire_lookup)

    def _fire_lookup(self) -> None:
        self._timer = None
        self._lookup_seq += 1
        task = asyncio.ensure_future(self._run_lookup(self._lookup_seq, self.draft.title))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run_lookup(self, seq: int, query: str) -> None:
        results = await self.lookup.search(query)

        if seq != self._lookup_seq or self.draft.title != query:
            # Superseded by newer input
            return

        self.suggestions = results

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _close_suggestions(self) -> None:
        self._cancel_timer()
        self.suggestions = []
        self._lookup_seq += 1

    @staticmethod
    def _dedupe(tags: list[str]) -> list[str]:
        unique: list[str] = []
        for tag in tags:
            if tag not in unique:
                unique.append(tag)
        return unique
