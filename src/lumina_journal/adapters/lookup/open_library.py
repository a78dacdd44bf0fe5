"""Open Library search for book auto-fill."""

from typing import Any, Optional

import httpx

from lumina_journal.config import LookupConfig
from lumina_journal.core import BookLookup, BookSuggestion


class OpenLibraryLookup(BookLookup):
    """Search books by free text on Open Library."""

    def __init__(self, config: Optional[LookupConfig] = None) -> None:
        self.config = config or LookupConfig()
        self.api_base = self.config.base_url.rstrip("/")

    async def search(self, query: str) -> list[BookSuggestion]:
        """Return up to max_results candidates. Failures yield an empty list."""
        if not query.strip():
            return []

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, follow_redirects=True) as client:
                response = await client.get(
                    f"{self.api_base}/search.json",
                    params={
                        "q": query.strip(),
                        "limit": self.config.max_results,
                        "fields": "title,author_name,first_publish_year,cover_i",
                    },
                )

                if response.status_code != 200:
                    print(f"  └─ ⚠️  Open Library error: {response.status_code} for query: {query}")
                    return []

                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            print(f"  └─ ⚠️  Error searching books for '{query}': {e}")
            return []

        suggestions: list[BookSuggestion] = []
        for doc in data.get("docs", [])[:self.config.max_results]:
            suggestion = self._create_suggestion(doc)
            if suggestion:
                suggestions.append(suggestion)

        return suggestions

    def _create_suggestion(self, doc: dict[str, Any]) -> Optional[BookSuggestion]:
        """Create suggestion from a search result document."""
        title = doc.get("title")
        if not title:
            return None

        cover_id = doc.get("cover_i")
        year = doc.get("first_publish_year")

        return BookSuggestion(
            title=title,
            authors=list(doc.get("author_name") or []),
            first_publish_year=int(year) if year else None,
            cover_id=int(cover_id) if cover_id else None,
            covers_url=self.config.covers_url,
        )
