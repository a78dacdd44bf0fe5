"""Markdown rendering of journal entries."""

from lumina_journal.core import EntryRenderer, JournalEntry
from lumina_journal.core.view import EMPTY_COLLECTION_MESSAGE


class MarkdownRenderer(EntryRenderer):
    """Render an entry list as a markdown document, keeping the given order."""

    def render(self, entries: list[JournalEntry], heading: str = "Reading Log") -> str:
        """Generate markdown document."""
        if not entries:
            return f"# {heading}\n\n{EMPTY_COLLECTION_MESSAGE}"

        lines = [
            f"# {heading}",
            "",
            f"Entries: {len(entries)}",
            "",
        ]

        for entry in entries:
            lines.extend(self._format_entry(entry))

        return "\n".join(lines)

    def _format_entry(self, entry: JournalEntry) -> list[str]:
        """Format single entry."""
        title = f"[{entry.title}]({entry.url})" if entry.url else entry.title
        lines = [f"## {title}", ""]

        meta_parts = [entry.type.value]
        if entry.author:
            meta_parts.append(f"by {entry.author}")
        meta_parts.append(entry.created_at.strftime("%d.%m.%Y"))
        lines.extend([f"*{' | '.join(meta_parts)}*", ""])

        if entry.cover_image:
            lines.extend([f"![cover]({entry.cover_image})", ""])

        if entry.ai_summary:
            lines.extend([f"> {entry.ai_summary}", ""])

        lines.extend([entry.content, ""])

        if entry.tags:
            lines.append(" ".join(f"`#{tag}`" for tag in entry.tags))
            lines.append("")

        lines.append("---")
        lines.append("")

        return lines
