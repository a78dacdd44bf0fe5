"""Tests for markdown rendering."""

from datetime import datetime, timezone

from lumina_journal.adapters.render import MarkdownRenderer
from lumina_journal.core import EntryType, JournalEntry


def test_render_empty() -> None:
    output = MarkdownRenderer().render([])

    assert output == "# Reading Log\n\nNo entries found."


def test_render_entries() -> None:
    """Test every populated field appears and order is kept."""
    entries = [
        JournalEntry(
            id="2",
            user_id="user-1",
            title="Attention Is All You Need",
            type=EntryType.PAPER,
            content="Self-attention replaces recurrence.",
            url="https://arxiv.org/abs/1706.03762",
            tags=["ML", "Transformers"],
            ai_summary="Introduces the Transformer.",
            created_at=datetime(2024, 3, 5, tzinfo=timezone.utc),
        ),
        JournalEntry(
            id="1",
            user_id="user-1",
            title="Dune",
            author="Frank Herbert",
            type=EntryType.BOOK,
            content="Spice must flow.",
            cover_image="https://covers.openlibrary.org/b/id/1-M.jpg",
            created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        ),
    ]

    output = MarkdownRenderer().render(entries, heading="Export")

    assert output.startswith("# Export\n\nEntries: 2")
    assert "## [Attention Is All You Need](https://arxiv.org/abs/1706.03762)" in output
    assert "*Research Paper | 05.03.2024*" in output
    assert "> Introduces the Transformer." in output
    assert "`#ML` `#Transformers`" in output
    assert "## Dune" in output
    assert "*Book | by Frank Herbert | 02.01.2024*" in output
    assert "![cover](https://covers.openlibrary.org/b/id/1-M.jpg)" in output
    assert output.index("Attention") < output.index("## Dune")
