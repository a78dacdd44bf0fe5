"""Rendering adapters."""

from lumina_journal.adapters.render.markdown_renderer import MarkdownRenderer

__all__ = ["MarkdownRenderer"]
