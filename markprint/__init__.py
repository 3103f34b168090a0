"""MarkPrint - Markdown to printable HTML/PDF service."""

__version__ = "0.1.0"
