"""Markdown module - markdown to sanitized HTML."""

from .router import router
from .schemas import RenderRequest, RenderResponse
from .service import MarkdownRenderer, get_markdown_renderer

__all__ = ["router", "RenderRequest", "RenderResponse", "MarkdownRenderer", "get_markdown_renderer"]
