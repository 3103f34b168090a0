"""Markdown module schemas."""

from pydantic import BaseModel, Field


class RenderRequest(BaseModel):
    """Request to render markdown for preview."""

    markdown: str = Field(..., description="Markdown source")


class RenderResponse(BaseModel):
    html: str = Field(..., description="Sanitized HTML fragment")
