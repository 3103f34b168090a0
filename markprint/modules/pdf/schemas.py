"""PDF module schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from markprint.modules.themes.schemas import ThemeId

PageSize = Literal["A4", "Letter", "Legal", "B5"]
MarginPreset = Literal["normal", "narrow", "wide"]


class PdfOptions(BaseModel):
    """Page layout options. Accepts camelCase keys from the client."""

    model_config = ConfigDict(populate_by_name=True)

    page_size: PageSize = Field(default="A4", alias="pageSize")
    margins: MarginPreset = "normal"
    include_page_numbers: bool = Field(default=True, alias="includePageNumbers")


class PdfRequest(BaseModel):
    """Request to render markdown to PDF."""

    markdown: str = Field(..., min_length=1, description="Markdown content")
    theme: ThemeId
    options: PdfOptions = Field(default_factory=PdfOptions)


class PdfStatusResponse(BaseModel):
    """Snapshot of the render admission gate."""

    active: int
    pending: int
    limit: int
    max_pending: int
    browser_connected: bool
