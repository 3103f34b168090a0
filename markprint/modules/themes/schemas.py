"""Themes module schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

ThemeId = Literal[
    "clean",
    "academic",
    "modern",
    "compact",
    "executive",
    "manuscript",
    "technical",
    "minimalist",
    "newsletter",
]


class Theme(BaseModel):
    """A fixed styling preset applied to rendered markdown."""

    model_config = ConfigDict(frozen=True)

    id: ThemeId
    name: str
    description: str


class ThemesResponse(BaseModel):
    themes: list[Theme]
