"""Themes module - theme metadata and cached stylesheets."""

from .router import router
from .schemas import Theme, ThemeId, ThemesResponse
from .service import ThemeStore, get_theme_store

__all__ = ["router", "Theme", "ThemeId", "ThemesResponse", "ThemeStore", "get_theme_store"]
