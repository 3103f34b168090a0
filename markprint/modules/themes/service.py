"""
Theme store - static theme metadata and per-theme stylesheet cache.

A theme stylesheet is the shared ``_base.css`` followed by the theme's own file,
with the theme's ``@import`` of the base stripped since the base is inlined.
"""

import re
from pathlib import Path

from markprint.config import get_settings
from markprint.shared.errors import StylesheetLoadError, UnknownThemeError
from markprint.shared.logging import get_logger

from .schemas import Theme

logger = get_logger(__name__)


THEMES: tuple[Theme, ...] = (
    Theme(
        id="clean",
        name="Clean",
        description="Minimal, professional styling with generous white space. Perfect for documentation.",
    ),
    Theme(
        id="academic",
        name="Academic",
        description="Traditional serif fonts with justified text. Ideal for essays and research papers.",
    ),
    Theme(
        id="modern",
        name="Modern",
        description="Contemporary design with subtle colored accents. Great for technical documentation.",
    ),
    Theme(
        id="compact",
        name="Compact",
        description="Optimized for maximum content per page. Small fonts and tight spacing.",
    ),
    Theme(
        id="executive",
        name="Executive",
        description="Bold, corporate look with strong visual hierarchy. Ideal for business documents.",
    ),
    Theme(
        id="manuscript",
        name="Manuscript",
        description="Traditional book style with classic serif typography. Perfect for literary content.",
    ),
    Theme(
        id="technical",
        name="Technical",
        description="Optimized for code-heavy technical documentation. High contrast and mono-friendly.",
    ),
    Theme(
        id="minimalist",
        name="Minimalist",
        description="Ultra-clean design with maximum whitespace. For content that speaks for itself.",
    ),
    Theme(
        id="newsletter",
        name="Newsletter",
        description="Friendly layout with subtle decorative elements. Great for casual communications.",
    ),
)

THEME_IDS: frozenset[str] = frozenset(theme.id for theme in THEMES)

BASE_STYLESHEET = "_base.css"

_BASE_IMPORT_RE = re.compile(r"""@import\s+['"]\.?/?_base\.css['"];?\s*""")


class ThemeStore:
    """Serves theme metadata and lazily loads theme CSS from disk."""

    def __init__(self, themes_dir: Path) -> None:
        self.themes_dir = themes_dir
        self._cache: dict[str, str] = {}

    def list_themes(self) -> list[Theme]:
        """All themes in display order."""
        return list(THEMES)

    def is_valid_theme_id(self, theme_id: str) -> bool:
        return theme_id in THEME_IDS

    def get_stylesheet(self, theme_id: str) -> str:
        """
        Get the combined base + theme CSS for a theme.

        Raises:
            UnknownThemeError: theme_id is not one of THEME_IDS
            StylesheetLoadError: a backing CSS file cannot be read
        """
        if not self.is_valid_theme_id(theme_id):
            raise UnknownThemeError(theme_id)

        cached = self._cache.get(theme_id)
        if cached is not None:
            return cached

        try:
            base_css = (self.themes_dir / BASE_STYLESHEET).read_text(encoding="utf-8")
            theme_css = (self.themes_dir / f"{theme_id}.css").read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read stylesheet for theme '{theme_id}': {e}")
            raise StylesheetLoadError(theme_id) from e

        theme_css = _BASE_IMPORT_RE.sub("", theme_css)
        combined = f"/* Base Styles */\n{base_css}\n\n/* Theme: {theme_id} */\n{theme_css}"

        self._cache[theme_id] = combined
        logger.debug(f"Cached stylesheet for theme '{theme_id}' ({len(combined)} chars)")
        return combined

    def clear_cache(self) -> None:
        """Drop all cached stylesheets."""
        self._cache.clear()


_store: ThemeStore | None = None


def get_theme_store() -> ThemeStore:
    """Process-wide theme store."""
    global _store
    if _store is None:
        _store = ThemeStore(get_settings().themes_dir)
    return _store


def reset_theme_store() -> None:
    global _store
    _store = None
