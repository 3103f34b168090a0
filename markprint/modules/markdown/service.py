"""
Markdown renderer - markdown-it-py with Pygments highlighting.

``render()`` output still contains whatever raw HTML the author wrote; only
``render_sanitized()`` output may be handed to a browser.
"""

import html
from functools import lru_cache

from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from markprint.shared.logging import get_logger

from .sanitize import sanitize_html

logger = get_logger(__name__)


# Canonical Pygments aliases that get highlighted; aliases resolving to these
# (js, py, sh, yml, ...) are accepted too.
SUPPORTED_LANGUAGES = frozenset({
    "javascript",
    "typescript",
    "python",
    "bash",
    "json",
    "html",
    "css",
    "markdown",
    "yaml",
    "sql",
    "go",
    "rust",
})

HIGHLIGHT_CSS_CLASS = "highlight"
HIGHLIGHT_STYLE = "default"

MARKDOWN_OPTIONS = {
    "html": True,
    "linkify": True,
    "typographer": True,
    "breaks": False,
}

ANCHOR_LEVELS = (1, 4)


@lru_cache(maxsize=1)
def highlight_css() -> str:
    """Stylesheet for the token classes emitted by highlighted code blocks."""
    return HtmlFormatter(style=HIGHLIGHT_STYLE).get_style_defs(f".{HIGHLIGHT_CSS_CLASS}")


def _plain_code_block(code: str, lang: str) -> str:
    return (
        f'<pre><code class="language-{html.escape(lang)}">'
        f"{html.escape(code)}</code></pre>"
    )


class MarkdownRenderer:
    """Converts markdown text to HTML."""

    def __init__(self) -> None:
        self._formatter = HtmlFormatter(nowrap=True)
        self.md = self._build_parser()

    def _build_parser(self) -> MarkdownIt:
        md = MarkdownIt("gfm-like", {**MARKDOWN_OPTIONS, "highlight": self.highlight_code})
        # Typographic substitutions are off in the base preset
        md.enable(["replacements", "smartquotes"])

        md.use(anchors_plugin, min_level=ANCHOR_LEVELS[0], max_level=ANCHOR_LEVELS[1], permalink=False)
        md.use(tasklists_plugin, enabled=True, label=True)
        md.use(footnote_plugin)
        return md

    def highlight_code(self, code: str, lang: str, attrs: str = "") -> str:
        """
        Highlight a fenced block.

        Returns a complete ``<pre>`` element, or an empty string for blocks with
        no language so markdown-it falls back to its own escaped rendering.
        """
        if not lang:
            return ""

        try:
            lexer = get_lexer_by_name(lang.lower())
        except ClassNotFound:
            return _plain_code_block(code, lang)

        if not lexer.aliases or lexer.aliases[0] not in SUPPORTED_LANGUAGES:
            return _plain_code_block(code, lang)

        try:
            highlighted = highlight(code, lexer, self._formatter)
        except Exception:
            logger.warning(f"Highlighting failed for language '{lang}'", exc_info=True)
            return _plain_code_block(code, lang)

        return (
            f'<pre class="{HIGHLIGHT_CSS_CLASS}">'
            f'<code class="language-{html.escape(lang.lower())}">{highlighted}</code></pre>'
        )

    def render(self, markdown: str) -> str:
        """Render markdown to unsanitized HTML."""
        return self.md.render(markdown)

    def render_sanitized(self, markdown: str) -> str:
        """Render markdown to HTML that is safe to load in a browser."""
        return sanitize_html(self.render(markdown))


_renderer: MarkdownRenderer | None = None


def get_markdown_renderer() -> MarkdownRenderer:
    """Process-wide renderer; the parser is built once."""
    global _renderer
    if _renderer is None:
        _renderer = MarkdownRenderer()
    return _renderer
