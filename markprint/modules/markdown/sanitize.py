"""
HTML sanitization policy.

Allow-list of the structural markup markdown produces. Script, style and
embedding elements are removed together with their content; event handler
attributes never make it through because only listed attributes survive.
"""

import nh3

ALLOWED_TAGS = frozenset({
    # Block structure
    "p", "br", "hr", "div", "section", "blockquote", "pre",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "details", "summary", "figure", "figcaption",
    # Lists
    "ul", "ol", "li", "dl", "dt", "dd",
    # Inline
    "a", "abbr", "b", "code", "del", "em", "i", "img", "ins", "kbd",
    "mark", "s", "small", "span", "strong", "sub", "sup", "u",
    # Tables
    "table", "caption", "colgroup", "col", "thead", "tbody", "tfoot", "tr", "th", "td",
    # Task list checkboxes
    "input", "label",
})

# Dropped along with everything inside them
FORBIDDEN_CONTENT_TAGS = frozenset({
    "script", "style", "iframe", "object", "embed", "noscript", "template",
})

ALLOWED_ATTRIBUTES: dict[str, set[str]] = {
    "*": {"class", "id", "title", "lang", "dir"},
    "a": {"href", "name"},
    "img": {"src", "alt", "width", "height"},
    "input": {"checked", "disabled"},
    "ol": {"start", "type"},
    "li": {"value"},
    "th": {"align", "colspan", "rowspan", "style"},
    "td": {"align", "colspan", "rowspan", "style"},
    "col": {"span"},
}

# Only checkboxes may be emitted as inputs
ALLOWED_ATTRIBUTE_VALUES: dict[str, dict[str, set[str]]] = {
    "input": {"type": {"checkbox"}},
}

# Table cell alignment from markdown tables is the only inline style kept
ALLOWED_STYLE_PROPERTIES = frozenset({"text-align"})

ALLOWED_URL_SCHEMES = frozenset({"http", "https", "mailto", "tel"})


def sanitize_html(html: str) -> str:
    """Strip everything outside the allow-list from an HTML fragment."""
    return nh3.clean(
        html,
        tags=set(ALLOWED_TAGS),
        clean_content_tags=set(FORBIDDEN_CONTENT_TAGS),
        attributes=ALLOWED_ATTRIBUTES,
        tag_attribute_values=ALLOWED_ATTRIBUTE_VALUES,
        filter_style_properties=set(ALLOWED_STYLE_PROPERTIES),
        url_schemes=set(ALLOWED_URL_SCHEMES),
        strip_comments=True,
    )
