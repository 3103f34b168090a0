"""
Print document assembly.

Builds the self-contained HTML page handed to the browser: sanitized content,
theme CSS, the code highlighting stylesheet, and print rules for the chosen
page size and margins.
"""

from jinja2 import Template

from markprint.modules.markdown.service import highlight_css

from .schemas import PdfOptions

MARGIN_PRESETS = {
    "normal": "20mm",
    "narrow": "10mm",
    "wide": "25mm",
}

# Bottom margin when a page-number footer is printed
FOOTER_MARGIN = "25mm"

FOOTER_TEMPLATE = """
<div style="width: 100%; text-align: center; font-size: 10px; color: #666; font-family: system-ui, sans-serif;">
  Page <span class="pageNumber"></span> of <span class="totalPages"></span>
</div>
"""

EMPTY_HEADER_TEMPLATE = "<span></span>"

_DOCUMENT_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>
    @page {
      size: {{ page_size }};
      margin: {{ margin }};
    }

    * {
      box-sizing: border-box;
    }

    html, body {
      margin: 0;
      padding: 0;
      -webkit-print-color-adjust: exact !important;
      print-color-adjust: exact !important;
    }

    body {
      font-family: system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    }

    /* Theme */
    {{ theme_css }}

    /* Code highlighting */
    {{ highlight_css }}

    /* Print adjustments */
    img {
      max-width: 100%;
      height: auto;
    }

    pre {
      white-space: pre-wrap;
      word-wrap: break-word;
    }

    table {
      page-break-inside: avoid;
    }

    h1, h2, h3, h4, h5, h6 {
      page-break-after: avoid;
    }

    p, blockquote {
      orphans: 3;
      widows: 3;
    }
  </style>
</head>
<body class="print-document">
  <article class="markdown-body">
    {{ content }}
  </article>
</body>
</html>
""")


def margin_for(options: PdfOptions) -> str:
    return MARGIN_PRESETS[options.margins]


def build_document(content: str, theme_css: str, options: PdfOptions) -> str:
    """
    Assemble the full HTML document.

    ``content`` must already be sanitized; it is inserted verbatim.
    """
    return _DOCUMENT_TEMPLATE.render(
        page_size=options.page_size,
        margin=margin_for(options),
        theme_css=theme_css,
        highlight_css=highlight_css(),
        content=content,
    )
