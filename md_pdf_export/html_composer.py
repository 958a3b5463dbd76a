"""
Markdown to standalone HTML composition.

Turns raw Markdown into a complete HTML document: the shared stylesheet, the
converted body with Mermaid fences rewritten into ``<div class="mermaid">``
containers, the Mermaid library and a small script that raises
``window.mermaidReady`` once every diagram has rendered (or timed out).

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import html
import re
from pathlib import Path
from typing import Optional

import markdown
from pymdownx.superfences import fence_div_format

from .config import (
    DEFAULT_DIAGRAM_TIMEOUT_MS,
    DEFAULT_LANGUAGE,
    DEFAULT_MERMAID_URL,
    DEFAULT_POLL_INTERVAL_MS,
)
from .styles import PDF_CSS

# Grace period between the last diagram rendering and readiness, lets layout settle
SETTLE_DELAY_MS = 500

# "extra" minus its fenced_code: superfences also finds fences nested in lists and blockquotes
MARKDOWN_EXTENSIONS = [
    "abbr",
    "attr_list",
    "def_list",
    "footnotes",
    "md_in_html",
    "tables",
    "nl2br",
    "sane_lists",
    "pymdownx.highlight",
    "pymdownx.superfences",
]

MARKDOWN_EXTENSION_CONFIGS = {
    "pymdownx.highlight": {
        "use_pygments": False,
    },
    "pymdownx.superfences": {
        "custom_fences": [
            {"name": "mermaid", "class": "mermaid", "format": fence_div_format},
        ],
    },
}

# Mermaid code that reached the generic code-block renderer
_MERMAID_BLOCK_RE = re.compile(
    r'<pre[^>]*><code class="language-mermaid">([\s\S]*?)</code></pre>'
)


def markdown_to_html(markdown_content: str) -> str:
    """Convert Markdown text to an HTML fragment (soft breaks become <br>).

    Mermaid fences, at any nesting depth, come out as ``<div class="mermaid">``.
    """
    return markdown.markdown(
        markdown_content,
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
        output_format="html5",
    )


def convert_diagram_blocks(html_content: str) -> str:
    """Rewrite Mermaid code blocks into the container form Mermaid.js scans for.

    Covers HTML that rendered Mermaid as an ordinary code block. The escaped
    diagram source is kept as-is; the browser decodes the entities back into
    the text Mermaid reads.
    """
    return _MERMAID_BLOCK_RE.sub(r'<div class="mermaid">\1</div>', html_content)


def extract_title(content: str, md_file: Optional[Path] = None) -> str:
    """Extract the document title from markdown content.

    Preference order:
    1) First ATX H1 heading starting with '# '
    2) Setext H1 style (line followed by '===')
    3) Humanized filename stem
    """
    lines = content.splitlines()

    # 1) ATX H1: lines that start with '# ' but not '## '
    for line in lines:
        stripped = line.strip()
        if stripped.startswith('# '):
            heading_text = stripped[2:].strip().rstrip('#').strip()
            if heading_text:
                return heading_text

    # 2) Setext H1: a non-empty line followed by a line of '='
    for i in range(len(lines) - 1):
        current_line = lines[i].strip()
        underline = lines[i + 1].strip()
        if current_line and re.fullmatch(r"=+", underline):
            return current_line

    # 3) Fallback to humanized filename stem
    if md_file is None:
        return "Document"
    stem = md_file.stem.replace('_', ' ').replace('-', ' ').strip()
    return stem.title() if stem else md_file.stem


def _readiness_script(poll_interval: int, diagram_timeout: int) -> str:
    return f"""
        // Offline runs have no mermaid global; the timeouts below still fire
        if (window.mermaid) {{
            mermaid.initialize({{
                startOnLoad: true,
                theme: 'default',
                securityLevel: 'loose'
            }});
        }}

        (function() {{
            const mermaidElements = document.querySelectorAll('.mermaid');
            const totalCount = mermaidElements.length;
            let settledCount = 0;

            if (totalCount === 0) {{
                window.mermaidReady = true;
                return;
            }}

            window.mermaidReady = false;

            function markSettled(state, delay) {{
                if (state.settled) {{
                    return;
                }}
                state.settled = true;
                settledCount++;
                if (settledCount === totalCount) {{
                    setTimeout(function() {{
                        window.mermaidReady = true;
                    }}, delay);
                }}
            }}

            mermaidElements.forEach(function(element) {{
                const state = {{ settled: false }};

                const checkRender = setInterval(function() {{
                    if (element.querySelector('svg')) {{
                        clearInterval(checkRender);
                        markSettled(state, {SETTLE_DELAY_MS});
                    }}
                }}, {poll_interval});

                // Diagram never rendered: stop waiting on it
                setTimeout(function() {{
                    clearInterval(checkRender);
                    if (!state.settled) {{
                        element.setAttribute('data-render-timeout', 'true');
                    }}
                    markSettled(state, 0);
                }}, {diagram_timeout});
            }});
        }})();
"""


def create_html_template(
    markdown_content: str,
    title: Optional[str] = None,
    language: str = DEFAULT_LANGUAGE,
    mermaid_url: str = DEFAULT_MERMAID_URL,
    poll_interval: int = DEFAULT_POLL_INTERVAL_MS,
    diagram_timeout: int = DEFAULT_DIAGRAM_TIMEOUT_MS,
) -> str:
    """Build the complete HTML document for one Markdown source."""
    body = convert_diagram_blocks(markdown_to_html(markdown_content))
    if title is None:
        title = extract_title(markdown_content)

    return f"""<!DOCTYPE html>
<html lang="{html.escape(language, quote=True)}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <script src="{html.escape(mermaid_url, quote=True)}"></script>
    <style>
        {PDF_CSS}
    </style>
</head>
<body>
    {body}
    <script>{_readiness_script(poll_interval, diagram_timeout)}    </script>
</body>
</html>
"""
