"""The generic markdown engine (markdown-it-py) with the docs heading renderer."""

from markdown_it import MarkdownIt

from .utils import slugify


def _heading_level(tag: str) -> int:
    # h1 becomes h2: the page title is the only h1
    level = int(tag[1:])
    return 2 if level == 1 else level


def _render_heading_open(tokens, idx, options, env):
    token = tokens[idx]
    level = _heading_level(token.tag)
    text = ''
    if idx + 1 < len(tokens) and tokens[idx + 1].type == 'inline':
        text = tokens[idx + 1].content
    return f'<h{level} id="{slugify(text)}">'


def _render_heading_close(tokens, idx, options, env):
    return f'</h{_heading_level(tokens[idx].tag)}>\n'


def create_markdown_engine() -> MarkdownIt:
    """GFM-style engine: raw HTML, tables, strikethrough, newline → <br>."""
    md = MarkdownIt(
        "commonmark",
        {"html": True, "breaks": True},
    ).enable("table").enable("strikethrough")
    md.renderer.rules["heading_open"] = _render_heading_open
    md.renderer.rules["heading_close"] = _render_heading_close
    return md
