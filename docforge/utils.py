"""Shared utilities for the documentation renderer."""

import html
import re
from dataclasses import dataclass, asdict

from .frontmatter import split_frontmatter


def escape_html(text) -> str:
    """Escape &, <, >, " and ' for use in attributes and visible text."""
    if text is None:
        return ''
    return html.escape(str(text), quote=True)


def slugify(text: str) -> str:
    """Create a URL-safe slug from heading text.

    Used both for heading ids in rendered HTML and for the table of contents,
    so the two always agree.
    """
    text = (text or '').lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-')


class IdGenerator:
    """Deterministic element-id source owned by a single render call."""

    def __init__(self):
        self._counters = {}

    def next(self, prefix: str) -> str:
        count = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = count
        return f'{prefix}-{count}'


# key="value", key='value', key={value} or bare key=value
_ATTR_PATTERN = re.compile(r'''([\w-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|\{([^}]*)\}|([^\s"'>/{}]+))''')


def parse_attributes(attr_text: str) -> dict:
    """Parse JSX-style tag attributes into a dict of strings."""
    attrs = {}
    for match in _ATTR_PATTERN.finditer(attr_text or ''):
        name = match.group(1)
        for value in match.groups()[1:]:
            if value is not None:
                attrs[name] = value.strip()
                break
    return attrs


@dataclass
class Heading:
    """A table-of-contents entry."""
    depth: int
    slug: str
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


def extract_headings(content: str) -> list[Heading]:
    """Scan markdown for level 1-3 headings for the table of contents.

    Level-1 headings are reported at depth 2 because the renderer demotes
    them; fenced code blocks are skipped.
    """
    _, body = split_frontmatter(content or '')
    headings = []
    in_code_block = False

    for line in body.split('\n'):
        stripped = line.strip()
        if stripped.startswith('```') or stripped.startswith('~~~'):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue

        match = re.match(r'^(#{1,3})\s+(.+?)(?:\s+#+)?\s*$', line)
        if not match:
            continue
        depth = max(len(match.group(1)), 2)
        text = match.group(2).strip()
        headings.append(Heading(depth=depth, slug=slugify(text), text=text))

    return headings
