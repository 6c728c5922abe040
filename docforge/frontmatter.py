"""Split and parse the YAML-like frontmatter block of a CMS document.

This is deliberately not a YAML parser. It understands the subset the CMS
editor writes:

    title: "Create a user"
    method: POST
    tags:
      - users
      - admin
    description: >-
      Folded text
      over several lines.
    notes: |
      Literal text
      kept line by line.

Top-level ``key: value`` pairs only. Quotes around values are stripped.
A key with an empty value followed by ``- item`` lines becomes a list.
Block scalars: ``>`` / ``>-`` fold continuation lines with spaces, ``|`` /
``|-`` keep the line breaks; the ``-`` variants drop the final newline.
Lines that fit none of these shapes are skipped.
"""

import re
from typing import Union

FrontmatterValue = Union[str, list[str]]

BLOCK_SCALARS = ('>', '>-', '|', '|-')

_FRONTMATTER_PATTERN = re.compile(r'\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)', re.DOTALL)


def split_frontmatter(content: str) -> tuple[dict[str, FrontmatterValue], str]:
    """Split a leading frontmatter block from the body.

    Returns ``({}, content)`` unchanged when there is no complete block.
    """
    if not content or not content.startswith('---'):
        return {}, content or ''

    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    return parse_frontmatter(match.group(1)), content[match.end():]


def parse_frontmatter(fm_text: str) -> dict[str, FrontmatterValue]:
    """Parse the text between the ``---`` delimiters."""
    fm = {}
    lines = fm_text.replace('\r\n', '\n').split('\n')
    i = 0
    while i < len(lines):
        line = lines[i]
        if ':' not in line or line.startswith((' ', '\t', '-', '#')):
            i += 1
            continue

        key, _, value = line.partition(':')
        key = key.strip()
        value = value.strip()
        if not key or ' ' in key:
            i += 1
            continue

        # Block scalar: collect indented continuation lines
        if value in BLOCK_SCALARS:
            block_lines = []
            i += 1
            while i < len(lines) and (lines[i].startswith((' ', '\t')) or lines[i].strip() == ''):
                block_lines.append(lines[i].strip())
                i += 1
            while block_lines and not block_lines[-1]:
                block_lines.pop()
            fm[key] = _join_block(block_lines, value)
            continue

        # Empty value: may open a "- item" list
        if not value:
            items = []
            j = i + 1
            while j < len(lines) and re.match(r'^\s*-\s', lines[j] + ' '):
                item = lines[j].strip()[1:].strip()
                if item:
                    items.append(_unquote(item))
                j += 1
            if items:
                fm[key] = items
                i = j
                continue
            i += 1
            continue

        fm[key] = _unquote(value)
        i += 1

    return fm


def _join_block(block_lines: list[str], indicator: str) -> str:
    if indicator.startswith('>'):
        # Folded: blank lines become paragraph breaks
        paragraphs = []
        current = []
        for bl in block_lines:
            if bl:
                current.append(bl)
            elif current:
                paragraphs.append(' '.join(current))
                current = []
        if current:
            paragraphs.append(' '.join(current))
        text = '\n'.join(paragraphs)
    else:
        text = '\n'.join(block_lines)

    if not indicator.endswith('-') and text:
        text += '\n'
    return text


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value
