"""Locate API component tags and extract their embedded JSON payloads.

Tags look like ``<ApiParams parameters={[{"name": "id", ...}]} />``. The
payload may contain nested braces and braces inside string literals, which
a regex cannot match reliably, so the payload is found by scanning for the
balanced closing brace while tracking double-quoted strings.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .api_components import (
    render_security,
    render_params,
    render_request_body,
    render_responses,
)
from .properties import DEFAULT_MAX_DEPTH
from .stash import HtmlStash
from .utils import escape_html, IdGenerator

REQUEST_MARKER = '<!--docforge:request-part-->'

REQUEST_OPEN = (
    '<div class="doc-api-section doc-api-request">\n'
    '<h2 id="{id}">Request</h2>\n'
)
REQUEST_CLOSE = '</div>'


@dataclass(frozen=True)
class ApiComponent:
    """One entry of the component table."""
    tag: str
    attribute: str
    render: Callable[..., str]
    label: str
    request_part: bool

    @property
    def open_tag(self) -> str:
        return f'<{self.tag}'


# Processed in this order
API_COMPONENTS = (
    ApiComponent('ApiSecurity', 'security', render_security, 'security requirements', True),
    ApiComponent('ApiParams', 'parameters', render_params, 'parameters', True),
    ApiComponent('ApiRequest', 'requestBody', render_request_body, 'request body', True),
    ApiComponent('ApiResponse', 'responses', render_responses, 'responses', False),
)


def find_closing_brace(text: str, start: int) -> int:
    """Index of the '}' matching the '{' at ``start``, or -1 if unbalanced.

    Braces inside double-quoted strings (with backslash escapes) are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return i
    return -1


def parse_payload(raw: str) -> Any:
    """Parse the text between the attribute braces.

    ``attr={[...]}`` and ``attr={{...}}`` hold a JSON value directly;
    ``attr={"a": 1}`` is an object literal whose braces double as the
    attribute delimiters.
    """
    try:
        return json.loads(raw)
    except ValueError:
        return json.loads('{' + raw + '}')


def error_placeholder(label: str, reason: str) -> str:
    return f'<div class="doc-api-error">Could not parse {escape_html(label)} ({escape_html(reason)})</div>'


def process_api_components(text: str, stash: HtmlStash, ids: IdGenerator,
                           issues: Optional[list] = None,
                           max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Replace every API component tag with stashed HTML.

    Request-part components are grouped under one "Request" container.
    """
    if issues is None:
        issues = []
    for component in API_COMPONENTS:
        text = _process_component(text, component, stash, ids, issues, max_depth)
    return wrap_request_parts(text, ids)


def _process_component(text: str, component: ApiComponent, stash: HtmlStash, ids: IdGenerator,
                       issues: list, max_depth: int) -> str:
    open_tag = component.open_tag
    marker = f'{component.attribute}={{'
    out = []
    pos = 0

    while True:
        start = text.find(open_tag, pos)
        if start == -1:
            out.append(text[pos:])
            break

        name_end = start + len(open_tag)
        # <ApiParamsFoo is a different tag
        if name_end < len(text) and not (text[name_end].isspace() or text[name_end] in '/>'):
            out.append(text[pos:name_end])
            pos = name_end
            continue

        out.append(text[pos:start])

        attr_at = text.find(marker, name_end)
        tag_close = text.find('>', name_end)
        if attr_at == -1 or (tag_close != -1 and tag_close < attr_at):
            # Tag without a payload: nothing to render
            pos = tag_close + 1 if tag_close != -1 else len(text)
            continue

        brace = attr_at + len(marker) - 1
        close = find_closing_brace(text, brace)
        if close == -1:
            issues.append(f'Could not parse {component.label}: unbalanced braces in <{component.tag}>')
            out.append(stash.store(error_placeholder(component.label, 'unbalanced braces')))
            # Resume past the tag name so the scan always advances
            pos = name_end
            continue

        tag_end = text.find('>', close)
        end = tag_end + 1 if tag_end != -1 else close + 1

        try:
            data = parse_payload(text[brace + 1:close])
        except ValueError:
            issues.append(f'Could not parse {component.label}: invalid JSON in <{component.tag}>')
            out.append(stash.store(error_placeholder(component.label, 'invalid JSON')))
            pos = end
            continue

        try:
            html = component.render(data, ids, max_depth=max_depth)
        except (TypeError, ValueError, AttributeError, KeyError):
            issues.append(f'Could not parse {component.label}: invalid data in <{component.tag}>')
            out.append(stash.store(error_placeholder(component.label, 'invalid data')))
            pos = end
            continue

        if html:
            placeholder = stash.store(html)
            if component.request_part:
                placeholder = f'\n\n{REQUEST_MARKER}{placeholder}{REQUEST_MARKER}\n\n'
            out.append(placeholder)
        pos = end

    return ''.join(out)


def wrap_request_parts(text: str, ids: IdGenerator) -> str:
    """Enclose the span between the first and last request marker in one container."""
    first = text.find(REQUEST_MARKER)
    if first == -1:
        return text
    last = text.rfind(REQUEST_MARKER) + len(REQUEST_MARKER)
    inner = text[first:last].replace(REQUEST_MARKER, '')
    opening = REQUEST_OPEN.format(id=ids.next('request'))
    return f'{text[:first]}\n\n{opening}\n{inner}\n\n{REQUEST_CLOSE}\n\n{text[last:]}'
