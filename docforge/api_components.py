"""HTML cards for OpenAPI security, parameters, request bodies and responses.

Each renderer takes already-parsed JSON and returns an HTML fragment, or an
empty string when there is nothing to show. Malformed fields are skipped.
"""

from http import HTTPStatus
from typing import Any, Optional

from .icons import LOCK_ICON
from .properties import (
    DEFAULT_MAX_DEPTH,
    render_property_row,
    render_media_content,
    type_label,
)
from .schema import resolve_schema
from .utils import escape_html, IdGenerator

PARAMETER_GROUPS = (
    ('path', 'Path Parameters'),
    ('query', 'Query Parameters'),
    ('header', 'Headers'),
    ('cookie', 'Cookies'),
)

# Well-known security scheme names → (header name, example value)
SECURITY_SCHEMES = {
    'bearerAuth': ('Authorization', 'Bearer <token>'),
    'BearerAuth': ('Authorization', 'Bearer <token>'),
    'bearer': ('Authorization', 'Bearer <token>'),
    'jwt': ('Authorization', 'Bearer <jwt>'),
    'apiKey': ('X-API-Key', '<api-key>'),
    'ApiKeyAuth': ('X-API-Key', '<api-key>'),
    'api_key': ('X-API-Key', '<api-key>'),
    'basicAuth': ('Authorization', 'Basic <base64(username:password)>'),
    'BasicAuth': ('Authorization', 'Basic <base64(username:password)>'),
    'oauth2': ('Authorization', 'Bearer <access-token>'),
    'OAuth2': ('Authorization', 'Bearer <access-token>'),
}
DEFAULT_SECURITY_SCHEME = ('Authorization', 'Bearer <token>')

STATUS_TEXT = {str(status.value): status.phrase for status in HTTPStatus}


def _card(title_html: str, body_html: str, css_class: str) -> str:
    return (
        f'<details class="doc-api-card {css_class}" open>'
        f'<summary class="doc-api-card-header">{title_html}</summary>'
        f'<div class="doc-api-card-body">{body_html}</div>'
        f'</details>'
    )


# ---- Security ----

def render_security(security: Any, ids: Optional[IdGenerator] = None,
                    max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """One card per scheme entry of each security requirement object."""
    if isinstance(security, dict):
        security = [security]
    if not isinstance(security, list) or not security:
        return ''

    cards = []
    for requirement in security:
        if not isinstance(requirement, dict):
            continue
        for scheme_name, scopes in requirement.items():
            cards.append(_render_security_entry(str(scheme_name), scopes))

    if not cards:
        return ''
    return f'<div class="doc-api-security">{"".join(cards)}</div>'


def _render_security_entry(scheme_name: str, scopes: Any) -> str:
    header_name, example = SECURITY_SCHEMES.get(scheme_name, DEFAULT_SECURITY_SCHEME)

    title = (
        f'<span class="doc-api-card-icon">{LOCK_ICON}</span>'
        f'<span class="doc-api-card-title">Authorization</span>'
        f'<code class="doc-api-scheme-name">{escape_html(scheme_name)}</code>'
    )
    body = [
        f'<div class="doc-api-auth-header">'
        f'<span class="doc-api-auth-label">Header</span>'
        f'<code>{escape_html(header_name)}</code>'
        f'</div>',
        f'<div class="doc-api-auth-example">'
        f'<span class="doc-api-auth-label">Example</span>'
        f'<code>{escape_html(header_name)}: {escape_html(example)}</code>'
        f'</div>',
    ]
    if isinstance(scopes, list) and scopes:
        chips = ''.join(f'<code class="doc-api-scope">{escape_html(scope)}</code>' for scope in scopes)
        body.append(f'<div class="doc-api-scopes"><span class="doc-api-auth-label">Scopes</span>{chips}</div>')

    return _card(title, ''.join(body), 'doc-api-security-card')


# ---- Parameters ----

def render_params(parameters: Any, ids: Optional[IdGenerator] = None,
                  max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Parameter cards grouped by location: path, query, header, cookie."""
    if not isinstance(parameters, list) or not parameters:
        return ''

    groups = {location: [] for location, _ in PARAMETER_GROUPS}
    for param in parameters:
        if not isinstance(param, dict) or not param.get('name'):
            continue
        location = param.get('in', 'query')
        if isinstance(location, str) and location in groups:
            groups[location].append(param)

    cards = []
    for location, title in PARAMETER_GROUPS:
        params = groups[location]
        if not params:
            continue
        rows = ''.join(_render_param_row(param, max_depth) for param in params)
        title_html = (
            f'<span class="doc-api-card-title">{title}</span>'
            f'<span class="doc-api-card-count">{len(params)}</span>'
        )
        cards.append(_card(title_html, f'<div class="doc-schema-properties">{rows}</div>',
                           f'doc-api-params-{location}'))

    if not cards:
        return ''
    return f'<div class="doc-api-params">{"".join(cards)}</div>'


def _render_param_row(param: dict, max_depth: int) -> str:
    schema = param.get('schema')
    if not isinstance(schema, dict):
        schema = {}
    # Path parameters are always required
    required = bool(param.get('required')) or param.get('in') == 'path'
    return render_property_row(
        str(param['name']),
        schema,
        required=required,
        depth=0,
        max_depth=max_depth,
        description=param.get('description') or schema.get('description'),
        deprecated=bool(param.get('deprecated')),
    )


# ---- Request body ----

def render_request_body(request_body: Any, ids: Optional[IdGenerator] = None,
                        max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Body card: required badge, description, and a schema block per media type."""
    if not isinstance(request_body, dict) or not request_body:
        return ''
    ids = ids or IdGenerator()

    content_html = render_media_content(request_body.get('content'), ids, max_depth)
    description = request_body.get('description')
    if not content_html and not description:
        return ''

    if request_body.get('required'):
        badge = '<span class="doc-badge doc-badge-required">required</span>'
    else:
        badge = '<span class="doc-badge doc-badge-optional">optional</span>'
    title = f'<span class="doc-api-card-title">Body</span>{badge}'

    body = []
    if description:
        body.append(f'<div class="doc-api-description">{escape_html(description)}</div>')
    body.append(content_html)

    return f'<div class="doc-api-request-body">{_card(title, "".join(body), "doc-api-body-card")}</div>'


# ---- Responses ----

def status_bucket(code: str) -> str:
    """Coarse CSS bucket from the leading digit: 1xx..5xx, else 'default'."""
    if code and code[0] in '12345':
        return f'{code[0]}xx'
    return 'default'


def render_responses(responses: Any, ids: Optional[IdGenerator] = None,
                     max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """One row per status code, codes in lexicographic string order."""
    if not isinstance(responses, dict) or not responses:
        return ''
    ids = ids or IdGenerator()

    items = []
    for code in sorted(responses, key=str):
        response = responses[code]
        if not isinstance(response, dict):
            response = {}
        items.append(_render_response_item(str(code), response, ids, max_depth))

    return (
        f'<div class="doc-api-responses">'
        f'<div class="doc-api-section-title">Responses</div>'
        f'{"".join(items)}'
        f'</div>'
    )


def _render_response_item(code: str, response: dict, ids: IdGenerator, max_depth: int) -> str:
    bucket = status_bucket(code)
    header = [
        f'<span class="doc-api-status-badge status-{bucket}">{escape_html(code)}</span>',
        f'<span class="doc-api-status-text">{escape_html(STATUS_TEXT.get(code, ""))}</span>',
    ]
    description = response.get('description')
    if description:
        header.append(f'<span class="doc-api-response-description">{escape_html(description)}</span>')

    body = [render_media_content(response.get('content'), ids, max_depth)]
    body.append(_render_response_headers(response.get('headers')))
    body_html = ''.join(body)

    if not body_html:
        return (
            f'<div class="doc-api-response status-{bucket}">'
            f'<div class="doc-api-response-header">{"".join(header)}</div>'
            f'</div>'
        )
    return (
        f'<details class="doc-api-response status-{bucket}" open>'
        f'<summary class="doc-api-response-header">{"".join(header)}</summary>'
        f'<div class="doc-api-response-body">{body_html}</div>'
        f'</details>'
    )


def _render_response_headers(headers: Any) -> str:
    if not isinstance(headers, dict) or not headers:
        return ''
    rows = []
    for name, header in headers.items():
        if not isinstance(header, dict):
            header = {}
        schema = resolve_schema(header.get('schema'))
        label = type_label(schema) if isinstance(schema, dict) else ''
        description = header.get('description') or (schema.get('description') if isinstance(schema, dict) else '')
        row = [f'<code class="doc-api-header-name">{escape_html(name)}</code>']
        if label:
            row.append(f'<span class="doc-schema-property-type">{escape_html(label)}</span>')
        if description:
            row.append(f'<span class="doc-api-header-description">{escape_html(description)}</span>')
        rows.append(f'<div class="doc-api-response-header-row">{"".join(row)}</div>')
    return (
        f'<div class="doc-api-response-headers">'
        f'<div class="doc-api-subsection-title">Headers</div>'
        f'{"".join(rows)}'
        f'</div>'
    )
