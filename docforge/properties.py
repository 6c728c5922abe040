"""Render JSON Schema properties as collapsible HTML rows."""

import json
from typing import Any, Optional

from .schema import resolve_schema, generate_schema_example
from .utils import escape_html, IdGenerator

DEFAULT_MAX_DEPTH = 4

# (schema keyword, label), in display order
CONSTRAINT_KEYS = (
    ('minLength', 'min length'),
    ('maxLength', 'max length'),
    ('pattern', 'pattern'),
    ('format', 'format'),
    ('minimum', 'min'),
    ('maximum', 'max'),
    ('minItems', 'min items'),
    ('maxItems', 'max items'),
)


def type_label(schema: Any) -> str:
    """Human type label: ``array [itemType]`` for typed arrays, else the raw type."""
    if not isinstance(schema, dict):
        return ''
    schema_type = schema.get('type')
    if isinstance(schema_type, list):
        schema_type = ' | '.join(str(t) for t in schema_type)
    if schema_type == 'array':
        items = resolve_schema(schema.get('items'))
        if isinstance(items, dict) and isinstance(items.get('type'), str):
            return f"array [{items['type']}]"
        return 'array'
    if not schema_type and isinstance(schema.get('properties'), dict):
        return 'object'
    return str(schema_type or '')


def collect_constraints(schema: Any) -> list[str]:
    """Constraint strings in CONSTRAINT_KEYS order."""
    if not isinstance(schema, dict):
        return []
    constraints = []
    for key, label in CONSTRAINT_KEYS:
        if key in schema and schema[key] is not None:
            constraints.append(f'{label}: {schema[key]}')
    return constraints


def child_schema(schema: Any) -> Optional[dict]:
    """The schema whose properties are rendered as children, if any.

    Objects with properties are their own child schema; arrays unwrap one
    level of items.
    """
    if not isinstance(schema, dict):
        return None
    if isinstance(schema.get('properties'), dict) and schema['properties']:
        return schema
    if schema.get('type') == 'array':
        items = resolve_schema(schema.get('items'))
        if isinstance(items, dict) and isinstance(items.get('properties'), dict) and items['properties']:
            return items
    return None


def format_value(value: Any) -> str:
    """Display form of an enum/default value."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def render_property_row(name: str, schema: Any, required: bool = False, depth: int = 0,
                        max_depth: int = DEFAULT_MAX_DEPTH, description: Optional[str] = None,
                        deprecated: Optional[bool] = None) -> str:
    """Render a single property (or parameter) row, recursing into children."""
    schema = resolve_schema(schema)
    if not isinstance(schema, dict):
        schema = {}

    if description is None:
        description = schema.get('description')
    if deprecated is None:
        deprecated = bool(schema.get('deprecated'))

    header = [f'<code class="doc-schema-property-name">{escape_html(name)}</code>']
    label = type_label(schema)
    if label:
        header.append(f'<span class="doc-schema-property-type">{escape_html(label)}</span>')
    if required:
        header.append('<span class="doc-badge doc-badge-required">required</span>')
    else:
        header.append('<span class="doc-badge doc-badge-optional">optional</span>')
    if deprecated:
        header.append('<span class="doc-badge doc-badge-deprecated">deprecated</span>')

    body = []
    if description:
        body.append(f'<div class="doc-schema-property-description">{escape_html(description)}</div>')

    constraints = collect_constraints(schema)
    if constraints:
        chips = ''.join(f'<span class="doc-constraint">{escape_html(c)}</span>' for c in constraints)
        body.append(f'<div class="doc-schema-property-constraints">{chips}</div>')

    enum_values = schema.get('enum')
    if isinstance(enum_values, list) and enum_values:
        chips = ''.join(f'<code class="doc-enum-value">{escape_html(format_value(v))}</code>' for v in enum_values)
        body.append(f'<div class="doc-schema-property-enum"><span>Allowed values:</span> {chips}</div>')

    if 'default' in schema:
        body.append(
            f'<div class="doc-schema-property-default"><span>Default:</span> '
            f'<code>{escape_html(format_value(schema["default"]))}</code></div>'
        )

    children = child_schema(schema)
    child_rows = render_schema_properties(children, depth + 1, max_depth) if children else ''

    if child_rows:
        return (
            f'<div class="doc-schema-property has-children" data-depth="{depth}">'
            f'<div class="doc-schema-property-header">{"".join(header)}</div>'
            f'{"".join(body)}'
            f'<details class="doc-schema-children" open>'
            f'<summary>Child attributes</summary>'
            f'<div class="doc-schema-properties">{child_rows}</div>'
            f'</details>'
            f'</div>'
        )

    return (
        f'<div class="doc-schema-property" data-depth="{depth}">'
        f'<div class="doc-schema-property-header">{"".join(header)}</div>'
        f'{"".join(body)}'
        f'</div>'
    )


def render_schema_properties(schema: Any, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Render one row per property of an object schema.

    Returns an empty string past ``max_depth``, which also bounds output for
    self-referencing schemas.
    """
    if depth > max_depth:
        return ''
    schema = resolve_schema(schema)
    if not isinstance(schema, dict):
        return ''
    properties = schema.get('properties')
    if not isinstance(properties, dict):
        return ''

    required = schema.get('required')
    required = {r for r in required if isinstance(r, str)} if isinstance(required, list) else set()

    rows = []
    for name, prop in properties.items():
        rows.append(render_property_row(str(name), prop, name in required, depth, max_depth))
    return ''.join(rows)


def render_schema_block(schema: Any, ids: IdGenerator, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Params/Example tab pair for a request or response schema."""
    if schema is None:
        return ''
    resolved = resolve_schema(schema)

    rows = render_schema_properties(resolved, 0, max_depth)
    if rows:
        params_html = f'<div class="doc-schema-properties">{rows}</div>'
    else:
        children = child_schema(resolved)
        if children is not None:
            # Array of objects: show the item properties
            item_rows = render_schema_properties(children, 0, max_depth)
            params_html = (
                f'<div class="doc-schema-array-note">{escape_html(type_label(resolved))}</div>'
                f'<div class="doc-schema-properties">{item_rows}</div>'
            )
        else:
            params_html = _raw_json(schema)

    example = generate_schema_example(schema)
    example_html = _raw_json(example)

    return render_tabs(
        ['Params', 'Example'],
        [params_html, example_html],
        ids.next('schema'),
        css_class='doc-schema-block',
    )


def render_media_content(content: Any, ids: IdGenerator, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Schema blocks per media type; one media type renders directly, several as tabs."""
    if not isinstance(content, dict) or not content:
        return ''

    media_types = []
    panels = []
    for media_type, media in content.items():
        schema = media.get('schema') if isinstance(media, dict) else None
        media_types.append(str(media_type))
        block = render_schema_block(schema, ids, max_depth)
        panels.append(block or '<div class="doc-schema-empty">No schema.</div>')

    if len(media_types) == 1:
        return (
            f'<div class="doc-media-type"><code>{escape_html(media_types[0])}</code></div>'
            f'{panels[0]}'
        )
    return render_tabs(media_types, panels, ids.next('media'), css_class='doc-media-tabs')


def render_tabs(titles: list[str], panels: list[str], tab_id: str, css_class: str = '') -> str:
    """Tab strip markup shared with the <Tabs> component; the first tab is active."""
    buttons = ''.join(
        f'<button class="doc-tab-button{" active" if i == 0 else ""}" data-tab-trigger '
        f'data-tab-index="{i}">{escape_html(title)}</button>'
        for i, title in enumerate(titles)
    )
    contents = ''.join(
        f'<div class="doc-tab-panel{" active" if i == 0 else ""}" data-tab-panel '
        f'data-tab-index="{i}">{panel}</div>'
        for i, panel in enumerate(panels)
    )
    classes = f'doc-tabs {css_class}'.strip()
    return (
        f'<div class="{classes}" data-tabs id="{tab_id}">'
        f'<div class="doc-tabs-header">{buttons}</div>'
        f'<div class="doc-tabs-content">{contents}</div>'
        f'</div>'
    )


def _raw_json(value: Any) -> str:
    try:
        text = json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        # Self-referencing or non-JSON values
        text = str(value)
    return f'<pre><code class="language-json">{escape_html(text)}</code></pre>'
