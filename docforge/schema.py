"""JSON Schema helpers: composite resolution and example synthesis."""

from typing import Any, Optional

# Canonical literals for string formats
FORMAT_EXAMPLES = {
    'date-time': '2024-01-01T00:00:00Z',
    'date': '2024-01-01',
    'email': 'user@example.com',
    'uri': 'https://example.com',
    'url': 'https://example.com',
    'uuid': '123e4567-e89b-12d3-a456-426614174000',
}


def resolve_schema(schema: Any) -> Any:
    """Flatten allOf/oneOf/anyOf into a single object view where possible.

    allOf parts are merged (properties unioned, required concatenated, first
    description inherited). An allOf with no object-shaped part wraps a
    primitive and keeps its type, format and constraints. oneOf/anyOf are unioned into a permissive superset
    only when every variant is an object with properties; otherwise the schema
    is returned unchanged. Non-dict input passes through.
    """
    if not isinstance(schema, dict):
        return schema

    resolved = schema
    if isinstance(schema.get('allOf'), list):
        resolved = _merge_all_of(schema)

    for keyword in ('oneOf', 'anyOf'):
        if isinstance(resolved.get(keyword), list):
            merged = _merge_variants(resolved, keyword)
            if merged is not None:
                resolved = merged

    return resolved


def _merge_all_of(schema: dict) -> dict:
    parts = [resolve_schema(part) for part in schema['allOf']]
    parts = [part for part in parts if isinstance(part, dict)]

    if not _is_object_shaped(schema) and not any(_is_object_shaped(part) for part in parts):
        # Wrapper around a primitive: keep its type, format and constraints
        merged = {}
        for part in parts:
            merged.update({k: v for k, v in part.items() if k != 'allOf'})
        merged.update({k: v for k, v in schema.items() if k != 'allOf'})
        return merged

    properties = _dict_or_empty(schema.get('properties'))
    required = _list_or_empty(schema.get('required'))
    description = schema.get('description')

    for part in parts:
        if isinstance(part.get('properties'), dict):
            properties.update(part['properties'])
        if isinstance(part.get('required'), list):
            required.extend(part['required'])
        if not description and part.get('description'):
            description = part['description']

    merged = {k: v for k, v in schema.items() if k not in ('allOf', 'properties', 'required', 'description')}
    merged['type'] = 'object'
    if properties:
        merged['properties'] = properties
    if required:
        merged['required'] = _dedupe(required)
    if description:
        merged['description'] = description
    return merged


def _is_object_shaped(schema: dict) -> bool:
    return isinstance(schema.get('properties'), dict) or schema.get('type') == 'object'


def _merge_variants(schema: dict, keyword: str) -> Optional[dict]:
    variants = [resolve_schema(variant) for variant in schema[keyword]]
    if not variants:
        return None
    for variant in variants:
        if not isinstance(variant, dict) or not isinstance(variant.get('properties'), dict):
            return None
        if variant.get('type', 'object') != 'object':
            return None

    properties = _dict_or_empty(schema.get('properties'))
    required = _list_or_empty(schema.get('required'))
    for variant in variants:
        properties.update(variant['properties'])
        if isinstance(variant.get('required'), list):
            required.extend(variant['required'])

    merged = {k: v for k, v in schema.items() if k not in (keyword, 'properties', 'required')}
    merged['type'] = 'object'
    if properties:
        merged['properties'] = properties
    if required:
        merged['required'] = _dedupe(required)
    return merged


def _dict_or_empty(value: Any) -> dict:
    return dict(value) if isinstance(value, dict) else {}


def _list_or_empty(value: Any) -> list:
    return list(value) if isinstance(value, list) else []


def _dedupe(items: list) -> list:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def generate_schema_example(schema: Any, _expanding: Optional[set] = None) -> Any:
    """Synthesize a representative JSON value for a schema.

    Precedence: example, default, allOf (merged), first oneOf/anyOf variant,
    first enum value, then type-driven synthesis. A schema object that is
    already being expanded further up the recursion yields ``{}``.
    """
    if not isinstance(schema, dict):
        return 'string'

    expanding = _expanding if _expanding is not None else set()
    key = id(schema)
    if key in expanding:
        return {}
    expanding.add(key)
    try:
        return _generate(schema, expanding)
    finally:
        expanding.discard(key)


def _generate(schema: dict, expanding: set) -> Any:
    if 'example' in schema:
        return schema['example']
    if 'default' in schema:
        return schema['default']

    if isinstance(schema.get('allOf'), list) and schema['allOf']:
        merged = {}
        fallback = None
        for part in schema['allOf']:
            value = generate_schema_example(part, expanding)
            if isinstance(value, dict):
                merged.update(value)
            else:
                fallback = value
        if merged or fallback is None:
            return merged
        return fallback

    for keyword in ('oneOf', 'anyOf'):
        variants = schema.get(keyword)
        if isinstance(variants, list) and variants:
            return generate_schema_example(variants[0], expanding)

    if isinstance(schema.get('enum'), list) and schema['enum']:
        return schema['enum'][0]

    schema_type = _schema_type(schema)

    if schema_type == 'object':
        properties = schema.get('properties')
        if not isinstance(properties, dict):
            return {}
        return {name: generate_schema_example(prop, expanding) for name, prop in properties.items()}

    if schema_type == 'array':
        items = schema.get('items')
        if isinstance(items, dict):
            return [generate_schema_example(items, expanding)]
        return ['string']

    if schema_type == 'string':
        fmt = schema.get('format')
        return FORMAT_EXAMPLES.get(fmt, 'string') if isinstance(fmt, str) else 'string'
    if schema_type in ('number', 'integer'):
        return 0
    if schema_type == 'boolean':
        return True
    if schema_type == 'null':
        return None

    return 'string'


def _schema_type(schema: dict) -> Optional[str]:
    schema_type = schema.get('type')
    # OpenAPI 3.1 allows a list of types, e.g. ["string", "null"]
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != 'null']
        schema_type = non_null[0] if non_null else 'null'
    if schema_type:
        return schema_type
    if isinstance(schema.get('properties'), dict):
        return 'object'
    if 'items' in schema:
        return 'array'
    return None
