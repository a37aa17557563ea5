"""
Coercion of `enum` and `example` tag literals.

A literal is interpreted against the schema already derived for its field,
so the checks below dispatch on exactly the kinds the walker produces.
"""

import json
from collections.abc import Callable
from typing import Any

from assistant_core.errors import InvalidLiteralError
from assistant_core.jsonschema.model import DataType, Schema

Resolver = Callable[[Schema], Schema]


def _kind(schema: Schema) -> str:
    return schema.type.value if schema.type else "json"


def coerce_literal(field: str, schema: Schema, raw: str, resolve: Resolver) -> Any:
    """Parse `raw` into a value that satisfies `schema`.

    Strings are taken verbatim, and arrays of strings accept a bare
    comma-separated list. Anything else must be JSON.
    """
    schema = resolve(schema)
    if schema.type == DataType.STRING:
        return raw

    if (
        schema.type == DataType.ARRAY
        and schema.items is not None
        and resolve(schema.items).type == DataType.STRING
        and not raw.startswith("[")
    ):
        return [value.strip() for value in raw.split(",")]

    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidLiteralError(_kind(schema), raw, field, str(e)) from e

    ensure_type(field, schema, raw, value, resolve)
    return value


def ensure_type(field: str, schema: Schema, raw: str, value: Any, resolve: Resolver) -> None:
    """Recursively check a decoded literal against `schema`.

    Nested positions extend the field label (`Field[0]`, `Field.key`) so the
    error points at the offending element.
    """
    schema = resolve(schema)
    match schema.type:
        case DataType.BOOLEAN:
            valid = isinstance(value, bool)
        case DataType.NUMBER:
            valid = isinstance(value, int | float) and not isinstance(value, bool)
        case DataType.INTEGER:
            valid = (isinstance(value, int) and not isinstance(value, bool)) or (
                isinstance(value, float) and value.is_integer()
            )
        case DataType.STRING:
            valid = isinstance(value, str)
        case DataType.ARRAY:
            valid = isinstance(value, list)
            if valid and schema.items is not None:
                for i, item in enumerate(value):
                    ensure_type(f"{field}[{i}]", schema.items, json.dumps(item), item, resolve)
        case DataType.OBJECT:
            valid = isinstance(value, dict)
            if valid:
                _ensure_members(field, schema, value, resolve)
        case _:
            valid = True

    if not valid:
        raise InvalidLiteralError(_kind(schema), raw, field)


def _ensure_members(field: str, schema: Schema, value: dict[str, Any], resolve: Resolver) -> None:
    for name, prop in (schema.properties or {}).items():
        if name in value:
            ensure_type(f"{field}.{name}", prop, json.dumps(value[name]), value[name], resolve)

    if isinstance(schema.additional_properties, Schema):
        for name, member in value.items():
            ensure_type(
                f"{field}.{name}",
                schema.additional_properties,
                json.dumps(member),
                member,
                resolve,
            )
