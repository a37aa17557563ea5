"""
Binding of field tags onto derived schemas.
"""

import json
import math
from typing import Any

from assistant_core.errors import InvalidConstraintTagError, InvalidLiteralError
from assistant_core.jsonschema.fields import FieldDescriptor
from assistant_core.jsonschema.literals import Resolver, coerce_literal, ensure_type
from assistant_core.jsonschema.model import DataType, Schema

STRING_TAGS = {
    "description": "description",
    "format": "format",
    "encoding": "content_encoding",
    "pattern": "pattern",
}
FLOAT_TAGS = {
    "multipleOf": "multiple_of",
    "maximum": "maximum",
    "exclusiveMaximum": "exclusive_maximum",
    "minimum": "minimum",
    "exclusiveMinimum": "exclusive_minimum",
}
INT_TAGS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "minItems": "min_items",
    "maxItems": "max_items",
    "minProperties": "min_properties",
    "maxProperties": "max_properties",
}


def bool_tag(value: Any, tag: str, field: str) -> bool | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise InvalidConstraintTagError("bool", tag, field, value)


def int_tag(value: Any, tag: str, field: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise InvalidConstraintTagError("int", tag, field, value) from e


def float_tag(value: Any, tag: str, field: str) -> int | float | None:
    """Parse a numeric bound, keeping integral values as `int` for tidy JSON."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidConstraintTagError("float", tag, field, value)
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidConstraintTagError("float", tag, field, value) from e
    if not math.isfinite(number):
        raise InvalidConstraintTagError("float", tag, field, value)
    return int(number) if number.is_integer() else number


def is_required(field: FieldDescriptor) -> bool:
    """Fields are required unless `omitempty` is set; a `required` tag overrides both."""
    required = bool_tag(field.tag("required"), "required", field.attribute)
    if required is not None:
        return required
    return not field.omit_empty


def _literal(field: FieldDescriptor, tag: str) -> str | None:
    value = field.tag(tag)
    if value is not None and not isinstance(value, str):
        raise InvalidConstraintTagError("string", tag, field.attribute, value)
    return value


def _enum_values(field: FieldDescriptor, target: Schema, raw: str, resolve: Resolver) -> list[Any]:
    if not raw.startswith("["):
        return [coerce_literal(field.attribute, target, part.strip(), resolve) for part in raw.split(",")]

    try:
        values = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidLiteralError("array", raw, field.attribute, str(e)) from e
    if not isinstance(values, list):
        raise InvalidLiteralError("array", raw, field.attribute)
    for value in values:
        ensure_type(field.attribute, target, json.dumps(value), value, resolve)
    return values


def bind_constraints(field: FieldDescriptor, schema: Schema) -> Schema:
    """Apply the keyword and bound tags of `field` to its derived `schema`, in place."""
    for tag, attr in STRING_TAGS.items():
        if (value := field.tag(tag)) is not None:
            setattr(schema, attr, str(value))

    for tag, attr in FLOAT_TAGS.items():
        if (number := float_tag(field.tag(tag), tag, field.attribute)) is not None:
            setattr(schema, attr, number)

    for tag, attr in INT_TAGS.items():
        if (count := int_tag(field.tag(tag), tag, field.attribute)) is not None:
            setattr(schema, attr, count)

    if (unique := bool_tag(field.tag("uniqueItems"), "uniqueItems", field.attribute)) is not None:
        schema.unique_items = unique or None

    return schema


def bind_literals(field: FieldDescriptor, schema: Schema, resolve: Resolver) -> Schema:
    """Coerce the `example` and `enum` tags of `field` against `schema`.

    Every record reachable from `schema` must be complete, since literals are
    checked against the properties of the records they reference.
    """
    if (example := _literal(field, "example")) is not None:
        schema.examples = [coerce_literal(field.attribute, schema, example, resolve)]

    if (enum := _literal(field, "enum")) is not None:
        target = schema
        if resolve(schema).type == DataType.ARRAY and resolve(schema).items is not None:
            target = resolve(schema).items
        target.enum = _enum_values(field, target, enum, resolve)

    return schema
