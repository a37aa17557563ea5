"""
Derivation of JSON schemas from Python types.

`schema_for` walks a type annotation depth-first and returns the schema
document describing it. Dataclasses are registered in a per-call
definitions table before their fields are walked, which is what makes
self-referential and mutually recursive records terminate: every later
visit of the same class resolves to a `$ref` instead of a new walk.
"""

import collections.abc
import datetime
import ipaddress
import logging
import urllib.parse
import uuid
from enum import Enum
from typing import Any, Literal, Tuple, get_args, get_origin  # noqa: UP035

from pydantic import AnyUrl

from assistant_core.errors import UnsupportedTypeError
from assistant_core.jsonschema.constraints import (
    bind_constraints,
    bind_literals,
    bool_tag,
    is_required,
)
from assistant_core.jsonschema.fields import (
    ADDITIONAL_PROPERTIES_TAG,
    FieldDescriptor,
    additional_properties_tag,
    record_fields,
)
from assistant_core.jsonschema.model import DEFS_PREFIX, ROOT_REF, DataType, Schema
from assistant_core.jsonschema.types import (
    IntegerFormat,
    NumberFormat,
    WidthMarker,
    is_record,
    type_name,
    unwrap,
)

logger = logging.getLogger(__name__)

# Order matters: datetime is a subclass of date.
LEAF_FORMATS: tuple[tuple[type, str], ...] = (
    (datetime.datetime, "date-time"),
    (datetime.date, "date"),
    (datetime.time, "time"),
    (datetime.timedelta, "duration"),
    (uuid.UUID, "uuid"),
    (ipaddress.IPv4Address, "ipv4"),
    (ipaddress.IPv6Address, "ipv6"),
    (urllib.parse.ParseResult, "uri"),
    (urllib.parse.SplitResult, "uri"),
    (AnyUrl, "uri"),
)

SEQUENCE_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
SET_ORIGINS = (set, frozenset, collections.abc.Set, collections.abc.MutableSet)
MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _leaf_schema(tp: Any) -> Schema | None:
    if not isinstance(tp, type):
        return None
    for leaf, fmt in LEAF_FORMATS:
        if issubclass(tp, leaf):
            return Schema(type=DataType.STRING, format=fmt)
    return None


def _integer_schema(marker: WidthMarker | None) -> Schema:
    width = marker if isinstance(marker, IntegerFormat) else IntegerFormat()
    schema = Schema(type=DataType.INTEGER, format=width.format)
    if not width.signed:
        schema.minimum = 0
    return schema


def _number_schema(marker: WidthMarker | None) -> Schema:
    width = marker if isinstance(marker, NumberFormat) else NumberFormat()
    return Schema(type=DataType.NUMBER, format=width.format)


def _value_kind(values: list[Any]) -> DataType | None:
    if all(isinstance(v, bool) for v in values):
        return DataType.BOOLEAN
    if any(isinstance(v, bool) for v in values):
        return None
    if all(isinstance(v, int) for v in values):
        return DataType.INTEGER
    if all(isinstance(v, int | float) for v in values):
        return DataType.NUMBER
    if all(isinstance(v, str) for v in values):
        return DataType.STRING
    return None


class SchemaBuilder:
    """Derives one schema document. Create a new builder per derivation."""

    def __init__(self) -> None:
        self._definitions: dict[type, Schema] = {}
        self._names: dict[type, str] = {}
        self._by_name: dict[str, Schema] = {}
        self._root: type | None = None
        self._root_node: Schema | None = None
        self._path: list[str] = []
        # Literals wait until every record they may reference has its properties.
        self._literals: list[tuple[FieldDescriptor, Schema]] = []

    def build(self, tp: Any) -> Schema:
        target, _ = unwrap(tp)
        if is_record(target):
            self._root = target

        schema = self.derive(tp)
        for field, node in self._literals:
            bind_literals(field, node, self.resolve)

        if self._root is not None:
            self._definitions.pop(self._root, None)
        if self._definitions:
            schema.defs = {self._names[cls]: node for cls, node in self._definitions.items()}

        logger.debug(
            "Derived schema for %s with %d definition(s)", type_name(tp), len(self._definitions)
        )
        return schema

    def resolve(self, schema: Schema) -> Schema:
        """Follow a `$ref` node to the schema it points at."""
        if schema.ref is None:
            return schema
        if schema.ref == ROOT_REF and self._root_node is not None:
            return self._root_node
        return self._by_name.get(schema.ref.removeprefix(DEFS_PREFIX), schema)

    def derive(self, tp: Any) -> Schema:  # noqa: C901
        field = self._path[-1] if self._path else None
        tp, marker = unwrap(tp, field)

        if tp is Any or tp is object:
            return Schema()

        if (leaf := _leaf_schema(tp)) is not None:
            return leaf

        if is_record(tp):
            return self._record(tp)

        if isinstance(tp, type) and issubclass(tp, Enum):
            return self._closed_set(tp, [member.value for member in tp])

        origin = get_origin(tp)
        if origin is Literal:
            return self._closed_set(tp, list(get_args(tp)))

        if isinstance(tp, type) and origin is None:
            if issubclass(tp, bool):
                return Schema(type=DataType.BOOLEAN)
            if issubclass(tp, int):
                return _integer_schema(marker)
            if issubclass(tp, float):
                return _number_schema(marker)
            if issubclass(tp, str):
                return Schema(type=DataType.STRING)
            if issubclass(tp, bytes | bytearray):
                # Byte sequences travel as base64 strings, never as arrays.
                return Schema(type=DataType.STRING, content_encoding="base64")

        args = get_args(tp)
        if tp is tuple or origin is tuple:
            return self._tuple(tp, args)
        if tp in SEQUENCE_ORIGINS or origin in SEQUENCE_ORIGINS:
            return Schema(type=DataType.ARRAY, items=self.derive(args[0] if args else Any))
        if tp in SET_ORIGINS or origin in SET_ORIGINS:
            return Schema(
                type=DataType.ARRAY,
                items=self.derive(args[0] if args else Any),
                unique_items=True,
            )
        if tp in MAPPING_ORIGINS or origin in MAPPING_ORIGINS:
            return Schema(
                type=DataType.OBJECT,
                additional_properties=self.derive(args[1] if args else Any),
            )

        raise UnsupportedTypeError(type_name(tp), field)

    def _tuple(self, tp: Any, args: tuple[Any, ...]) -> Schema:
        if tp is tuple or tp is Tuple:  # noqa: UP006
            return Schema(type=DataType.ARRAY, items=self.derive(Any))
        if not args:
            return Schema(type=DataType.ARRAY, min_items=0, max_items=0)
        if len(args) == 2 and args[1] is Ellipsis:
            return Schema(type=DataType.ARRAY, items=self.derive(args[0]))
        if any(arg != args[0] for arg in args):
            raise UnsupportedTypeError(type_name(tp), self._path[-1] if self._path else None)
        return Schema(
            type=DataType.ARRAY,
            items=self.derive(args[0]),
            min_items=len(args),
            max_items=len(args),
        )

    def _closed_set(self, tp: Any, values: list[Any]) -> Schema:
        kind = _value_kind(values) if values else None
        if kind is None:
            raise UnsupportedTypeError(type_name(tp), self._path[-1] if self._path else None)
        return Schema(type=kind, enum=values)

    def _reference(self, cls: type) -> Schema:
        if cls is self._root:
            return Schema.reference(None)
        return Schema.reference(self._names[cls])

    def _register(self, cls: type, node: Schema) -> None:
        if cls is self._root:
            self._root_node = node
            self._definitions[cls] = Schema.reference(None)
            return

        name = cls.__name__
        if name in self._by_name:
            name = f"{cls.__module__}.{cls.__qualname__}"
        self._names[cls] = name
        self._by_name[name] = node
        self._definitions[cls] = node

    def _record(self, cls: type) -> Schema:
        if cls in self._definitions:
            logger.debug("Reusing definition for %s", cls.__qualname__)
            return self._reference(cls)

        node = Schema(type=DataType.OBJECT, additional_properties=self._allows_extra(cls))
        self._register(cls, node)

        properties: dict[str, Schema] = {}
        required: list[str] = []
        for field in record_fields(cls):
            self._path.append(f"{cls.__qualname__}.{field.attribute}")
            try:
                schema = bind_constraints(field, self.derive(field.annotation))
                field_required = is_required(field)
            finally:
                self._path.pop()

            self._literals.append((field, schema))
            properties[field.name] = schema
            if field_required:
                required.append(field.name)

        node.properties = properties or None
        node.required = required or None

        return node if cls is self._root else self._reference(cls)

    @staticmethod
    def _allows_extra(cls: type) -> bool:
        raw = additional_properties_tag(cls)
        return bool(bool_tag(raw, ADDITIONAL_PROPERTIES_TAG, f"{cls.__qualname__}._"))


def schema_for(tp: Any) -> Schema:
    """Derive the JSON schema document describing `tp`.

    Raises:
        UnsupportedTypeError: `tp` (or a type reachable from it) has no schema.
        InvalidConstraintTagError: a field tag is not a valid bool/int/float.
        InvalidLiteralError: an enum or example literal does not fit its field.
    """
    return SchemaBuilder().build(tp)
