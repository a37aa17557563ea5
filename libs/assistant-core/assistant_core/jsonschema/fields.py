"""
Field descriptors for record (dataclass) types.

Schema tags live in the dataclass field metadata, keyed by string:

    @dataclass
    class Query:
        city: str = tagged(json="city", description="City to look up")
        days: int = tagged(1, json="days,omitempty", minimum="1", maximum="7")

Base dataclasses are treated as embedded records: their fields are promoted
into the subclass, after the fields the subclass declares itself.
"""

import dataclasses
import inspect
import typing
from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from assistant_core.errors import UnsupportedTypeError
from assistant_core.jsonschema.types import is_record

JSON_TAG = "json"
OMIT_EMPTY = "omitempty"
ADDITIONAL_PROPERTIES_FIELD = "_"
ADDITIONAL_PROPERTIES_TAG = "additionalProperties"


def tagged(
    default: Any = dataclasses.MISSING,
    *,
    default_factory: Any = dataclasses.MISSING,
    **tags: Any,
) -> Any:
    """Declare a dataclass field carrying schema tags."""
    return dataclasses.field(default=default, default_factory=default_factory, metadata=tags)


@dataclass(frozen=True)
class FieldDescriptor:
    """A record field as seen by the schema walker."""

    attribute: str
    annotation: Any
    name: str
    omitted: bool
    omit_empty: bool
    tags: Mapping[str, Any]

    def tag(self, key: str) -> Any:
        """Return the tag value, treating empty strings as absent."""
        value = self.tags.get(key)
        if value is None or value == "":
            return None
        return value


def _parse_json_tag(attribute: str, raw: Any) -> tuple[str, bool, bool]:
    name, _, options = str(raw or "").partition(",")
    if name == "-":
        return name, True, False
    return name or attribute, False, OMIT_EMPTY in options.split(",")


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except NameError as e:
        raise UnsupportedTypeError(f"{cls.__qualname__} ({e})") from e


def declared_fields(cls: type) -> list[FieldDescriptor]:
    """Public fields declared directly on `cls`, in declaration order.

    Attributes with a leading underscore are private and never part of the
    schema, which includes the `_` escape-hatch field.
    """
    dataclass_fields = {f.name: f for f in dataclasses.fields(cls)}
    hints = _resolve_hints(cls)
    descriptors = []
    for attribute in inspect.get_annotations(cls):
        field = dataclass_fields.get(attribute)
        if field is None or attribute.startswith("_"):
            continue
        name, omitted, omit_empty = _parse_json_tag(attribute, field.metadata.get(JSON_TAG))
        descriptors.append(
            FieldDescriptor(
                attribute=attribute,
                annotation=hints[attribute],
                name=name,
                omitted=omitted,
                omit_empty=omit_empty,
                tags=field.metadata,
            )
        )
    return descriptors


def _embedded_records(cls: type) -> Iterator[type]:
    visited = {cls}
    queue = deque(base for base in cls.__bases__ if is_record(base))
    while queue:
        base = queue.popleft()
        if base in visited:
            continue
        visited.add(base)
        yield base
        queue.extend(b for b in base.__bases__ if is_record(b))


def record_fields(cls: type) -> list[FieldDescriptor]:
    """The flattened field list of a record.

    Directly declared fields come first, followed by the fields of embedded
    (base) records in breadth-first order. A field whose attribute or target
    name is already claimed is dropped, so a shallower declaration always
    shadows a deeper one. Fields tagged `json:"-"` claim their attribute
    name but are not returned.
    """
    attributes: set[str] = set()
    names: set[str] = set()
    fields = []
    for record in (cls, *_embedded_records(cls)):
        for field in declared_fields(record):
            if field.attribute in attributes or field.name in names:
                continue
            attributes.add(field.attribute)
            if field.omitted:
                continue
            names.add(field.name)
            fields.append(field)
    return fields


def additional_properties_tag(cls: type) -> Any:
    """The raw escape-hatch tag of a record, if it declares one."""
    field = {f.name: f for f in dataclasses.fields(cls)}.get(ADDITIONAL_PROPERTIES_FIELD)
    if field is None:
        return None
    value = field.metadata.get(ADDITIONAL_PROPERTIES_TAG)
    return None if value == "" else value
