"""
JSON Schema document model.

The subset of JSON Schema 2020-12 that assistants understand when describing
function parameters. Attribute names are snake_case; the keyword spelling is
carried by the field alias and used whenever the document is serialized.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFS_PREFIX = "#/$defs/"
ROOT_REF = "#"


class DataType(str, Enum):
    """The JSON value kinds a schema can constrain."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class Schema(BaseModel):
    """A JSON Schema node.

    Numeric bounds are nullable so that an unset bound is distinguishable
    from a bound of zero.
    """

    model_config = ConfigDict(populate_by_name=True)

    ref: str | None = Field(default=None, alias="$ref")

    # core: applicators
    items: "Schema | None" = None
    properties: "dict[str, Schema] | None" = None
    additional_properties: "bool | Schema | None" = Field(
        default=None, alias="additionalProperties"
    )

    # validation: any instance
    type: DataType | None = None
    enum: list[Any] | None = None

    # validation: numbers
    multiple_of: int | float | None = Field(default=None, alias="multipleOf")
    maximum: int | float | None = None
    exclusive_maximum: int | float | None = Field(default=None, alias="exclusiveMaximum")
    minimum: int | float | None = None
    exclusive_minimum: int | float | None = Field(default=None, alias="exclusiveMinimum")

    # validation: strings
    max_length: int | None = Field(default=None, alias="maxLength")
    min_length: int | None = Field(default=None, alias="minLength")
    pattern: str | None = None

    # validation: arrays
    max_items: int | None = Field(default=None, alias="maxItems")
    min_items: int | None = Field(default=None, alias="minItems")
    unique_items: bool | None = Field(default=None, alias="uniqueItems")

    # validation: objects
    max_properties: int | None = Field(default=None, alias="maxProperties")
    min_properties: int | None = Field(default=None, alias="minProperties")
    required: list[str] | None = None

    # format and content
    format: str | None = None
    content_encoding: str | None = Field(default=None, alias="contentEncoding")

    # annotations
    title: str | None = None
    description: str | None = None
    examples: list[Any] | None = None

    defs: "dict[str, Schema] | None" = Field(default=None, alias="$defs")

    @classmethod
    def reference(cls, name: str | None) -> "Schema":
        """Build a `$ref` node, pointing at the document root when `name` is None."""
        return cls(ref=ROOT_REF if name is None else f"{DEFS_PREFIX}{name}")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-compatible representation of the schema."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


Schema.model_rebuild()
