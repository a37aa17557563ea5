"""Derivation of JSON schemas from Python type annotations."""

from .fields import FieldDescriptor, record_fields, tagged
from .model import DataType, Schema
from .types import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    IntegerFormat,
    NumberFormat,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .walker import SchemaBuilder, schema_for

__all__ = [
    # Derivation
    "SchemaBuilder",
    "schema_for",
    # Document model
    "DataType",
    "Schema",
    # Fields
    "FieldDescriptor",
    "record_fields",
    "tagged",
    # Width markers
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "IntegerFormat",
    "NumberFormat",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
]
