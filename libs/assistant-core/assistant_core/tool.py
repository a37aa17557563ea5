import base64
import dataclasses
import inspect
import ipaddress
import json
import logging
import re
import typing
import urllib.parse
from collections.abc import Callable, Mapping
from typing import Any, Literal, get_args

import pydantic_core
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from assistant_core.errors import (
    SchemaError,
    ToolDefinitionError,
    ToolExecutionError,
    ToolInputError,
    ToolOutputError,
    ToolRuntimeError,
)
from assistant_core.jsonschema import Schema, record_fields, schema_for
from assistant_core.jsonschema.types import is_record, unwrap

logger = logging.getLogger(__name__)

TOOL_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")


class FunctionSchema(BaseModel):
    """The description of a function tool sent to the assistant."""

    name: str
    description: str | None = None
    parameters: Schema


class Function:
    """
    A Python callable exposed to the assistant as a function tool.

    The callable takes exactly one annotated argument. The JSON schema of that
    argument is what the model sees, and the JSON arguments the model sends
    back are decoded into an instance of it before the callable runs.
    """

    def __init__(
        self,
        func: Callable[[Any], Any],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        self.func = func
        self.name = name or str(getattr(func, "__name__", ""))
        self.description = (
            description if description is not None else inspect.cleandoc(func.__doc__ or "")
        )

        if not TOOL_NAME_PATTERN.match(self.name):
            raise ToolDefinitionError(
                f"Tool name '{self.name}' must be 1 to 64 characters of a-z, A-Z, 0-9, "
                "underscores or dashes"
            )

        self.argument_name, self.argument_type = _argument_of(func, self.name)
        try:
            _ensure_decodable(self.argument_type, self.name)
        except SchemaError as e:
            raise e.with_context(self.name)
        logger.debug("Registered function tool %s(%s)", self.name, self.argument_name)

    def __repr__(self) -> str:
        return f"Function(name={self.name!r})"

    @property
    def id(self) -> str:
        return self.name

    def schema(self) -> FunctionSchema:
        """Describe the tool, deriving the JSON schema of its argument.

        Raises:
            SchemaError: the argument type has no schema. The message is
                prefixed with the tool name.
        """
        try:
            parameters = schema_for(self.argument_type)
        except SchemaError as e:
            raise e.with_context(self.name)

        return FunctionSchema(
            name=self.name,
            description=self.description or None,
            parameters=parameters,
        )

    async def call(self, arguments: str | bytes) -> str:
        """
        Run the tool with the JSON arguments chosen by the model.

        Returns the JSON encoding of the result. String results are returned
        as they are.
        """
        argument = self._decode_argument(arguments)

        try:
            if inspect.iscoroutinefunction(self.func):
                result = await self.func(argument)
            else:
                result = self.func(argument)

        # a ToolRuntimeError raised by the tool itself is passed through untouched
        except ToolRuntimeError:
            raise
        except Exception as e:
            raise ToolExecutionError(
                message=f"Error in execution of {self.name}",
                developer_message=f"Error in {getattr(self.func, '__name__', self.name)}: {e!s}",
            ).with_context(self.name) from e

        if isinstance(result, str):
            return result
        return self._encode_result(result)

    def _decode_argument(self, arguments: str | bytes) -> Any:
        try:
            payload = json.loads(arguments)
            return TypeAdapter(self.argument_type).validate_python(
                _from_wire(self.argument_type, payload)
            )
        except (ValidationError, ValueError) as e:
            raise ToolInputError(
                message="Error in tool input deserialization",
                developer_message=str(e),
            ).with_context(self.name) from e

    def _encode_result(self, result: Any) -> str:
        try:
            return pydantic_core.to_json(_to_wire(result)).decode()
        except pydantic_core.PydanticSerializationError as e:
            raise ToolOutputError(
                message="Failed to serialize tool output",
                developer_message=f"Serialization error occurred while encoding tool output: {e!s}. "
                f"Please ensure the tool returns JSON-compatible values.",
            ).with_context(self.name) from e


def tool(
    func: Callable | None = None,
    desc: str | None = None,
    name: str | None = None,
) -> Any:
    """Turn a one-argument callable into a `Function` tool.

    Usable bare (`@tool`) or with arguments (`@tool(name="lookup")`).
    """

    def decorator(func: Callable) -> Function:
        return Function(func, name=name, description=desc)

    if func:
        return decorator(func)
    return decorator


class CodeInterpreter(BaseModel):
    """
    Lets the assistant write and run Python code in a sandboxed execution environment.
    """

    type: Literal["code_interpreter"] = "code_interpreter"
    file_ids: list[str] = Field(
        default_factory=list,
        max_length=20,
        description="Files made available to the code interpreter.",
    )

    @property
    def id(self) -> str:
        return self.type


class FileSearch(BaseModel):
    """
    Augments the assistant with knowledge from uploaded documents.

    An existing vector store is attached when `vector_store_ids` is set,
    otherwise a new vector store is built from `file_ids`.
    """

    type: Literal["file_search"] = "file_search"
    vector_store_ids: list[str] = Field(default_factory=list, max_length=1)
    file_ids: list[str] = Field(default_factory=list)

    @property
    def id(self) -> str:
        return self.type


Tool = Function | CodeInterpreter | FileSearch


def _argument_of(func: Callable, tool_name: str) -> tuple[str, Any]:
    params = list(inspect.signature(func).parameters.values())
    if len(params) != 1 or params[0].kind in (
        inspect.Parameter.VAR_POSITIONAL,
        inspect.Parameter.VAR_KEYWORD,
    ):
        raise ToolDefinitionError(
            f"Tool '{tool_name}' must take exactly one argument, got {len(params)}"
        )

    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except NameError as e:
        raise ToolDefinitionError(
            f"Could not resolve the argument annotation of tool '{tool_name}': {e}"
        ) from e

    argument = params[0].name
    if argument not in hints:
        raise ToolDefinitionError(
            f"Argument '{argument}' of tool '{tool_name}' is missing a type annotation"
        )
    return argument, hints[argument]


def _ensure_decodable(tp: Any, tool_name: str, seen: set[type] | None = None) -> None:
    """Reject records with required fields that never appear in the tool input.

    Hidden fields (`json="-"`, private attributes, the `_` field) are not sent
    by the model, so they must have a default for the record to be built.
    """
    seen = set() if seen is None else seen
    while (inner := getattr(tp, "__supertype__", None) or getattr(tp, "__value__", None)) is not None:
        tp = inner

    if is_record(tp):
        if tp in seen:
            return
        seen.add(tp)
        fields = record_fields(tp)
        visible = {field.attribute for field in fields}
        for field in dataclasses.fields(tp):
            if (
                field.init
                and field.name not in visible
                and field.default is dataclasses.MISSING
                and field.default_factory is dataclasses.MISSING
            ):
                raise ToolDefinitionError(
                    f"Field '{tp.__qualname__}.{field.name}' of tool '{tool_name}' is not "
                    "part of the tool input and must have a default"
                )
        for field in fields:
            _ensure_decodable(field.annotation, tool_name, seen)
        return

    for arg in get_args(tp):
        if arg is not Ellipsis:
            _ensure_decodable(arg, tool_name, seen)


def _from_wire(tp: Any, value: Any) -> Any:
    """Rename wire keys to attribute names and decode base64 bytes, recursively."""
    if value is None:
        return None

    tp, _ = unwrap(tp)
    args = get_args(tp)

    if is_record(tp) and isinstance(value, dict):
        return {
            field.attribute: _from_wire(field.annotation, value[field.name])
            for field in record_fields(tp)
            if field.name in value
        }

    if isinstance(value, str) and isinstance(tp, type):
        if issubclass(tp, bytes | bytearray):
            return base64.b64decode(value, validate=True)
        if issubclass(tp, urllib.parse.ParseResult):
            return urllib.parse.urlparse(value)
        if issubclass(tp, urllib.parse.SplitResult):
            return urllib.parse.urlsplit(value)

    if isinstance(value, list):
        item_type = args[0] if args else Any
        return [_from_wire(item_type, item) for item in value]

    if isinstance(value, dict) and len(args) == 2:
        return {key: _from_wire(args[1], member) for key, member in value.items()}

    return value


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool | int | float | str | bytes | bytearray):
        return not value
    if isinstance(value, list | tuple | dict | set | frozenset):
        return not value
    return False


def _to_wire(value: Any) -> Any:
    """Rename attributes to wire names and base64-encode bytes, recursively."""
    if is_record(type(value)):
        wire = {}
        for field in record_fields(type(value)):
            member = getattr(value, field.attribute)
            if field.omit_empty and _is_empty(member):
                continue
            wire[field.name] = _to_wire(member)
        return wire

    if isinstance(value, bytes | bytearray):
        return base64.b64encode(value).decode()
    if isinstance(value, urllib.parse.ParseResult | urllib.parse.SplitResult):
        return value.geturl()
    if isinstance(value, ipaddress.IPv4Address | ipaddress.IPv6Address):
        return str(value)
    if isinstance(value, Mapping):
        return {key: _to_wire(member) for key, member in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_to_wire(item) for item in value]
    return value
