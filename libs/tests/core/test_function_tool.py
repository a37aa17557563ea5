import datetime
import json
from dataclasses import dataclass
from typing import Any, Literal

import pytest
from assistant_core.errors import (
    ErrorCode,
    SchemaError,
    ToolDefinitionError,
    ToolExecutionError,
    ToolInputError,
    ToolOutputError,
)
from assistant_core.jsonschema import tagged
from assistant_core.tool import (
    CodeInterpreter,
    FileSearch,
    Function,
    FunctionSchema,
    tool,
)


@dataclass
class TemperatureRequest:
    location: str = tagged(
        json="location", description="The city and state, e.g., San Francisco, CA"
    )
    unit: Literal["Celsius", "Fahrenheit"] = tagged(
        json="unit", description="The temperature unit to use."
    )


@dataclass
class Reading:
    degrees: float = tagged(json="degrees")
    unit: str = tagged(json="unit")
    note: str = tagged("", json="note,omitempty")


@dataclass
class Address:
    zip_code: str = tagged(json="zipCode")
    lines: list[str] = tagged(json="lines")


@dataclass
class Parcel:
    destination: Address = tagged(json="destination")
    payload: bytes = tagged(json="payload")


@dataclass
class OpenSettings:
    _: Any = tagged(None, additionalProperties="true")
    value: int = tagged(0, json="value")


@dataclass
class RequiredExtras:
    _: Any = tagged(additionalProperties="true")
    value: int = tagged(0, json="value")


@dataclass
class Credential:
    secret: str = tagged(json="-")


@dataclass
class Keyring:
    credentials: list[Credential] = tagged(json="credentials")


def get_current_temperature(request: TemperatureRequest) -> Reading:
    """
    Get the current temperature for a location.
    """
    return Reading(degrees=72.0, unit=request.unit)


async def get_rain_probability(request: TemperatureRequest) -> float:
    return 0.2


def describe_parcel(parcel: Parcel) -> dict:
    return {"zip": parcel.destination.zip_code, "size": len(parcel.payload)}


def echo_bytes(parcel: Parcel) -> bytes:
    return parcel.payload


def greet(name: str) -> str:
    return f"Hello, {name}!"


def timestamp(days: int) -> datetime.date:
    return datetime.date(2024, 1, 1) + datetime.timedelta(days=days)


def explode(request: TemperatureRequest) -> None:
    raise ValueError("sensor offline")


def refuse(request: TemperatureRequest) -> None:
    raise ToolInputError("location is not supported", developer_message="no sensor in region")


def unserializable(request: TemperatureRequest) -> object:
    return object()


def configure(settings: OpenSettings) -> int:
    return settings.value


def configure_strictly(settings: RequiredExtras) -> int:
    return settings.value


def unlock(keyring: Keyring) -> int:
    return len(keyring.credentials)


def takes_two(a: int, b: int) -> int:
    return a + b


def untyped(request):  # type: ignore[no-untyped-def]
    return request


def union_argument(value: int | str) -> str:
    return str(value)


TEMPERATURE_ARGUMENTS = json.dumps({"location": "San Francisco, CA", "unit": "Celsius"})


# ----------------------------------------------------------------------------
# Test: Definition
# ----------------------------------------------------------------------------


class TestFunctionDefinition:
    def test_name_and_description_default_to_function(self) -> None:
        fn = Function(get_current_temperature)

        assert fn.name == "get_current_temperature"
        assert fn.id == "get_current_temperature"
        assert fn.description == "Get the current temperature for a location."
        assert fn.argument_name == "request"
        assert fn.argument_type is TemperatureRequest

    def test_explicit_name_and_description(self) -> None:
        fn = Function(get_current_temperature, name="temperature", description="Reads a sensor")

        assert fn.name == "temperature"
        assert fn.description == "Reads a sensor"

    def test_bare_decorator(self) -> None:
        decorated = tool(get_rain_probability)

        assert isinstance(decorated, Function)
        assert decorated.name == "get_rain_probability"
        assert decorated.description == ""

    def test_decorator_with_arguments(self) -> None:
        @tool(name="rain-probability", desc="Chance of rain today")
        def rain(request: TemperatureRequest) -> float:
            return 0.5

        assert rain.name == "rain-probability"
        assert rain.description == "Chance of rain today"

    @pytest.mark.parametrize("name", ["has space", "dots.are.bad", "x" * 65])
    def test_invalid_names_are_rejected(self, name: str) -> None:
        with pytest.raises(ToolDefinitionError):
            Function(get_current_temperature, name=name)

    def test_exactly_one_argument(self) -> None:
        with pytest.raises(ToolDefinitionError) as exc_info:
            Function(takes_two)
        assert "exactly one argument" in str(exc_info.value)

    def test_argument_must_be_annotated(self) -> None:
        with pytest.raises(ToolDefinitionError) as exc_info:
            Function(untyped)
        assert "missing a type annotation" in str(exc_info.value)

    @pytest.mark.parametrize(
        "func, field",
        [(configure_strictly, "RequiredExtras._"), (unlock, "Credential.secret")],
    )
    def test_hidden_fields_need_a_default(self, func: Any, field: str) -> None:
        with pytest.raises(ToolDefinitionError) as exc_info:
            Function(func)
        assert f"Field '{field}' of tool '{func.__name__}'" in str(exc_info.value)


# ----------------------------------------------------------------------------
# Test: Schema
# ----------------------------------------------------------------------------


class TestFunctionSchema:
    def test_schema(self) -> None:
        schema = Function(get_current_temperature).schema()

        assert isinstance(schema, FunctionSchema)
        assert schema.name == "get_current_temperature"
        assert schema.description == "Get the current temperature for a location."
        assert schema.parameters.to_dict() == {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "location": {
                    "type": "string",
                    "description": "The city and state, e.g., San Francisco, CA",
                },
                "unit": {
                    "type": "string",
                    "enum": ["Celsius", "Fahrenheit"],
                    "description": "The temperature unit to use.",
                },
            },
            "required": ["location", "unit"],
        }

    def test_empty_description_is_omitted(self) -> None:
        assert Function(get_rain_probability).schema().description is None

    def test_scalar_argument(self) -> None:
        assert Function(greet).schema().parameters.to_dict() == {"type": "string"}

    def test_schema_errors_name_the_tool(self) -> None:
        fn = Function(union_argument)

        with pytest.raises(SchemaError) as exc_info:
            fn.schema()

        assert exc_info.value.code == ErrorCode.UNSUPPORTED_TYPE
        assert str(exc_info.value) == (
            "[SCHEMA_DEFINITION_UNSUPPORTED_TYPE] UnsupportedTypeError in definition of tool "
            "'union_argument': unsupported type 'int | str'"
        )


# ----------------------------------------------------------------------------
# Test: Calls
# ----------------------------------------------------------------------------


class TestFunctionCall:
    @pytest.mark.asyncio
    async def test_sync_function(self) -> None:
        result = await Function(get_current_temperature).call(TEMPERATURE_ARGUMENTS)

        # empty omitempty fields are left out of the result
        assert json.loads(result) == {"degrees": 72.0, "unit": "Celsius"}

    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        result = await Function(get_rain_probability).call(TEMPERATURE_ARGUMENTS)

        assert result == "0.2"

    @pytest.mark.asyncio
    async def test_string_result_is_returned_verbatim(self) -> None:
        assert await Function(greet).call('"Ada"') == "Hello, Ada!"

    @pytest.mark.asyncio
    async def test_non_record_result_is_json(self) -> None:
        assert await Function(timestamp).call("31") == '"2024-02-01"'

    @pytest.mark.asyncio
    async def test_wire_names_and_base64_are_decoded(self) -> None:
        arguments = json.dumps({
            "destination": {"zipCode": "94103", "lines": ["1 Market St"]},
            "payload": "aGVsbG8=",
        })

        result = await Function(describe_parcel).call(arguments)

        assert json.loads(result) == {"zip": "94103", "size": 5}

    @pytest.mark.asyncio
    async def test_escape_hatch_field_is_not_decoded(self) -> None:
        assert await Function(configure).call('{"value": 3}') == "3"

    @pytest.mark.asyncio
    async def test_bytes_result_is_base64(self) -> None:
        arguments = json.dumps({"destination": {"zipCode": "1", "lines": []}, "payload": "aGk="})

        assert await Function(echo_bytes).call(arguments) == '"aGk="'

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arguments",
        [
            "not json",
            json.dumps({"location": "Paris"}),
            json.dumps({"location": "Paris", "unit": "Kelvin"}),
        ],
    )
    async def test_bad_arguments(self, arguments: str) -> None:
        with pytest.raises(ToolInputError) as exc_info:
            await Function(get_current_temperature).call(arguments)

        assert exc_info.value.code == ErrorCode.BAD_INPUT_VALUE
        assert exc_info.value.developer_message
        assert "get_current_temperature" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_base64(self) -> None:
        arguments = json.dumps({"destination": {"zipCode": "1", "lines": []}, "payload": "!!"})

        with pytest.raises(ToolInputError):
            await Function(describe_parcel).call(arguments)

    @pytest.mark.asyncio
    async def test_function_errors_are_wrapped(self) -> None:
        with pytest.raises(ToolExecutionError) as exc_info:
            await Function(explode).call(TEMPERATURE_ARGUMENTS)

        error = exc_info.value
        assert isinstance(error.__cause__, ValueError)
        assert error.developer_message.endswith("Error in explode: sensor offline")
        assert error.stacktrace() is not None
        assert error.to_payload()["code"] == ErrorCode.FATAL

    @pytest.mark.asyncio
    async def test_tool_errors_pass_through(self) -> None:
        with pytest.raises(ToolInputError) as exc_info:
            await Function(refuse).call(TEMPERATURE_ARGUMENTS)

        assert exc_info.value.message == "location is not supported"

    @pytest.mark.asyncio
    async def test_unserializable_result(self) -> None:
        with pytest.raises(ToolOutputError) as exc_info:
            await Function(unserializable).call(TEMPERATURE_ARGUMENTS)

        assert exc_info.value.code == ErrorCode.BAD_OUTPUT_VALUE


# ----------------------------------------------------------------------------
# Test: Built-in tools
# ----------------------------------------------------------------------------


class TestBuiltinTools:
    def test_code_interpreter(self) -> None:
        interpreter = CodeInterpreter(file_ids=["file-1"])

        assert interpreter.id == "code_interpreter"
        assert interpreter.file_ids == ["file-1"]

    def test_code_interpreter_file_limit(self) -> None:
        with pytest.raises(ValueError):
            CodeInterpreter(file_ids=[f"file-{i}" for i in range(21)])

    def test_file_search_defaults(self) -> None:
        search = FileSearch()

        assert search.id == "file_search"
        assert search.vector_store_ids == []
        assert search.file_ids == []
