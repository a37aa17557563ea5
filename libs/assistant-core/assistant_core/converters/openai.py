"""Conversion of tools and assistants into OpenAI Assistants API payloads."""

import logging
from typing import Any, Literal, TypedDict

from assistant_core.assistant import Assistant
from assistant_core.settings import AssistantSettings
from assistant_core.tool import CodeInterpreter, FileSearch, Function, Tool

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------------
# Type definitions for JSON tool schemas used by OpenAI APIs
# ----------------------------------------------------------------------------


class OpenAIFunctionSchema(TypedDict, total=False):
    """Type definition for a function tool parameter matching OpenAI's API."""

    name: str
    """The name of the function to call."""

    description: str
    """A description of the function.
    Used by the model to determine whether or not to call the function.
    """

    parameters: dict[str, Any]
    """A JSON schema object describing the parameters of the function."""


class OpenAIFunctionToolSchema(TypedDict):
    """A function tool definition passed in an assistant's `tools` list."""

    type: Literal["function"]
    """The type field, always 'function'."""

    function: OpenAIFunctionSchema
    """The function definition."""


class OpenAIBuiltinToolSchema(TypedDict):
    """A built-in tool definition passed in an assistant's `tools` list."""

    type: Literal["code_interpreter", "file_search"]


OpenAIToolSchema = OpenAIFunctionToolSchema | OpenAIBuiltinToolSchema

# Type alias for a list of openai tool schemas
OpenAIToolList = list[OpenAIToolSchema]


class OpenAIVectorStore(TypedDict):
    file_ids: list[str]


class OpenAICodeInterpreterResources(TypedDict):
    file_ids: list[str]


class OpenAIFileSearchResources(TypedDict, total=False):
    vector_store_ids: list[str]
    """At most one existing vector store attached to the assistant."""

    vector_stores: list[OpenAIVectorStore]
    """Vector stores to create from uploaded files."""


class OpenAIToolResources(TypedDict, total=False):
    """Resources made available to the assistant's built-in tools."""

    code_interpreter: OpenAICodeInterpreterResources
    file_search: OpenAIFileSearchResources


class OpenAIAssistantRequest(TypedDict, total=False):
    """Body of a create-assistant request."""

    name: str
    description: str
    model: str
    instructions: str
    tools: OpenAIToolList
    tool_resources: OpenAIToolResources
    metadata: dict[str, str]


# ----------------------------------------------------------------------------
# Converters
# ----------------------------------------------------------------------------


def to_openai(tool: Tool) -> OpenAIToolSchema:
    """Convert a tool into the OpenAI tool schema format.

    Raises:
        SchemaError: the argument type of a function tool has no schema.
    """
    if isinstance(tool, CodeInterpreter | FileSearch):
        return {"type": tool.type}

    return _to_openai_function(tool)


def _to_openai_function(tool: Function) -> OpenAIFunctionToolSchema:
    schema = tool.schema()
    parameters = schema.parameters.to_dict()

    # Function parameters must always list their properties, even when there are none
    if parameters.get("type") == "object":
        parameters.setdefault("properties", {})

    function: OpenAIFunctionSchema = {"name": schema.name}
    if schema.description:
        function["description"] = schema.description
    function["parameters"] = parameters

    return {"type": "function", "function": function}


def to_openai_tool_resources(tools: list[Tool]) -> OpenAIToolResources:
    """Collect the `tool_resources` block for the built-in tools in `tools`."""
    resources: OpenAIToolResources = {}
    for tool in tools:
        if isinstance(tool, CodeInterpreter):
            resources["code_interpreter"] = {"file_ids": list(tool.file_ids)}
        elif isinstance(tool, FileSearch):
            if tool.vector_store_ids:
                resources["file_search"] = {"vector_store_ids": list(tool.vector_store_ids)}
            else:
                resources["file_search"] = {"vector_stores": [{"file_ids": list(tool.file_ids)}]}
    return resources


def to_openai_assistant(
    assistant: Assistant, settings: AssistantSettings | None = None
) -> OpenAIAssistantRequest:
    """Build the create-assistant request body for `assistant`.

    Empty fields are left out, except `model` which falls back to the
    configured default.
    """
    settings = settings or AssistantSettings.from_env()

    request: OpenAIAssistantRequest = {}
    if assistant.name:
        request["name"] = assistant.name
    if assistant.description:
        request["description"] = assistant.description
    request["model"] = assistant.model or settings.model
    if assistant.instructions:
        request["instructions"] = assistant.instructions

    tools = [to_openai(tool) for tool in assistant.tools]
    if tools:
        request["tools"] = tools
    if resources := to_openai_tool_resources(assistant.tools):
        request["tool_resources"] = resources
    if assistant.metadata:
        request["metadata"] = dict(assistant.metadata)

    logger.debug(
        "Built create-assistant request for %s with %d tool(s)",
        assistant.name or "<unnamed>",
        len(tools),
    )
    return request
