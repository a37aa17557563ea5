from assistant_core.assistant import Assistant
from assistant_core.errors import (
    AssistantError,
    InvalidConstraintTagError,
    InvalidLiteralError,
    SchemaError,
    ToolDefinitionError,
    ToolExecutionError,
    ToolInputError,
    ToolOutputError,
    ToolRuntimeError,
    UnsupportedTypeError,
)
from assistant_core.jsonschema import Schema, schema_for, tagged
from assistant_core.settings import AssistantSettings
from assistant_core.tool import (
    CodeInterpreter,
    FileSearch,
    Function,
    FunctionSchema,
    Tool,
    tool,
)

__all__ = [
    "Assistant",
    "AssistantError",
    "AssistantSettings",
    "CodeInterpreter",
    "FileSearch",
    "Function",
    "FunctionSchema",
    "InvalidConstraintTagError",
    "InvalidLiteralError",
    "Schema",
    "SchemaError",
    "Tool",
    "ToolDefinitionError",
    "ToolExecutionError",
    "ToolInputError",
    "ToolOutputError",
    "ToolRuntimeError",
    "UnsupportedTypeError",
    "schema_for",
    "tagged",
    "tool",
]
