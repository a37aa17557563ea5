"""Converters for transforming tools and assistants into provider formats."""

from .openai import (
    OpenAIAssistantRequest,
    OpenAIBuiltinToolSchema,
    OpenAIFunctionSchema,
    OpenAIFunctionToolSchema,
    OpenAIToolList,
    OpenAIToolResources,
    OpenAIToolSchema,
    to_openai,
    to_openai_assistant,
    to_openai_tool_resources,
)

__all__ = [
    # OpenAI
    "OpenAIAssistantRequest",
    "OpenAIBuiltinToolSchema",
    "OpenAIFunctionSchema",
    "OpenAIFunctionToolSchema",
    "OpenAIToolList",
    "OpenAIToolResources",
    "OpenAIToolSchema",
    "to_openai",
    "to_openai_assistant",
    "to_openai_tool_resources",
]
