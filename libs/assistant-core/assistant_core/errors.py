import traceback
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class ErrorOrigin(str, Enum):
    """Where the error originated."""

    SCHEMA = "SCHEMA"
    TOOL = "TOOL"
    UNKNOWN = "UNKNOWN"


class ErrorPhase(str, Enum):
    """When the error occurred."""

    DEFINITION = "DEFINITION"
    RUNTIME = "RUNTIME"
    UNKNOWN = "UNKNOWN"


class ErrorCode(str, Enum):
    """Error codes."""

    # Tool Definition error codes
    BAD_DEFINITION = "BAD_DEFINITION"
    BAD_INPUT_SCHEMA = "BAD_INPUT_SCHEMA"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    INVALID_TAG = "INVALID_TAG"
    INVALID_LITERAL = "INVALID_LITERAL"
    # Tool Runtime error codes
    BAD_INPUT_VALUE = "BAD_INPUT_VALUE"
    BAD_OUTPUT_VALUE = "BAD_OUTPUT_VALUE"
    FATAL = "FATAL"
    # Unknown error code
    UNKNOWN = "UNKNOWN"


class AssistantError(Exception, ABC):
    """
    Base class for all assistant SDK errors.

    Note: This class is an abstract class and cannot be instantiated directly.

    Attributes expected from subclasses:
      message           : str                    # user-facing error message
      origin            : ErrorOrigin            # where the error originated
      phase             : ErrorPhase             # when the error occurred
      code              : ErrorCode              # machine-readable error code
      can_retry         : bool                   # whether the operation can be retried
      developer_message : str | None             # developer-facing error details
      extra             : dict[str, Any] | None  # arbitrary structured metadata
    """

    can_retry: bool = False
    developer_message: str | None = None
    extra: dict[str, Any] | None = None

    def __new__(cls, *args, **kwargs):
        abs_methods = getattr(cls, "__abstractmethods__", None)
        if abs_methods:
            raise TypeError(f"Can't instantiate abstract class {cls.__name__}")
        return super().__new__(cls)

    @abstractmethod
    def create_message_prefix(self, name: str) -> str:
        pass

    def with_context(self, name: str) -> "AssistantError":
        """
        Add context to the error message.

        Args:
            name: The name of the tool that caused the error.

        Returns:
            The error with the context added to the message.
        """
        prefix = self.create_message_prefix(name)
        self.message = f"{prefix}{self.message}"
        if self.developer_message:
            self.developer_message = f"{prefix}{self.developer_message}"

        return self

    def __str__(self) -> str:
        return self.message

    # wire-format helper
    def to_payload(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "developer_message": self.developer_message,
            "origin": self.origin,
            "code": self.code,
            "phase": self.phase,
            "can_retry": self.can_retry,
            **(self.extra or {}),
        }


# ------  definition-time errors (tool developer's responsibility) ------
class ToolDefinitionError(AssistantError):
    """
    Raised when there is an error in the definition/signature of a tool.
    """

    origin: ErrorOrigin = ErrorOrigin.TOOL
    phase: ErrorPhase = ErrorPhase.DEFINITION
    code: ErrorCode = ErrorCode.BAD_DEFINITION

    def __init__(self, message: str, *, extra: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def create_message_prefix(self, tool_name: str) -> str:
        return f"[{self.origin.value}_{self.phase.value}_{self.code.value}] {type(self).__name__} in definition of tool '{tool_name}': "


class SchemaError(ToolDefinitionError):
    """
    Raised when a JSON schema cannot be derived for a type.

    Note: This class is not intended to be instantiated directly.
    """

    origin: ErrorOrigin = ErrorOrigin.SCHEMA
    code: ErrorCode = ErrorCode.BAD_INPUT_SCHEMA


class UnsupportedTypeError(SchemaError):
    """Raised when a type has no JSON schema representation."""

    code: ErrorCode = ErrorCode.UNSUPPORTED_TYPE

    def __init__(self, type_name: str, field: str | None = None) -> None:
        message = f"unsupported type '{type_name}'"
        if field:
            message += f" for field '{field}'"
        super().__init__(message, extra={"type": type_name, "field": field})
        self.type_name = type_name
        self.field = field


class InvalidConstraintTagError(SchemaError):
    """Raised when a constraint tag does not parse as the primitive it requires."""

    code: ErrorCode = ErrorCode.INVALID_TAG

    def __init__(self, kind: str, tag: str, field: str, raw: Any) -> None:
        super().__init__(
            f"invalid {kind} tag '{tag}' for field '{field}': {raw}",
            extra={"tag": tag, "field": field},
        )
        self.kind = kind
        self.tag = tag
        self.field = field
        self.raw = raw


class InvalidLiteralError(SchemaError):
    """Raised when an enum or example literal does not match the field schema."""

    code: ErrorCode = ErrorCode.INVALID_LITERAL

    def __init__(self, kind: str, raw: str, field: str, reason: str | None = None) -> None:
        message = f"invalid {kind} tag value '{raw}' for field '{field}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, extra={"field": field})
        self.kind = kind
        self.raw = raw
        self.field = field
        self.reason = reason


# ------  runtime errors ------
class ToolRuntimeError(AssistantError, RuntimeError):
    """
    Any failure starting from when the tool call begins until the tool call returns.

    Note: This class is not intended to be instantiated directly.
    """

    origin: ErrorOrigin = ErrorOrigin.TOOL
    phase: ErrorPhase = ErrorPhase.RUNTIME
    code: ErrorCode = ErrorCode.FATAL

    def __init__(
        self,
        message: str,
        developer_message: str | None = None,
        *,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.developer_message = developer_message
        self.extra = extra

    def create_message_prefix(self, tool_name: str) -> str:
        return f"[{self.origin.value}_{self.phase.value}_{self.code.value}] {type(self).__name__} in execution of tool '{tool_name}': "

    def stacktrace(self) -> str | None:
        if self.__cause__:
            return "\n".join(traceback.format_exception(self.__cause__))
        return None


class ToolInputError(ToolRuntimeError):
    """
    Raised when there is an error parsing a tool call argument.
    """

    code: ErrorCode = ErrorCode.BAD_INPUT_VALUE


class ToolOutputError(ToolRuntimeError):
    """
    Raised when there is an error serializing a tool call return value.
    """

    code: ErrorCode = ErrorCode.BAD_OUTPUT_VALUE


class ToolExecutionError(ToolRuntimeError):
    """
    Raised when the function behind a tool raises.
    """
