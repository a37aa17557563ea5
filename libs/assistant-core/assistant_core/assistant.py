from pydantic import BaseModel, ConfigDict, Field, field_validator

from assistant_core.tool import Tool

MAX_METADATA_PAIRS = 16
MAX_METADATA_KEY_LENGTH = 64
MAX_METADATA_VALUE_LENGTH = 512


class Assistant(BaseModel):
    """
    A purpose-built assistant that uses a model and calls tools.

    When `id` is empty the assistant is created on the server from the other
    fields; otherwise the existing assistant is used as is.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    id: str | None = None
    name: str = ""
    description: str = Field(default="", max_length=512)
    model: str = Field(
        default="",
        description="Model to use. Falls back to the configured default model when empty.",
    )
    instructions: str = ""
    tools: list[Tool] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("tools")
    @classmethod
    def validate_unique_tools(cls, v: list[Tool]) -> list[Tool]:
        """Function names and built-in tool kinds may each appear once."""
        seen: set[str] = set()
        for tool in v:
            if tool.id in seen:
                raise ValueError(f"Duplicate tool '{tool.id}'")
            seen.add(tool.id)
        return v

    @field_validator("metadata")
    @classmethod
    def validate_metadata(cls, v: dict[str, str]) -> dict[str, str]:
        if len(v) > MAX_METADATA_PAIRS:
            raise ValueError(
                f"Metadata can hold at most {MAX_METADATA_PAIRS} pairs, got {len(v)}"
            )
        for key, value in v.items():
            if len(key) > MAX_METADATA_KEY_LENGTH:
                raise ValueError(
                    f"Metadata key '{key}' is longer than {MAX_METADATA_KEY_LENGTH} characters"
                )
            if len(value) > MAX_METADATA_VALUE_LENGTH:
                raise ValueError(
                    f"Metadata value for '{key}' is longer than "
                    f"{MAX_METADATA_VALUE_LENGTH} characters"
                )
        return v
