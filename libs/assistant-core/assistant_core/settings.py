"""
Assistant Settings Management

Provides Pydantic-based settings with validation and environment variable support.
"""

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

DEFAULT_MODEL = "gpt-4o"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
ASSISTANTS_API_VERSION = "assistants=v2"


class AssistantSettings(BaseSettings):
    """Settings shared by the payload builders and the transport that sends them."""

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Model used by assistants that do not name one",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key",
        validation_alias=AliasChoices("ASSISTANT_API_KEY", "OPENAI_API_KEY"),
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the OpenAI API",
    )
    organization: str | None = Field(
        default=None,
        description="OpenAI organization ID sent with every request",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level",
    )

    model_config = {
        "env_prefix": "ASSISTANT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
        "protected_namespaces": (),
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(cls) -> "AssistantSettings":
        """Create settings from environment variables."""
        return cls()

    def request_headers(self) -> dict[str, str]:
        """Headers every Assistants API request carries."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "OpenAI-Beta": ASSISTANTS_API_VERSION,
        }
        if self.api_key is not None:
            headers["Authorization"] = f"Bearer {self.api_key.get_secret_value()}"
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers
