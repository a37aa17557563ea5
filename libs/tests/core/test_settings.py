import pytest
from assistant_core.settings import AssistantSettings
from pydantic import ValidationError


class TestAssistantSettings:
    def test_defaults(self) -> None:
        settings = AssistantSettings()

        assert settings.model == "gpt-4o"
        assert settings.api_key is None
        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.organization is None
        assert settings.log_level == "INFO"

    def test_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ASSISTANT_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("ASSISTANT_BASE_URL", "http://localhost:8080/v1/")
        monkeypatch.setenv("ASSISTANT_LOG_LEVEL", "debug")

        settings = AssistantSettings.from_env()

        assert settings.model == "gpt-4o-mini"
        assert settings.base_url == "http://localhost:8080/v1"
        assert settings.log_level == "DEBUG"

    def test_api_key_from_openai_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")

        settings = AssistantSettings()

        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "sk-openai"

    def test_prefixed_api_key_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("ASSISTANT_API_KEY", "sk-assistant")

        settings = AssistantSettings()

        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "sk-assistant"

    def test_api_key_is_not_printed(self) -> None:
        settings = AssistantSettings(api_key="sk-secret")

        assert "sk-secret" not in repr(settings)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            AssistantSettings(log_level="chatty")


class TestRequestHeaders:
    def test_headers_with_key(self) -> None:
        headers = AssistantSettings(api_key="sk-test").request_headers()

        assert headers == {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "OpenAI-Beta": "assistants=v2",
            "Authorization": "Bearer sk-test",
        }

    def test_headers_without_key(self) -> None:
        assert "Authorization" not in AssistantSettings().request_headers()

    def test_organization_header(self) -> None:
        headers = AssistantSettings(organization="org-1").request_headers()

        assert headers["OpenAI-Organization"] == "org-1"
