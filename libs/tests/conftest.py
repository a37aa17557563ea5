"""Global test configuration for all tests.

This conftest.py is at the root of the tests directory and applies to all test modules.
"""

import os

import pytest

SETTINGS_ENV_PREFIXES = ("ASSISTANT_", "OPENAI_")


@pytest.fixture(autouse=True)
def isolate_environment():
    """Isolate environment variables for each test.

    This fixture captures the entire environment before a test and restores it
    after. Variables read by AssistantSettings are removed up front so a
    developer's own OpenAI configuration never leaks into assertions.
    """
    original_env = os.environ.copy()

    for key in list(os.environ):
        if key.startswith(SETTINGS_ENV_PREFIXES):
            del os.environ[key]

    yield

    # Restore the original environment
    os.environ.clear()
    os.environ.update(original_env)
