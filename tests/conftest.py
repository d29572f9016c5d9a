"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from solution_chat.persona.registry import PersonaRegistry


@pytest.fixture
def registry() -> PersonaRegistry:
    """Registry with the built-in fragments."""
    return PersonaRegistry()


@pytest.fixture
def openai_client():
    """Patch the lazily-created OpenAI client with a mock."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    with patch("solution_chat.llm.client._get_client", return_value=client):
        yield client
