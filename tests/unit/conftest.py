"""Unit test fixtures (mocks and stubs).

Provides mock provider clients for testing without network access.
"""

from unittest.mock import AsyncMock

import pytest

from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.models.llm_models import LLMGenerationResponse


def make_response(content: str, model: str = "test-model") -> LLMGenerationResponse:
    return LLMGenerationResponse(
        content=content,
        model_version=model,
        finish_reason="stop",
        prompt_tokens=100,
        completion_tokens=50,
        latency_ms=10,
    )


@pytest.fixture
def mock_client_factory():
    """Factory for BaseLLMClient mocks whose generate() follows a side_effect list."""

    def factory(side_effect) -> AsyncMock:
        client = AsyncMock(spec=BaseLLMClient)
        client.generate = AsyncMock(side_effect=[
            make_response(item) if isinstance(item, str) else item for item in side_effect
        ])
        return client

    return factory
