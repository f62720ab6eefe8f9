"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from unittest.mock import AsyncMock

import pytest

from redaction_layer.llm.base_client import BaseLLMClient
from redaction_layer.models.llm_models import LLMGenerationResponse


@pytest.fixture
def mock_llm_response():
    """Mock LLMGenerationResponse with one NAME entity."""
    return LLMGenerationResponse(
        content='{"entities": [{"type": "NAME", "text": "Sarah", "start": 0, "end": 5, "confidence": 0.95}]}',
        model_version="qwen2.5:7b",
        finish_reason="stop",
        prompt_tokens=500,
        completion_tokens=40,
        latency_ms=1500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response):
    """Mock LLM client for capability tests."""
    mock = AsyncMock(spec=BaseLLMClient)
    mock.generate = AsyncMock(return_value=mock_llm_response)
    mock.health_check = AsyncMock(return_value=True)
    mock.close = AsyncMock()
    return mock
