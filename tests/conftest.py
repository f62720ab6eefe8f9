"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import inspect
import re
from pathlib import Path
from typing import Callable

import pytest

from redaction_layer.config import Settings
from redaction_layer.detection.capability import TextAnalysisCapability
from redaction_layer.models.entity_models import CandidateEntity
from redaction_layer.models.enums import EntityType


class FakeCapability(TextAnalysisCapability):
    """
    In-memory TextAnalysisCapability.

    ``handler(text, category)`` returns candidates (or an awaitable of them)
    or raises; every call is recorded.
    """

    def __init__(self, handler: Callable | None = None):
        self.handler = handler or (lambda text, category: [])
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def detect(self, text: str, category: str = "unknown") -> list[CandidateEntity]:
        self.calls.append((text, category))
        result = self.handler(text, category)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def close(self) -> None:
        self.closed = True


def find_terms(terms: dict[str, EntityType], confidence: float = 0.9) -> Callable:
    """Handler that reports every occurrence of each term with correct offsets."""

    def handler(text: str, category: str) -> list[CandidateEntity]:
        found = []
        for term, entity_type in terms.items():
            for match in re.finditer(re.escape(term), text):
                found.append(
                    CandidateEntity(
                        text=term,
                        type=entity_type,
                        start=match.start(),
                        end=match.end(),
                        confidence=confidence,
                    )
                )
        return found

    return handler


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Settings are frozen; build a variant with keyword overrides:
        def test_something(make_settings):
            settings = make_settings(MAX_RETRIES=0)
    """
    return Settings(
        # === Application ===
        APP_NAME="PII Redaction Layer (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Segmentation ===
        MAX_SEGMENT_SIZE=5000,
        OVERLAP_SIZE=500,
        CHUNK_THRESHOLD=5000,

        # === Context detection: short timeouts, no backoff sleeps ===
        BASE_TIMEOUT_MS=2000,
        TIMEOUT_PER_KB_MS=100,
        MAX_TIMEOUT_MS=5000,
        MAX_RETRIES=2,
        RETRY_BACKOFF_BASE_MS=0,

        # === LLM ===
        LLM_PROVIDER="ollama",
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_MODEL="qwen2.5:7b",
    )


@pytest.fixture
def make_settings(test_settings: Settings) -> Callable[..., Settings]:
    """Factory for validated Settings variants of ``test_settings``."""

    def factory(**overrides) -> Settings:
        values = test_settings.model_dump()
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def fake_capability_class() -> type[FakeCapability]:
    return FakeCapability


@pytest.fixture
def term_finder() -> Callable[..., Callable]:
    """Factory for handlers that find given terms: ``term_finder({"Jane": EntityType.NAME})``."""
    return find_terms


@pytest.fixture
def prompts_dir() -> Path:
    """Packaged prompt templates."""
    return Path(__file__).parent.parent / "src" / "redaction_layer" / "prompts"
