"""
Text-analysis capability port.

The context detector talks to an abstract ``TextAnalysisCapability``. The
default adapter drives an LLM client, but tests and alternative backends
(a local NER model, a rules engine) only need to implement ``detect``.

Adapters report failures with the detection taxonomy:
- TransientDetectionError: worth retrying
- PermanentDetectionError: retrying cannot help
- MalformedResponseError: the payload broke the structured-output contract
"""

from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from redaction_layer.config import Settings
from redaction_layer.detection.exceptions import (
    PermanentDetectionError,
    TransientDetectionError,
)
from redaction_layer.detection.response_parser import ENTITY_RESPONSE_SCHEMA, ResponseParser
from redaction_layer.llm.base_client import BaseLLMClient
from redaction_layer.llm.exceptions import LLMClientError
from redaction_layer.llm.ollama_client import OllamaClient
from redaction_layer.llm.openai_client import OpenAICompatibleClient
from redaction_layer.llm.prompt_builder import PromptBuilder
from redaction_layer.models.entity_models import CandidateEntity


logger = structlog.get_logger(__name__)


class TextAnalysisCapability(ABC):
    """Port for anything that can find contextual PII in a piece of text."""

    @abstractmethod
    async def detect(self, text: str, category: str = "unknown") -> list[CandidateEntity]:
        """
        Return unverified candidate entities with offsets local to ``text``.

        Makes a single attempt; timeouts and retries belong to the caller.
        """

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class LLMTextAnalysisCapability(TextAnalysisCapability):
    """
    Capability adapter backed by an LLM client.

    Builds the prompt, calls the client once and parses the structured
    response. LLM client errors are translated by their ``retryable`` flag.
    """

    def __init__(
        self,
        client: BaseLLMClient,
        prompt_builder: PromptBuilder,
        parser: ResponseParser | None = None,
    ):
        self.client = client
        self.prompt_builder = prompt_builder
        self.parser = parser or ResponseParser()

    async def detect(self, text: str, category: str = "unknown") -> list[CandidateEntity]:
        request = self.prompt_builder.build_request(text, category)

        try:
            response = await self.client.generate(request)
        except LLMClientError as e:
            details = {"error_type": type(e).__name__, **e.details}
            if e.retryable:
                raise TransientDetectionError(e.message, details=details) from e
            raise PermanentDetectionError(e.message, details=details) from e

        # MalformedResponseError propagates unchanged
        return self.parser.parse(response.content)

    async def health_check(self) -> bool:
        return await self.client.health_check()

    async def close(self) -> None:
        await self.client.close()

    def __repr__(self) -> str:
        return f"LLMTextAnalysisCapability(client={self.client!r})"


def build_capability(settings: Settings) -> LLMTextAnalysisCapability:
    """
    Wire the configured LLM provider into a capability adapter.

    The client HTTP timeout is set to MAX_TIMEOUT_MS as a backstop; the
    context detector enforces the adaptive per-call limit.
    """
    http_timeout = settings.MAX_TIMEOUT_MS / 1000.0

    if settings.LLM_PROVIDER == "openai":
        client: BaseLLMClient = OpenAICompatibleClient(
            base_url=settings.OPENAI_BASE_URL,
            api_key=settings.OPENAI_API_KEY or None,
            timeout=http_timeout,
        )
        model = settings.OPENAI_MODEL
        # json_object mode carries no schema; validation happens in the parser
        response_schema = None
    else:
        client = OllamaClient(base_url=settings.OLLAMA_BASE_URL, timeout=http_timeout)
        model = settings.OLLAMA_MODEL
        response_schema = ENTITY_RESPONSE_SCHEMA

    prompt_builder = PromptBuilder(
        templates_dir=Path(settings.PROMPT_TEMPLATES_DIR),
        response_schema=response_schema,
        default_model=model,
        default_temperature=settings.LLM_TEMPERATURE,
        default_max_tokens=settings.LLM_MAX_TOKENS,
        seed=settings.LLM_SEED,
    )

    logger.info("Built text analysis capability", provider=settings.LLM_PROVIDER, model=model)
    return LLMTextAnalysisCapability(client, prompt_builder)
