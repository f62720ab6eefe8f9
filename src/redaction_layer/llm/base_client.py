"""
Abstract base client for LLM inference.

Defines the interface that all LLM client implementations (Ollama,
OpenAI-compatible, etc.) must adhere to. This abstraction allows swapping
inference backends without changing the detection layer.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx
import structlog

from redaction_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM inference clients.

    Responsibilities:
    - Send generation requests to inference server
    - Parse responses into standardized format
    - Map transport and HTTP failures onto LLMClientError subclasses

    Does NOT handle:
    - Prompt construction (that's PromptBuilder's job)
    - Response parsing into entities (that's ResponseParser's job)
    - Timeouts and retries (that's ContextDetector's job): a client makes
      exactly one attempt per ``generate`` call
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 600.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        """
        Initialize base client.

        Args:
            base_url: Base URL of LLM inference server (e.g., http://ollama:11434)
            timeout: HTTP timeout in seconds; a backstop only, the context
                detector enforces the adaptive per-call timeout
            transport: Optional httpx transport (tests inject MockTransport)
            connection_limits: httpx connection pool limits
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self._connection_limits = connection_limits or httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0
        )
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    def _default_headers(self) -> dict[str, str]:
        return {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                headers=self._default_headers(),
                transport=self._transport,
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient", client_class=self.__class__.__name__)
        return self._client

    @abstractmethod
    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate completion from the LLM.

        Args:
            request: Standardized generation request

        Returns:
            LLMGenerationResponse with generated text and metadata

        Raises:
            LLMConnectionError: Network errors
            LLMTimeoutError: HTTP timeout
            LLMGenerationError: Server-side generation errors
            LLMModelNotAvailableError: Model not found
            LLMAuthenticationError: Credentials rejected
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the inference server is healthy and reachable.

        Returns:
            True if server is healthy, False otherwise

        Note:
            This should NOT raise exceptions - return False on error.
        """
        pass

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed LLM client connection", client_class=self.__class__.__name__)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
