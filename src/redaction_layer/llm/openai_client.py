"""
OpenAI-compatible chat completions client.

Works against the OpenAI API and any server exposing the same
/v1/chat/completions contract (vLLM, SGLang, LiteLLM proxies).
JSON output is requested through ``response_format={"type": "json_object"}``.
"""

import json
import time
from typing import Optional

import httpx
import structlog

from redaction_layer.llm.base_client import BaseLLMClient
from redaction_layer.llm.exceptions import LLMGenerationError
from redaction_layer.llm.http_errors import error_from_status, error_from_transport
from redaction_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from redaction_layer.monitoring.metrics import llm_latency_seconds, llm_tokens_total


logger = structlog.get_logger(__name__)


class OpenAICompatibleClient(BaseLLMClient):
    """
    Client for OpenAI-style chat completion endpoints.

    API Endpoints:
    - POST /v1/chat/completions: Generate completion
    - GET /v1/models: List models (health check)
    """

    def __init__(
        self,
        base_url: str = "https://api.openai.com",
        api_key: Optional[str] = None,
        timeout: float = 600.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        self._api_key = api_key
        super().__init__(base_url, timeout, transport=transport, connection_limits=connection_limits)

    def _default_headers(self) -> dict[str, str]:
        if not self._api_key:
            return {}
        return {"Authorization": f"Bearer {self._api_key}"}

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate completion using the chat completions API.

        POST /v1/chat/completions with payload:
        {
            "model": "gpt-4o-mini",
            "messages": [{"role": "system", ...}, {"role": "user", ...}],
            "temperature": 0,
            "max_tokens": 2048,
            "seed": 42,
            "response_format": {"type": "json_object"}
        }
        """
        start_time = time.time()

        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        payload = {
            "model": request.model,
            "messages": messages,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "response_format": {"type": "json_object"},
        }
        if request.seed is not None:
            payload["seed"] = request.seed

        logger.debug(
            "Sending chat completion request",
            model=request.model,
            prompt_length=len(request.prompt),
        )

        try:
            client = await self._get_client()
            response = await client.post("/v1/chat/completions", json=payload)
            response.raise_for_status()
            response_data = response.json()
        except httpx.HTTPStatusError as e:
            llm_latency_seconds.labels(model=request.model, success="false").observe(time.time() - start_time)
            logger.warning("Chat completion HTTP error", status_code=e.response.status_code, model=request.model)
            raise error_from_status(e.response.status_code, "OpenAI", request.model) from e
        except httpx.HTTPError as e:
            llm_latency_seconds.labels(model=request.model, success="false").observe(time.time() - start_time)
            logger.warning("Chat completion transport error", error_type=type(e).__name__, model=request.model)
            raise error_from_transport(e, "OpenAI", self.timeout) from e
        except json.JSONDecodeError as e:
            raise LLMGenerationError(
                "Invalid JSON envelope from chat completions",
                details={"parse_error": e.msg}
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)

        try:
            choice = response_data["choices"][0]
            content = choice["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise LLMGenerationError(
                "Unexpected chat completion structure",
                details={"error_type": type(e).__name__}
            ) from e

        if not content:
            raise LLMGenerationError("Empty completion content", details={"model": request.model})

        model_version = response_data.get("model", request.model)
        usage = response_data.get("usage") or {}
        prompt_tokens = usage.get("prompt_tokens")
        completion_tokens = usage.get("completion_tokens")

        logger.info(
            "Chat completion successful",
            model=model_version,
            latency_ms=latency_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

        llm_latency_seconds.labels(model=model_version, success="true").observe(latency_ms / 1000.0)
        if prompt_tokens:
            llm_tokens_total.labels(model=model_version, token_type="prompt").inc(prompt_tokens)
        if completion_tokens:
            llm_tokens_total.labels(model=model_version, token_type="completion").inc(completion_tokens)

        return LLMGenerationResponse(
            content=content,
            model_version=model_version,
            finish_reason=choice.get("finish_reason") or "stop",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency_ms,
        )

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/v1/models", timeout=5.0)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning("Chat completions health check failed", error=str(e))
            return False
