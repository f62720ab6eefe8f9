"""
Ollama client implementation for LLM inference.

Communicates with Ollama API using httpx AsyncClient. Supports:
- Structured output via JSON Schema (format parameter)
- Deterministic generation (temperature + seed options)
- Connection pooling
- Health checks
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


class OllamaClient(BaseLLMClient):
    """
    Ollama-specific LLM client using httpx for async HTTP communication.

    API Endpoints:
    - POST /api/generate: Generate completion with optional format constraint
    - GET /api/tags: List available models (health check)
    """

    def __init__(
        self,
        base_url: str = "http://ollama:11434",
        timeout: float = 600.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        super().__init__(base_url, timeout, transport=transport, connection_limits=connection_limits)

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate completion using Ollama API.

        POST /api/generate with payload:
        {
            "model": "qwen2.5:7b",
            "system": "...",
            "prompt": "...",
            "stream": false,
            "format": <JSON Schema or "json">,
            "options": {"temperature": 0, "num_predict": 2048, "seed": 42}
        }

        Response:
        {
            "model": "qwen2.5:7b",
            "response": "...",
            "done": true,
            "eval_count": 150,
            "prompt_eval_count": 50
        }
        """
        start_time = time.time()

        payload = {
            "model": request.model,
            "prompt": request.prompt,
            "stream": False,
            "format": request.format_schema if request.format_schema else "json",
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            }
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        if request.seed is not None:
            payload["options"]["seed"] = request.seed

        logger.debug(
            "Sending generation request to Ollama",
            model=request.model,
            prompt_length=len(request.prompt),
            has_schema=bool(request.format_schema)
        )

        try:
            client = await self._get_client()
            response = await client.post("/api/generate", json=payload)
            response.raise_for_status()
            response_data = response.json()
        except httpx.HTTPStatusError as e:
            llm_latency_seconds.labels(model=request.model, success="false").observe(time.time() - start_time)
            logger.warning("Ollama HTTP error", status_code=e.response.status_code, model=request.model)
            raise error_from_status(e.response.status_code, "Ollama", request.model) from e
        except httpx.HTTPError as e:
            llm_latency_seconds.labels(model=request.model, success="false").observe(time.time() - start_time)
            logger.warning("Ollama transport error", error_type=type(e).__name__, model=request.model)
            raise error_from_transport(e, "Ollama", self.timeout) from e
        except json.JSONDecodeError as e:
            raise LLMGenerationError(
                "Invalid JSON envelope from Ollama",
                details={"parse_error": e.msg}
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)

        content = response_data.get("response", "")
        if not content:
            raise LLMGenerationError("Empty response from Ollama", details={"model": request.model})

        model_version = response_data.get("model", request.model)
        prompt_tokens = response_data.get("prompt_eval_count")
        completion_tokens = response_data.get("eval_count")

        logger.info(
            "Ollama generation successful",
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
            finish_reason="stop" if response_data.get("done") else "incomplete",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency_ms,
        )

    async def health_check(self) -> bool:
        """
        Check Ollama server health via GET /api/tags.

        Returns True if server responds, False otherwise.
        """
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=5.0)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning("Ollama health check failed", error=str(e))
            return False
