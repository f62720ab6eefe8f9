"""
Mapping of httpx failures onto the LLM exception hierarchy.

Shared by every HTTP-based client so retryability is decided in one place.
"""

import httpx

from redaction_layer.llm.exceptions import (
    LLMAuthenticationError,
    LLMBadRequestError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMRateLimitError,
    LLMTimeoutError,
)


def error_from_status(status_code: int, provider: str, model: str) -> LLMClientError:
    """
    Build the exception matching an HTTP error status.

    The response body is deliberately not included: it may echo the prompt,
    which contains the document text.
    """
    details = {"status": status_code, "model": model}
    if status_code in (401, 403):
        return LLMAuthenticationError(f"{provider} rejected credentials: {status_code}", details=details)
    if status_code == 404:
        return LLMModelNotAvailableError(f"Model not found: {model}", details=details)
    if status_code == 429:
        return LLMRateLimitError(f"{provider} rate limit exceeded", details=details)
    if status_code >= 500:
        return LLMGenerationError(f"{provider} server error: {status_code}", details=details)
    return LLMBadRequestError(f"{provider} client error: {status_code}", details=details)


def error_from_transport(exc: httpx.HTTPError, provider: str, timeout: float) -> LLMClientError:
    """Build the exception matching a transport-level httpx failure."""
    if isinstance(exc, httpx.TimeoutException):
        return LLMTimeoutError(
            f"{provider} request timeout after {timeout}s",
            details={"timeout": timeout, "error_type": type(exc).__name__},
        )
    return LLMConnectionError(
        f"{provider} network error: {exc}",
        details={"error_type": type(exc).__name__},
    )
