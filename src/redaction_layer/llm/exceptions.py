"""
Custom exceptions for the LLM client layer.

Each exception carries a ``retryable`` flag. The capability adapter uses it
to translate client failures into the detection taxonomy
(TransientDetectionError vs PermanentDetectionError), so the context
detector never needs to know which provider is behind the port.
"""


class LLMClientError(Exception):
    """
    Base exception for all LLM client errors.

    All LLM-specific exceptions inherit from this to allow catching
    any LLM-related error with a single except clause.
    """
    retryable: bool = True

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMConnectionError(LLMClientError):
    """
    Raised when unable to connect to the LLM inference server.

    Includes network errors, DNS failures, refused connections.
    """
    retryable = True


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when the HTTP request itself exceeded the client timeout.

    Separate from the context detector's adaptive timeout, which cancels
    the call from outside.
    """
    retryable = True


class LLMGenerationError(LLMClientError):
    """
    Raised when the LLM server returns an error during generation.

    5xx responses and empty completions are retryable; the 4xx subclasses
    below are not.
    """
    retryable = True


class LLMRateLimitError(LLMGenerationError):
    """
    Raised when the provider rate-limits the request (HTTP 429).

    Retried with backoff like any transient failure.
    """
    retryable = True


class LLMBadRequestError(LLMGenerationError):
    """Raised on 4xx responses other than auth, missing model and rate limit."""
    retryable = False


class LLMAuthenticationError(LLMGenerationError):
    """Raised when the provider rejects the credentials (HTTP 401/403)."""
    retryable = False


class LLMModelNotAvailableError(LLMGenerationError):
    """
    Raised when the requested model is not available on the server.

    Retrying the same model cannot succeed.
    """
    retryable = False
