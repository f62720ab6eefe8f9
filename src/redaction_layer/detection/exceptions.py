"""
Detection-layer exceptions.

These exceptions let the context detector distinguish failure modes:
- Retry on TransientDetectionError / MalformedResponseError
- Degrade immediately on PermanentDetectionError
- DetectionRetryExhausted when all attempts for a segment failed

None of them ever escape the pipeline orchestrator; degradation is
reported as data in the RedactionResult.
"""

from typing import Any


class DetectionError(Exception):
    """
    Base exception for all detection errors.

    Carries a structured ``details`` dict for logging and retry history.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class TransientDetectionError(DetectionError):
    """
    Temporary failure of the text-analysis capability.

    Network errors, 5xx responses, rate limiting. Retried up to MAX_RETRIES.
    """
    pass


class DetectionTimeoutError(TransientDetectionError):
    """
    The capability call exceeded its adaptive timeout.

    Raised by the context detector when ``asyncio.wait_for`` expires; only
    the owning segment's call is cancelled.
    """
    pass


class PermanentDetectionError(DetectionError):
    """
    Failure that retrying cannot fix.

    Examples: authentication rejected, model not found, invalid request.
    The segment degrades without further attempts.
    """
    pass


class MalformedResponseError(DetectionError):
    """
    The capability response violated the structured-output contract.

    Treated like a transient failure for the owning segment: the whole
    payload is discarded, never partially trusted.
    """

    def __init__(
        self,
        message: str,
        raw_content: str | None = None,
        parse_error: str | None = None,
        validation_errors: list[str] | None = None,
    ):
        """
        Initialize malformed response error.

        Args:
            message: Error description
            raw_content: Malformed content; only the length is kept so raw
                text (possible PII) never reaches the logs
            parse_error: Original json.JSONDecodeError message
            validation_errors: JSON Schema violation messages
        """
        details: dict[str, Any] = {}
        if raw_content is not None:
            details["content_length"] = len(raw_content)
        if parse_error:
            details["parse_error"] = parse_error
        if validation_errors:
            details["validation_errors"] = validation_errors[:10]

        super().__init__(message, details)


class DetectionRetryExhausted(DetectionError):
    """
    Raised when every attempt for a segment failed.

    Attributes:
        attempts: Number of capability calls made
        last_error: Final error that caused the segment to degrade
        failures: Details dict of every failed attempt
    """

    def __init__(
        self,
        attempts: int,
        last_error: DetectionError,
        failures: list[dict[str, Any]] | None = None,
    ):
        self.attempts = attempts
        self.last_error = last_error
        self.failures = failures or []

        super().__init__(
            f"Context detection failed after {attempts} attempt(s). "
            f"Final error: {type(last_error).__name__}",
            details={"attempts": attempts, "last_error": type(last_error).__name__},
        )
