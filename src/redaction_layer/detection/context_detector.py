"""
Context detector: finds PII that needs surrounding context.

Wraps a TextAnalysisCapability with:
- Adaptive timeout: min(MAX, BASE + PER_KB * len / 1000) milliseconds
- Retry with exponential backoff on timeouts, transient and malformed
  responses (MAX_RETRIES + 1 attempts in total)
- Hallucination guard: a candidate survives only if the segment text at
  its claimed offsets equals its claimed text

Usage:
    detector = ContextDetector(capability, settings)
    outcome = await detector.detect_segment(segment, category="transcript")
"""

import asyncio
import time

import structlog

from redaction_layer.config import Settings
from redaction_layer.detection.capability import TextAnalysisCapability
from redaction_layer.detection.exceptions import (
    DetectionError,
    DetectionRetryExhausted,
    DetectionTimeoutError,
    MalformedResponseError,
    PermanentDetectionError,
    TransientDetectionError,
)
from redaction_layer.detection.outcome import SegmentDetectionOutcome
from redaction_layer.models.document_models import Segment
from redaction_layer.models.entity_models import CandidateEntity, Entity
from redaction_layer.models.enums import EntitySource
from redaction_layer.monitoring.metrics import (
    context_detection_latency_seconds,
    detection_attempts_total,
    hallucinated_entities_total,
    segments_processed_total,
)


logger = structlog.get_logger(__name__)


def verify_candidates(
    candidates: list[CandidateEntity], text: str
) -> tuple[list[Entity], int]:
    """
    Keep only candidates whose claimed text sits at their claimed offsets.

    Returns:
        (verified entities with offsets local to ``text``, number dropped)
    """
    verified: list[Entity] = []
    dropped = 0
    for candidate in candidates:
        start, end = candidate.start, candidate.end
        if not (0 <= start < end <= len(text)) or text[start:end] != candidate.text:
            dropped += 1
            continue
        verified.append(
            Entity(
                text=candidate.text,
                type=candidate.type,
                start=start,
                end=end,
                confidence=candidate.confidence,
                source=EntitySource.CONTEXT,
            )
        )
    return verified, dropped


class ContextDetector:
    """
    Per-segment driver for the text-analysis capability.

    Stateless between calls, so one instance serves all concurrent segments
    of a document.
    """

    def __init__(self, capability: TextAnalysisCapability, settings: Settings):
        self.capability = capability
        self.settings = settings

    def calculate_timeout_ms(self, text: str) -> int:
        """
        Per-call timeout for a text of this length.

        With adaptive timeouts disabled every call gets MAX_TIMEOUT_MS.
        """
        s = self.settings
        if not s.ENABLE_ADAPTIVE_TIMEOUT:
            return s.MAX_TIMEOUT_MS
        adaptive = s.BASE_TIMEOUT_MS + s.TIMEOUT_PER_KB_MS * len(text) / 1000
        return int(min(s.MAX_TIMEOUT_MS, adaptive))

    def backoff_seconds(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based)."""
        return self.settings.RETRY_BACKOFF_BASE_MS * (2 ** (attempt - 1)) / 1000.0

    async def detect(self, segment_text: str, category: str = "unknown") -> list[Entity]:
        """
        Detect contextual PII with retries and the hallucination guard.

        Args:
            segment_text: Text to analyse
            category: Document category hint

        Returns:
            Verified entities with offsets local to ``segment_text``

        Raises:
            DetectionRetryExhausted: When no attempt produced a valid response
        """
        entities, _, _ = await self._detect_with_retry(segment_text, category)
        return entities

    async def detect_segment(self, segment: Segment, category: str = "unknown") -> SegmentDetectionOutcome:
        """
        Run detection for one segment. Never raises.

        Failures are folded into a degraded outcome so one segment cannot
        take down its siblings.
        """
        timeout_ms = self.calculate_timeout_ms(segment.text)

        if len(segment.text.strip()) < self.settings.MIN_CONTEXT_TEXT_LENGTH:
            segments_processed_total.labels(outcome="skipped").inc()
            logger.debug("Segment too short for context detection", segment_index=segment.index)
            return SegmentDetectionOutcome(segment_index=segment.index, skipped=True, timeout_ms=timeout_ms)

        start_time = time.time()
        try:
            entities, dropped, attempts = await self._detect_with_retry(segment.text, category, segment.index)
        except DetectionRetryExhausted as e:
            segments_processed_total.labels(outcome="degraded").inc()
            logger.warning(
                "Segment context detection degraded",
                segment_index=segment.index,
                attempts=e.attempts,
                last_error=type(e.last_error).__name__,
            )
            return SegmentDetectionOutcome(
                segment_index=segment.index,
                attempts=e.attempts,
                degraded=True,
                timeout_ms=timeout_ms,
                latency_ms=int((time.time() - start_time) * 1000),
                failures=e.failures,
                error=type(e.last_error).__name__,
            )
        except Exception as e:
            segments_processed_total.labels(outcome="degraded").inc()
            logger.error(
                "Unexpected context detection error",
                segment_index=segment.index,
                error_type=type(e).__name__,
            )
            return SegmentDetectionOutcome(
                segment_index=segment.index,
                attempts=1,
                degraded=True,
                timeout_ms=timeout_ms,
                latency_ms=int((time.time() - start_time) * 1000),
                failures=[{"attempt": 1, "error_type": type(e).__name__}],
                error=type(e).__name__,
            )

        segments_processed_total.labels(outcome="ok").inc()
        return SegmentDetectionOutcome(
            segment_index=segment.index,
            entities=entities,
            attempts=attempts,
            hallucinations_dropped=dropped,
            timeout_ms=timeout_ms,
            latency_ms=int((time.time() - start_time) * 1000),
        )

    async def _detect_with_retry(
        self, text: str, category: str, segment_index: int | None = None
    ) -> tuple[list[Entity], int, int]:
        timeout_ms = self.calculate_timeout_ms(text)
        max_attempts = self.settings.MAX_RETRIES + 1
        failures: list[dict] = []
        last_error: DetectionError | None = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                await asyncio.sleep(self.backoff_seconds(attempt - 1))

            call_start = time.time()
            try:
                candidates = await asyncio.wait_for(
                    self.capability.detect(text, category),
                    timeout=timeout_ms / 1000.0,
                )
            except asyncio.TimeoutError:
                last_error = DetectionTimeoutError(
                    f"Context detection exceeded {timeout_ms}ms",
                    details={"timeout_ms": timeout_ms, "text_length": len(text)},
                )
                outcome = "timeout"
            except PermanentDetectionError as e:
                detection_attempts_total.labels(outcome="permanent").inc()
                context_detection_latency_seconds.labels(success="false").observe(time.time() - call_start)
                failures.append({"attempt": attempt, "error_type": type(e).__name__, **e.details})
                logger.warning(
                    "Permanent context detection failure",
                    segment_index=segment_index,
                    attempt=attempt,
                    error=e.message,
                )
                raise DetectionRetryExhausted(attempt, e, failures) from e
            except MalformedResponseError as e:
                last_error = e
                outcome = "malformed"
            except TransientDetectionError as e:
                last_error = e
                outcome = "transient"
            else:
                detection_attempts_total.labels(outcome="success").inc()
                context_detection_latency_seconds.labels(success="true").observe(time.time() - call_start)

                entities, dropped = verify_candidates(candidates, text)
                if dropped:
                    hallucinated_entities_total.inc(dropped)
                    logger.info(
                        "Dropped hallucinated entities",
                        segment_index=segment_index,
                        dropped=dropped,
                        kept=len(entities),
                    )
                return entities, dropped, attempt

            detection_attempts_total.labels(outcome=outcome).inc()
            context_detection_latency_seconds.labels(success="false").observe(time.time() - call_start)
            failures.append({"attempt": attempt, "error_type": type(last_error).__name__, **last_error.details})
            logger.warning(
                "Context detection attempt failed",
                segment_index=segment_index,
                attempt=attempt,
                max_attempts=max_attempts,
                outcome=outcome,
            )

        raise DetectionRetryExhausted(max_attempts, last_error, failures)
