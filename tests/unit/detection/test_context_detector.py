"""
Unit tests for ContextDetector.

Covers adaptive timeout, retry policy, hallucination guard and the
never-raising per-segment entry point.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from redaction_layer.detection.context_detector import ContextDetector, verify_candidates
from redaction_layer.detection.exceptions import (
    DetectionRetryExhausted,
    MalformedResponseError,
    PermanentDetectionError,
    TransientDetectionError,
)
from redaction_layer.models.document_models import Segment
from redaction_layer.models.entity_models import CandidateEntity
from redaction_layer.models.enums import EntitySource, EntityType


TEXT = "Yesterday Sarah Johnson shared his report with the team at Google."


def make_segment(text: str = TEXT, index: int = 0, start: int = 0) -> Segment:
    return Segment(index=index, start_offset=start, end_offset=start + len(text), text=text)


def always_raise(exc):
    def handler(text, category):
        raise exc

    return handler


def scripted(*steps):
    """Handler that raises or returns the next scripted step on each call."""
    remaining = list(steps)

    def handler(text, category):
        step = remaining.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    return handler


class TestAdaptiveTimeout:

    @pytest.fixture
    def detector(self, make_settings, fake_capability_class):
        settings = make_settings(BASE_TIMEOUT_MS=30000, TIMEOUT_PER_KB_MS=10000, MAX_TIMEOUT_MS=600000)
        return ContextDetector(fake_capability_class(), settings)

    @pytest.mark.parametrize(
        "length,expected",
        [(0, 30000), (1000, 40000), (5000, 80000), (2500, 55000), (100000, 600000)],
    )
    def test_formula(self, detector, length, expected):
        assert detector.calculate_timeout_ms("x" * length) == expected

    def test_disabled_uses_max(self, make_settings, fake_capability_class):
        settings = make_settings(ENABLE_ADAPTIVE_TIMEOUT=False, MAX_TIMEOUT_MS=4000)
        detector = ContextDetector(fake_capability_class(), settings)

        assert detector.calculate_timeout_ms("x" * 10) == 4000

    def test_backoff_is_exponential(self, make_settings, fake_capability_class):
        detector = ContextDetector(fake_capability_class(), make_settings(RETRY_BACKOFF_BASE_MS=1000))

        assert [detector.backoff_seconds(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]


class TestHallucinationGuard:

    def test_keeps_exact_match(self):
        start = TEXT.index("Sarah Johnson")
        candidate = CandidateEntity(text="Sarah Johnson", type=EntityType.NAME, start=start, end=start + 13)

        entities, dropped = verify_candidates([candidate], TEXT)

        assert dropped == 0
        assert entities[0].source == EntitySource.CONTEXT
        assert TEXT[entities[0].start:entities[0].end] == "Sarah Johnson"

    def test_drops_text_mismatch(self):
        start = TEXT.index("his report")
        candidate = CandidateEntity(text="Jane Doe", type=EntityType.NAME, start=start, end=start + 8)

        entities, dropped = verify_candidates([candidate], TEXT)

        assert entities == []
        assert dropped == 1

    @pytest.mark.parametrize("start,end", [(-1, 4), (5, 5), (10, 3), (len(TEXT) - 2, len(TEXT) + 3)])
    def test_drops_invalid_offsets(self, start, end):
        candidate = CandidateEntity(text="Sarah", type=EntityType.NAME, start=start, end=end)

        entities, dropped = verify_candidates([candidate], TEXT)

        assert entities == []
        assert dropped == 1


class TestDetect:

    @pytest.mark.asyncio
    async def test_returns_verified_local_entities(self, test_settings, fake_capability_class, term_finder):
        capability = fake_capability_class(term_finder({"Sarah Johnson": EntityType.NAME, "Google": EntityType.EMPLOYER}))
        detector = ContextDetector(capability, test_settings)

        entities = await detector.detect(TEXT, "transcript")

        assert {(e.text, e.type) for e in entities} == {
            ("Sarah Johnson", EntityType.NAME),
            ("Google", EntityType.EMPLOYER),
        }
        assert capability.calls == [(TEXT, "transcript")]

    @pytest.mark.asyncio
    async def test_hallucinated_entity_is_dropped(self, test_settings, fake_capability_class):
        start = TEXT.index("his report")
        capability = fake_capability_class(
            lambda text, category: [CandidateEntity(text="Jane Doe", type=EntityType.NAME, start=start, end=start + 8)]
        )
        detector = ContextDetector(capability, test_settings)

        outcome = await detector.detect_segment(make_segment())

        assert outcome.entities == []
        assert outcome.hallucinations_dropped == 1
        assert not outcome.degraded

    @pytest.mark.asyncio
    async def test_retries_transient_then_succeeds(self, test_settings, fake_capability_class):
        capability = fake_capability_class(scripted(TransientDetectionError("503"), []))
        detector = ContextDetector(capability, test_settings)

        outcome = await detector.detect_segment(make_segment())

        assert outcome.succeeded
        assert outcome.attempts == 2
        assert outcome.retries == 1
        assert len(capability.calls) == 2

    @pytest.mark.asyncio
    async def test_retries_malformed_response(self, test_settings, fake_capability_class):
        capability = fake_capability_class(scripted(MalformedResponseError("bad json"), MalformedResponseError("bad"), []))
        detector = ContextDetector(capability, test_settings)

        outcome = await detector.detect_segment(make_segment())

        assert outcome.succeeded
        assert outcome.attempts == 3

    @pytest.mark.asyncio
    async def test_exhaustion_degrades_segment(self, test_settings, fake_capability_class):
        capability = fake_capability_class(always_raise(TransientDetectionError("down")))
        detector = ContextDetector(capability, test_settings)

        outcome = await detector.detect_segment(make_segment(index=3))

        assert outcome.degraded
        assert outcome.segment_index == 3
        assert outcome.attempts == test_settings.MAX_RETRIES + 1
        assert outcome.error == "TransientDetectionError"
        assert len(outcome.failures) == 3
        assert outcome.entities == []

    @pytest.mark.asyncio
    async def test_detect_raises_on_exhaustion(self, make_settings, fake_capability_class):
        capability = fake_capability_class(scripted(TransientDetectionError("a"), TransientDetectionError("b")))
        detector = ContextDetector(capability, make_settings(MAX_RETRIES=1))

        with pytest.raises(DetectionRetryExhausted) as exc_info:
            await detector.detect(TEXT)

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.last_error, TransientDetectionError)

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self, test_settings, fake_capability_class):
        capability = fake_capability_class(scripted(PermanentDetectionError("401")))
        detector = ContextDetector(capability, test_settings)

        outcome = await detector.detect_segment(make_segment())

        assert outcome.degraded
        assert outcome.attempts == 1
        assert outcome.error == "PermanentDetectionError"
        assert len(capability.calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_cancels_call_and_retries(self, make_settings, fake_capability_class):
        settings = make_settings(BASE_TIMEOUT_MS=50, TIMEOUT_PER_KB_MS=0, MAX_TIMEOUT_MS=50, MAX_RETRIES=1)

        async def slow(text, category):
            await asyncio.sleep(5)
            return []

        capability = fake_capability_class(slow)
        detector = ContextDetector(capability, settings)

        outcome = await detector.detect_segment(make_segment())

        assert outcome.degraded
        assert outcome.attempts == 2
        assert outcome.error == "DetectionTimeoutError"
        assert outcome.timeout_ms == 50
        assert all(f["error_type"] == "DetectionTimeoutError" for f in outcome.failures)

    @pytest.mark.asyncio
    async def test_backoff_sleeps_between_attempts(self, make_settings, fake_capability_class):
        settings = make_settings(RETRY_BACKOFF_BASE_MS=1000, MAX_RETRIES=2)
        capability = fake_capability_class(
            scripted(TransientDetectionError("a"), TransientDetectionError("b"), TransientDetectionError("c"))
        )
        detector = ContextDetector(capability, settings)

        with patch("redaction_layer.detection.context_detector.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            outcome = await detector.detect_segment(make_segment())

        assert outcome.degraded
        assert [call.args[0] for call in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_short_segment_is_skipped(self, make_settings, fake_capability_class):
        capability = fake_capability_class()
        detector = ContextDetector(capability, make_settings(MIN_CONTEXT_TEXT_LENGTH=20))

        outcome = await detector.detect_segment(make_segment("  Hi Sam.  "))

        assert outcome.skipped
        assert not outcome.degraded
        assert outcome.attempts == 0
        assert capability.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_error_degrades_without_raising(self, test_settings, fake_capability_class):
        capability = fake_capability_class(scripted(RuntimeError("boom")))
        detector = ContextDetector(capability, test_settings)

        outcome = await detector.detect_segment(make_segment())

        assert outcome.degraded
        assert outcome.error == "RuntimeError"
