"""
Redaction pipeline orchestrator.

Drives one document through the state machine:

    received -> (short_path | chunked) -> reconciling -> redacting -> done
                                                      \\-> degraded

Short path: segmentation disabled or text shorter than CHUNK_THRESHOLD; the
whole document is one segment. Chunked path: the Segmenter cuts the
document and context detection fans out over segments, bounded by an
asyncio.Semaphore of MAX_CONCURRENT_SEGMENTS.

``redact`` never raises. Failures are reported in the result:
- some segments failed: partial result, stats.degraded_segments > 0
- every attempted segment failed: original text, degraded=True, pattern
  findings listed but not applied
- unexpected exception: original text, degraded=True, error set

Usage:
    async with RedactionPipeline(settings) as pipeline:
        result = await pipeline.redact(text, category="transcript")
"""

import asyncio
import time
from collections import Counter
from typing import Optional

import structlog

from redaction_layer.config import Settings
from redaction_layer.detection.capability import TextAnalysisCapability, build_capability
from redaction_layer.detection.context_detector import ContextDetector
from redaction_layer.detection.outcome import SegmentDetectionOutcome
from redaction_layer.detection.patterns import PatternDetector
from redaction_layer.models.document_models import Document, Segment
from redaction_layer.models.entity_models import Entity
from redaction_layer.models.enums import PipelineState
from redaction_layer.models.result_models import RedactionResult, RedactionStats
from redaction_layer.monitoring.metrics import (
    entities_detected_total,
    redaction_duration_seconds,
    redaction_runs_total,
)
from redaction_layer.reconciliation.reconciler import EntityReconciler
from redaction_layer.redaction.audit import build_audit_record
from redaction_layer.redaction.redactor import Redactor
from redaction_layer.segmentation.segmenter import Segmenter


logger = structlog.get_logger(__name__)

DEGRADED_WARNING = "context detection failed for every segment; text returned unredacted"


def _count_by(entities: list[Entity], attr: str) -> dict[str, int]:
    return dict(Counter(getattr(e, attr).value for e in entities))


class RedactionPipeline:
    """
    End-to-end PII redaction for one document at a time.

    Components are injectable; anything not supplied is built from
    ``settings``. The capability is only built when context detection is
    enabled. Holds no per-document state, so concurrent ``redact`` calls
    on one instance are safe.
    """

    def __init__(
        self,
        settings: Settings,
        capability: Optional[TextAnalysisCapability] = None,
        segmenter: Optional[Segmenter] = None,
        pattern_detector: Optional[PatternDetector] = None,
        reconciler: Optional[EntityReconciler] = None,
        redactor: Optional[Redactor] = None,
    ):
        self.settings = settings
        self.segmenter = segmenter or Segmenter(settings)
        self.pattern_detector = pattern_detector or PatternDetector(settings)
        self.reconciler = reconciler or EntityReconciler(settings)
        self.redactor = redactor or Redactor(settings)

        if capability is None and settings.ENABLE_CONTEXT_DETECTION:
            capability = build_capability(settings)
        self.capability = capability
        self.context_detector = ContextDetector(capability, settings) if capability else None

        logger.info(
            "RedactionPipeline initialized",
            segmentation=settings.ENABLE_SEGMENTATION,
            pattern_detection=settings.ENABLE_PATTERN_DETECTION,
            context_detection=self.context_detector is not None,
            max_concurrent_segments=settings.MAX_CONCURRENT_SEGMENTS,
            strategy=settings.REDACTION_STRATEGY,
        )

    async def redact_document(self, document: Document) -> RedactionResult:
        return await self.redact(document.text, document.category)

    async def redact(self, text: str, category: str = "unknown") -> RedactionResult:
        """
        Redact PII from ``text``.

        Args:
            text: Raw document text; non-string input is treated as ""
            category: Category tag passed to the context detection prompt

        Returns:
            RedactionResult; never raises
        """
        start_time = time.time()
        if not isinstance(text, str):
            logger.warning("Non-string input coerced to empty text", input_type=type(text).__name__)
            text = ""
        category = category or "unknown"

        try:
            result = await self._run(text, category, start_time)
            outcome = "degraded" if result.degraded else "done"
        except Exception as e:
            logger.error(
                "Redaction pipeline failed",
                error_type=type(e).__name__,
                document_length=len(text),
                exc_info=True,
            )
            result = RedactionResult(
                sanitized_text=text,
                stats=RedactionStats(
                    elapsed_ms=int((time.time() - start_time) * 1000),
                    state=PipelineState.DEGRADED,
                    path=self._choose_path(text),
                ),
                degraded=True,
                error=type(e).__name__,
                warnings=[f"redaction pipeline error: {type(e).__name__}"],
            )
            outcome = "error"

        redaction_runs_total.labels(path=result.stats.path, outcome=outcome).inc()
        redaction_duration_seconds.labels(path=result.stats.path).observe(time.time() - start_time)
        logger.info("Redaction audit", audit=build_audit_record(result, category, len(text)))
        return result

    def _choose_path(self, text: str) -> str:
        if not text:
            return "skipped"
        if not self.settings.ENABLE_SEGMENTATION or len(text) < self.settings.CHUNK_THRESHOLD:
            return PipelineState.SHORT_PATH.value
        return PipelineState.CHUNKED.value

    async def _run(self, text: str, category: str, start_time: float) -> RedactionResult:
        state = PipelineState.RECEIVED
        logger.debug("Pipeline state", state=state.value, document_length=len(text))
        path = self._choose_path(text)

        if path == "skipped":
            return RedactionResult(
                sanitized_text=text,
                stats=RedactionStats(path=path, state=PipelineState.DONE),
            )

        if path == PipelineState.SHORT_PATH.value:
            state = PipelineState.SHORT_PATH
            segments = [Segment(index=0, start_offset=0, end_offset=len(text), text=text)]
        else:
            state = PipelineState.CHUNKED
            segments = self.segmenter.segment(text)

        logger.debug("Pipeline state", state=state.value, segments=len(segments), document_length=len(text))

        pattern_entities: list[Entity] = []
        if self.settings.ENABLE_PATTERN_DETECTION:
            pattern_entities = self.pattern_detector.detect(text)

        outcomes: list[SegmentDetectionOutcome] = []
        if self.context_detector is not None and self.settings.ENABLE_CONTEXT_DETECTION:
            outcomes = await self._detect_segments(segments, category)

        attempted = [o for o in outcomes if o.attempted]
        failed = [o for o in attempted if o.degraded]
        retries = sum(o.retries for o in outcomes)
        segment_hallucinations = sum(o.hallucinations_dropped for o in outcomes)

        if attempted and len(failed) == len(attempted):
            logger.warning(
                "Context detection failed for every segment",
                segments=len(segments),
                attempted=len(attempted),
            )
            return RedactionResult(
                sanitized_text=text,
                entities=pattern_entities,
                stats=RedactionStats(
                    by_type=_count_by(pattern_entities, "type"),
                    by_source=_count_by(pattern_entities, "source"),
                    segment_count=len(segments),
                    degraded_segments=len(failed),
                    elapsed_ms=int((time.time() - start_time) * 1000),
                    hallucinations_dropped=segment_hallucinations,
                    retries=retries,
                    path=path,
                    state=PipelineState.DEGRADED,
                ),
                degraded=True,
                warnings=[DEGRADED_WARNING],
            )

        state = PipelineState.RECONCILING
        logger.debug("Pipeline state", state=state.value)
        if outcomes:
            per_segment = [o.entities for o in outcomes]
        else:
            per_segment = [[] for _ in segments]
        reconciled = self.reconciler.reconcile(segments, per_segment, pattern_entities, document_text=text)
        entities = reconciled.entities

        state = PipelineState.REDACTING
        logger.debug("Pipeline state", state=state.value, entities=len(entities))
        sanitized, regions = self.redactor.redact_with_regions(text, entities)

        warnings = [
            f"context detection degraded for segment {o.segment_index} ({o.error})" for o in failed
        ]
        warnings.extend(self.redactor.verify(sanitized, entities))

        for entity in entities:
            entities_detected_total.labels(type=entity.type.value, source=entity.source.value).inc()

        state = PipelineState.DONE
        logger.debug("Pipeline state", state=state.value)
        stats = RedactionStats(
            by_type=_count_by(entities, "type"),
            by_source=_count_by(entities, "source"),
            segment_count=len(segments),
            degraded_segments=len(failed),
            elapsed_ms=int((time.time() - start_time) * 1000),
            hallucinations_dropped=segment_hallucinations + reconciled.hallucinations_dropped,
            retries=retries,
            conflicts_resolved=reconciled.conflicts_resolved,
            characters_redacted=sum(r.length for r in regions),
            path=path,
            state=state,
        )

        logger.info(
            "Redaction complete",
            path=path,
            segments=len(segments),
            entities=len(entities),
            degraded_segments=len(failed),
            elapsed_ms=stats.elapsed_ms,
        )
        return RedactionResult(sanitized_text=sanitized, entities=entities, stats=stats, warnings=warnings)

    async def _detect_segments(self, segments: list[Segment], category: str) -> list[SegmentDetectionOutcome]:
        """Fan out context detection with bounded concurrency, one result slot per segment."""
        semaphore = asyncio.Semaphore(self.settings.MAX_CONCURRENT_SEGMENTS)
        results: list[Optional[SegmentDetectionOutcome]] = [None] * len(segments)

        async def run(position: int, segment: Segment) -> None:
            async with semaphore:
                results[position] = await self.context_detector.detect_segment(segment, category)

        await asyncio.gather(*(run(i, s) for i, s in enumerate(segments)))
        return results

    async def health_check(self) -> bool:
        if self.capability is None:
            return True
        return await self.capability.health_check()

    async def close(self) -> None:
        if self.capability is not None:
            await self.capability.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
