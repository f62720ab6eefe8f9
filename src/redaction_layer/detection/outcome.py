"""
Per-segment context detection outcome.

The orchestrator collects one outcome per segment and uses them to decide
between a normal and a degraded result.
"""

from dataclasses import dataclass, field

from redaction_layer.models.entity_models import Entity


@dataclass(frozen=True)
class SegmentDetectionOutcome:
    """
    Result of running context detection on one segment.

    Attributes:
        segment_index: Index of the segment in document order
        entities: Verified entities, offsets local to the segment text
        attempts: Number of capability calls made
        degraded: True when every attempt failed
        hallucinations_dropped: Candidates rejected by the offset check
        timeout_ms: Per-call timeout applied to this segment
        latency_ms: Wall time spent on the segment, retries included
        failures: Details dict of every failed attempt
        skipped: True when the segment was too short and no call was made
        error: Name of the final error class when degraded
    """

    segment_index: int
    entities: list[Entity] = field(default_factory=list)
    attempts: int = 0
    degraded: bool = False
    hallucinations_dropped: int = 0
    timeout_ms: int = 0
    latency_ms: int = 0
    failures: list[dict] = field(default_factory=list)
    skipped: bool = False
    error: str | None = None

    def __post_init__(self) -> None:
        if self.segment_index < 0:
            raise ValueError("segment_index must be >= 0")
        if self.skipped and (self.attempts or self.degraded):
            raise ValueError("a skipped segment makes no attempts and cannot degrade")
        if not self.skipped and self.attempts < 1:
            raise ValueError("an attempted segment must record at least one attempt")
        if self.degraded and self.entities:
            raise ValueError("a degraded segment carries no entities")

    @property
    def attempted(self) -> bool:
        return not self.skipped

    @property
    def succeeded(self) -> bool:
        return not self.skipped and not self.degraded

    @property
    def retries(self) -> int:
        return max(0, self.attempts - 1)
