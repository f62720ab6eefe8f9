"""
Output data models for the PII Redaction Layer.

Field names are snake_case in Python; ``model_dump(by_alias=True)`` yields
the camelCase wire contract (sanitizedText, byType, segmentCount, ...).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from redaction_layer.models.entity_models import Entity
from redaction_layer.models.enums import PipelineState


class RedactionStats(BaseModel):
    """Run statistics for one redaction call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    by_type: dict[str, int] = Field(default_factory=dict, description="Entity count per type")
    by_source: dict[str, int] = Field(default_factory=dict, description="Entity count per detector")
    segment_count: int = Field(default=0, ge=0)
    degraded_segments: int = Field(default=0, ge=0)
    elapsed_ms: int = Field(default=0, ge=0)
    hallucinations_dropped: int = Field(default=0, ge=0)
    retries: int = Field(default=0, ge=0, description="Context calls beyond the first, summed over segments")
    conflicts_resolved: int = Field(default=0, ge=0)
    characters_redacted: int = Field(default=0, ge=0)
    path: str = Field(default="short_path", description="short_path, chunked or skipped")
    state: PipelineState = Field(default=PipelineState.RECEIVED)


class RedactionResult(BaseModel):
    """
    Complete redaction result.

    When ``degraded`` is true ``sanitized_text`` is the original, unredacted
    text; callers decide whether to block or proceed.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sanitized_text: str
    entities: list[Entity] = Field(default_factory=list)
    stats: RedactionStats = Field(default_factory=RedactionStats)
    degraded: bool = False
    warnings: list[str] = Field(default_factory=list)
    error: Optional[str] = None
