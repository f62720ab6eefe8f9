"""
Entity data models.

CandidateEntity is what the external capability claims; Entity is what
survived the hallucination guard and carries verified offsets.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from redaction_layer.models.enums import EntitySource, EntityType


class CandidateEntity(BaseModel):
    """
    Unverified finding returned by a text-analysis capability.

    Offsets are local to the analysed text and may be wrong; nothing is
    trusted until ``ContextDetector`` checks the claimed text against the
    segment.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    type: EntityType
    start: int
    end: int
    confidence: float = Field(default=0.9, ge=0.0, le=1.0)


class Entity(BaseModel):
    """
    A verified span of PII.

    Invariant: ``0 <= start < end`` and ``end - start == len(text)``. After
    reconciliation offsets are document-global and
    ``document.text[start:end] == text``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str = Field(..., min_length=1, description="Exact matched text")
    type: EntityType = Field(..., description="PII type")
    start: int = Field(..., ge=0, description="Start offset (inclusive)")
    end: int = Field(..., gt=0, description="End offset (exclusive)")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Detection confidence")
    source: EntitySource = Field(..., description="Detector that produced the entity")

    @model_validator(mode="after")
    def _check_span(self) -> "Entity":
        if self.start >= self.end:
            raise ValueError(f"start ({self.start}) must be < end ({self.end})")
        if self.end - self.start != len(self.text):
            raise ValueError("span length does not match entity text length")
        return self

    @property
    def length(self) -> int:
        return self.end - self.start

    def shifted(self, offset: int) -> "Entity":
        """Return a copy moved by ``offset`` characters."""
        return self.model_copy(update={"start": self.start + offset, "end": self.end + offset})

    def overlap_with(self, other: "Entity") -> int:
        """Number of characters shared with ``other`` (0 when disjoint)."""
        return max(0, min(self.end, other.end) - max(self.start, other.start))
