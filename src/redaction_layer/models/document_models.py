"""
Input data models: the document to redact and the segments cut from it.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Document(BaseModel):
    """
    Immutable redaction input.

    The category tag (transcript, assessment, blog_post, ...) is passed
    through to the context detection prompt so the capability knows which
    domain vocabulary is not PII.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str = Field(..., description="Raw document text")
    category: str = Field(default="unknown", description="Category tag used in detection prompts")

    @property
    def length(self) -> int:
        return len(self.text)


class Segment(BaseModel):
    """
    A bounded slice of a Document.

    Offsets are document-relative; ``text == document.text[start_offset:end_offset]``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int = Field(..., ge=0, description="Position in the segment sequence")
    start_offset: int = Field(..., ge=0)
    end_offset: int = Field(..., ge=0)
    text: str

    @model_validator(mode="after")
    def _check_offsets(self) -> "Segment":
        if self.end_offset < self.start_offset:
            raise ValueError("end_offset must be >= start_offset")
        if self.end_offset - self.start_offset != len(self.text):
            raise ValueError("segment text length does not match its offsets")
        return self

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset
