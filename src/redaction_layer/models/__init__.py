"""
Pydantic data models for the PII Redaction Layer.

Includes:
- Enums (EntityType, EntitySource, PipelineState, RedactionStrategyEnum)
- Input models (Document, Segment)
- Entity models (CandidateEntity, Entity)
- Output models (RedactionStats, RedactionResult)
- LLM models (LLMGenerationRequest, LLMGenerationResponse)
"""

from redaction_layer.models.enums import (
    EntitySource,
    EntityType,
    PipelineState,
    RedactionStrategyEnum,
)
from redaction_layer.models.document_models import Document, Segment
from redaction_layer.models.entity_models import CandidateEntity, Entity
from redaction_layer.models.result_models import RedactionResult, RedactionStats
from redaction_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse

__all__ = [
    # Enums
    "EntityType",
    "EntitySource",
    "PipelineState",
    "RedactionStrategyEnum",
    # Input models
    "Document",
    "Segment",
    # Entity models
    "CandidateEntity",
    "Entity",
    # Output models
    "RedactionStats",
    "RedactionResult",
    # LLM models
    "LLMGenerationRequest",
    "LLMGenerationResponse",
]
