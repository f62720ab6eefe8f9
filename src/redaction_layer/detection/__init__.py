"""Pattern and context PII detection."""

from redaction_layer.detection.capability import (
    LLMTextAnalysisCapability,
    TextAnalysisCapability,
    build_capability,
)
from redaction_layer.detection.context_detector import ContextDetector, verify_candidates
from redaction_layer.detection.exceptions import (
    DetectionError,
    DetectionRetryExhausted,
    DetectionTimeoutError,
    MalformedResponseError,
    PermanentDetectionError,
    TransientDetectionError,
)
from redaction_layer.detection.outcome import SegmentDetectionOutcome
from redaction_layer.detection.patterns import DEFAULT_PATTERNS, PatternDetector, PiiPattern, is_luhn_valid
from redaction_layer.detection.response_parser import ENTITY_RESPONSE_SCHEMA, ResponseParser

__all__ = [
    "ContextDetector",
    "verify_candidates",
    "TextAnalysisCapability",
    "LLMTextAnalysisCapability",
    "build_capability",
    "SegmentDetectionOutcome",
    "PatternDetector",
    "PiiPattern",
    "DEFAULT_PATTERNS",
    "is_luhn_valid",
    "ResponseParser",
    "ENTITY_RESPONSE_SCHEMA",
    "DetectionError",
    "TransientDetectionError",
    "DetectionTimeoutError",
    "PermanentDetectionError",
    "MalformedResponseError",
    "DetectionRetryExhausted",
]
