"""
Audit records for redaction runs.

A record describes what was found and how much text changed, never the
values themselves: types, sources, confidences, positions and lengths only.
"""

from datetime import datetime, timezone
from typing import Any

from redaction_layer.models.result_models import RedactionResult


def _confidence_stats(confidences: list[float]) -> dict[str, float]:
    if not confidences:
        return {"min": 0.0, "max": 0.0, "average": 0.0}
    return {
        "min": round(min(confidences), 3),
        "max": round(max(confidences), 3),
        "average": round(sum(confidences) / len(confidences), 3),
    }


def build_audit_record(
    result: RedactionResult,
    category: str,
    original_length: int,
    include_entity_details: bool = False,
) -> dict[str, Any]:
    """
    Build a PII-free audit record for one redaction run.

    Args:
        result: Pipeline result
        category: Document category
        original_length: Length of the input text
        include_entity_details: Add per-entity type/position/length rows

    Returns:
        JSON-serializable dict suitable for structured logging
    """
    stats = result.stats
    entities = result.entities
    redacted_length = len(result.sanitized_text)

    record: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "category": category,
        "path": stats.path,
        "state": stats.state.value,
        "degraded": result.degraded,
        "error": result.error,
        "entities": {
            "total": len(entities),
            "by_type": dict(stats.by_type),
            "by_source": dict(stats.by_source),
            "confidence": _confidence_stats([e.confidence for e in entities]),
        },
        "segments": {
            "count": stats.segment_count,
            "degraded": stats.degraded_segments,
            "retries": stats.retries,
            "hallucinations_dropped": stats.hallucinations_dropped,
        },
        "text_stats": {
            "original_length": original_length,
            "redacted_length": redacted_length,
            "characters_redacted": stats.characters_redacted,
            "redaction_percentage": (
                round(100.0 * stats.characters_redacted / original_length, 2) if original_length else 0.0
            ),
        },
        "elapsed_ms": stats.elapsed_ms,
        "warnings": len(result.warnings),
    }

    if include_entity_details and entities:
        record["entity_details"] = [
            {
                "type": e.type.value,
                "source": e.source.value,
                "start": e.start,
                "length": e.length,
                "confidence": e.confidence,
            }
            for e in entities
        ]

    return record
