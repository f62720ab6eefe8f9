"""Monitoring and metrics instrumentation for the PII Redaction Layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from redaction_layer.monitoring.metrics import (
    context_detection_latency_seconds,
    detection_attempts_total,
    entities_detected_total,
    hallucinated_entities_total,
    llm_latency_seconds,
    llm_tokens_total,
    redaction_duration_seconds,
    redaction_runs_total,
    segments_processed_total,
)

__all__ = [
    "redaction_runs_total",
    "redaction_duration_seconds",
    "segments_processed_total",
    "detection_attempts_total",
    "hallucinated_entities_total",
    "context_detection_latency_seconds",
    "entities_detected_total",
    "llm_latency_seconds",
    "llm_tokens_total",
]
