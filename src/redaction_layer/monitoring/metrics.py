"""Custom Prometheus metrics for the PII Redaction Layer.

Exposition is left to the embedding service (e.g. ``prometheus_client.
start_http_server`` or a framework instrumentator). Alert rules should be
configured for:
- redaction_runs_total{outcome="degraded"} (capability unreachable)
- segments_processed_total{outcome="degraded"} (partial degradation)
- hallucinated_entities_total (prompt or model drift)
"""

from prometheus_client import Counter, Histogram

# === Pipeline Metrics ===

redaction_runs_total = Counter(
    "redaction_runs_total",
    "Total redaction runs by path and outcome",
    ["path", "outcome"],
)
"""
Redaction runs counter.

Labels:
- path: short_path, chunked, skipped
- outcome: done, degraded, error

Alert thresholds:
- WARN: degraded rate > 1% of runs
- CRITICAL: degraded rate > 10% of runs (capability outage)
"""

redaction_duration_seconds = Histogram(
    "redaction_duration_seconds",
    "End-to-end redaction latency in seconds",
    ["path"],
    buckets=[0.01, 0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0],
)

# === Segment / Context Detection Metrics ===

segments_processed_total = Counter(
    "segments_processed_total",
    "Segments processed by the context detector, by outcome",
    ["outcome"],
)
"""
Labels:
- outcome: ok, degraded, skipped
"""

detection_attempts_total = Counter(
    "detection_attempts_total",
    "Context detection calls by outcome",
    ["outcome"],
)
"""
Labels:
- outcome: success, timeout, transient, malformed, permanent
"""

hallucinated_entities_total = Counter(
    "hallucinated_entities_total",
    "Entities dropped because their text did not match the claimed offsets",
)

context_detection_latency_seconds = Histogram(
    "context_detection_latency_seconds",
    "Latency of a single context detection call in seconds",
    ["success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
)

entities_detected_total = Counter(
    "entities_detected_total",
    "Entities surviving reconciliation, by type and source",
    ["type", "source"],
)

# === LLM Performance Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "LLM generation latency in seconds",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
LLM generation latency histogram.

Labels:
- model: Model name (e.g., qwen2.5:7b, gpt-4o-mini)
- success: true (generation succeeded), false (generation failed)

Alert thresholds:
- WARN: p95 > 30s
- CRITICAL: p95 > 60s
"""

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Token consumption counter.

Labels:
- model: Model name
- token_type: prompt (input tokens), completion (output tokens)

Used for cost estimation per provider and model.
"""
