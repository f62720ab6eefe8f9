"""Pipeline orchestration."""

from redaction_layer.pipeline.orchestrator import RedactionPipeline

__all__ = ["RedactionPipeline"]
