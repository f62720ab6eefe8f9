"""
PII Redaction Layer for long coaching documents.

Transforms raw documents into sanitized text plus an auditable entity list:
- Overlapping, boundary-aware segmentation
- Regex detection of lexical PII (email, phone, ID and card numbers)
- LLM-backed context detection with adaptive timeout, retry and a
  hallucination guard
- Cross-segment reconciliation and offset-safe redaction

Architecture: asyncio orchestrator + Ollama/OpenAI-compatible inference +
schema-validated structured output
"""

__version__ = "0.1.0"
