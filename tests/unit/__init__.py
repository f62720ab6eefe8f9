"""
Unit tests for the PII Redaction Layer.

Test individual components in isolation:
- Data models and settings (validation, constraints, camelCase dump)
- Segmenter (boundaries, offsets, overlap)
- Pattern and context detectors (timeout, retry, hallucination guard)
- Reconciler and redactor (dedup, conflicts, offset safety)
- Pipeline orchestrator and CLI
- LLM clients (httpx.MockTransport) and prompt builder
"""
