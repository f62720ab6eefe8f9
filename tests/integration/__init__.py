"""
Integration tests for the PII Redaction Layer.

Test components together or against real external services:
- End-to-end pipeline scenarios with an in-memory capability
- Ollama capability and pipeline (real calls, skipped when unreachable)
"""
