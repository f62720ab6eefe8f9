"""Placeholder substitution and audit records."""

from redaction_layer.redaction.audit import build_audit_record
from redaction_layer.redaction.redactor import RedactionRegion, Redactor, mask_value

__all__ = ["Redactor", "RedactionRegion", "mask_value", "build_audit_record"]
