"""Cross-segment entity reconciliation."""

from redaction_layer.reconciliation.reconciler import EntityReconciler, ReconciliationResult

__all__ = ["EntityReconciler", "ReconciliationResult"]
