"""Application use cases."""

from .reconcile_registration import ReconcileRegistration, ReconciliationResult

__all__ = ["ReconcileRegistration", "ReconciliationResult"]
