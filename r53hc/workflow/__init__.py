"""Reconciliation workflows (single health check, whole manifest)."""

from r53hc.workflow.reconcile import (
    Reconciler,
    ReconcileOutcome,
    ReconcileResult,
    new_creation_token,
)
from r53hc.workflow.run import (
    EXIT_AWS_FAILURE,
    EXIT_DRIFT,
    EXIT_IMMUTABLE_CONFLICT,
    EXIT_SUCCESS,
    EXIT_VALIDATION_FAILURE,
    reconcile_specs,
    run_delete,
    run_manifest,
)

__all__ = [
    "EXIT_AWS_FAILURE",
    "EXIT_DRIFT",
    "EXIT_IMMUTABLE_CONFLICT",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_FAILURE",
    "ReconcileOutcome",
    "ReconcileResult",
    "Reconciler",
    "new_creation_token",
    "reconcile_specs",
    "run_delete",
    "run_manifest",
]
