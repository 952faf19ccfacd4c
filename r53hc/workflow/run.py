"""Manifest runner: reconcile every declared health check and pick an exit code.

Execution model:

1. **Load** -- parse the manifest and validate every entry.  Any invalid
   entry aborts before a single AWS call is made.
2. **Reconcile** -- run each entry's action in file order.  A failing entry
   with ``fail_on_error: true`` stops the run; otherwise the failure is
   reported and the next entry proceeds.
3. **Report** -- the most severe outcome becomes the exit code.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from r53hc import ui
from r53hc.aws.context import AWSContext
from r53hc.aws.route53 import HealthCheckClient, Route53HealthCheckClient
from r53hc.config.manifest import load_manifest
from r53hc.config.models import AwsCredentials, HealthCheckSpec
from r53hc.errors import (
    ConfigurationError,
    IdentityStoreError,
    ImmutableFieldConflict,
    TransportError,
)
from r53hc.state.store import IdentityStore, JsonIdentityStore
from r53hc.workflow.reconcile import Reconciler, ReconcileOutcome, ReconcileResult

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_VALIDATION_FAILURE = 1
EXIT_AWS_FAILURE = 2
EXIT_DRIFT = 3
EXIT_IMMUTABLE_CONFLICT = 4

# Lowest to highest; the run reports the highest seen.
_SEVERITY: List[int] = [
    EXIT_SUCCESS,
    EXIT_DRIFT,
    EXIT_VALIDATION_FAILURE,
    EXIT_AWS_FAILURE,
    EXIT_IMMUTABLE_CONFLICT,
]

ClientFactory = Callable[[AwsCredentials], HealthCheckClient]


def worst(*codes: int) -> int:
    """Return the most severe of *codes*."""
    return max(codes, key=_SEVERITY.index, default=EXIT_SUCCESS)


def exit_code_for_error(exc: BaseException) -> int:
    """Map a reconcile failure to the appropriate exit code."""
    if isinstance(exc, ImmutableFieldConflict):
        return EXIT_IMMUTABLE_CONFLICT
    if isinstance(exc, (TransportError, RuntimeError)):
        return EXIT_AWS_FAILURE
    if isinstance(exc, ConfigurationError):
        # Stale identity: the store and Route 53 disagree.
        return EXIT_AWS_FAILURE
    return EXIT_VALIDATION_FAILURE


# ---------------------------------------------------------------------------
# Client construction
# ---------------------------------------------------------------------------


def route53_client_factory(creds: AwsCredentials) -> HealthCheckClient:
    """Default :data:`ClientFactory`: boto3 session -> Route 53 adapter."""
    ctx = AWSContext.from_credentials(creds)
    return Route53HealthCheckClient.from_context(ctx)


class _ClientCache:
    """One client per distinct credential bundle."""

    def __init__(self, factory: ClientFactory) -> None:
        self._factory = factory
        self._clients: Dict[AwsCredentials, HealthCheckClient] = {}

    def get(self, creds: AwsCredentials) -> HealthCheckClient:
        if creds not in self._clients:
            self._clients[creds] = self._factory(creds)
        return self._clients[creds]


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def report_result(result: ReconcileResult) -> None:
    """Print one reconcile result to the console."""
    label = f"{result.name} ({result.remote_id})" if result.remote_id else result.name
    kind = result.outcome.value
    if result.outcome == ReconcileOutcome.PLANNED:
        ui.outcome(kind, label, f"would {result.planned}" if result.planned else "")
    elif result.outcome == ReconcileOutcome.SKIPPED:
        ui.outcome(kind, label, "; ".join(result.messages))
    else:
        ui.outcome(kind, label)
        for msg in result.messages:
            ui.note(msg)
    ui.field_changes(result.changed_fields)
    if result.tag_error:
        ui.warning(f"tagging failed: {result.tag_error}")


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------


def reconcile_specs(
    specs: Iterable[HealthCheckSpec],
    *,
    store: IdentityStore,
    client_factory: ClientFactory = route53_client_factory,
    dry_run: bool = False,
    recreate_missing: bool = False,
) -> int:
    """Reconcile *specs* in order and return an exit code."""
    clients = _ClientCache(client_factory)
    code = EXIT_SUCCESS

    for spec in specs:
        ui.check_header(spec.action.value, spec.name)
        try:
            reconciler = Reconciler(
                clients.get(spec.credentials),
                store,
                dry_run=dry_run,
                recreate_missing=recreate_missing,
            )
            result = reconciler.apply(spec)
        except (ConfigurationError, TransportError, IdentityStoreError, RuntimeError) as exc:
            logger.error("Health check %s failed: %s", spec.name, exc)
            if isinstance(exc, ImmutableFieldConflict):
                ui.conflict_panel(spec.name, str(exc))
            else:
                ui.failure(str(exc))
            code = worst(code, exit_code_for_error(exc))
            if spec.fail_on_error:
                logger.error("fail_on_error set for %s; stopping run", spec.name)
                return code
            continue

        report_result(result)
        if dry_run and result.changed:
            code = worst(code, EXIT_DRIFT)

    return code


def run_manifest(
    manifest_path: str | Path,
    *,
    names: Optional[List[str]] = None,
    dry_run: bool = False,
    recreate_missing: bool = False,
    store: Optional[IdentityStore] = None,
    client_factory: ClientFactory = route53_client_factory,
) -> int:
    """Load *manifest_path* and reconcile the selected health checks.

    Returns one of the ``EXIT_*`` constants.
    """
    try:
        manifest = load_manifest(manifest_path)
        specs = manifest.specs(names)
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        logger.error("Manifest invalid: %s", exc)
        ui.fatal(f"manifest invalid: {exc}")
        return EXIT_VALIDATION_FAILURE

    if not specs:
        ui.warning("manifest declares no health checks")
        return EXIT_SUCCESS

    ui.run_header("plan" if dry_run else "apply", len(specs))
    return reconcile_specs(
        specs,
        store=store if store is not None else JsonIdentityStore(),
        client_factory=client_factory,
        dry_run=dry_run,
        recreate_missing=recreate_missing,
    )


def run_delete(
    name: str,
    creds: AwsCredentials,
    *,
    dry_run: bool = False,
    store: Optional[IdentityStore] = None,
    client_factory: ClientFactory = route53_client_factory,
) -> int:
    """Delete the health check stored under *name*."""
    store = store if store is not None else JsonIdentityStore()
    ui.run_header("delete", 1)
    ui.check_header("delete", name)
    try:
        reconciler = Reconciler(client_factory(creds), store, dry_run=dry_run)
        result = reconciler.delete(name)
    except (TransportError, IdentityStoreError, RuntimeError) as exc:
        logger.error("Deleting %s failed: %s", name, exc)
        ui.failure(str(exc))
        return exit_code_for_error(exc)

    report_result(result)
    if dry_run and result.changed:
        return EXIT_DRIFT
    return EXIT_SUCCESS
