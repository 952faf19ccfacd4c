"""Reconciler: converge one logical health check to its declared state.

Per logical name, the create action walks this state machine::

    Absent          -> CreateHealthCheck, store identity, tag (best effort)
    Present         -> GetHealthCheck, diff
      Present-Current -> nothing
      Present-Stale   -> UpdateHealthCheck (mutable fields only)
      conflict        -> ImmutableFieldConflict, no mutation

Side effects are strictly ordered: identity read -> remote read -> decision
-> at most one mutating call -> identity write.  Tagging happens after the
identity write and never fails the action.

Delete resolves the id from the identity store, deletes the check and drops
the identity.  A name with no stored identity is skipped with a warning.

No locking: callers must not run two actions for the same name at once.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

from r53hc.aws.route53 import HealthCheckClient
from r53hc.config.builder import build_desired_config
from r53hc.config.models import HealthCheckSpec, ResourceAction
from r53hc.errors import HealthCheckNotFound, StaleIdentityError
from r53hc.state.diff import DiffResult, diff_configs
from r53hc.state.models import DesiredConfig
from r53hc.state.store import IdentityStore

logger = logging.getLogger(__name__)


def new_creation_token() -> str:
    """Fresh caller reference.

    Route 53 never accepts a caller reference again once its check has been
    deleted, so every creation attempt gets a new one.
    """
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class ReconcileOutcome(str, Enum):
    """What an action did (or, in a dry run, would do)."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    UNCHANGED = "UNCHANGED"
    DELETED = "DELETED"
    SKIPPED = "SKIPPED"
    PLANNED = "PLANNED"


@dataclass
class ReconcileResult:
    """Outcome of one :class:`Reconciler` action."""

    name: str
    action: str
    outcome: ReconcileOutcome
    remote_id: str = ""
    changed_fields: List[str] = field(default_factory=list)
    planned: str = ""
    tag_error: str = ""
    messages: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True when a mutating call was (or would be) issued."""
        if self.outcome == ReconcileOutcome.PLANNED:
            return bool(self.planned)
        return self.outcome in (
            ReconcileOutcome.CREATED,
            ReconcileOutcome.UPDATED,
            ReconcileOutcome.DELETED,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "changed_fields": list(self.changed_fields),
            "messages": list(self.messages),
            "name": self.name,
            "outcome": self.outcome.value,
            "planned": self.planned,
            "remote_id": self.remote_id,
            "tag_error": self.tag_error,
        }


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------


class Reconciler:
    """Compose identity store, Route 53 client and diff engine.

    Args:
        client: Provider adapter (see :class:`HealthCheckClient`).
        store: Identity store keyed by logical name.
        token_factory: Produces creation tokens; one call per creation.
        dry_run: Read and diff only; never mutate Route 53 or the store.
        recreate_missing: When a stored id no longer exists in Route 53,
            create a replacement instead of raising
            :class:`StaleIdentityError`.
    """

    def __init__(
        self,
        client: HealthCheckClient,
        store: IdentityStore,
        *,
        token_factory: Callable[[], str] = new_creation_token,
        dry_run: bool = False,
        recreate_missing: bool = False,
    ) -> None:
        self.client = client
        self.store = store
        self.token_factory = token_factory
        self.dry_run = dry_run
        self.recreate_missing = recreate_missing

    # -- create -------------------------------------------------------------

    def create(self, spec: HealthCheckSpec) -> ReconcileResult:
        """Create the health check, or converge the existing one."""
        name = spec.name
        desired = build_desired_config(spec)
        identity = self.store.read(name)

        if identity is None:
            return self._create_new(name, desired)

        current = self.client.get(identity.remote_id)
        if current is None:
            if not self.recreate_missing:
                raise StaleIdentityError(name, identity.remote_id)
            logger.warning(
                "Health check %s (%s) no longer exists; creating a replacement",
                name,
                identity.remote_id,
            )
            return self._create_new(name, desired, replaces=identity.remote_id)

        result = diff_configs(desired, current)
        result.raise_for_conflict(name)

        if result.unchanged:
            logger.debug("Health check %s is up to date", name)
            return ReconcileResult(
                name=name,
                action="create",
                outcome=ReconcileOutcome.UNCHANGED,
                remote_id=identity.remote_id,
            )

        return self._update(name, identity.remote_id, result)

    def _create_new(
        self,
        name: str,
        desired: DesiredConfig,
        replaces: str = "",
    ) -> ReconcileResult:
        if self.dry_run:
            return ReconcileResult(
                name=name,
                action="create",
                outcome=ReconcileOutcome.PLANNED,
                remote_id=replaces,
                planned=f"add new health check {name}",
            )

        token = self.token_factory()
        remote_id = self.client.create(token, desired)
        self.store.write(name, remote_id, token)

        result = ReconcileResult(
            name=name,
            action="create",
            outcome=ReconcileOutcome.CREATED,
            remote_id=remote_id,
        )
        if replaces:
            result.messages.append(f"replaced missing health check {replaces}")

        try:
            self.client.tag(remote_id, name)
        except Exception as exc:  # noqa: BLE001
            # Creation is committed once the id is stored.
            logger.warning("Tagging health check %s (%s) failed: %s", name, remote_id, exc)
            result.tag_error = str(exc)

        logger.info("Added new health check %s (%s)", name, remote_id)
        return result

    def _update(self, name: str, remote_id: str, diff: DiffResult) -> ReconcileResult:
        if self.dry_run:
            return ReconcileResult(
                name=name,
                action="create",
                outcome=ReconcileOutcome.PLANNED,
                remote_id=remote_id,
                changed_fields=list(diff.changed_fields),
                planned=f"update health check {name}",
            )

        self.client.update(remote_id, diff.update_fields, diff.reset_fields)
        logger.info(
            "Updated health check %s (%s): %s",
            name,
            remote_id,
            ", ".join(diff.changed_fields),
        )
        return ReconcileResult(
            name=name,
            action="create",
            outcome=ReconcileOutcome.UPDATED,
            remote_id=remote_id,
            changed_fields=list(diff.changed_fields),
        )

    # -- delete -------------------------------------------------------------

    def delete(self, name: str) -> ReconcileResult:
        """Delete the health check recorded under *name*."""
        identity = self.store.read(name)
        if identity is None:
            logger.warning("No stored health check id for %s; nothing to delete", name)
            return ReconcileResult(
                name=name,
                action="delete",
                outcome=ReconcileOutcome.SKIPPED,
                messages=["no stored health check id"],
            )

        if self.dry_run:
            return ReconcileResult(
                name=name,
                action="delete",
                outcome=ReconcileOutcome.PLANNED,
                remote_id=identity.remote_id,
                planned=f"remove health check {name}",
            )

        result = ReconcileResult(
            name=name,
            action="delete",
            outcome=ReconcileOutcome.DELETED,
            remote_id=identity.remote_id,
        )
        try:
            self.client.delete(identity.remote_id)
        except HealthCheckNotFound:
            logger.warning(
                "Health check %s (%s) was already gone", name, identity.remote_id
            )
            result.messages.append("already deleted in Route 53")

        self.store.remove(name)
        logger.info("Removed health check %s (%s)", name, identity.remote_id)
        return result

    # -- dispatch -----------------------------------------------------------

    def apply(self, spec: HealthCheckSpec) -> ReconcileResult:
        """Run the action declared on *spec*."""
        if spec.action == ResourceAction.DELETE:
            return self.delete(spec.name)
        return self.create(spec)
