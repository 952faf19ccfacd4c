"""Diff engine: desired health check config vs. live Route 53 config.

Classifies the difference into one of three outcomes without calling AWS:

- ``UNCHANGED`` -- nothing to do.
- ``NEEDS_UPDATE`` -- only mutable fields differ; ``update_fields`` holds the
  desired record with every immutable key removed, ready for
  ``UpdateHealthCheck``.
- ``IMMUTABLE_CONFLICT`` -- a field Route 53 never lets us change on an
  existing check differs.  Comparison stops at the first such field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from r53hc.errors import ImmutableFieldConflict
from r53hc.state.models import DesiredConfig, RemoteConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field classification
# ---------------------------------------------------------------------------

# Checked in this order; the first mismatch wins.
IMMUTABLE_FIELDS: List[str] = ["type", "request_interval", "measure_latency"]

MUTABLE_FIELDS: List[str] = [
    "port",
    "enable_sni",
    "failure_threshold",
    "inverted",
    "check_regions",
    "ip_address",
    "resource_path",
    "fqdn",
    "search_string",
]

# Optional fields UpdateHealthCheck can clear through ResetElements.
RESETTABLE_FIELDS: List[str] = ["fqdn", "resource_path"]


# ---------------------------------------------------------------------------
# DiffStatus / DiffResult
# ---------------------------------------------------------------------------


class DiffStatus(str, Enum):
    """Outcome of a desired-vs-live comparison."""

    UNCHANGED = "UNCHANGED"
    NEEDS_UPDATE = "NEEDS_UPDATE"
    IMMUTABLE_CONFLICT = "IMMUTABLE_CONFLICT"


@dataclass
class DiffResult:
    """Result of :func:`diff_configs`."""

    status: DiffStatus
    changed_fields: List[str] = field(default_factory=list)
    update_fields: Dict[str, Any] = field(default_factory=dict)
    reset_fields: List[str] = field(default_factory=list)
    conflict_field: str = ""
    expected: Any = None
    actual: Any = None

    @property
    def unchanged(self) -> bool:
        return self.status == DiffStatus.UNCHANGED

    @property
    def needs_update(self) -> bool:
        return self.status == DiffStatus.NEEDS_UPDATE

    @property
    def has_conflict(self) -> bool:
        return self.status == DiffStatus.IMMUTABLE_CONFLICT

    def raise_for_conflict(self, name: str) -> None:
        """Raise :class:`ImmutableFieldConflict` if this is a conflict."""
        if self.has_conflict:
            raise ImmutableFieldConflict(
                name, self.conflict_field, self.expected, self.actual
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to a plain dict (sorted for determinism)."""
        return {
            "actual": self.actual,
            "changed_fields": list(self.changed_fields),
            "conflict_field": self.conflict_field,
            "expected": self.expected,
            "reset_fields": list(self.reset_fields),
            "status": self.status.value,
            "update_fields": dict(sorted(self.update_fields.items())),
        }


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def mutable_subset(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return *record* with every immutable key removed."""
    return {k: v for k, v in record.items() if k not in IMMUTABLE_FIELDS}


def _normalise(key: str, value: Any) -> Any:
    if key == "check_regions" and value is not None:
        return sorted(value)
    return value


def diff_configs(desired: DesiredConfig, current: RemoteConfig) -> DiffResult:
    """Compare *desired* against *current* and classify the difference."""
    want = desired.to_record()
    have = current.to_record()

    for key in IMMUTABLE_FIELDS:
        if want.get(key) != have.get(key):
            logger.debug("Immutable field %s differs", key)
            return DiffResult(
                status=DiffStatus.IMMUTABLE_CONFLICT,
                conflict_field=key,
                expected=want.get(key),
                actual=have.get(key),
            )

    changed: List[str] = []
    for key in MUTABLE_FIELDS:
        if _normalise(key, want.get(key)) != _normalise(key, have.get(key)):
            logger.info("Health check config modified: %s changed", key)
            changed.append(key)

    if not changed:
        return DiffResult(status=DiffStatus.UNCHANGED)

    reset = [
        key
        for key in RESETTABLE_FIELDS
        if key in changed and key not in want and key in have
    ]
    return DiffResult(
        status=DiffStatus.NEEDS_UPDATE,
        changed_fields=changed,
        update_fields=mutable_subset(want),
        reset_fields=reset,
    )

