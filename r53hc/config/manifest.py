"""Manifest loading: a YAML file declaring health checks by logical name.

Structure::

    defaults:                 # optional, merged under every entry
      region: us-east-1
      aws_assume_role_arn: arn:aws:iam::123456789012:role/route53-admin
    health_checks:
      web-check:
        type: HTTPS
        fqdn: www.example.com
        port: 443
        resource_path: /health
      old-check:
        action: delete
        type: TCP
        port: 22

Keys set on an entry override ``defaults``.  The mapping key is the logical
name; an explicit ``name`` inside the entry is not allowed to disagree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, Field

from r53hc.config.models import HealthCheckSpec


class Manifest(BaseModel):
    """Parsed manifest, before per-entry validation."""

    defaults: Dict[str, Any] = Field(default_factory=dict)
    health_checks: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def entry(self, name: str) -> Dict[str, Any]:
        """Return the merged raw entry for *name*."""
        if name not in self.health_checks:
            raise KeyError(name)
        merged: Dict[str, Any] = dict(self.defaults)
        merged.update(self.health_checks[name])
        declared = merged.get("name")
        if declared is not None and declared != name:
            raise ValueError(
                f"Health check '{name}' declares a conflicting name '{declared}'"
            )
        merged["name"] = name
        return merged

    def spec(self, name: str) -> HealthCheckSpec:
        """Validate and return the :class:`HealthCheckSpec` for *name*."""
        return HealthCheckSpec.model_validate(self.entry(name))

    def specs(self, names: Optional[Iterable[str]] = None) -> List[HealthCheckSpec]:
        """Return specs for *names* (all entries, in file order, if omitted).

        Raises :class:`ValueError` when a requested name is not declared.
        """
        selected = list(names) if names else list(self.health_checks)
        unknown = [n for n in selected if n not in self.health_checks]
        if unknown:
            raise ValueError(
                f"Health check(s) not declared in manifest: {', '.join(unknown)}"
            )
        return [self.spec(n) for n in selected]


def load_manifest(path: str | Path) -> Manifest:
    """Load and parse a manifest YAML file.

    Raises :class:`FileNotFoundError` if *path* does not exist and
    :class:`ValueError` if the document is not shaped like a manifest.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Manifest not found: {path}")
    with open(path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Manifest {path} must be a YAML mapping")

    defaults = raw.get("defaults") or {}
    checks_raw = raw.get("health_checks") or {}
    if not isinstance(defaults, dict):
        raise ValueError(f"Manifest {path}: 'defaults' must be a mapping")
    if not isinstance(checks_raw, dict):
        raise ValueError(f"Manifest {path}: 'health_checks' must be a mapping")

    checks: Dict[str, Dict[str, Any]] = {}
    for name, entry in checks_raw.items():
        # A bare ``name:`` line declares an entry with only defaults.
        entry = entry or {}
        if not isinstance(entry, dict):
            raise ValueError(
                f"Manifest {path}: health check '{name}' must be a mapping"
            )
        checks[str(name)] = entry

    return Manifest(defaults=defaults, health_checks=checks)
