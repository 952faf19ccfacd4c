"""Build the canonical :class:`DesiredConfig` from a declared resource.

Pure and deterministic: the same :class:`HealthCheckSpec` always yields an
equal :class:`DesiredConfig`, with check regions de-duplicated and sorted,
and empty optional strings dropped (Route 53 treats "set to empty" and "not
set" differently, and we never want to send the former).
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from r53hc.config.models import HealthCheckSpec
from r53hc.state.models import DesiredConfig


def normalise_regions(regions: Iterable[str]) -> List[str]:
    """Strip, de-duplicate and sort region identifiers."""
    return sorted({r.strip() for r in regions if r and r.strip()})


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    return value


def build_desired_config(spec: HealthCheckSpec) -> DesiredConfig:
    """Return the desired Route 53 configuration for *spec*."""
    return DesiredConfig(
        type=spec.type.value,
        port=spec.port,
        enable_sni=spec.enable_sni,
        request_interval=spec.request_interval,
        failure_threshold=spec.failure_threshold,
        inverted=spec.inverted,
        measure_latency=spec.measure_latency,
        check_regions=normalise_regions(spec.check_regions),
        ip_address=_optional(spec.ip_address),
        resource_path=_optional(spec.resource_path),
        fqdn=_optional(spec.fqdn),
        search_string=_optional(spec.search_string),
        fail_on_error=spec.fail_on_error,
    )
