"""Health check configuration and identity models.

``DesiredConfig`` is what we intend Route 53 to hold, ``RemoteConfig`` is
what it reports, and ``IdentityRecord`` links a logical name to the id that
Route 53 assigned when the check was created.

Both config models expose :meth:`to_record`, a plain dict with snake_case
keys that the diff engine and the Route 53 adapter work from::

    {
      "type": "HTTPS",
      "port": 443,
      "enable_sni": true,
      "request_interval": 30,
      "failure_threshold": 3,
      "inverted": false,
      "measure_latency": false,
      "check_regions": ["us-east-1", "us-west-1", "us-west-2"],
      "fqdn": "www.example.com"          # optional keys only when set
    }
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


class HealthCheckType(str, Enum):
    """Route 53 health check (monitor) protocols."""

    HTTP = "HTTP"
    HTTPS = "HTTPS"
    HTTP_STR_MATCH = "HTTP_STR_MATCH"
    HTTPS_STR_MATCH = "HTTPS_STR_MATCH"
    TCP = "TCP"
    CALCULATED = "CALCULATED"
    CLOUDWATCH_METRIC = "CLOUDWATCH_METRIC"
    RECOVERY_CONTROL = "RECOVERY_CONTROL"


DEFAULT_CHECK_REGIONS: List[str] = ["us-west-1", "us-east-1", "us-west-2"]
DEFAULT_REQUEST_INTERVAL = 30
DEFAULT_FAILURE_THRESHOLD = 3

# Sent only when set; Route 53 distinguishes "absent" from "empty".
OPTIONAL_STRING_FIELDS: List[str] = [
    "ip_address",
    "resource_path",
    "fqdn",
    "search_string",
]


# ---------------------------------------------------------------------------
# DesiredConfig
# ---------------------------------------------------------------------------


class DesiredConfig(BaseModel):
    """Canonical intended configuration, produced by the config builder."""

    model_config = ConfigDict(frozen=True)

    type: str
    port: int
    enable_sni: bool = False
    request_interval: int = DEFAULT_REQUEST_INTERVAL
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    inverted: bool = False
    measure_latency: bool = False
    check_regions: List[str] = Field(
        default_factory=lambda: sorted(DEFAULT_CHECK_REGIONS)
    )
    ip_address: Optional[str] = None
    resource_path: Optional[str] = None
    fqdn: Optional[str] = None
    search_string: Optional[str] = None
    # Local only; never part of the outgoing record.
    fail_on_error: bool = False

    def to_record(self) -> Dict[str, Any]:
        """Return the record sent to Route 53 (snake_case keys)."""
        record: Dict[str, Any] = {
            "type": self.type,
            "port": self.port,
            "enable_sni": self.enable_sni,
            "request_interval": self.request_interval,
            "failure_threshold": self.failure_threshold,
            "inverted": self.inverted,
            "measure_latency": self.measure_latency,
            "check_regions": sorted(self.check_regions),
        }
        for key in OPTIONAL_STRING_FIELDS:
            value = getattr(self, key)
            if value:
                record[key] = value
        return record


# ---------------------------------------------------------------------------
# RemoteConfig
# ---------------------------------------------------------------------------


class RemoteConfig(BaseModel):
    """Live configuration as reported by ``GetHealthCheck``.

    Every field is optional because Route 53 leaves unset fields out of the
    response.
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None
    port: Optional[int] = None
    enable_sni: Optional[bool] = None
    request_interval: Optional[int] = None
    failure_threshold: Optional[int] = None
    inverted: Optional[bool] = None
    measure_latency: Optional[bool] = None
    check_regions: Optional[List[str]] = None
    ip_address: Optional[str] = None
    resource_path: Optional[str] = None
    fqdn: Optional[str] = None
    search_string: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Return the reported fields, omitting those Route 53 left out."""
        record: Dict[str, Any] = {}
        for key, value in self.model_dump().items():
            if value is None:
                continue
            if key == "check_regions":
                value = sorted(value)
            record[key] = value
        return record


# ---------------------------------------------------------------------------
# IdentityRecord
# ---------------------------------------------------------------------------


class IdentityRecord(BaseModel):
    """Route 53 id and caller reference for one logical health check name."""

    remote_id: str
    creation_token: str
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        ),
    )
