"""Route 53 health check client.

:class:`HealthCheckClient` is the narrow interface the reconciler consumes;
:class:`Route53HealthCheckClient` implements it on top of a boto3
``route53`` client.  The adapter owns the wire mapping between our
snake_case records and the Route 53 ``HealthCheckConfig`` shape::

    type               <-> Type
    ip_address         <-> IPAddress
    port               <-> Port
    resource_path      <-> ResourcePath
    fqdn               <-> FullyQualifiedDomainName
    search_string      <-> SearchString
    request_interval   <-> RequestInterval
    failure_threshold  <-> FailureThreshold
    measure_latency    <-> MeasureLatency
    inverted           <-> Inverted
    enable_sni         <-> EnableSNI
    check_regions      <-> Regions

Retries are left to botocore (``standard`` mode, configurable attempts);
every failure that survives them is raised as :class:`TransportError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from r53hc.aws.context import AWSContext
from r53hc.errors import HealthCheckNotFound, HealthCheckRejected, TransportError
from r53hc.state.diff import IMMUTABLE_FIELDS, RESETTABLE_FIELDS
from r53hc.state.models import DesiredConfig, RemoteConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5

# "Name" appears in the health check table of the Route 53 console.
NAME_TAG_KEY = "Name"

WIRE_FIELDS: Dict[str, str] = {
    "type": "Type",
    "ip_address": "IPAddress",
    "port": "Port",
    "resource_path": "ResourcePath",
    "fqdn": "FullyQualifiedDomainName",
    "search_string": "SearchString",
    "request_interval": "RequestInterval",
    "failure_threshold": "FailureThreshold",
    "measure_latency": "MeasureLatency",
    "inverted": "Inverted",
    "enable_sni": "EnableSNI",
    "check_regions": "Regions",
}

_RESET_ELEMENTS: Dict[str, str] = {f: WIRE_FIELDS[f] for f in RESETTABLE_FIELDS}


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class HealthCheckClient(Protocol):
    """Operations the reconciler needs from the provider."""

    def get(self, remote_id: str) -> Optional[RemoteConfig]: ...

    def create(self, creation_token: str, desired: DesiredConfig) -> str: ...

    def update(
        self,
        remote_id: str,
        fields: Dict[str, Any],
        reset_fields: Iterable[str] = (),
    ) -> None: ...

    def delete(self, remote_id: str) -> None: ...

    def tag(self, remote_id: str, name: str) -> None: ...


# ---------------------------------------------------------------------------
# Wire mapping
# ---------------------------------------------------------------------------


def to_wire(record: Dict[str, Any]) -> Dict[str, Any]:
    """Map a snake_case record onto Route 53 parameter names."""
    wire: Dict[str, Any] = {}
    for key, value in record.items():
        if key not in WIRE_FIELDS:
            raise ValueError(f"Unknown health check field: {key}")
        if key == "check_regions":
            value = sorted(value)
        wire[WIRE_FIELDS[key]] = value
    return wire


def from_wire(config: Dict[str, Any]) -> RemoteConfig:
    """Build a :class:`RemoteConfig` from a ``HealthCheckConfig`` dict.

    Fields Route 53 reports that we do not manage (``ChildHealthChecks``,
    ``AlarmIdentifier``, ...) are ignored.
    """
    values: Dict[str, Any] = {}
    for key, wire_key in WIRE_FIELDS.items():
        if wire_key in config:
            values[key] = config[wire_key]
    return RemoteConfig(**values)


# ---------------------------------------------------------------------------
# boto3 adapter
# ---------------------------------------------------------------------------


class Route53HealthCheckClient:
    """:class:`HealthCheckClient` backed by boto3's ``route53`` client."""

    def __init__(self, route53: Any) -> None:
        self._route53 = route53

    @classmethod
    def from_context(
        cls,
        ctx: AWSContext,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> "Route53HealthCheckClient":
        """Create a client from an :class:`AWSContext`."""
        logger.debug("Initializing Route 53 client (region %s)", ctx.region)
        cfg = Config(retries={"max_attempts": max_attempts, "mode": "standard"})
        return cls(ctx.client("route53", config=cfg))

    # -- reads ------------------------------------------------------------

    def get(self, remote_id: str) -> Optional[RemoteConfig]:
        """Return the live config, or ``None`` if the check does not exist."""
        try:
            resp = self._call("GetHealthCheck", HealthCheckId=remote_id)
        except HealthCheckNotFound:
            return None
        config = resp.get("HealthCheck", {}).get("HealthCheckConfig", {})
        logger.debug("Live config for %s: %s", remote_id, config)
        return from_wire(config)

    # -- writes -----------------------------------------------------------

    def create(self, creation_token: str, desired: DesiredConfig) -> str:
        """Create a health check and return its Route 53 id."""
        resp = self._call(
            "CreateHealthCheck",
            CallerReference=creation_token,
            HealthCheckConfig=to_wire(desired.to_record()),
        )
        remote_id = resp["HealthCheck"]["Id"]
        logger.info("Created health check %s", remote_id)
        return remote_id

    def update(
        self,
        remote_id: str,
        fields: Dict[str, Any],
        reset_fields: Iterable[str] = (),
    ) -> None:
        """Apply *fields* (mutable only) to an existing health check."""
        immutable = sorted(set(fields) & set(IMMUTABLE_FIELDS))
        if immutable:
            raise ValueError(
                f"UpdateHealthCheck does not accept: {', '.join(immutable)}"
            )
        kwargs: Dict[str, Any] = {"HealthCheckId": remote_id}
        kwargs.update(to_wire(fields))
        reset_fields = list(reset_fields)
        unknown = sorted(set(reset_fields) - set(_RESET_ELEMENTS))
        if unknown:
            raise ValueError(f"Cannot reset health check field: {', '.join(unknown)}")
        resets = [_RESET_ELEMENTS[f] for f in reset_fields]
        if resets:
            kwargs["ResetElements"] = resets
        self._call("UpdateHealthCheck", **kwargs)
        logger.info("Updated health check %s", remote_id)

    def delete(self, remote_id: str) -> None:
        self._call("DeleteHealthCheck", HealthCheckId=remote_id)
        logger.info("Deleted health check %s", remote_id)

    def tag(self, remote_id: str, name: str) -> None:
        self._call(
            "ChangeTagsForResource",
            ResourceType="healthcheck",
            ResourceId=remote_id,
            AddTags=[{"Key": NAME_TAG_KEY, "Value": name}],
        )

    # -- internals --------------------------------------------------------

    def _call(self, operation: str, **kwargs: Any) -> Dict[str, Any]:
        """Invoke *operation* and translate botocore failures."""
        method = getattr(self._route53, _snake(operation))
        try:
            return method(**kwargs)
        except ClientError as exc:
            code = _error_code(exc)
            message = exc.response.get("Error", {}).get("Message", str(exc))
            if code == "NoSuchHealthCheck":
                raise HealthCheckNotFound(operation, message, code, exc) from exc
            if code == "InvalidInput":
                raise HealthCheckRejected(operation, message, code, exc) from exc
            raise TransportError(operation, message, code, exc) from exc
        except BotoCoreError as exc:
            raise TransportError(operation, str(exc), cause=exc) from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _snake(operation: str) -> str:
    """``GetHealthCheck`` -> ``get_health_check``."""
    out = []
    for i, ch in enumerate(operation):
        if ch.isupper() and i:
            out.append("_")
        out.append(ch.lower())
    return "".join(out)


def _error_code(exc: BaseException) -> str:
    """Extract AWS error code from a botocore ClientError (or return '')."""
    resp = getattr(exc, "response", None)
    if resp and isinstance(resp, dict):
        return resp.get("Error", {}).get("Code", "")
    return ""
