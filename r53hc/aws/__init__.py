"""AWS service interactions (session, Route 53 health checks)."""

from r53hc.aws.context import AWSContext, resolve_region
from r53hc.aws.route53 import (
    NAME_TAG_KEY,
    WIRE_FIELDS,
    HealthCheckClient,
    Route53HealthCheckClient,
    from_wire,
    to_wire,
)

__all__ = [
    "AWSContext",
    "HealthCheckClient",
    "NAME_TAG_KEY",
    "Route53HealthCheckClient",
    "WIRE_FIELDS",
    "from_wire",
    "resolve_region",
    "to_wire",
]
