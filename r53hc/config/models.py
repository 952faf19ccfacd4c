"""Pydantic models for declared health check resources.

A :class:`HealthCheckSpec` is one entry of a manifest: the health check
settings plus the AWS credential bundle used to reach Route 53.  Alternate
property names are accepted as aliases:

- ``regions`` for ``check_regions``
- ``fully_qualified_domain_name`` for ``fqdn``
- ``aws_access_key_id`` for ``aws_access_key``
- ``aws_region`` for ``region``
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from r53hc.state.models import (
    DEFAULT_CHECK_REGIONS,
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_REQUEST_INTERVAL,
    HealthCheckType,
)


class ResourceAction(str, Enum):
    """What to do with a declared health check."""

    CREATE = "create"
    DELETE = "delete"


class AwsCredentials(BaseModel):
    """Opaque credential bundle handed to the Route 53 client.

    The reconciler never looks inside; only :mod:`r53hc.aws.context` does.
    """

    model_config = ConfigDict(frozen=True)

    aws_access_key: Optional[str] = None
    aws_secret_access_key: Optional[str] = Field(default=None, repr=False)
    aws_session_token: Optional[str] = Field(default=None, repr=False)
    aws_assume_role_arn: Optional[str] = None
    aws_role_session_name: Optional[str] = None
    region: Optional[str] = None
    profile: Optional[str] = None


class HealthCheckSpec(BaseModel):
    """A declared Route 53 health check."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1)
    action: ResourceAction = ResourceAction.CREATE

    # -- health check settings ----------------------------------------------
    type: HealthCheckType
    port: int = Field(ge=1, le=65535)
    ip_address: Optional[str] = None
    fqdn: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("fqdn", "fully_qualified_domain_name"),
    )
    search_string: Optional[str] = None
    resource_path: Optional[str] = None
    enable_sni: bool = False
    request_interval: int = Field(default=DEFAULT_REQUEST_INTERVAL, ge=1)
    failure_threshold: int = Field(default=DEFAULT_FAILURE_THRESHOLD, ge=1, le=10)
    inverted: bool = False
    measure_latency: bool = False
    check_regions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CHECK_REGIONS),
        validation_alias=AliasChoices("check_regions", "regions"),
    )
    fail_on_error: bool = False

    # -- authentication -----------------------------------------------------
    aws_access_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("aws_access_key", "aws_access_key_id"),
    )
    aws_secret_access_key: Optional[str] = Field(default=None, repr=False)
    aws_session_token: Optional[str] = Field(default=None, repr=False)
    aws_assume_role_arn: Optional[str] = None
    aws_role_session_name: Optional[str] = None
    region: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("region", "aws_region"),
    )
    profile: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("check_regions", mode="before")
    @classmethod
    def _coerce_regions(cls, value: Any) -> Any:
        """Accept a single region string as a one-element list."""
        if isinstance(value, str):
            return [value]
        return value

    @property
    def credentials(self) -> AwsCredentials:
        """The credential bundle for this resource."""
        return AwsCredentials(
            aws_access_key=self.aws_access_key,
            aws_secret_access_key=self.aws_secret_access_key,
            aws_session_token=self.aws_session_token,
            aws_assume_role_arn=self.aws_assume_role_arn,
            aws_role_session_name=self.aws_role_session_name,
            region=self.region,
            profile=self.profile,
        )
