"""AWS context: session and region resolution for the Route 53 client.

Turns an :class:`~r53hc.config.models.AwsCredentials` bundle into a
:class:`boto3.Session`.  Credential precedence:

1. ``aws_assume_role_arn`` -- ``sts:AssumeRole`` using the base session below
2. Explicit ``aws_access_key`` / ``aws_secret_access_key`` / ``aws_session_token``
3. Named ``profile``
4. The default boto3 credential chain

Region resolution precedence (evaluated eagerly, once per context):
1. Explicit ``region`` on the resource
2. ``AWS_DEFAULT_REGION`` / ``AWS_REGION`` env vars
3. Hardcoded fallback (``us-east-1``; Route 53 is a global service)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from r53hc.config.models import AwsCredentials

logger = logging.getLogger(__name__)

_DEFAULT_REGION = "us-east-1"
DEFAULT_ROLE_SESSION_NAME = "r53hc"

RegionResolver = Callable[[Optional[str]], str]


# ---------------------------------------------------------------------------
# Region helpers
# ---------------------------------------------------------------------------


def resolve_region(region: Optional[str] = None) -> str:
    """Return the AWS region string.

    Precedence: *region* → ``AWS_DEFAULT_REGION`` → ``AWS_REGION`` → fallback.
    """
    if region:
        return region
    return (
        os.environ.get("AWS_DEFAULT_REGION")
        or os.environ.get("AWS_REGION")
        or _DEFAULT_REGION
    )


# ---------------------------------------------------------------------------
# AWSContext
# ---------------------------------------------------------------------------


@dataclass
class AWSContext:
    """Resolved region + session factory.

    Attributes:
        region: AWS region used for API calls.
        profile: Named profile, if one was used.
        assumed_role_arn: Role ARN when credentials came from ``sts:AssumeRole``.
    """

    region: str
    profile: Optional[str] = None
    assumed_role_arn: Optional[str] = None
    _session: Any = field(default=None, repr=False, compare=False)

    # -- factory ----------------------------------------------------------

    @classmethod
    def from_credentials(
        cls,
        creds: AwsCredentials,
        region_resolver: RegionResolver = resolve_region,
    ) -> "AWSContext":
        """Construct an :class:`AWSContext` from a credential bundle.

        Raises :class:`RuntimeError` if the base session cannot be built
        (e.g. an unknown profile) or the role cannot be assumed.
        """
        region = region_resolver(creds.region)
        try:
            base = _base_session(creds, region)
        except (BotoCoreError, ClientError) as exc:
            raise RuntimeError(f"Unable to create AWS session: {exc}") from exc

        if not creds.aws_assume_role_arn:
            return cls(region=region, profile=creds.profile, _session=base)

        session_name = creds.aws_role_session_name or DEFAULT_ROLE_SESSION_NAME
        logger.debug(
            "Assuming role %s (session %s)", creds.aws_assume_role_arn, session_name
        )
        try:
            sts = base.client("sts")
            resp = sts.assume_role(
                RoleArn=creds.aws_assume_role_arn,
                RoleSessionName=session_name,
            )
        except (BotoCoreError, ClientError) as exc:
            raise RuntimeError(
                f"Unable to assume role {creds.aws_assume_role_arn}: {exc}"
            ) from exc

        temp = resp["Credentials"]
        session = boto3.Session(
            aws_access_key_id=temp["AccessKeyId"],
            aws_secret_access_key=temp["SecretAccessKey"],
            aws_session_token=temp["SessionToken"],
            region_name=region,
        )
        return cls(
            region=region,
            profile=creds.profile,
            assumed_role_arn=creds.aws_assume_role_arn,
            _session=session,
        )

    # -- session accessor -------------------------------------------------

    @property
    def session(self) -> boto3.Session:
        """Return the cached :class:`boto3.Session`."""
        if self._session is None:
            self._session = boto3.Session(
                profile_name=self.profile, region_name=self.region
            )
        return self._session

    def client(self, service: str, **kwargs: Any) -> Any:
        """Create a boto3 client for *service*."""
        return self.session.client(service, **kwargs)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _base_session(creds: AwsCredentials, region: str) -> boto3.Session:
    """Session from explicit keys, else profile, else the default chain."""
    if creds.aws_access_key:
        return boto3.Session(
            aws_access_key_id=creds.aws_access_key,
            aws_secret_access_key=creds.aws_secret_access_key,
            aws_session_token=creds.aws_session_token,
            region_name=region,
        )
    if creds.profile:
        return boto3.Session(profile_name=creds.profile, region_name=region)
    return boto3.Session(region_name=region)
