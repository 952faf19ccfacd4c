"""Tests for r53hc.aws.route53 — wire mapping and the boto3 adapter."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from r53hc.aws.route53 import (
    NAME_TAG_KEY,
    Route53HealthCheckClient,
    _error_code,
    _snake,
    from_wire,
    to_wire,
)
from r53hc.errors import (
    HealthCheckNotFound,
    HealthCheckRejected,
    TransportError,
)
from r53hc.state.models import DesiredConfig


# ── helpers ──────────────────────────────────────────────────────────────


def _client_error(code: str, operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} msg"}}, operation)


def _desired(**kw) -> DesiredConfig:
    data = dict(type="HTTPS", port=443, fqdn="www.example.com")
    data.update(kw)
    return DesiredConfig(**data)


WIRE_CONFIG = {
    "Type": "HTTPS",
    "Port": 443,
    "FullyQualifiedDomainName": "www.example.com",
    "ResourcePath": "/health",
    "RequestInterval": 30,
    "FailureThreshold": 3,
    "MeasureLatency": False,
    "Inverted": False,
    "Disabled": False,
    "EnableSNI": True,
    "Regions": ["us-west-2", "us-east-1", "us-west-1"],
}


# ── wire mapping ─────────────────────────────────────────────────────────


class TestWireMapping:
    def test_to_wire(self):
        wire = to_wire(_desired(ip_address="192.0.2.1").to_record())
        assert wire["Type"] == "HTTPS"
        assert wire["IPAddress"] == "192.0.2.1"
        assert wire["FullyQualifiedDomainName"] == "www.example.com"
        assert wire["EnableSNI"] is False
        assert wire["Regions"] == ["us-east-1", "us-west-1", "us-west-2"]
        assert "ResourcePath" not in wire
        assert "SearchString" not in wire

    def test_to_wire_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown health check field"):
            to_wire({"fail_on_error": True})

    def test_from_wire(self):
        remote = from_wire(WIRE_CONFIG)
        assert remote.type == "HTTPS"
        assert remote.fqdn == "www.example.com"
        assert remote.resource_path == "/health"
        assert remote.enable_sni is True
        assert remote.ip_address is None
        assert remote.to_record()["check_regions"] == [
            "us-east-1",
            "us-west-1",
            "us-west-2",
        ]

    def test_from_wire_ignores_unmanaged_fields(self):
        assert "disabled" not in from_wire(WIRE_CONFIG).to_record()


class TestHelpers:
    def test_snake(self):
        assert _snake("GetHealthCheck") == "get_health_check"
        assert _snake("ChangeTagsForResource") == "change_tags_for_resource"

    def test_error_code(self):
        assert _error_code(_client_error("Throttling")) == "Throttling"

    def test_error_code_no_response(self):
        assert _error_code(ValueError("x")) == ""


# ── Route53HealthCheckClient ─────────────────────────────────────────────


class TestGet:
    def test_returns_remote_config(self):
        r53 = MagicMock()
        r53.get_health_check.return_value = {
            "HealthCheck": {"Id": "hc-1", "HealthCheckConfig": WIRE_CONFIG}
        }
        remote = Route53HealthCheckClient(r53).get("hc-1")
        r53.get_health_check.assert_called_once_with(HealthCheckId="hc-1")
        assert remote.port == 443

    def test_not_found_returns_none(self):
        r53 = MagicMock()
        r53.get_health_check.side_effect = _client_error("NoSuchHealthCheck")
        assert Route53HealthCheckClient(r53).get("hc-1") is None

    def test_other_error_raises_transport(self):
        r53 = MagicMock()
        r53.get_health_check.side_effect = _client_error("AccessDenied")
        with pytest.raises(TransportError) as info:
            Route53HealthCheckClient(r53).get("hc-1")
        assert info.value.code == "AccessDenied"
        assert info.value.operation == "GetHealthCheck"
        assert isinstance(info.value.__cause__, ClientError)


class TestCreate:
    def test_create(self):
        r53 = MagicMock()
        r53.create_health_check.return_value = {"HealthCheck": {"Id": "hc-new"}}
        remote_id = Route53HealthCheckClient(r53).create("tok-1", _desired())
        assert remote_id == "hc-new"
        kwargs = r53.create_health_check.call_args.kwargs
        assert kwargs["CallerReference"] == "tok-1"
        assert kwargs["HealthCheckConfig"]["Type"] == "HTTPS"
        assert "ResourcePath" not in kwargs["HealthCheckConfig"]

    def test_invalid_input_rejected(self):
        r53 = MagicMock()
        r53.create_health_check.side_effect = _client_error("InvalidInput")
        with pytest.raises(HealthCheckRejected):
            Route53HealthCheckClient(r53).create("tok-1", _desired())

    def test_connection_error(self):
        r53 = MagicMock()
        r53.create_health_check.side_effect = EndpointConnectionError(
            endpoint_url="https://route53.amazonaws.com"
        )
        with pytest.raises(TransportError) as info:
            Route53HealthCheckClient(r53).create("tok-1", _desired())
        assert info.value.code == ""


class TestUpdate:
    def test_update_flattens_fields(self):
        r53 = MagicMock()
        Route53HealthCheckClient(r53).update(
            "hc-1", {"port": 8443, "failure_threshold": 2}
        )
        r53.update_health_check.assert_called_once_with(
            HealthCheckId="hc-1", Port=8443, FailureThreshold=2
        )

    def test_update_reset_elements(self):
        r53 = MagicMock()
        Route53HealthCheckClient(r53).update(
            "hc-1", {"port": 80}, reset_fields=["resource_path"]
        )
        kwargs = r53.update_health_check.call_args.kwargs
        assert kwargs["ResetElements"] == ["ResourcePath"]

    def test_update_without_resets_omits_key(self):
        r53 = MagicMock()
        Route53HealthCheckClient(r53).update("hc-1", {"port": 80})
        assert "ResetElements" not in r53.update_health_check.call_args.kwargs

    def test_update_reset_both_resettable_fields(self):
        r53 = MagicMock()
        Route53HealthCheckClient(r53).update(
            "hc-1", {"port": 80}, reset_fields=["fqdn", "resource_path"]
        )
        kwargs = r53.update_health_check.call_args.kwargs
        assert kwargs["ResetElements"] == ["FullyQualifiedDomainName", "ResourcePath"]

    def test_update_refuses_unresettable_field(self):
        r53 = MagicMock()
        with pytest.raises(ValueError, match="check_regions"):
            Route53HealthCheckClient(r53).update(
                "hc-1", {"port": 80}, reset_fields=["check_regions"]
            )
        r53.update_health_check.assert_not_called()

    @pytest.mark.parametrize("field", ["type", "request_interval", "measure_latency"])
    def test_update_refuses_immutable(self, field):
        r53 = MagicMock()
        with pytest.raises(ValueError, match=field):
            Route53HealthCheckClient(r53).update("hc-1", {field: 1, "port": 80})
        r53.update_health_check.assert_not_called()


class TestDeleteAndTag:
    def test_delete(self):
        r53 = MagicMock()
        Route53HealthCheckClient(r53).delete("hc-1")
        r53.delete_health_check.assert_called_once_with(HealthCheckId="hc-1")

    def test_delete_not_found(self):
        r53 = MagicMock()
        r53.delete_health_check.side_effect = _client_error("NoSuchHealthCheck")
        with pytest.raises(HealthCheckNotFound):
            Route53HealthCheckClient(r53).delete("hc-1")

    def test_tag(self):
        r53 = MagicMock()
        Route53HealthCheckClient(r53).tag("hc-1", "web-check")
        r53.change_tags_for_resource.assert_called_once_with(
            ResourceType="healthcheck",
            ResourceId="hc-1",
            AddTags=[{"Key": NAME_TAG_KEY, "Value": "web-check"}],
        )


class TestFromContext:
    def test_builds_route53_client_with_retries(self):
        ctx = MagicMock()
        ctx.region = "us-east-1"
        Route53HealthCheckClient.from_context(ctx, max_attempts=3)
        args, kwargs = ctx.client.call_args
        assert args == ("route53",)
        assert kwargs["config"].retries == {"max_attempts": 3, "mode": "standard"}
