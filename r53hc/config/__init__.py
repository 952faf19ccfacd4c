"""Declared health check models, manifest loading and config building."""

from r53hc.config.builder import build_desired_config, normalise_regions
from r53hc.config.manifest import Manifest, load_manifest
from r53hc.config.models import AwsCredentials, HealthCheckSpec, ResourceAction

__all__ = [
    "AwsCredentials",
    "HealthCheckSpec",
    "Manifest",
    "ResourceAction",
    "build_desired_config",
    "load_manifest",
    "normalise_regions",
]
