"""Health check config models, identity persistence and diffing."""

from r53hc.state.diff import (
    IMMUTABLE_FIELDS,
    MUTABLE_FIELDS,
    DiffResult,
    DiffStatus,
    diff_configs,
)
from r53hc.state.models import (
    DEFAULT_CHECK_REGIONS,
    DesiredConfig,
    HealthCheckType,
    IdentityRecord,
    RemoteConfig,
)
from r53hc.state.store import (
    IdentityStore,
    JsonIdentityStore,
    MemoryIdentityStore,
    config_dir,
)

__all__ = [
    "DEFAULT_CHECK_REGIONS",
    "DesiredConfig",
    "DiffResult",
    "DiffStatus",
    "HealthCheckType",
    "IMMUTABLE_FIELDS",
    "IdentityRecord",
    "IdentityStore",
    "JsonIdentityStore",
    "MUTABLE_FIELDS",
    "MemoryIdentityStore",
    "RemoteConfig",
    "config_dir",
    "diff_configs",
]
