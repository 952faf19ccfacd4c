"""Exception types shared by the reconciler, the Route 53 adapter and the CLI.

Two families matter to callers:

- :class:`ConfigurationError` -- the declared configuration cannot be applied
  to the object that already exists (e.g. an immutable field changed).
- :class:`TransportError` -- a call to the provider failed (network, auth,
  throttling, validation on the provider side).

The CLI maps them to distinct exit codes.
"""

from __future__ import annotations

from typing import Any, Optional


class R53HCError(Exception):
    """Base class for all r53hc errors."""


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class ConfigurationError(R53HCError):
    """The declared configuration is invalid for the live object."""


class ImmutableFieldConflict(ConfigurationError):
    """A field Route 53 refuses to change on an existing check differs."""

    def __init__(
        self,
        name: str,
        field: str,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        self.name = name
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Health check '{name}': AWS APIs don't permit changing the "
            f"'{field}' of an existing health check "
            f"(declared {expected!r}, live {actual!r}). Recreating it would "
            "give it a new id and break DNS records that reference the old "
            "one, so this must be resolved by hand."
        )


class StaleIdentityError(ConfigurationError):
    """A stored health check id no longer resolves to a live object."""

    def __init__(self, name: str, remote_id: str) -> None:
        self.name = name
        self.remote_id = remote_id
        super().__init__(
            f"Health check '{name}' is recorded as {remote_id} but Route 53 "
            "reports no such health check. Re-run with --recreate-missing to "
            "create a replacement, or remove the stale identity."
        )


class IdentityStoreError(R53HCError):
    """The identity store could not be read or written."""


# ---------------------------------------------------------------------------
# Provider errors
# ---------------------------------------------------------------------------


class TransportError(R53HCError):
    """A Route 53 API call failed.

    Attributes:
        operation: API operation name, e.g. ``CreateHealthCheck``.
        code: AWS error code when available (``Throttling``, ...), else ``""``.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        code: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        self.operation = operation
        self.code = code
        self.cause = cause
        prefix = f"{operation} failed"
        if code:
            prefix += f" ({code})"
        super().__init__(f"{prefix}: {message}")


class HealthCheckNotFound(TransportError):
    """Route 53 returned ``NoSuchHealthCheck``."""


class HealthCheckRejected(TransportError):
    """Route 53 rejected the submitted configuration (``InvalidInput``)."""
