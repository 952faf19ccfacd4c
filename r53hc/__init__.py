"""r53hc - Route 53 health check reconciler.

Converges AWS Route 53 health checks to a declared configuration: creates
missing checks, updates drifted mutable settings, refuses to touch settings
the API treats as immutable, and deletes checks by logical name.
"""

try:
    from importlib.metadata import version

    __version__ = version("r53hc")
except Exception:
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
