"""CLI entry point for r53hc, built on cli-core-yo.

Provides ``apply``, ``plan``, ``delete`` and ``identities`` commands for
converging Route 53 health checks to a YAML manifest.

Usage::

    python -m r53hc.cli --help
    python -m r53hc.cli apply --manifest health_checks.yaml
    python -m r53hc.cli plan --manifest health_checks.yaml --name web-check
    python -m r53hc.cli delete --name web-check --profile ops
    python -m r53hc.cli identities
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from cli_core_yo import output
from cli_core_yo.app import create_app
from cli_core_yo.runtime import _reset, initialize
from cli_core_yo.spec import CliSpec, XdgSpec

# ── App specification ────────────────────────────────────────────────────────

spec = CliSpec(
    prog_name="r53hc",
    app_display_name="Route 53 Health Check Reconciler",
    dist_name="r53hc",
    root_help=(
        "Create, update and delete AWS Route 53 health checks so they "
        "match a declared manifest."
    ),
    xdg=XdgSpec(app_dir_name="r53hc"),
)

app = create_app(spec)

_STATE = {"json": False}


# ── Root callback (global options) ───────────────────────────────────────────


@app.callback()
def _root_callback(
    json_flag: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON."
    ),
) -> None:
    """Route 53 health check reconciler."""
    _reset()
    _STATE["json"] = json_flag
    debug = os.environ.get("CLI_CORE_YO_DEBUG") == "1"
    xdg_paths = app._cli_core_yo_xdg_paths  # type: ignore[attr-defined]
    initialize(spec, xdg_paths, json_mode=json_flag, debug=debug)


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG)
        logging.getLogger("r53hc").setLevel(logging.DEBUG)


def _store(store_path: Optional[str]):
    from r53hc.state.store import JsonIdentityStore

    return JsonIdentityStore(Path(store_path) if store_path else None)


# ── apply command ────────────────────────────────────────────────────────────


@app.command()
def apply(
    manifest: str = typer.Option(
        ...,
        "--manifest",
        "-m",
        help="Path to the health check manifest YAML.",
    ),
    name: Optional[List[str]] = typer.Option(
        None,
        "--name",
        help="Only reconcile this logical name. Can be specified multiple times.",
    ),
    recreate_missing: bool = typer.Option(
        False,
        "--recreate-missing",
        help=(
            "Create a replacement when a stored health check id no longer "
            "exists in Route 53 (default: fail)."
        ),
    ),
    store_path: Optional[str] = typer.Option(
        None,
        "--store",
        help="Identity store JSON. Default: ~/.config/r53hc/identities.json",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
) -> None:
    """Converge Route 53 to the manifest.

    Exit codes: 0 = ok, 1 = invalid manifest, 2 = AWS failure,
    4 = immutable field conflict.
    """
    from r53hc.workflow.run import run_manifest

    _configure_logging(debug)
    output.action(f"Applying {manifest} ...")
    rc = run_manifest(
        manifest,
        names=name or None,
        recreate_missing=recreate_missing,
        store=_store(store_path),
    )
    raise typer.Exit(rc)


# ── plan command ─────────────────────────────────────────────────────────────


@app.command()
def plan(
    manifest: str = typer.Option(
        ...,
        "--manifest",
        "-m",
        help="Path to the health check manifest YAML.",
    ),
    name: Optional[List[str]] = typer.Option(
        None,
        "--name",
        help="Only check this logical name. Can be specified multiple times.",
    ),
    store_path: Optional[str] = typer.Option(
        None,
        "--store",
        help="Identity store JSON.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
) -> None:
    """Show what ``apply`` would change without changing anything.

    Exit codes: 0 = converged, 3 = changes pending, 1/2/4 as for ``apply``.
    """
    from r53hc.workflow.run import run_manifest

    _configure_logging(debug)
    output.action(f"Planning {manifest} ...")
    rc = run_manifest(
        manifest,
        names=name or None,
        dry_run=True,
        store=_store(store_path),
    )
    raise typer.Exit(rc)


# ── delete command ───────────────────────────────────────────────────────────


@app.command()
def delete(
    name: str = typer.Option(
        ...,
        "--name",
        help="Logical name of the health check to delete.",
    ),
    manifest: Optional[str] = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Take AWS credentials for NAME from this manifest.",
    ),
    region: Optional[str] = typer.Option(
        None,
        "--region",
        help="AWS region. Defaults to AWS_DEFAULT_REGION / AWS_REGION / us-east-1.",
    ),
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        help="AWS CLI profile.",
    ),
    assume_role_arn: Optional[str] = typer.Option(
        None,
        "--assume-role-arn",
        help="Role to assume before calling Route 53.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report what would be deleted.",
    ),
    store_path: Optional[str] = typer.Option(
        None,
        "--store",
        help="Identity store JSON.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
) -> None:
    """Delete a health check by logical name and forget its id."""
    from r53hc.config.manifest import load_manifest
    from r53hc.config.models import AwsCredentials
    from r53hc.workflow.run import EXIT_VALIDATION_FAILURE, run_delete

    _configure_logging(debug)

    if manifest:
        try:
            creds = load_manifest(manifest).spec(name).credentials
        except (FileNotFoundError, KeyError, ValueError) as exc:
            output.error(f"Cannot read credentials for '{name}': {exc}")
            raise typer.Exit(EXIT_VALIDATION_FAILURE) from exc
    else:
        creds = AwsCredentials(
            region=region,
            profile=profile,
            aws_assume_role_arn=assume_role_arn,
        )

    rc = run_delete(name, creds, dry_run=dry_run, store=_store(store_path))
    raise typer.Exit(rc)


# ── identities command ───────────────────────────────────────────────────────


@app.command()
def identities(
    store_path: Optional[str] = typer.Option(
        None,
        "--store",
        help="Identity store JSON.",
    ),
) -> None:
    """List logical names and the Route 53 ids recorded for them."""
    import json

    from r53hc import ui
    from r53hc.errors import IdentityStoreError
    from r53hc.workflow.run import EXIT_VALIDATION_FAILURE

    store = _store(store_path)
    try:
        records = {n: store.read(n) for n in store.names()}
    except IdentityStoreError as exc:
        output.error(str(exc))
        raise typer.Exit(EXIT_VALIDATION_FAILURE) from exc

    if _STATE["json"]:
        payload = {n: r.model_dump(mode="json") for n, r in records.items() if r}
        output.detail(json.dumps(payload, indent=2, sort_keys=True))
        return

    if not records:
        output.warn(f"No identities recorded in {store.path}")
        return

    ui.identity_table(
        (n, r.remote_id, r.creation_token, r.created_at)
        for n, r in records.items()
        if r
    )


# ── Entry point ──────────────────────────────────────────────────────────────


def main() -> int:
    """Run the CLI and return an exit code."""
    try:
        app()
        return 0
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())
