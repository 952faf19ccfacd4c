"""Identity store: logical health check name -> Route 53 id + caller reference.

The durable implementation writes JSON to ``~/.config/r53hc/``
(XDG_CONFIG_HOME / r53hc)::

    {
      "web-check": {
        "created_at": "2026-10-19T06:00:00Z",
        "creation_token": "6f1c...",
        "remote_id": "abcdef12-..."
      }
    }

All JSON is serialised with **sorted keys** for deterministic, diff-friendly output.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from r53hc.errors import IdentityStoreError
from r53hc.state.models import IdentityRecord

logger = logging.getLogger(__name__)

_APP_DIR = "r53hc"
_STORE_FILE = "identities.json"


# ---------------------------------------------------------------------------
# Directory resolution
# ---------------------------------------------------------------------------


def config_dir() -> Path:
    """Return the XDG config directory for r53hc.

    Uses ``XDG_CONFIG_HOME`` if set, otherwise ``~/.config``.
    Creates the directory if it does not exist.
    """
    base = os.environ.get("XDG_CONFIG_HOME", "")
    if not base:
        base = str(Path.home() / ".config")
    path = Path(base) / _APP_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_store_path() -> Path:
    return config_dir() / _STORE_FILE


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class IdentityStore(Protocol):
    """Durable key-value state keyed by logical health check name."""

    def read(self, name: str) -> Optional[IdentityRecord]: ...

    def write(self, name: str, remote_id: str, creation_token: str) -> IdentityRecord: ...

    def remove(self, name: str) -> None: ...

    def names(self) -> List[str]: ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class MemoryIdentityStore:
    """Dict-backed store for tests."""

    def __init__(self, records: Optional[Dict[str, IdentityRecord]] = None) -> None:
        self._records: Dict[str, IdentityRecord] = dict(records or {})

    def read(self, name: str) -> Optional[IdentityRecord]:
        return self._records.get(name)

    def write(self, name: str, remote_id: str, creation_token: str) -> IdentityRecord:
        record = IdentityRecord(remote_id=remote_id, creation_token=creation_token)
        self._records[name] = record
        return record

    def remove(self, name: str) -> None:
        self._records.pop(name, None)

    def names(self) -> List[str]:
        return sorted(self._records)


# ---------------------------------------------------------------------------
# JSON file store
# ---------------------------------------------------------------------------


class JsonIdentityStore:
    """Identity store persisted as a single sorted-key JSON file.

    The file is re-read on every access so that separate invocations (and a
    human editing the file between runs) always see current state.  Writes
    go through a temp file in the same directory followed by ``os.replace``.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_store_path()

    # -- IdentityStore ------------------------------------------------------

    def read(self, name: str) -> Optional[IdentityRecord]:
        return self._load().get(name)

    def write(self, name: str, remote_id: str, creation_token: str) -> IdentityRecord:
        records = self._load()
        record = IdentityRecord(remote_id=remote_id, creation_token=creation_token)
        records[name] = record
        self._save(records)
        logger.info("Identity stored: %s -> %s", name, remote_id)
        return record

    def remove(self, name: str) -> None:
        records = self._load()
        if records.pop(name, None) is None:
            return
        self._save(records)
        logger.info("Identity removed: %s", name)

    def names(self) -> List[str]:
        return sorted(self._load())

    # -- file I/O -----------------------------------------------------------

    def _load(self) -> Dict[str, IdentityRecord]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise IdentityStoreError(
                f"Cannot read identity store {self.path}: {exc}"
            ) from exc
        if not isinstance(raw, dict):
            raise IdentityStoreError(
                f"Identity store {self.path} must contain a JSON object"
            )
        try:
            return {
                name: IdentityRecord.model_validate(value)
                for name, value in raw.items()
            }
        except ValidationError as exc:
            raise IdentityStoreError(
                f"Identity store {self.path} has an invalid record: {exc}"
            ) from exc

    def _save(self, records: Dict[str, IdentityRecord]) -> None:
        payload = json.dumps(
            {name: rec.model_dump(mode="json") for name, rec in records.items()},
            indent=2,
            sort_keys=True,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=".identities-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload + "\n")
            os.replace(tmp, self.path)
        except OSError as exc:
            Path(tmp).unlink(missing_ok=True)
            raise IdentityStoreError(
                f"Cannot write identity store {self.path}: {exc}"
            ) from exc
