"""Tests for IdentityRecord and the identity stores."""

from __future__ import annotations

import json

import pytest

from r53hc.errors import IdentityStoreError
from r53hc.state.models import IdentityRecord
from r53hc.state.store import (
    JsonIdentityStore,
    MemoryIdentityStore,
    config_dir,
    default_store_path,
)


# ---------------------------------------------------------------------------
# IdentityRecord
# ---------------------------------------------------------------------------


class TestIdentityRecord:
    def test_created_at_default(self):
        rec = IdentityRecord(remote_id="hc-1", creation_token="tok")
        assert rec.created_at.endswith("Z")

    def test_model_dump_roundtrip(self):
        rec = IdentityRecord(remote_id="hc-1", creation_token="tok", created_at="x")
        assert IdentityRecord(**rec.model_dump(mode="json")) == rec


# ---------------------------------------------------------------------------
# config_dir
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_uses_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert config_dir() == tmp_path / "r53hc"
        assert (tmp_path / "r53hc").is_dir()

    def test_default_store_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert default_store_path() == tmp_path / "r53hc" / "identities.json"


# ---------------------------------------------------------------------------
# MemoryIdentityStore
# ---------------------------------------------------------------------------


class TestMemoryIdentityStore:
    def test_read_absent(self):
        assert MemoryIdentityStore().read("web-check") is None

    def test_write_read(self):
        store = MemoryIdentityStore()
        store.write("web-check", "hc-1", "tok-1")
        rec = store.read("web-check")
        assert rec.remote_id == "hc-1"
        assert rec.creation_token == "tok-1"

    def test_remove(self):
        store = MemoryIdentityStore()
        store.write("web-check", "hc-1", "tok-1")
        store.remove("web-check")
        assert store.read("web-check") is None

    def test_remove_absent_is_noop(self):
        MemoryIdentityStore().remove("nope")

    def test_names_sorted(self):
        store = MemoryIdentityStore()
        store.write("b", "hc-b", "t")
        store.write("a", "hc-a", "t")
        assert store.names() == ["a", "b"]


# ---------------------------------------------------------------------------
# JsonIdentityStore
# ---------------------------------------------------------------------------


class TestJsonIdentityStore:
    def test_default_path_under_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        store = JsonIdentityStore()
        assert store.path == tmp_path / "r53hc" / "identities.json"

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonIdentityStore(tmp_path / "ids.json")
        assert store.read("web-check") is None
        assert store.names() == []

    def test_write_creates_file(self, tmp_path):
        path = tmp_path / "sub" / "ids.json"
        JsonIdentityStore(path).write("web-check", "hc-1", "tok-1")
        assert path.exists()

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "ids.json"
        JsonIdentityStore(path).write("web-check", "hc-1", "tok-1")
        rec = JsonIdentityStore(path).read("web-check")
        assert rec.remote_id == "hc-1"
        assert rec.creation_token == "tok-1"

    def test_written_json_has_sorted_keys(self, tmp_path):
        path = tmp_path / "ids.json"
        store = JsonIdentityStore(path)
        store.write("zeta", "hc-z", "t")
        store.write("alpha", "hc-a", "t")
        data = json.loads(path.read_text())
        assert list(data) == ["alpha", "zeta"]
        assert list(data["alpha"]) == sorted(data["alpha"])

    def test_file_ends_with_newline(self, tmp_path):
        path = tmp_path / "ids.json"
        JsonIdentityStore(path).write("nl", "hc", "t")
        assert path.read_text().endswith("\n")

    def test_remove(self, tmp_path):
        path = tmp_path / "ids.json"
        store = JsonIdentityStore(path)
        store.write("a", "hc-a", "t")
        store.write("b", "hc-b", "t")
        store.remove("a")
        assert store.names() == ["b"]
        assert "a" not in json.loads(path.read_text())

    def test_remove_absent_does_not_create_file(self, tmp_path):
        path = tmp_path / "ids.json"
        JsonIdentityStore(path).remove("nope")
        assert not path.exists()

    def test_no_temp_files_left(self, tmp_path):
        store = JsonIdentityStore(tmp_path / "ids.json")
        store.write("a", "hc-a", "t")
        assert [p.name for p in tmp_path.iterdir()] == ["ids.json"]

    def test_corrupt_json_raises(self, tmp_path):
        path = tmp_path / "ids.json"
        path.write_text("{not json")
        with pytest.raises(IdentityStoreError, match="Cannot read"):
            JsonIdentityStore(path).read("a")

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "ids.json"
        path.write_text("[]")
        with pytest.raises(IdentityStoreError, match="JSON object"):
            JsonIdentityStore(path).names()

    def test_invalid_record_raises(self, tmp_path):
        path = tmp_path / "ids.json"
        path.write_text(json.dumps({"a": {"remote_id": "hc"}}))
        with pytest.raises(IdentityStoreError, match="invalid record"):
            JsonIdentityStore(path).read("a")
