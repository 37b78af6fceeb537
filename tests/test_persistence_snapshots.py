from __future__ import annotations

import json
from pathlib import Path

import savings_estimator.persistence as persistence
from savings_estimator.defaults import zero_state
from savings_estimator.persistence import (
    SNAPSHOT_KEY,
    LocalSnapshotStore,
    build_snapshot_bundle,
    parse_import_json,
)
from savings_estimator.schema import SCHEMA_VERSION, SNAPSHOT_TYPE


def test_missing_store_loads_nothing(tmp_path):
    assert LocalSnapshotStore(tmp_path / "snapshots.json").load() is None


def test_save_writes_versioned_bundle(tmp_path, demo_portfolio):
    path = tmp_path / "nested" / "snapshots.json"
    store = LocalSnapshotStore(path)
    store.save(demo_portfolio)

    raw = json.loads(path.read_text(encoding="utf-8"))
    bundle = raw[SNAPSHOT_KEY]
    assert bundle["type"] == SNAPSHOT_TYPE
    assert bundle["schema_version"] == SCHEMA_VERSION
    assert "saved_at" in bundle
    assert store.load() == demo_portfolio
    assert not path.with_suffix(".json.tmp").exists()


def test_save_keeps_other_keys(tmp_path, zero_portfolio):
    path = tmp_path / "snapshots.json"
    path.write_text(json.dumps({"unrelated": 1}), encoding="utf-8")
    LocalSnapshotStore(path).save(zero_portfolio)
    assert json.loads(path.read_text(encoding="utf-8"))["unrelated"] == 1


def test_corrupt_store_loads_nothing(tmp_path):
    path = tmp_path / "snapshots.json"
    path.write_text("{not json", encoding="utf-8")
    assert LocalSnapshotStore(path).load() is None
    path.write_text("[1, 2]", encoding="utf-8")
    assert LocalSnapshotStore(path).load() is None


def test_undecodable_store_is_replaced_on_next_save(tmp_path, zero_portfolio):
    path = tmp_path / "snapshots.json"
    path.write_bytes(b"\xff\xfe garbage")
    store = LocalSnapshotStore(path)
    assert store.load() is None
    assert store.purge_legacy() == []

    store.save(zero_portfolio)
    assert json.loads(path.read_text(encoding="utf-8"))[SNAPSHOT_KEY]["inputs"] == zero_portfolio


def test_purge_legacy_removes_only_old_keys(tmp_path, zero_portfolio):
    path = tmp_path / "snapshots.json"
    path.write_text(
        json.dumps({"savings_calc_v1": {"isp": {"units": 9}}, SNAPSHOT_KEY: build_snapshot_bundle(zero_portfolio)}),
        encoding="utf-8",
    )
    store = LocalSnapshotStore(path)
    assert store.purge_legacy() == ["savings_calc_v1"]
    assert store.purge_legacy() == []
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert "savings_calc_v1" not in raw
    assert store.load() == zero_portfolio


def test_store_follows_configured_storage_root(tmp_path, monkeypatch):
    monkeypatch.setattr(persistence, "STORE_DIR", persistence.STORE_DIR)
    monkeypatch.setattr(persistence, "SNAPSHOT_STORE_FILE", persistence.SNAPSHOT_STORE_FILE)
    persistence.configure_storage_root(tmp_path / "data")

    store = LocalSnapshotStore()
    assert store.path == tmp_path / "data" / "snapshots.json"
    assert persistence.storage_root_path() == str((tmp_path / "data").resolve())


def test_storage_root_from_env_expands_user(monkeypatch):
    monkeypatch.setenv("SAVINGS_STORAGE_ROOT", "~/estimates")
    assert persistence.storage_root_from_env() == Path.home() / "estimates"
    monkeypatch.setenv("SAVINGS_STORAGE_ROOT", "  ")
    assert persistence.storage_root_from_env() == Path(".local_store")


def test_parse_import_json_reports_bad_json():
    state, warnings, unknown = parse_import_json("{oops")
    assert state == zero_state()
    assert warnings == ["Could not parse import JSON."]
    assert unknown == []


def test_parse_import_json_accepts_bytes():
    state, warnings, _ = parse_import_json(b'{"inputs": {"mobile": {"units": 4}}}')
    assert state["mobile"]["units"] == 4
    assert warnings == []
