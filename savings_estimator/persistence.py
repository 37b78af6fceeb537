"""Local snapshot persistence for the active portfolio."""

from __future__ import annotations

import json
import os
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from savings_estimator.schema import SCHEMA_VERSION, SNAPSHOT_TYPE, migrate_import_payload


STORE_DIR = Path(".local_store")
SNAPSHOT_STORE_FILE = STORE_DIR / "snapshots.json"

_DEFAULT_STORE_DIR = Path(".local_store")
_STORAGE_ENV_VAR = "SAVINGS_STORAGE_ROOT"

SNAPSHOT_KEY = f"savings_calc_v{SCHEMA_VERSION}"
# Keys written by earlier schema versions; never merged, purged on load.
LEGACY_SNAPSHOT_KEYS = tuple(f"savings_calc_v{v}" for v in range(1, SCHEMA_VERSION))


class SnapshotStore(Protocol):
    def load(self) -> Any: ...

    def save(self, state: dict) -> None: ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def expand_storage_root(path_value: str | Path | None) -> Path:
    if path_value is None:
        return _DEFAULT_STORE_DIR
    text = str(path_value).strip()
    if not text:
        return _DEFAULT_STORE_DIR
    return Path(os.path.expandvars(os.path.expanduser(text)))


def configure_storage_root(path_value: str | Path | None) -> Path:
    """Point snapshot persistence at a new storage directory."""
    global STORE_DIR, SNAPSHOT_STORE_FILE
    STORE_DIR = expand_storage_root(path_value)
    SNAPSHOT_STORE_FILE = STORE_DIR / "snapshots.json"
    return STORE_DIR


def storage_root_path() -> str:
    return str(STORE_DIR.resolve())


def storage_root_from_env() -> Path:
    return expand_storage_root(os.getenv(_STORAGE_ENV_VAR, ""))


def build_snapshot_bundle(state: dict) -> dict:
    return {
        "type": SNAPSHOT_TYPE,
        "schema_version": SCHEMA_VERSION,
        "saved_at": _now_iso(),
        "inputs": deepcopy(state),
    }


class LocalSnapshotStore:
    """Key/value JSON file holding the latest portfolio under a versioned key."""

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else SNAPSHOT_STORE_FILE

    def _load_store(self) -> dict:
        p = self.path
        if not p.exists():
            return {}
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    def _save_store(self, data: dict) -> None:
        p = self.path
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(f"{p.suffix}.tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(p)

    def purge_legacy(self) -> list[str]:
        """Delete snapshots stored under older schema keys; return the keys removed."""
        store = self._load_store()
        removed = [k for k in LEGACY_SNAPSHOT_KEYS if k in store]
        if removed:
            for key in removed:
                del store[key]
            self._save_store(store)
        return removed

    def load(self) -> Any:
        value = self._load_store().get(SNAPSHOT_KEY)
        if isinstance(value, dict) and value.get("type") == SNAPSHOT_TYPE:
            return deepcopy(value.get("inputs"))
        return deepcopy(value)

    def save(self, state: dict) -> None:
        store = self._load_store()
        store[SNAPSHOT_KEY] = build_snapshot_bundle(state)
        self._save_store(store)


def parse_import_json(raw_json: str | bytes) -> tuple[dict, list[str], list[str]]:
    try:
        payload = json.loads(raw_json)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        state, _, _ = migrate_import_payload(None)
        return state, ["Could not parse import JSON."], []
    return migrate_import_payload(payload)


configure_storage_root(storage_root_from_env())
