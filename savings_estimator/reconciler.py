"""Startup merge and ongoing sync of the portfolio state.

Three candidate sources feed the state, lowest precedence first: the built-in
zero defaults, the persisted snapshot, and the snapshot embedded in the share
URL. A source only overrides the categories it actually carries, and a broken
source is skipped without affecting the others. After every edit the full
state is written back to both the snapshot store and the URL.
"""

from __future__ import annotations

from copy import deepcopy

from savings_estimator.defaults import CATEGORY_KEYS, demo_state, zero_state
from savings_estimator.normalization import normalize, normalize_portfolio
from savings_estimator.persistence import SnapshotStore, parse_import_json
from savings_estimator.runtime_logging import append_runtime_event, log_recovered_error
from savings_estimator.schema import migrate_category, migrate_portfolio
from savings_estimator.share_link import ShareableLocationStore


class StateReconciler:
    def __init__(self, snapshot_store: SnapshotStore, location_store: ShareableLocationStore):
        self.snapshot_store = snapshot_store
        self.location_store = location_store

    def _purge_legacy_snapshots(self) -> None:
        purge = getattr(self.snapshot_store, "purge_legacy", None)
        if purge is None:
            return
        try:
            removed = purge()
        except Exception as exc:
            log_recovered_error("legacy_snapshot_purge_failed", "Could not purge legacy snapshots.", exc)
            return
        if removed:
            append_runtime_event(
                level="INFO",
                event="legacy_snapshot_purged",
                message="Removed snapshots from an older schema version.",
                context={"keys": removed},
            )

    def _overlay(self, state: dict, source: str, loader) -> dict:
        try:
            raw = loader()
            if raw is None:
                return state
            merged, warnings, unknown_keys = migrate_portfolio(raw, base=state)
        except Exception as exc:
            log_recovered_error(f"{source}_snapshot_unreadable", f"Skipped unreadable {source} snapshot.", exc)
            return state
        if warnings or unknown_keys:
            append_runtime_event(
                level="WARNING",
                event=f"{source}_snapshot_migrated",
                message=f"{source.capitalize()} snapshot loaded with corrections.",
                context={"warnings": warnings, "unknown_keys": unknown_keys},
            )
        return merged

    def load(self) -> dict:
        """Build the authoritative state: defaults < persisted < URL, then normalize."""
        self._purge_legacy_snapshots()
        state = zero_state()
        state = self._overlay(state, "persisted", self.snapshot_store.load)
        state = self._overlay(state, "url", self.location_store.load)
        return normalize_portfolio(state)

    def on_change(self, state: dict) -> None:
        """Write the full state to storage and the share URL; failures are logged only."""
        snapshot = deepcopy(state)
        try:
            self.snapshot_store.save(snapshot)
        except Exception as exc:
            log_recovered_error("snapshot_save_failed", "Could not persist portfolio snapshot.", exc)
        try:
            self.location_store.save(snapshot)
        except Exception as exc:
            log_recovered_error("share_url_sync_failed", "Could not update share URL.", exc)

    def update(self, state: dict, category_key: str, inputs: dict) -> dict:
        new_state = replace_category(state, category_key, inputs)
        self.on_change(new_state)
        return new_state

    def reset(self, state: dict) -> dict:
        new_state = normalize_portfolio(state)
        self.on_change(new_state)
        return new_state

    def clear(self) -> dict:
        return self.reset(zero_state())

    def load_demo(self) -> dict:
        return self.reset(demo_state())

    def import_json(self, raw_json: str | bytes) -> tuple[dict, list[str]]:
        """Replace the whole portfolio from exported or persisted JSON."""
        state, warnings, unknown_keys = parse_import_json(raw_json)
        if unknown_keys:
            warnings.append(f"Ignored unknown categories: {', '.join(unknown_keys)}.")
        return self.reset(state), warnings


def replace_category(state: dict, category_key: str, inputs: dict) -> dict:
    """Return a new state with one category's record replaced as a whole."""
    if category_key not in CATEGORY_KEYS:
        raise KeyError(f"Unknown category: {category_key}")
    record, _ = migrate_category(category_key, inputs)
    new_state = deepcopy(state)
    new_state[category_key] = normalize(category_key, record)
    return new_state
