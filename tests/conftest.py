from __future__ import annotations

from copy import deepcopy

import pytest

import savings_estimator.runtime_logging as runtime_logging
from savings_estimator.defaults import demo_state, zero_state
from savings_estimator.normalization import normalize_portfolio


class MemorySnapshotStore:
    def __init__(self, payload=None, *, fail_load: bool = False, fail_save: bool = False):
        self.payload = deepcopy(payload)
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.saves = 0

    def load(self):
        if self.fail_load:
            raise OSError("storage unavailable")
        return deepcopy(self.payload)

    def save(self, state: dict) -> None:
        if self.fail_save:
            raise OSError("storage unavailable")
        self.payload = deepcopy(state)
        self.saves += 1


@pytest.fixture(autouse=True)
def runtime_log_file(tmp_path, monkeypatch):
    log_dir = tmp_path / "runtime_logs"
    monkeypatch.setattr(runtime_logging, "LOG_DIR", log_dir)
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", log_dir / "runtime_events.jsonl")
    return log_dir / "runtime_events.jsonl"


@pytest.fixture
def zero_portfolio() -> dict:
    return normalize_portfolio(zero_state())


@pytest.fixture
def demo_portfolio() -> dict:
    return normalize_portfolio(demo_state())


@pytest.fixture
def per_unit_inputs() -> dict:
    return {
        "mode": "perUnit",
        "units": 10,
        "current_monthly": 60.0,
        "proposed_monthly": 30.0,
        "one_time_cost": 1200.0,
        "term_months": 12,
        "enabled": True,
    }
