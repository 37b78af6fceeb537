from __future__ import annotations

from copy import deepcopy

import pytest

from savings_estimator.defaults import CATEGORY_KEYS, DEMO_DEFAULTS, ZERO_DEFAULTS
from savings_estimator.normalization import NORMALIZATION_RULES, normalize, normalize_portfolio


def _variants(key: str) -> list[dict]:
    base = deepcopy(DEMO_DEFAULTS[key])
    flipped = {**base, "mode": "flat" if base["mode"] == "perUnit" else "perUnit"}
    out = [deepcopy(ZERO_DEFAULTS[key]), base, flipped, {**base, "units": 0, "current_monthly": 0.0}]
    if key == "isp":
        out.append({**base, "isp_mode": "new", "resell_price": 80.0})
        out.append({k: v for k, v in {**base, "isp_mode": "new"}.items() if k != "resell_price"})
    if key == "biznet":
        out.append({**base, "bulk_agreement": True})
    return out


def test_every_category_has_a_rule():
    assert set(NORMALIZATION_RULES) == set(CATEGORY_KEYS)


@pytest.mark.parametrize("key", CATEGORY_KEYS)
def test_normalize_is_idempotent(key):
    for inputs in _variants(key):
        once = normalize(key, inputs)
        assert normalize(key, once) == once


def test_normalize_does_not_mutate_input():
    raw = deepcopy(ZERO_DEFAULTS["voip"])
    normalize("voip", raw)
    assert raw == ZERO_DEFAULTS["voip"]


def test_unused_voip_has_no_fixed_charge():
    raw = {**ZERO_DEFAULTS["voip"], "mode": "perUnit", "units": 0, "current_monthly": 0.0, "proposed_monthly": 30.0}
    assert normalize("voip", raw)["proposed_monthly"] == 0


def test_per_unit_voip_needs_units_and_rate_to_count_as_used():
    raw = {**ZERO_DEFAULTS["voip"], "mode": "perUnit", "units": 5, "current_monthly": 0.0}
    assert normalize("voip", raw)["proposed_monthly"] == 0
    raw["current_monthly"] = 20.0
    assert normalize("voip", raw)["proposed_monthly"] == 30


def test_used_flat_voip_gets_fixed_price():
    raw = {**ZERO_DEFAULTS["voip"], "current_monthly": 600.0, "proposed_monthly": 999.0}
    assert normalize("voip", raw)["proposed_monthly"] == 30


def test_biznet_forced_flat_and_priced_by_bulk_agreement():
    raw = {**DEMO_DEFAULTS["biznet"], "mode": "perUnit", "proposed_monthly": 5.0}
    assert normalize("biznet", raw)["mode"] == "flat"
    assert normalize("biznet", raw)["proposed_monthly"] == 120
    raw["bulk_agreement"] = True
    assert normalize("biznet", raw)["proposed_monthly"] == 0


def test_existing_isp_applies_project_fee_and_fixed_rate():
    raw = {**DEMO_DEFAULTS["isp"], "mode": "flat", "proposed_monthly": 1.0, "one_time_cost": 0.0}
    out = normalize("isp", raw)
    assert out["mode"] == "perUnit"
    assert out["proposed_monthly"] == 32
    assert out["one_time_cost"] == 5000
    assert out["current_monthly"] == raw["current_monthly"]


def test_new_isp_uses_resell_price_and_waives_project_fee():
    raw = {**DEMO_DEFAULTS["isp"], "isp_mode": "new", "resell_price": 70.0}
    out = normalize("isp", raw)
    assert out["current_monthly"] == 70
    assert out["proposed_monthly"] == 32
    assert out["one_time_cost"] == 0
    missing = {k: v for k, v in raw.items() if k != "resell_price"}
    assert normalize("isp", missing)["current_monthly"] == 65


def test_mobile_and_unknown_keys_pass_through():
    raw = deepcopy(DEMO_DEFAULTS["mobile"])
    assert normalize("mobile", raw) == raw
    assert normalize("satellite", {"x": 1}) == {"x": 1}


def test_normalize_portfolio_applies_each_rule():
    out = normalize_portfolio(deepcopy(ZERO_DEFAULTS))
    assert out["voip"]["proposed_monthly"] == 0
    assert out["isp"]["one_time_cost"] == 5000
    assert out["biznet"]["proposed_monthly"] == 120
