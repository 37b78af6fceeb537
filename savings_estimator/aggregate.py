"""Portfolio totals, chart series, and partner fee calculations."""

from __future__ import annotations

import pandas as pd

from savings_estimator.defaults import CATEGORY_KEYS, CATEGORY_LABELS, FEE_RATE, ISP_BULK_FEE
from savings_estimator.kpis import compute_category_kpis
from savings_estimator.normalization import normalize


SCOPES = {"all", "selected"}

SUMMED_KPI_FIELDS = (
    "current",
    "proposed",
    "monthly_savings",
    "annual_savings",
    "lifetime_savings",
    "door_benefit",
)


def _ordered_keys(state: dict) -> list[str]:
    return [k for k in CATEGORY_KEYS if k in state]


def included_keys(state: dict, scope: str = "all", active: str | None = None) -> list[str]:
    """Enabled categories, narrowed to ``active`` when scope is ``selected``."""
    if scope not in SCOPES:
        raise ValueError(f"Unsupported scope: {scope}")
    keys = [k for k in _ordered_keys(state) if state[k].get("enabled")]
    if scope == "selected":
        keys = [k for k in keys if k == active]
    return keys


def aggregate(state: dict, scope: str = "all", active: str | None = None) -> dict:
    totals = {field: 0.0 for field in SUMMED_KPI_FIELDS}
    totals["one_time"] = 0.0
    for key in included_keys(state, scope, active):
        kpi = compute_category_kpis(key, state[key])
        for field in SUMMED_KPI_FIELDS:
            totals[field] += kpi[field]
        totals["one_time"] += float(state[key].get("one_time_cost") or 0.0)
    return totals


def chart_series(state: dict, scope: str = "all", active: str | None = None) -> list[dict]:
    series = []
    for key in included_keys(state, scope, active):
        value = compute_category_kpis(key, state[key])["annual_savings"]
        if value > 0:
            series.append({"name": CATEGORY_LABELS[key], "value": value})
    return series


def annual_savings_by_category(state: dict) -> dict[str, float]:
    """Annual savings for every category, ignoring enabled flags and scope."""
    return {key: compute_category_kpis(key, state[key])["annual_savings"] for key in _ordered_keys(state)}


def compute_fee(
    state: dict,
    scope: str = "all",
    active: str | None = None,
    fee_rate: float = FEE_RATE,
    bulk_fee: float = ISP_BULK_FEE,
) -> dict:
    """Partner fee and net savings.

    The fee base leaves out door-fee benefits and is floored per category
    before summing; the net is taken against the headline annual savings,
    which still include those benefits.
    """
    base_annual = 0.0
    for key in included_keys(state, scope, active):
        kpi = compute_category_kpis(key, state[key])
        base_annual += max(0.0, kpi["annual_savings"] - kpi["door_benefit"])

    isp = state.get("isp") or {}
    applied_bulk_fee = float(bulk_fee) if isp.get("enabled") else 0.0
    fee = fee_rate * base_annual + applied_bulk_fee
    total_annual = aggregate(state, scope, active)["annual_savings"]
    return {
        "base_annual": base_annual,
        "bulk_fee": applied_bulk_fee,
        "fee": fee,
        "net": max(0.0, total_annual - fee),
    }


def category_frame(state: dict) -> pd.DataFrame:
    """One row per category with effective inputs and KPIs."""
    rows = []
    for key in _ordered_keys(state):
        effective = normalize(key, state[key])
        kpi = compute_category_kpis(key, state[key])
        rows.append(
            {
                "Key": key,
                "Category": CATEGORY_LABELS[key],
                "Enabled": bool(effective.get("enabled")),
                "Mode": effective["mode"],
                "Units": int(effective["units"]),
                "Current": float(effective["current_monthly"]),
                "Proposed": float(effective["proposed_monthly"]),
                "Current Monthly Total": kpi["current"],
                "Proposed Monthly Total": kpi["proposed"],
                "Monthly Savings": kpi["monthly_savings"],
                "Annual Savings": kpi["annual_savings"],
                "Term Months": int(effective["term_months"]),
                "Lifetime Savings": kpi["lifetime_savings"],
                "One-time Cost": float(effective["one_time_cost"]),
                "Door Benefit": kpi["door_benefit"],
                "ROI": kpi["roi"],
                "Payback Months": kpi["payback_months"],
                "Reduction": kpi["reduction"],
            }
        )
    return pd.DataFrame(rows)
