"""Per-category savings KPIs."""

from __future__ import annotations

import math

from savings_estimator.normalization import normalize


def monthly_totals(inputs: dict) -> tuple[float, float]:
    current = float(inputs.get("current_monthly") or 0.0)
    proposed = float(inputs.get("proposed_monthly") or 0.0)
    if inputs.get("mode") == "flat":
        return current, proposed
    units = float(inputs.get("units") or 0)
    return units * current, units * proposed


def door_benefit(inputs: dict) -> float:
    """One-time door fee paid to the property under a new ISP bulk agreement."""
    if inputs.get("isp_mode") != "new":
        return 0.0
    fee = float(inputs.get("door_fee_per_unit") or 0.0)
    units = float(inputs.get("units") or 0)
    if not fee or not units:
        return 0.0
    return fee * units


def compute_kpis(inputs: dict) -> dict:
    """Compute savings KPIs from effective (normalized) inputs."""
    current, proposed = monthly_totals(inputs)
    savings = max(0.0, current - proposed)

    benefit = door_benefit(inputs)
    annual = savings * 12 + benefit

    term = int(inputs.get("term_months") or 0)
    lifetime = savings * term if term > 0 else 0.0

    one_time = float(inputs.get("one_time_cost") or 0.0)
    if one_time > 0:
        # Sub-dollar costs divide by 1.
        roi = (annual - one_time) / max(1.0, one_time)
    else:
        roi = math.inf if annual > 0 else 0.0

    payback = one_time / savings if one_time > 0 and savings > 0 else 0.0
    reduction = (current - proposed) / current if current > 0 else 0.0

    return {
        "current": current,
        "proposed": proposed,
        "monthly_savings": savings,
        "annual_savings": annual,
        "lifetime_savings": lifetime,
        "roi": roi,
        "payback_months": payback,
        "reduction": reduction,
        "door_benefit": benefit,
    }


def compute_category_kpis(category_key: str, inputs: dict) -> dict:
    return compute_kpis(normalize(category_key, inputs))
