"""Field labels, help text, and which inputs each category lets users edit."""

from __future__ import annotations

from typing import Any

from savings_estimator.defaults import BIZNET_FIXED_PROPOSED, CATEGORY_LABELS, CATEGORY_KEYS
from savings_estimator.formatting import currency, pct
from savings_estimator.kpis import compute_category_kpis


FIELD_HELP: dict[str, str] = {
    "isp_mode": "Existing = current bulk terms. New = model a new agreement.",
    "isp_units": "Number of dwellings covered.",
    "units": "Count of billable units in per-unit mode.",
    "bulk_agreement": f"If enabled, proposed becomes $0; otherwise {currency(BIZNET_FIXED_PROPOSED)}/mo.",
    "resell_price": "Customer-facing price per unit.",
    "door_fee_per_unit": "One-time fee to property; included in savings; excluded from the partner fee.",
    "one_time_cost": "Upfront project cost (equipment, install, conversion).",
    "term_months": "Contract horizon used for lifetime savings; 0 means not applicable.",
    "reduction": "Percentage decrease from current to proposed monthly.",
    "payback_months": "Months to recover one-time costs.",
    "roi": "(Annual savings - one-time costs) / one-time costs. Door-fee benefits are not charged the partner fee.",
}

# Inputs whose value normalization derives or fixes.
_LOCKED_FIELDS = {
    "voip": {"proposed_monthly"},
    "biznet": {"mode", "proposed_monthly"},
}


def _is_new_isp(key: str, inputs: dict) -> bool:
    return key == "isp" and inputs.get("isp_mode") == "new"


def visible_fields(key: str, inputs: dict) -> list[str]:
    """Input fields the category form shows, in display order."""
    if key == "isp":
        if _is_new_isp(key, inputs):
            return ["isp_mode", "units", "resell_price", "door_fee_per_unit"]
        return ["isp_mode", "units", "current_monthly", "proposed_monthly"]
    fields = ["bulk_agreement"] if key == "biznet" else ["mode"]
    if key != "biznet" and inputs.get("mode") == "perUnit":
        fields.append("units")
    return fields + ["current_monthly", "proposed_monthly", "one_time_cost", "term_months"]


def locked_fields(key: str, inputs: dict) -> set[str]:
    if key == "isp":
        if _is_new_isp(key, inputs):
            return {"mode", "current_monthly", "proposed_monthly", "one_time_cost"}
        return {"mode", "proposed_monthly", "one_time_cost"}
    return set(_LOCKED_FIELDS.get(key, set()))


def field_label(key: str, field: str, inputs: dict) -> str:
    per_unit = inputs.get("mode") == "perUnit"
    if field == "units":
        return "Units / doors" if key == "isp" else "Units / seats / lines"
    if field == "current_monthly":
        return "Current per-unit" if per_unit else "Current monthly total"
    if field == "proposed_monthly":
        base = "Proposed per-unit" if per_unit else "Proposed monthly"
        if "proposed_monthly" in locked_fields(key, inputs):
            return f"{base} (fixed)"
        return base if per_unit else "Proposed monthly total"
    labels = {
        "isp_mode": "Agreement",
        "mode": "Per-unit pricing",
        "bulk_agreement": "Bulk Service / Marketing Agreement",
        "resell_price": "Resell price per unit",
        "door_fee_per_unit": "Door fee per unit",
        "one_time_cost": "One-time project cost",
        "term_months": "Contract term (months)",
        "enabled": "Include in totals",
    }
    return labels.get(field, field)


def field_help(key: str, field: str) -> str | None:
    if key == "isp" and field == "units":
        return FIELD_HELP["isp_units"]
    return FIELD_HELP.get(field)


def kpi_labels(key: str, inputs: dict) -> dict[str, str]:
    if _is_new_isp(key, inputs):
        return {
            "current": "Resell revenue (monthly)",
            "proposed": "Wholesale cost (monthly)",
            "monthly_savings": "Monthly profit",
            "annual_savings": "Annual profit",
        }
    return {
        "current": "Current monthly",
        "proposed": "Proposed monthly",
        "monthly_savings": "Monthly savings",
        "annual_savings": "Annual savings",
    }


def advisory_notes(state: dict[str, Any]) -> list[str]:
    """Flag enabled categories where the proposal costs more than today."""
    notes: list[str] = []
    for key in CATEGORY_KEYS:
        inputs = state.get(key)
        if not inputs or not inputs.get("enabled"):
            continue
        kpi = compute_category_kpis(key, inputs)
        if kpi["current"] > 0 and kpi["proposed"] > kpi["current"]:
            increase = (kpi["proposed"] - kpi["current"]) / kpi["current"]
            notes.append(
                f"{CATEGORY_LABELS[key]}: proposed {currency(kpi['proposed'])}/mo exceeds current "
                f"{currency(kpi['current'])}/mo (+{pct(increase)}); savings are reported as $0."
            )
    return notes
