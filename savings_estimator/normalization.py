"""Per-category normalization of raw inputs into effective inputs.

Each rule decides which inputs of its category are user-editable and which are
derived or fixed, so the KPI math never has to branch on category.
"""

from __future__ import annotations

from typing import Callable

from savings_estimator.defaults import (
    BIZNET_FIXED_PROPOSED,
    ISP_DEFAULT_RESELL_PRICE,
    ISP_PROJECT_FEE,
    ISP_PROPOSED_PER_UNIT,
    VOIP_FIXED_PROPOSED,
)


NormalizationRule = Callable[[dict], dict]


def _voip_is_used(inputs: dict) -> bool:
    if inputs.get("mode") == "flat":
        return inputs.get("current_monthly", 0) > 0
    return inputs.get("units", 0) > 0 and inputs.get("current_monthly", 0) > 0


def _normalize_voip(inputs: dict) -> dict:
    # Unused service carries no fixed proposed charge.
    return {**inputs, "proposed_monthly": VOIP_FIXED_PROPOSED if _voip_is_used(inputs) else 0.0}


def _normalize_biznet(inputs: dict) -> dict:
    proposed = 0.0 if inputs.get("bulk_agreement") else BIZNET_FIXED_PROPOSED
    return {**inputs, "mode": "flat", "proposed_monthly": proposed}


def _normalize_isp(inputs: dict) -> dict:
    if inputs.get("isp_mode") == "new":
        resell = inputs.get("resell_price")
        if resell is None:
            resell = ISP_DEFAULT_RESELL_PRICE
        return {
            **inputs,
            "mode": "perUnit",
            "current_monthly": resell,
            "proposed_monthly": ISP_PROPOSED_PER_UNIT,
            "one_time_cost": 0.0,
        }
    return {
        **inputs,
        "mode": "perUnit",
        "proposed_monthly": ISP_PROPOSED_PER_UNIT,
        "one_time_cost": ISP_PROJECT_FEE,
    }


def _identity(inputs: dict) -> dict:
    return dict(inputs)


NORMALIZATION_RULES: dict[str, NormalizationRule] = {
    "isp": _normalize_isp,
    "voip": _normalize_voip,
    "biznet": _normalize_biznet,
    "mobile": _identity,
}


def normalize(category_key: str, inputs: dict) -> dict:
    """Return effective inputs for ``category_key``; never mutates ``inputs``."""
    rule = NORMALIZATION_RULES.get(category_key, _identity)
    return rule(inputs)


def normalize_portfolio(state: dict) -> dict:
    return {key: normalize(key, inputs) for key, inputs in state.items()}
