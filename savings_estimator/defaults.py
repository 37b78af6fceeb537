"""Category catalog, default portfolios, and pricing constants."""

from __future__ import annotations

from copy import deepcopy


CATEGORY_KEYS = ("isp", "voip", "biznet", "mobile")

CATEGORY_LABELS = {
    "isp": "ISP Bulk Service",
    "voip": "VoIP and POTS Cost Optimization",
    "biznet": "Business Internet",
    "mobile": "Mobile & Connectivity Plans",
}

MODES = {"flat", "perUnit"}
ISP_MODES = {"current", "new"}

# Fixed pricing applied by normalization.
ISP_PROPOSED_PER_UNIT = 32.0
ISP_PROJECT_FEE = 5000.0
ISP_DEFAULT_RESELL_PRICE = 65.0
ISP_DEFAULT_DOOR_FEE = 200.0
VOIP_FIXED_PROPOSED = 30.0
BIZNET_FIXED_PROPOSED = 120.0

# Partner fee: share of annual savings plus a flat fee when ISP bulk service is in play.
FEE_RATE = 0.30
ISP_BULK_FEE = 5000.0

INT_FIELDS = ("units", "term_months")
FLOAT_FIELDS = ("current_monthly", "proposed_monthly", "one_time_cost", "resell_price", "door_fee_per_unit")
BOOL_FIELDS = ("enabled", "bulk_agreement")


ZERO_DEFAULTS: dict[str, dict] = {
    "isp": {
        "mode": "perUnit",
        "units": 0,
        "current_monthly": 0.0,
        "proposed_monthly": 32.0,
        "one_time_cost": 5000.0,
        "term_months": 0,
        "enabled": True,
        "isp_mode": "current",
        "resell_price": 65.0,
        "door_fee_per_unit": 200.0,
    },
    "voip": {
        "mode": "flat",
        "units": 0,
        "current_monthly": 0.0,
        "proposed_monthly": 30.0,
        "one_time_cost": 0.0,
        "term_months": 0,
        "enabled": True,
    },
    "biznet": {
        "mode": "flat",
        "units": 0,
        "current_monthly": 0.0,
        "proposed_monthly": 120.0,
        "one_time_cost": 0.0,
        "term_months": 0,
        "enabled": True,
        "bulk_agreement": False,
    },
    "mobile": {
        "mode": "perUnit",
        "units": 0,
        "current_monthly": 0.0,
        "proposed_monthly": 0.0,
        "one_time_cost": 0.0,
        "term_months": 0,
        "enabled": True,
    },
}

DEMO_DEFAULTS: dict[str, dict] = {
    "isp": {
        "mode": "perUnit",
        "units": 120,
        "current_monthly": 55.0,
        "proposed_monthly": 32.0,
        "one_time_cost": 5000.0,
        "term_months": 0,
        "enabled": True,
        "isp_mode": "current",
        "resell_price": 65.0,
        "door_fee_per_unit": 200.0,
    },
    "voip": {
        "mode": "flat",
        "units": 10,
        "current_monthly": 600.0,
        "proposed_monthly": 30.0,
        "one_time_cost": 0.0,
        "term_months": 0,
        "enabled": True,
    },
    "biznet": {
        "mode": "flat",
        "units": 1,
        "current_monthly": 350.0,
        "proposed_monthly": 120.0,
        "one_time_cost": 0.0,
        "term_months": 0,
        "enabled": True,
        "bulk_agreement": False,
    },
    "mobile": {
        "mode": "perUnit",
        "units": 40,
        "current_monthly": 45.0,
        "proposed_monthly": 28.0,
        "one_time_cost": 0.0,
        "term_months": 24,
        "enabled": True,
    },
}


def zero_state() -> dict[str, dict]:
    return deepcopy(ZERO_DEFAULTS)


def demo_state() -> dict[str, dict]:
    return deepcopy(DEMO_DEFAULTS)
