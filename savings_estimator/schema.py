"""Category input schema: coercion, clamping, and snapshot migration."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

import numpy as np

from savings_estimator.defaults import (
    BOOL_FIELDS,
    CATEGORY_KEYS,
    FLOAT_FIELDS,
    INT_FIELDS,
    ISP_MODES,
    MODES,
    ZERO_DEFAULTS,
    zero_state,
)


SCHEMA_VERSION = 2
SNAPSHOT_TYPE = "savings_snapshot"

# Snapshots written by the browser calculator used camelCase field names.
LEGACY_FIELD_ALIASES = {
    "currentMonthly": "current_monthly",
    "proposedMonthly": "proposed_monthly",
    "oneTimeCost": "one_time_cost",
    "termMonths": "term_months",
    "ispMode": "isp_mode",
    "resellPrice": "resell_price",
    "doorFeePerUnit": "door_fee_per_unit",
    "bulkAgreement": "bulk_agreement",
}

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "no", "n", "off"}


def _parse_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not np.isfinite(num):
        return None
    return num


def coerce_number(value: Any, *, as_int: bool = False) -> int | float:
    """Parse a user-entered number, mapping failures to 0 and clamping to >= 0."""
    num = _parse_number(value)
    if num is None:
        num = 0.0
    num = max(0.0, num)
    if as_int:
        # Half-up, not round-half-even.
        return int(np.floor(num + 0.5))
    return float(num)


def _parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        txt = value.strip().lower()
        if txt in _TRUE_STRINGS:
            return True
        if txt in _FALSE_STRINGS:
            return False
    return None


def coerce_bool(value: Any, default: bool) -> bool:
    parsed = _parse_bool(value)
    return default if parsed is None else parsed


def migrate_category(key: str, raw: Any) -> tuple[dict, list[str]]:
    """Return a complete, clamped input record for one category."""
    if key not in ZERO_DEFAULTS:
        raise KeyError(f"Unknown category: {key}")
    defaults = ZERO_DEFAULTS[key]
    inputs = deepcopy(defaults)
    warnings: list[str] = []
    if not isinstance(raw, Mapping):
        warnings.append(f"{key} ignored because it is not an object.")
        return inputs, warnings

    for field, value in raw.items():
        target = LEGACY_FIELD_ALIASES.get(field, field)
        if target != field and target in raw:
            continue
        if target in inputs:
            inputs[target] = value
        else:
            warnings.append(f"{key}.{field} is not a field of this category and was dropped.")

    inputs["mode"] = str(inputs.get("mode", defaults["mode"]))
    if inputs["mode"] not in MODES:
        warnings.append(f"{key}.mode invalid; reset to {defaults['mode']}.")
        inputs["mode"] = defaults["mode"]

    if "isp_mode" in inputs:
        inputs["isp_mode"] = str(inputs["isp_mode"])
        if inputs["isp_mode"] not in ISP_MODES:
            warnings.append(f"{key}.isp_mode invalid; reset to {defaults['isp_mode']}.")
            inputs["isp_mode"] = defaults["isp_mode"]

    for field in INT_FIELDS + FLOAT_FIELDS:
        if field not in inputs:
            continue
        if _parse_number(inputs[field]) is None:
            warnings.append(f"{key}.{field} invalid and coerced to 0.")
        inputs[field] = coerce_number(inputs[field], as_int=field in INT_FIELDS)

    for field in BOOL_FIELDS:
        if field not in inputs:
            continue
        parsed = _parse_bool(inputs[field])
        if parsed is None:
            warnings.append(f"{key}.{field} invalid and reset to default.")
            parsed = bool(defaults[field])
        inputs[field] = parsed

    return inputs, warnings


def migrate_portfolio(raw: Any, base: dict | None = None) -> tuple[dict, list[str], list[str]]:
    """Overlay a raw snapshot on ``base`` one category at a time.

    Only category keys present in ``raw`` with object values replace the base
    record; every other category keeps the base value.
    """
    state = deepcopy(base) if base is not None else zero_state()
    warnings: list[str] = []
    unknown_keys: list[str] = []
    if not isinstance(raw, Mapping):
        warnings.append("Snapshot ignored because it is not a JSON object.")
        return state, warnings, unknown_keys

    for key, value in raw.items():
        if key not in CATEGORY_KEYS:
            unknown_keys.append(str(key))
            continue
        if not isinstance(value, Mapping):
            warnings.append(f"{key} ignored because it is not an object.")
            continue
        state[key], category_warnings = migrate_category(key, value)
        warnings.extend(category_warnings)
    return state, warnings, sorted(unknown_keys)


def migrate_import_payload(payload: Any) -> tuple[dict, list[str], list[str]]:
    """Accept a snapshot bundle, an export payload, or a bare state map."""
    if not isinstance(payload, Mapping):
        return zero_state(), ["Import payload is not a JSON object."], []

    if payload.get("type") == SNAPSHOT_TYPE:
        state, warnings, unknown = migrate_portfolio(payload.get("inputs", {}))
        version = payload.get("schema_version")
        if version != SCHEMA_VERSION:
            warnings.append(f"Imported schema_version={version}; migrated to schema_version={SCHEMA_VERSION}.")
        return state, warnings, unknown

    if "inputs" in payload:
        # Export payloads carry totals alongside; totals are always recomputed.
        return migrate_portfolio(payload["inputs"])

    state, warnings, unknown = migrate_portfolio(payload)
    warnings.append("Imported bare portfolio JSON without bundle metadata.")
    return state, warnings, unknown
