"""Display formatting for money, ratios, and KPI sentinels."""

from __future__ import annotations

import math


NOT_APPLICABLE = "—"
INFINITY_LABEL = "∞"


def currency(value: float) -> str:
    amount = float(value or 0.0)
    text = f"${abs(amount):,.0f}"
    return f"-{text}" if round(amount) < 0 else text


def pct(value: float) -> str:
    """Percent with one decimal, clamped to the 0-100% range."""
    ratio = float(value or 0.0)
    if math.isnan(ratio):
        ratio = 0.0
    return f"{max(0.0, min(1.0, ratio)) * 100:.1f}%"


def roi_label(roi: float) -> str:
    return pct(roi) if math.isfinite(roi) else INFINITY_LABEL


def payback_label(months: float) -> str:
    return f"{months:.1f} mo" if months > 0 else NOT_APPLICABLE


def lifetime_label(value: float) -> str:
    return currency(value) if value > 0 else NOT_APPLICABLE
