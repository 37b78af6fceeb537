"""CSV and JSON export of the portfolio and its totals."""

from __future__ import annotations

import json

import pandas as pd

from savings_estimator.aggregate import category_frame
from savings_estimator.defaults import CATEGORY_KEYS


CSV_COLUMNS = [
    "Category",
    "Mode",
    "Units",
    "Current",
    "Proposed",
    "Monthly Savings",
    "Annual Savings",
    "Term Months",
    "Lifetime Savings",
    "One-time Cost",
]

CSV_FILE_NAME = "savings-estimate.csv"
JSON_FILE_NAME = "savings-estimate.json"


def export_frame(state: dict, totals: dict) -> pd.DataFrame:
    rows = category_frame(state)[CSV_COLUMNS].astype(object)
    totals_row = pd.DataFrame(
        [
            {
                "Category": "TOTALS",
                "Mode": "",
                "Units": "",
                "Current": "",
                "Proposed": "",
                "Monthly Savings": totals["monthly_savings"],
                "Annual Savings": totals["annual_savings"],
                "Term Months": "",
                "Lifetime Savings": totals["lifetime_savings"],
                "One-time Cost": totals["one_time"],
            }
        ],
        columns=CSV_COLUMNS,
    )
    return pd.concat([rows, totals_row], ignore_index=True)


def export_csv(state: dict, totals: dict) -> str:
    return export_frame(state, totals).to_csv(index=False, lineterminator="\n")


def export_json(state: dict, totals: dict) -> str:
    inputs = {key: state[key] for key in CATEGORY_KEYS if key in state}
    return json.dumps({"inputs": inputs, "totals": totals}, indent=2)
