from copy import deepcopy

import pandas as pd
import plotly.express as px
import streamlit as st

from savings_estimator.aggregate import aggregate, annual_savings_by_category, chart_series, compute_fee
from savings_estimator.defaults import CATEGORY_KEYS, CATEGORY_LABELS, FEE_RATE, INT_FIELDS
from savings_estimator.embed import mount_resize_listener
from savings_estimator.export import CSV_FILE_NAME, JSON_FILE_NAME, export_csv, export_json
from savings_estimator.formatting import currency, lifetime_label, payback_label, pct, roi_label
from savings_estimator.input_metadata import (
    advisory_notes,
    field_help,
    field_label,
    kpi_labels,
    locked_fields,
    visible_fields,
)
from savings_estimator.kpis import compute_category_kpis
from savings_estimator.persistence import (
    LocalSnapshotStore,
    configure_storage_root,
    storage_root_from_env,
    storage_root_path,
)
from savings_estimator.reconciler import StateReconciler
from savings_estimator.runtime_logging import (
    append_runtime_event,
    configure_log_root,
    install_global_exception_logging,
    read_runtime_events,
    runtime_log_path,
)
from savings_estimator.share_link import QueryParamLocationStore, mount_share_url_sync


install_global_exception_logging()


UI_DEFAULTS = {
    "active_category": "isp",
    "scope": "all",
    "view": "Simple",
    "widget_rev": 0,
    "import_warnings": [],
    "share_outbox": {},
}

SCOPE_LABELS = {"all": "All categories", "selected": "Selected only"}
ISP_MODE_LABELS = {"current": "Existing", "new": "New"}
CHART_COLORS = ["#1C3256", "#2f5ea5", "#7aa2d2", "#5a8cc4", "#9ab7dc", "#c5d6ec"]
WHOLE_DOLLAR_FIELDS = {"one_time_cost", "door_fee_per_unit"}


def _reconciler() -> StateReconciler:
    root = storage_root_from_env()
    configure_storage_root(root)
    configure_log_root(root)
    location = QueryParamLocationStore(st.query_params, st.session_state["share_outbox"])
    return StateReconciler(LocalSnapshotStore(), location)


def _widget_key(category_key: str, field: str) -> str:
    # The revision suffix gives every widget a fresh identity after a whole-portfolio reset.
    return f"{category_key}__{field}__{st.session_state['widget_rev']}"


def _on_category_edit(category_key: str) -> None:
    state = st.session_state["portfolio"]
    record = deepcopy(state[category_key])
    for field in ("enabled", *visible_fields(category_key, record)):
        wkey = _widget_key(category_key, field)
        if wkey not in st.session_state:
            continue
        value = st.session_state[wkey]
        if field == "mode":
            value = "perUnit" if value else "flat"
        record[field] = value
    st.session_state["portfolio"] = _reconciler().update(state, category_key, record)


def _replace_portfolio(state: dict) -> None:
    st.session_state["portfolio"] = state
    st.session_state["widget_rev"] += 1


def _on_clear() -> None:
    _replace_portfolio(_reconciler().clear())
    append_runtime_event(level="INFO", event="portfolio_cleared", message="Portfolio reset to zero defaults.")


def _on_load_demo() -> None:
    _replace_portfolio(_reconciler().load_demo())
    st.session_state["active_category"] = "isp"
    append_runtime_event(level="INFO", event="portfolio_demo_loaded", message="Demo portfolio loaded.")


def _on_scope_change() -> None:
    st.session_state["scope"] = st.session_state["_scope_choice"]


def _render_field(category_key: str, field: str, inputs: dict, locked: bool) -> None:
    label = field_label(category_key, field, inputs)
    kwargs = {"help": field_help(category_key, field)}
    if locked:
        kwargs["disabled"] = True
    else:
        kwargs.update(key=_widget_key(category_key, field), on_change=_on_category_edit, args=(category_key,))

    if field == "isp_mode":
        options = list(ISP_MODE_LABELS)
        st.radio(
            label,
            options,
            index=options.index(inputs.get("isp_mode", "current")),
            format_func=ISP_MODE_LABELS.get,
            horizontal=True,
            **kwargs,
        )
    elif field == "mode":
        st.toggle(label, value=inputs["mode"] == "perUnit", **kwargs)
    elif field == "bulk_agreement":
        st.toggle(label, value=bool(inputs.get("bulk_agreement")), **kwargs)
    elif field in INT_FIELDS:
        st.number_input(label, min_value=0, step=1, value=int(inputs[field]), **kwargs)
    else:
        step = 1.0 if field in WHOLE_DOLLAR_FIELDS else 0.01
        st.number_input(label, min_value=0.0, step=step, value=float(inputs[field]), format="%.2f", **kwargs)


def _render_category_card(category_key: str, inputs: dict) -> None:
    with st.container(border=True):
        head, switch = st.columns([4, 1])
        head.subheader(CATEGORY_LABELS[category_key])
        head.caption("Quickly model savings and ROI for this area.")
        with switch:
            st.toggle(
                field_label(category_key, "enabled", inputs),
                value=bool(inputs["enabled"]),
                key=_widget_key(category_key, "enabled"),
                on_change=_on_category_edit,
                args=(category_key,),
            )

        locked = locked_fields(category_key, inputs)
        cols = st.columns(2)
        for idx, field in enumerate(visible_fields(category_key, inputs)):
            with cols[idx % 2]:
                _render_field(category_key, field, inputs, field in locked)

        kpis = compute_category_kpis(category_key, inputs)
        labels = kpi_labels(category_key, inputs)
        m1, m2, m3, m4 = st.columns(4)
        m1.metric(labels["current"], currency(kpis["current"]))
        m2.metric(labels["proposed"], currency(kpis["proposed"]))
        m3.metric(labels["monthly_savings"], currency(kpis["monthly_savings"]))
        m4.metric(labels["annual_savings"], currency(kpis["annual_savings"]))
        r1, r2, r3 = st.columns(3)
        r1.metric("Reduction", pct(kpis["reduction"]), help=field_help(category_key, "reduction"))
        r2.metric("Payback", payback_label(kpis["payback_months"]), help=field_help(category_key, "payback_months"))
        r3.metric("ROI (first year)", roi_label(kpis["roi"]), help=field_help(category_key, "roi"))


def _render_totals(state: dict, scope: str, active: str) -> None:
    st.radio(
        "Totals & chart",
        list(SCOPE_LABELS),
        index=list(SCOPE_LABELS).index(scope),
        format_func=SCOPE_LABELS.get,
        horizontal=True,
        key="_scope_choice",
        on_change=_on_scope_change,
    )
    totals = aggregate(state, scope, active)
    t1, t2, t3 = st.columns(3)
    t1.metric("Current monthly", currency(totals["current"]))
    t2.metric("Proposed monthly", currency(totals["proposed"]))
    t3.metric("One-time costs", currency(totals["one_time"]))
    t4, t5, t6 = st.columns(3)
    t4.metric("Monthly savings", currency(totals["monthly_savings"]))
    t5.metric("Annual savings", currency(totals["annual_savings"]))
    t6.metric("Lifetime (term)", lifetime_label(totals["lifetime_savings"]))

    series = chart_series(state, scope, active)
    if series:
        fig = px.pie(
            pd.DataFrame(series),
            names="name",
            values="value",
            hole=0.55,
            color_discrete_sequence=CHART_COLORS,
            title=f"Annual savings: {currency(totals['annual_savings'])}",
        )
        fig.update_traces(hovertemplate="%{label}: $%{value:,.0f}<extra></extra>")
        st.plotly_chart(fig, width="stretch")
    else:
        st.info("Enter values to see the chart.")


def _render_net_savings(state: dict, scope: str, active: str) -> None:
    fee = compute_fee(state, scope, active)
    st.subheader("Net savings after partner fee")
    st.metric("Net annual savings", currency(fee["net"]))
    basis = f"Based on {currency(fee['base_annual'])} annual savings (excl. door-fee benefits)"
    if fee["bulk_fee"] > 0:
        basis += f", plus {currency(fee['bulk_fee'])} one-time bulk agreement fee (ISP)"
    st.caption(
        f"Partner fee = {FEE_RATE:.0%} of annual savings (excluding door-fee benefits) "
        f"+ bulk agreement fee (ISP, if any). {basis}."
    )


def _render_export_import(state: dict, scope: str, active: str) -> None:
    totals = aggregate(state, scope, active)
    with st.expander("Export / Import", expanded=False):
        c1, c2 = st.columns(2)
        c1.download_button("Download CSV", export_csv(state, totals), file_name=CSV_FILE_NAME, mime="text/csv")
        c2.download_button(
            "Download JSON", export_json(state, totals), file_name=JSON_FILE_NAME, mime="application/json"
        )
        uploaded = st.file_uploader("Import JSON", type=["json"], key=f"import_file_{st.session_state['widget_rev']}")
        if uploaded is not None and st.button("Apply Import", key="apply_import"):
            new_state, warnings = _reconciler().import_json(uploaded.getvalue())
            if "Could not parse import JSON." in warnings:
                append_runtime_event(
                    level="WARNING",
                    event="import_failed",
                    message="Uploaded file is not valid JSON.",
                    context={"file_name": uploaded.name},
                )
            _replace_portfolio(new_state)
            st.session_state["import_warnings"] = warnings
            st.rerun()
        for warning in st.session_state["import_warnings"]:
            st.caption(f"Import note: {warning}")


def _render_diagnostics() -> None:
    with st.expander("Diagnostics", expanded=False):
        st.caption(f"Snapshot store: `{storage_root_path()}`")
        st.caption(f"Runtime log: `{runtime_log_path()}`")
        events = read_runtime_events(limit=50)
        if events:
            st.dataframe(pd.DataFrame(events)[["timestamp_utc", "level", "event", "message"]], width="stretch")
        else:
            st.caption("No runtime events recorded.")


st.set_page_config(page_title="Savings Estimator", layout="wide")

for k, v in UI_DEFAULTS.items():
    st.session_state.setdefault(k, deepcopy(v))
if "portfolio" not in st.session_state:
    reconciler = _reconciler()
    st.session_state["portfolio"] = reconciler.load()
    reconciler.on_change(st.session_state["portfolio"])

st.title("Savings Estimator")
st.caption(
    "Model savings across ISP bulk service, VoIP/POTS, Business Internet, and mobility. "
    "Toggle per-unit or flat pricing, add one-time costs, and see payback and ROI instantly."
)

v_col, clear_col, demo_col = st.columns([3, 1, 1])
v_col.radio("View", ["Simple", "Advanced"], horizontal=True, key="view")
clear_col.button("Clear", key="clear_portfolio", on_click=_on_clear)
demo_col.button("Load demo", key="load_demo", on_click=_on_load_demo)

portfolio = st.session_state["portfolio"]
badges = annual_savings_by_category(portfolio)
st.radio(
    "Category",
    list(CATEGORY_KEYS),
    format_func=CATEGORY_LABELS.get,
    horizontal=True,
    key="active_category",
)
st.caption(" · ".join(f"{CATEGORY_LABELS[k]}: {currency(badges[k])}/yr" for k in CATEGORY_KEYS))

active = st.session_state["active_category"]
scope = st.session_state["scope"]
_render_category_card(active, portfolio[active])

if st.session_state["view"] == "Advanced":
    _render_totals(portfolio, scope, active)

_render_net_savings(portfolio, scope, active)
for note in advisory_notes(portfolio):
    st.caption(note)

_render_export_import(portfolio, scope, active)
_render_diagnostics()

st.caption(
    "Want these savings validated for your portfolio? A review of bills, contracts, and usage firms up the ROI."
)

mount_share_url_sync(st.session_state["share_outbox"])
mount_resize_listener()
