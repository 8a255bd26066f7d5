"""Streamlit app for running backtest scenarios against the free-coin backend."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import streamlit as st
import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from coinview.config.loader import section, set_runtime_config
from coinview.errors import MalformedPayload
from coinview.gui.charts import plot_model
from coinview.gui.widgets import (
    default_range,
    get_session,
    model_summary,
    render_reports,
    render_run_details,
)
from coinview.scenario.forms import INTERVAL_CHOICES, RunForm
from coinview.scenario.params import Operation


def _load_config() -> tuple[dict[str, Any], str | None]:
    try:
        return set_runtime_config(None), None
    except (OSError, ValueError, yaml.YAMLError) as exc:  # pragma: no cover - display in UI
        return {}, str(exc)


st.set_page_config(page_title="Scenario — coinview", page_icon="🎯", layout="wide")

config, config_error = _load_config()
if config_error:
    st.error(f"Could not load configuration: {config_error}")
    st.stop()

logging.basicConfig(
    level=getattr(logging, str(config.get("log_level", "INFO")).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

st.title("🎯 Run Scenario")
backend = section("backend", config)
st.caption(f"Backend: {backend.get('base_url')}")

session = get_session()
defaults = section("scenario", config)
coins = list(config.get("coins", ["BTC", "ETH"]))
default_from, default_to = default_range()

# ------------------------------------------------------------------
# Form
# ------------------------------------------------------------------
with st.form("scenario"):
    col_coin, col_from, col_to, col_interval = st.columns(4)
    with col_coin:
        coin = st.selectbox(
            "Coin",
            coins,
            index=coins.index(defaults.get("coin", coins[0])) if defaults.get("coin") in coins else 0,
        )
    with col_from:
        from_date = st.date_input("From", value=default_from)
    with col_to:
        to_date = st.date_input("To", value=default_to)
    with col_interval:
        interval = st.selectbox(
            "Interval",
            INTERVAL_CHOICES,
            index=INTERVAL_CHOICES.index(int(defaults.get("interval", 15))),
        )

    col_prev, col_next = st.columns(2)
    with col_prev:
        prev = st.slider("Look back", min_value=0, max_value=10, value=int(defaults.get("prev", 3)))
    with col_next:
        next_ = st.slider("Look ahead", min_value=0, max_value=10, value=int(defaults.get("next", 1)))

    submitted = st.form_submit_button("Run Scenario")

if submitted:
    try:
        form = RunForm(
            coin=coin,
            from_date=from_date,
            to_date=to_date,
            interval=interval,
            prev=prev,
            next=next_,
        )
    except ValueError as exc:
        session.router.report(exc)
    else:
        with st.spinner("Running scenario..."):
            session.run_scenario(form)

# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------
model = session.result(Operation.RUN)
if model is None:
    st.info("Run a scenario to see price, trades and signals.")
    st.stop()

summary = model_summary(model)
m1, m2, m3, m4 = st.columns(4)
m1.metric("Coin", summary["coin"])
m2.metric("Price points", f"{summary['points']:,}")
m3.metric("Buys", f"{summary['buys']:,}")
m4.metric("Sells", f"{summary['sells']:,}")

show_trades = st.checkbox("Show trades", value=False)
st.pyplot(plot_model(model, show_trades=show_trades), clear_figure=True)

st.header("Run details")
render_run_details(model)

if model.reports:
    st.header("Reports")
    try:
        render_reports(model)
    except MalformedPayload as exc:
        session.router.report(exc)
