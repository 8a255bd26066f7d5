"""
Reusable Streamlit UI widgets for the coinview dashboard.

Data helpers are pure Python; render helpers import streamlit lazily so the
module stays importable in tests.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any

from coinview.alerting import ErrorRouter
from coinview.client.request import RequestClient
from coinview.config.loader import get_runtime_config
from coinview.normalize.model import ModelOption, VisualizationModel
from coinview.report.aggregate import aggregate, detail_display
from coinview.session import DashboardSession

SESSION_KEY = "coinview_session"


# ---------------------------------------------------------------------------
# Data helpers (no Streamlit dependency)
# ---------------------------------------------------------------------------


def default_range(today: date | None = None) -> tuple[date, date]:
    """Yesterday → today, the range the forms open with."""
    end = today or datetime.now(UTC).date()
    return end - timedelta(days=1), end


def model_summary(model: VisualizationModel) -> dict[str, Any]:
    """Compact counts describing a result model."""
    return {
        "coin": model.coin,
        "points": len(model.price_series),
        "trades": len(model.trade_series),
        "strategies": list(model.signal_series),
        "buys": sum(len(pair.buy) for pair in model.signal_series.values()),
        "sells": sum(len(pair.sell) for pair in model.signal_series.values()),
        "loss_points": None if model.loss_series is None else len(model.loss_series),
        "runs": len(model.run_details),
    }


def model_option_label(option: ModelOption) -> str:
    if option.accuracy is None:
        return option.title
    return f"{option.title} ({option.accuracy:.2f})"


def new_session(channel: Any, config: dict[str, Any] | None = None) -> DashboardSession:
    """Build a session wired to *channel* from the runtime config."""
    cfg = config if config is not None else get_runtime_config()
    return DashboardSession(RequestClient.from_config(cfg), ErrorRouter(channel))


# ---------------------------------------------------------------------------
# Streamlit render helpers (import st lazily to keep module importable in tests)
# ---------------------------------------------------------------------------


def get_session() -> DashboardSession:
    """Return the per-browser session, creating it on first use."""
    import streamlit as st  # noqa: PLC0415

    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = new_session(st.error)
    return st.session_state[SESSION_KEY]


def render_run_details(model: VisualizationModel) -> None:
    """Render one card per backend run summary."""
    import streamlit as st  # noqa: PLC0415

    if not model.run_details:
        st.info("No log found")
        return

    cols = st.columns(min(len(model.run_details), 3))
    for idx, detail in enumerate(model.run_details):
        with cols[idx % len(cols)]:
            st.markdown(f"**{detail.coin}**")
            for label, value in detail_display(detail).items():
                st.caption(f"{label}: {value}")


def render_reports(model: VisualizationModel) -> None:
    """Render per-coin report cards; a malformed report raises."""
    import streamlit as st  # noqa: PLC0415

    metrics = aggregate(model.reports)
    if not metrics:
        st.info("No report returned for this run.")
        return

    cols = st.columns(min(len(metrics), 3))
    for idx, (coin, m) in enumerate(metrics.items()):
        with cols[idx % len(cols)]:
            st.markdown(f"**Coin: {coin}**")
            for label, value in m.to_display().items():
                st.caption(f"{label}: {value}")
