"""
Chart data for the dashboard.

Frames are plain pandas objects indexed by UTC instant so any renderer can use
them; the ``plot_*`` helpers build the matplotlib figures the Streamlit pages
show.
"""

from __future__ import annotations

from collections.abc import Sequence

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure

from coinview.normalize.model import HistoryModel, Point, VisualizationModel

PRICE_COLOR = "#b5a13f"
TRADE_COLOR = "#3F51B5"
BUY_COLOR = "#06a40e"
SELL_COLOR = "#cb3b3b"
LOSS_COLOR = "#929dd9"
_FACE = "#1a1f2e"
_BACKGROUND = "#0e1117"

# Extra marker shapes so several strategies stay distinguishable on one chart.
_MARKERS = ("o", "s", "D", "P", "X", "*")


def series_frame(points: Sequence[Point], name: str = "value") -> pd.DataFrame:
    """Points as a one-column frame indexed by ``instant`` (order preserved)."""
    if not points:
        index = pd.DatetimeIndex([], tz="UTC", name="instant")
        return pd.DataFrame({name: pd.Series(dtype="float64", index=index)})
    index = pd.DatetimeIndex([p.instant for p in points], name="instant")
    return pd.DataFrame({name: [p.value for p in points]}, index=index)


def signal_frames(model: VisualizationModel) -> dict[str, tuple[pd.DataFrame, pd.DataFrame]]:
    return {
        key: (series_frame(pair.buy, "buy"), series_frame(pair.sell, "sell"))
        for key, pair in model.signal_series.items()
    }


def _style(fig: Figure, ax: plt.Axes, title: str, ylabel: str) -> None:
    ax.set_title(title, color="white")
    ax.set_ylabel(ylabel, color="white")
    ax.set_facecolor(_FACE)
    fig.patch.set_facecolor(_BACKGROUND)
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444")
    if ax.get_legend_handles_labels()[0]:
        ax.legend(facecolor=_FACE, labelcolor="white")
    fig.tight_layout()


def plot_model(model: VisualizationModel, *, show_trades: bool = False) -> Figure:
    """Price line with buy/sell markers for every strategy in the model."""
    fig, ax = plt.subplots(figsize=(12, 5))
    price = series_frame(model.price_series, "price")
    if not price.empty:
        ax.plot(price.index, price["price"], color=PRICE_COLOR, linewidth=1, label=f"{model.coin}-price")

    if show_trades:
        trades = series_frame(model.trade_series, "trades")
        if not trades.empty:
            ax.plot(
                trades.index,
                trades["trades"],
                color=TRADE_COLOR,
                linewidth=0.8,
                alpha=0.6,
                label=f"{model.coin}-trades",
            )

    for idx, (key, (buy, sell)) in enumerate(signal_frames(model).items()):
        marker = _MARKERS[idx % len(_MARKERS)]
        prefix = model.coin if key == "default" else key
        if not buy.empty:
            ax.scatter(buy.index, buy["buy"], color=BUY_COLOR, marker=marker, s=18, label=f"{prefix}-buy")
        if not sell.empty:
            ax.scatter(sell.index, sell["sell"], color=SELL_COLOR, marker=marker, s=18, label=f"{prefix}-sell")

    _style(fig, ax, f"{model.coin} price and signals", "Price")
    return fig


def plot_loss(model: VisualizationModel) -> Figure | None:
    """Training curve, or ``None`` when the response carried none."""
    if model.loss_series is None:
        return None
    fig, ax = plt.subplots(figsize=(12, 3))
    loss = series_frame(model.loss_series, "loss")
    if not loss.empty:
        ax.plot(loss.index, loss["loss"], color=LOSS_COLOR, linewidth=1, label="loss")
    _style(fig, ax, "Training signal curve", "Loss")
    return fig


def plot_history(history: HistoryModel) -> Figure:
    """One marker per stored history range."""
    fig, ax = plt.subplots(figsize=(12, 2.5))
    frame = series_frame(history.points, "range")
    if not frame.empty:
        ax.scatter(frame.index, frame["range"], color=PRICE_COLOR, s=12, label=f"{history.coin}-history")
    ax.set_yticks([])
    _style(fig, ax, f"{history.coin} stored history", "")
    return fig
