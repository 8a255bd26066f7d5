"""Canonical, immutable result model handed to the chart layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import pandas as pd

UNKNOWN_COIN = "unknown"
DEFAULT_SIGNAL_KEY = "default"


@dataclass(frozen=True)
class Point:
    instant: pd.Timestamp
    value: float


@dataclass(frozen=True)
class SignalPair:
    """Buy and sell markers of one strategy or model."""

    buy: tuple[Point, ...] = ()
    sell: tuple[Point, ...] = ()


@dataclass(frozen=True)
class RunResult:
    fees: float
    trades: int
    pnl: float
    value: float
    coins: float
    threshold: float
    coin_value: float | None = None


@dataclass(frozen=True)
class RunDetail:
    """Summary of one backend run (one entry of ``details``)."""

    coin: str
    duration: int
    result: RunResult
    prev: int | None = None
    next: int | None = None


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class VisualizationModel:
    """Time-aligned series for one successful backend response.

    ``loss_series`` is ``None`` when the payload carried no training curve,
    which is distinct from an empty curve.
    """

    coin: str
    time_axis: tuple[pd.Timestamp, ...] = ()
    price_series: tuple[Point, ...] = ()
    trade_series: tuple[Point, ...] = ()
    signal_series: Mapping[str, SignalPair] = field(default_factory=_empty_mapping)
    loss_series: tuple[Point, ...] | None = None
    run_details: tuple[RunDetail, ...] = ()
    reports: Mapping[str, Mapping[str, Any]] = field(default_factory=_empty_mapping)

    @property
    def signal_keys(self) -> list[str]:
        return list(self.signal_series)


@dataclass(frozen=True)
class HistoryModel:
    """Stored history ranges for a coin, one marker per range start."""

    coin: str
    points: tuple[Point, ...] = ()


@dataclass(frozen=True)
class ModelOption:
    """A trained model id as listed by the backend."""

    title: str
    coin: str
    duration: str | None = None
    accuracy: float | None = None
