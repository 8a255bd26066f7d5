from __future__ import annotations

from typing import Any

import pytest


def _detail(coin: str = "BTC") -> dict[str, Any]:
    return {
        "coin": coin,
        "duration": 15,
        "prev": 3,
        "next": 1,
        "result": {
            "fees": 1.5,
            "trades": 4,
            "pnl": 12.25,
            "value": 1012.25,
            "coins": 0,
            "threshold": 0,
            "coinValue": 0.0,
        },
    }


def _report() -> dict[str, Any]:
    return {
        "buy": 2,
        "buy_avg": 100.5,
        "buy_vol": 0.02,
        "sell": 2,
        "sell_avg": 106.0,
        "sell_vol": 0.02,
        "wallet": 1012.25,
        "profit": 12.25,
        "fees": 1.5,
        "last_price": 105.0,
    }


@pytest.fixture()
def run_payload() -> dict[str, Any]:
    """A flat-trigger ``run`` response."""
    return {
        "time": ["2024-01-01T00:00:00Z", "2024-01-01T00:15:00Z"],
        "price": [
            {"x": "2024-01-01T00:00:00Z", "y": 100.0},
            {"x": "2024-01-01T00:15:00Z", "y": 101.5},
        ],
        "trades": [{"x": "2024-01-01T00:05:00Z", "y": 100.2}],
        "trigger": {
            "buy": [{"x": "2024-01-01T00:00:00Z", "y": 100.0}],
            "sell": [{"x": "2024-01-01T00:15:00Z", "y": 101.5}],
        },
        "loss": None,
        "details": [_detail()],
    }


@pytest.fixture()
def train_payload() -> dict[str, Any]:
    """A keyed-trigger ``train`` response with loss and report."""
    return {
        "time": ["2024-01-01T00:00:00Z"],
        "price": [{"x": "2024-01-01T00:00:00Z", "y": 100.0}],
        "trades": [],
        "trigger": {
            "BTC_15_ui": {
                "buy": [{"x": "2024-01-01T00:00:00Z", "y": 100.0}],
                "sell": [],
            },
            "BTC_-1": {
                "buy": [],
                "sell": [{"x": "2024-01-01T01:00:00+01:00", "y": 99.0}],
            },
        },
        "loss": [{"x": "2024-01-01T00:00:00Z", "y": 1.0}],
        "details": [_detail()],
        "report": {"BTC": _report()},
    }


@pytest.fixture()
def raw_report() -> dict[str, Any]:
    return _report()
