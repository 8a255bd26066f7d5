"""Turn raw backend payloads into :class:`VisualizationModel` instances.

The backend emits Go-encoded JSON: timestamps are RFC 3339 strings, points are
``{"x": <timestamp>, "y": <number>}`` and empty slices may arrive as ``null``.
Normalization is total over that shape and fails fast with
:class:`MalformedPayload` on anything else, so a broken contract never turns
into a silently wrong chart.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

import pandas as pd

from coinview.errors import MalformedPayload
from coinview.normalize.model import (
    DEFAULT_SIGNAL_KEY,
    UNKNOWN_COIN,
    Point,
    RunDetail,
    RunResult,
    SignalPair,
    VisualizationModel,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("time", "price", "trades", "trigger", "details")
RESULT_FIELDS = ("fees", "trades", "pnl", "value", "coins", "threshold")


def parse_instant(value: Any, where: str) -> pd.Timestamp:
    """Parse an RFC 3339 timestamp into an aware UTC ``Timestamp``."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedPayload(f"{where}: expected timestamp string, got {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise MalformedPayload(f"{where}: unparseable timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return pd.Timestamp(parsed).tz_convert("UTC")


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPayload(f"{where}: expected a number, got {value!r}")
    return float(value)


def _sequence(value: Any, where: str) -> Sequence[Any]:
    # Go marshals a nil slice as null.
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise MalformedPayload(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedPayload(f"{where}: expected an object, got {type(value).__name__}")
    return value


def normalize_points(raw: Any, where: str) -> tuple[Point, ...]:
    """Resolve a list of ``{x, y}`` pairs, preserving source order."""
    points: list[Point] = []
    for idx, item in enumerate(_sequence(raw, where)):
        entry = _mapping(item, f"{where}[{idx}]")
        if "x" not in entry or "y" not in entry:
            raise MalformedPayload(f"{where}[{idx}]: point needs both 'x' and 'y'")
        points.append(
            Point(
                instant=parse_instant(entry["x"], f"{where}[{idx}].x"),
                value=_number(entry["y"], f"{where}[{idx}].y"),
            )
        )
    return tuple(points)


def _signal_pair(raw: Any, where: str) -> SignalPair:
    entry = _mapping(raw, where)
    missing = [name for name in ("buy", "sell") if name not in entry]
    if missing:
        raise MalformedPayload(f"{where}: missing {', '.join(missing)}")
    return SignalPair(
        buy=normalize_points(entry["buy"], f"{where}.buy"),
        sell=normalize_points(entry["sell"], f"{where}.sell"),
    )


def _is_flat_trigger(trigger: Mapping[str, Any]) -> bool:
    if set(trigger) != {"buy", "sell"}:
        return False
    return all(
        value is None or (isinstance(value, Sequence) and not isinstance(value, str))
        for value in trigger.values()
    )


def normalize_signals(raw: Any) -> Mapping[str, SignalPair]:
    """Build the per-strategy signal map from the ``trigger`` field.

    A flat ``{buy, sell}`` pair becomes the single ``"default"`` entry. A keyed
    mapping produces exactly one entry per key, in sorted key order.
    """
    trigger = _mapping(raw, "trigger")
    if _is_flat_trigger(trigger):
        return MappingProxyType({DEFAULT_SIGNAL_KEY: _signal_pair(trigger, "trigger")})
    signals = {
        str(key): _signal_pair(trigger[key], f"trigger[{key!r}]")
        for key in sorted(trigger, key=str)
    }
    return MappingProxyType(signals)


def _optional_int(entry: Mapping[str, Any], name: str, where: str) -> int | None:
    if entry.get(name) is None:
        return None
    return int(_number(entry[name], f"{where}.{name}"))


def normalize_detail(raw: Any, where: str) -> RunDetail:
    entry = _mapping(raw, where)
    coin = entry.get("coin")
    if not isinstance(coin, str) or not coin.strip():
        raise MalformedPayload(f"{where}.coin: expected a coin symbol, got {coin!r}")
    if entry.get("duration") is None:
        raise MalformedPayload(f"{where}: missing 'duration'")
    if not isinstance(entry.get("result"), Mapping):
        raise MalformedPayload(f"{where}: missing 'result' block")
    result = entry["result"]
    missing = [name for name in RESULT_FIELDS if name not in result]
    if missing:
        raise MalformedPayload(f"{where}.result: missing {', '.join(missing)}")

    coin_value = result.get("coinValue")
    return RunDetail(
        coin=coin,
        duration=int(_number(entry["duration"], f"{where}.duration")),
        prev=_optional_int(entry, "prev", where),
        next=_optional_int(entry, "next", where),
        result=RunResult(
            fees=_number(result["fees"], f"{where}.result.fees"),
            trades=int(_number(result["trades"], f"{where}.result.trades")),
            pnl=_number(result["pnl"], f"{where}.result.pnl"),
            value=_number(result["value"], f"{where}.result.value"),
            coins=_number(result["coins"], f"{where}.result.coins"),
            threshold=_number(result["threshold"], f"{where}.result.threshold"),
            coin_value=(
                None if coin_value is None else _number(coin_value, f"{where}.result.coinValue")
            ),
        ),
    )


def _reports(raw: Any) -> Mapping[str, Mapping[str, Any]]:
    if raw is None:
        return MappingProxyType({})
    reports = _mapping(raw, "report")
    copied = {
        str(coin): MappingProxyType(dict(_mapping(entry, f"report[{coin!r}]")))
        for coin, entry in reports.items()
    }
    return MappingProxyType(copied)


def normalize(raw: Any) -> VisualizationModel:
    """Normalize a ``run``/``train`` response into a :class:`VisualizationModel`."""
    payload = _mapping(raw, "payload")
    missing = [name for name in REQUIRED_FIELDS if name not in payload]
    if missing:
        raise MalformedPayload(f"payload: missing {', '.join(missing)}")

    time_axis = tuple(
        parse_instant(value, f"time[{idx}]")
        for idx, value in enumerate(_sequence(payload["time"], "time"))
    )
    price = normalize_points(payload["price"], "price")
    trades = normalize_points(payload["trades"], "trades")
    signals = normalize_signals(payload["trigger"])

    loss: tuple[Point, ...] | None = None
    if payload.get("loss") is not None:
        loss = normalize_points(payload["loss"], "loss")

    details = tuple(
        normalize_detail(entry, f"details[{idx}]")
        for idx, entry in enumerate(_sequence(payload["details"], "details"))
    )
    coin = details[0].coin if details else UNKNOWN_COIN
    if not details and (price or signals):
        logger.warning("Payload has series but no details; coin set to %r", UNKNOWN_COIN)

    return VisualizationModel(
        coin=coin,
        time_axis=time_axis,
        price_series=price,
        trade_series=trades,
        signal_series=signals,
        loss_series=loss,
        run_details=details,
        reports=_reports(payload.get("report")),
    )
