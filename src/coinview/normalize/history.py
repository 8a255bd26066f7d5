"""Normalization for the ``history`` and ``models`` endpoints."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from coinview.errors import MalformedPayload
from coinview.normalize.model import HistoryModel, ModelOption, Point
from coinview.normalize.payload import _mapping, _sequence, parse_instant

MODEL_ID_DELIMITER = "_"


def normalize_history(raw: Any, coin: str) -> HistoryModel:
    """One unit-height marker per stored history range, at its ``From`` instant."""
    points: list[Point] = []
    for idx, item in enumerate(_sequence(raw, "history")):
        record = _mapping(item, f"history[{idx}]")
        if "From" not in record:
            raise MalformedPayload(f"history[{idx}]: missing 'From'")
        points.append(Point(instant=parse_instant(record["From"], f"history[{idx}].From"), value=1.0))
    return HistoryModel(coin=coin, points=tuple(points))


def _accuracy(parts: list[str]) -> float | None:
    if len(parts) < 4:
        return None
    try:
        value = float(parts[3])
    except ValueError:
        return None
    return None if math.isnan(value) else value


def parse_model_id(title: str) -> ModelOption:
    """Split ``<coin>_<duration>_<...>_<accuracy>_...`` into its parts."""
    parts = title.split(MODEL_ID_DELIMITER)
    return ModelOption(
        title=title,
        coin=parts[0],
        duration=parts[1] if len(parts) > 1 else None,
        accuracy=_accuracy(parts),
    )


def parse_model_ids(raw: Any) -> list[ModelOption]:
    """Parse the model listing, best accuracy first; unknown accuracy sorts last."""
    titles = _sequence(raw, "models")
    options: list[ModelOption] = []
    for idx, title in enumerate(titles):
        if not isinstance(title, str):
            raise MalformedPayload(f"models[{idx}]: expected a string, got {title!r}")
        options.append(parse_model_id(title))
    return sorted(
        options,
        key=lambda option: (option.accuracy is None, -(option.accuracy or 0.0)),
    )


def group_by_coin(options: Iterable[ModelOption]) -> dict[str, list[ModelOption]]:
    grouped: dict[str, list[ModelOption]] = {}
    for option in options:
        grouped.setdefault(option.coin, []).append(option)
    return grouped
