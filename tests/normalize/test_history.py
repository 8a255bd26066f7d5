"""Tests for history and model listing normalization."""

from __future__ import annotations

import pandas as pd
import pytest

from coinview.errors import MalformedPayload
from coinview.normalize.history import (
    group_by_coin,
    normalize_history,
    parse_model_id,
    parse_model_ids,
)


def test_history_points_at_range_start() -> None:
    raw = [
        {"Path": "/data/a", "Hash": "h1", "From": "2024-01-01T00:00:00Z", "To": "2024-01-02T00:00:00Z"},
        {"Path": "/data/b", "Hash": "h2", "From": "2024-01-03T00:00:00Z", "To": "2024-01-04T00:00:00Z"},
    ]
    history = normalize_history(raw, "BTC")

    assert history.coin == "BTC"
    assert [p.instant for p in history.points] == [
        pd.Timestamp("2024-01-01T00:00:00Z"),
        pd.Timestamp("2024-01-03T00:00:00Z"),
    ]
    assert {p.value for p in history.points} == {1.0}


def test_history_null_is_empty() -> None:
    assert normalize_history(None, "ETH").points == ()


def test_history_record_without_from() -> None:
    with pytest.raises(MalformedPayload, match="From"):
        normalize_history([{"To": "2024-01-01T00:00:00Z"}], "BTC")


def test_parse_model_id_parts() -> None:
    option = parse_model_id("BTC_15_ui_0.73_x")
    assert (option.coin, option.duration, option.accuracy) == ("BTC", "15", 0.73)


@pytest.mark.parametrize("title", ["BTC", "BTC_15", "BTC_15_ui_high", "BTC_15_ui_nan"])
def test_parse_model_id_without_accuracy(title: str) -> None:
    assert parse_model_id(title).accuracy is None


def test_model_ids_sorted_by_accuracy() -> None:
    options = parse_model_ids(["ETH_5_a_0.55", "BTC_15_b", "BTC_15_c_0.81", "BTC_5_d_0.60"])
    assert [option.title for option in options] == [
        "BTC_15_c_0.81",
        "BTC_5_d_0.60",
        "ETH_5_a_0.55",
        "BTC_15_b",
    ]


def test_model_ids_reject_non_strings() -> None:
    with pytest.raises(MalformedPayload):
        parse_model_ids(["BTC_15_a_0.5", 7])


def test_group_by_coin_keeps_order() -> None:
    grouped = group_by_coin(parse_model_ids(["BTC_1_a_0.9", "ETH_1_b_0.8", "BTC_1_c_0.7"]))
    assert list(grouped) == ["BTC", "ETH"]
    assert [o.title for o in grouped["BTC"]] == ["BTC_1_a_0.9", "BTC_1_c_0.7"]
