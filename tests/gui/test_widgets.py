"""Tests for the pure helpers in the GUI widgets module."""

from __future__ import annotations

from datetime import date
from typing import Any

from coinview.client.request import RequestClient
from coinview.gui.widgets import default_range, model_option_label, model_summary, new_session
from coinview.normalize.history import parse_model_id
from coinview.normalize.payload import normalize


def test_default_range_is_yesterday_to_today() -> None:
    assert default_range(date(2024, 3, 1)) == (date(2024, 2, 29), date(2024, 3, 1))


def test_default_range_uses_today() -> None:
    start, end = default_range()
    assert (end - start).days == 1


def test_model_summary_run(run_payload: dict[str, Any]) -> None:
    summary = model_summary(normalize(run_payload))

    assert summary == {
        "coin": "BTC",
        "points": 2,
        "trades": 1,
        "strategies": ["default"],
        "buys": 1,
        "sells": 1,
        "loss_points": None,
        "runs": 1,
    }


def test_model_summary_train(train_payload: dict[str, Any]) -> None:
    summary = model_summary(normalize(train_payload))

    assert summary["strategies"] == ["BTC_-1", "BTC_15_ui"]
    assert summary["buys"] == 1
    assert summary["sells"] == 1
    assert summary["loss_points"] == 1


def test_model_option_label() -> None:
    assert model_option_label(parse_model_id("BTC_15_a_0.734")) == "BTC_15_a_0.734 (0.73)"
    assert model_option_label(parse_model_id("BTC_15_a")) == "BTC_15_a"


def test_new_session_from_config() -> None:
    messages: list[str] = []
    config = {"backend": {"base_url": "http://example:1/test", "timeout_seconds": 3}}

    session = new_session(messages.append, config)

    assert isinstance(session.client, RequestClient)
    assert session.client.base_url == "http://example:1/test"
    session.router.report("hello")
    assert messages == ["hello"]
