from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from coinview import __version__
from coinview.cli import _cli, main
from coinview.client.request import RequestClient


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str = "") -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("not valid json")
        return self._payload


class RecordingSession:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.urls: list[str] = []

    def get(self, url: str, **kwargs: Any) -> Any:
        self.urls.append(url)
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture()
def backend(monkeypatch: pytest.MonkeyPatch) -> RecordingSession:
    http = RecordingSession()

    def fake_from_config(config: dict[str, Any] | None = None) -> RequestClient:
        return RequestClient("http://backend/test", session=http)

    monkeypatch.setattr("coinview.cli.RequestClient.from_config", fake_from_config)
    return http


def _invoke(*args: str) -> Any:
    return CliRunner().invoke(_cli, list(args))


def test_version() -> None:
    result = _invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_prints_summary(backend: RecordingSession, run_payload: dict[str, Any]) -> None:
    backend.responses.append(FakeResponse(run_payload))

    result = _invoke("run", "--coin", "ETH", "--from", "2024-01-01", "--to", "2024-01-02", "--interval", "5")

    assert result.exit_code == 0, result.output
    assert "Coin        : BTC" in result.output
    assert "Buy / Sell  : 1 / 1" in result.output
    assert "Loss points" not in result.output
    assert "Run: Coin=BTC" in result.output
    assert backend.urls == [
        "http://backend/test/run?coin=ETH&from=2024_01_01T00&to=2024_01_02T00&interval=5&prev=3&next=1"
    ]


def test_train_json_output(backend: RecordingSession, train_payload: dict[str, Any]) -> None:
    backend.responses.append(FakeResponse(train_payload))

    result = _invoke(
        "train",
        "--from", "2024-01-01",
        "--to", "2024-01-02",
        "--model", "BTC_15_a_0.7",
        "--model", "BTC_15_b_0.6",
        "--json",
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["strategies"] == ["BTC_-1", "BTC_15_ui"]
    assert payload["loss_points"] == 1
    assert payload["reports"]["BTC"]["wallet"] == 1012.25
    assert "model=BTC_15_a_0.7&model=BTC_15_b_0.6&precision=0.51" in backend.urls[0]


def test_backend_error_is_reported(backend: RecordingSession) -> None:
    backend.responses.append(FakeResponse(status_code=400, text="bad date range"))

    result = _invoke("run", "--from", "2024-01-01", "--to", "2024-01-02")

    assert result.exit_code == 1
    assert "Error: bad date range" in result.output


def test_invalid_form_is_usage_error(backend: RecordingSession) -> None:
    result = _invoke("run", "--from", "2024-01-05", "--to", "2024-01-02")

    assert result.exit_code == 2
    assert backend.urls == []


def test_malformed_report_exits_nonzero(
    backend: RecordingSession,
    train_payload: dict[str, Any],
) -> None:
    del train_payload["report"]["BTC"]["wallet"]
    backend.responses.append(FakeResponse(train_payload))

    result = _invoke("train", "--from", "2024-01-01", "--to", "2024-01-02")

    assert result.exit_code == 1
    assert "missing 'wallet'" in result.output


def test_history(backend: RecordingSession) -> None:
    backend.responses.append(
        FakeResponse([{"Path": "p", "Hash": "h", "From": "2024-01-01T00:00:00Z", "To": "2024-01-02T00:00:00Z"}])
    )

    result = _invoke("history", "--coin", "BTC", "--from", "2024-01-01", "--to", "2024-01-02")

    assert result.exit_code == 0, result.output
    assert "BTC: 1 stored ranges" in result.output
    assert "2024-01-01T00:00:00+00:00" in result.output


def test_load(backend: RecordingSession) -> None:
    backend.responses.append(FakeResponse({}))

    result = _invoke("load", "--coin", "ETH", "--from", "2024-01-01", "--to", "2024-01-02")

    assert result.exit_code == 0, result.output
    assert "Load requested for ETH" in result.output
    assert backend.urls[0].startswith("http://backend/test/load?coin=ETH")


def test_models_filtered_by_coin(backend: RecordingSession) -> None:
    backend.responses.append(FakeResponse(["ETH_5_a_0.9", "BTC_15_b_0.8", "BTC_15_c"]))

    result = _invoke("models", "--coin", "BTC")

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["BTC_15_b_0.8 (0.80)", "BTC_15_c"]


def test_config_option_overrides_defaults(
    tmp_path: Path,
    backend: RecordingSession,
    run_payload: dict[str, Any],
) -> None:
    config_path = tmp_path / "coinview.yaml"
    config_path.write_text(
        "log_level: WARNING\n"
        "backend:\n"
        "  base_url: http://backend/test\n"
        "scenario:\n"
        "  coin: SOL\n"
        "  interval: 30\n"
        "  prev: 0\n"
        "  next: 2\n",
        encoding="utf-8",
    )
    backend.responses.append(FakeResponse(run_payload))

    result = _invoke("--config", str(config_path), "run", "--from", "2024-01-01", "--to", "2024-01-02")

    assert result.exit_code == 0, result.output
    assert "coin=SOL" in backend.urls[0]
    assert "interval=30&prev=0&next=2" in backend.urls[0]


def test_main_entry_point(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    backend: RecordingSession,
) -> None:
    backend.responses.append(FakeResponse(["BTC_15_a_0.5"]))
    monkeypatch.setattr(sys, "argv", ["coinview", "models"])

    main()

    assert "BTC_15_a_0.5 (0.50)" in capsys.readouterr().out
