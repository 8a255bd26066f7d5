"""Tests for the backend date format."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from coinview.scenario.dates import as_utc_datetime, format_backend_date, parse_backend_date


def test_date_renders_midnight() -> None:
    assert format_backend_date(date(2024, 3, 9)) == "2024_03_09T00"


def test_naive_datetime_taken_as_utc() -> None:
    assert format_backend_date(datetime(2024, 3, 9, 17, 45)) == "2024_03_09T17"


def test_aware_datetime_converted_to_utc() -> None:
    tz = timezone(timedelta(hours=2))
    assert format_backend_date(datetime(2024, 3, 10, 1, 0, tzinfo=tz)) == "2024_03_09T23"


def test_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        format_backend_date("2024-03-09")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "value",
    [
        datetime(2024, 1, 1, 0, tzinfo=UTC),
        datetime(2023, 12, 31, 23, tzinfo=UTC),
        datetime(2024, 2, 29, 12, tzinfo=UTC),
    ],
)
def test_round_trip_at_hour_granularity(value: datetime) -> None:
    assert parse_backend_date(format_backend_date(value)) == value


def test_parse_rejects_bad_text() -> None:
    with pytest.raises(ValueError, match="Invalid backend date"):
        parse_backend_date("2024-01-01")


def test_as_utc_datetime_lifts_date() -> None:
    assert as_utc_datetime(date(2024, 1, 2)) == datetime(2024, 1, 2, tzinfo=UTC)
