"""Backend date wire format (``YYYY_MM_DDTHH``, UTC, hour granularity)."""

from __future__ import annotations

from datetime import UTC, date, datetime

BACKEND_DATE_FORMAT = "%Y_%m_%dT%H"


def _ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_backend_date(value: date | datetime) -> str:
    """Render *value* in the format the backend's date parser expects.

    Plain dates are day-level requests and always render ``T00``. Naive
    datetimes are taken as UTC; aware ones are converted to UTC first.
    """
    if isinstance(value, datetime):
        return _ensure_utc(value).strftime(BACKEND_DATE_FORMAT)
    if isinstance(value, date):
        return f"{value.year:04d}_{value.month:02d}_{value.day:02d}T00"
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def parse_backend_date(text: str) -> datetime:
    """Parse a ``YYYY_MM_DDTHH`` string back into an aware UTC datetime."""
    try:
        parsed = datetime.strptime(text, BACKEND_DATE_FORMAT)
    except ValueError as exc:
        raise ValueError(f"Invalid backend date: {text!r}") from exc
    return parsed.replace(tzinfo=UTC)


def as_utc_datetime(value: date | datetime) -> datetime:
    """Lift a date or datetime to an aware UTC datetime (dates at midnight)."""
    if isinstance(value, datetime):
        return _ensure_utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=UTC)
