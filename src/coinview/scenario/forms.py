"""Validated dashboard forms.

Bounds mirror the widgets of the operator UI: the model only guards what the
widgets already enforce, so values reaching the request builders are passed
through untouched.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from coinview.scenario.dates import as_utc_datetime

INTERVAL_CHOICES: tuple[int, ...] = (1, 2, 3, 5, 10, 15, 20, 25, 30)


class RangeForm(BaseModel):
    """Coin and date range shared by every operation."""

    model_config = ConfigDict(frozen=True)

    coin: str = Field(description="Coin symbol, e.g. BTC")
    from_date: datetime | date
    to_date: datetime | date

    @field_validator("coin")
    @classmethod
    def _coin_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("coin must not be blank")
        return cleaned

    @model_validator(mode="after")
    def _range_ordered(self) -> RangeForm:
        if as_utc_datetime(self.to_date) < as_utc_datetime(self.from_date):
            raise ValueError("to_date must be on or after from_date")
        return self


class RunForm(RangeForm):
    """Backtest scenario: candle interval plus look-back/look-ahead windows."""

    interval: int = Field(15, description="Interval length in minutes")
    prev: int = Field(3, ge=0, le=10, description="Look-back window")
    next: int = Field(1, ge=0, le=10, description="Look-ahead window")

    @field_validator("interval")
    @classmethod
    def _interval_choice(cls, value: int) -> int:
        if value not in INTERVAL_CHOICES:
            raise ValueError(f"interval must be one of {list(INTERVAL_CHOICES)}")
        return value


class TrainForm(RangeForm):
    """Model training run over the selected model ids."""

    models: tuple[str, ...] = ()
    precision: float = Field(0.51, ge=0.0, le=1.0)
    size: int = Field(100, ge=10, le=1000)
    buffer: int = Field(50, ge=10, le=100)
    features: int = Field(3, ge=1, le=10)
    look_back: int = Field(9, ge=3, le=30)
    look_ahead: int = Field(1, ge=1, le=30)
    gap: float = Field(0.75, ge=0.5, le=1.0)
    buffer_time: float = Field(0.0, ge=0.0)
    price_threshold: float = Field(0.0, ge=0.0)
    stop_loss: float = Field(0.01, ge=0.0)
    take_profit: float = Field(0.02, ge=0.0)
