"""Immutable request parameters and the per-operation builders."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from typing import Any

from coinview.scenario.dates import format_backend_date
from coinview.scenario.forms import RangeForm, RunForm, TrainForm

Scalar = str | int | float | bool
ParamValue = Scalar | tuple[Scalar, ...]


class Operation(str, Enum):
    """Backend endpoints the dashboard can call."""

    RUN = "run"
    TRAIN = "train"
    LOAD = "load"
    HISTORY = "history"
    MODELS = "models"


class ScenarioParameters(Mapping[str, ParamValue]):
    """Read-only, insertion-ordered parameter mapping for one request.

    List values are frozen into tuples so the instance cannot change after it
    has been built.
    """

    __slots__ = ("_items",)

    def __init__(
        self,
        values: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
    ) -> None:
        pairs = values.items() if isinstance(values, Mapping) else values
        items: dict[str, ParamValue] = {}
        for key, value in pairs:
            if isinstance(value, (list, tuple)):
                items[str(key)] = tuple(value)
            else:
                items[str(key)] = value
        self._items = items

    def __getitem__(self, key: str) -> ParamValue:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(tuple(self._items.items()))

    def __repr__(self) -> str:
        return f"ScenarioParameters({self._items!r})"


def _range_params(form: RangeForm | RunForm | TrainForm) -> dict[str, Any]:
    return {
        "coin": form.coin,
        "from": format_backend_date(form.from_date),
        "to": format_backend_date(form.to_date),
    }


def run_params(form: RunForm) -> ScenarioParameters:
    """Parameters for a backtest scenario run."""
    values = _range_params(form)
    values.update({
        "interval": form.interval,
        "prev": form.prev,
        "next": form.next,
    })
    return ScenarioParameters(values)


def train_params(form: TrainForm) -> ScenarioParameters:
    """Parameters for a model training run; each model id repeats the ``model`` key."""
    values = _range_params(form)
    values.update({
        "model": tuple(form.models),
        "precision": form.precision,
        "size": form.size,
        "buffer": form.buffer,
        "look_back": form.look_back,
        "look_ahead": form.look_ahead,
        "gap": form.gap,
        "features": form.features,
        "buffer_time": form.buffer_time,
        "price_threshold": form.price_threshold,
        "stop_loss": form.stop_loss,
        "take_profit": form.take_profit,
    })
    return ScenarioParameters(values)


def load_params(form: RangeForm) -> ScenarioParameters:
    """Parameters asking the backend to load trade history for a range."""
    return ScenarioParameters(_range_params(form))


def history_params(form: RangeForm) -> ScenarioParameters:
    """Parameters listing the stored history ranges for a coin."""
    return ScenarioParameters(_range_params(form))


def models_params() -> ScenarioParameters:
    return ScenarioParameters()


def build_params(
    operation: Operation | str,
    form: RangeForm | RunForm | TrainForm | None = None,
) -> ScenarioParameters:
    """Dispatch to the builder for *operation*."""
    op = Operation(operation)
    if op is Operation.MODELS:
        return models_params()
    if form is None:
        raise ValueError(f"Operation '{op.value}' requires a form")
    if op is Operation.RUN:
        if not isinstance(form, RunForm):
            raise TypeError("run requires a RunForm")
        return run_params(form)
    if op is Operation.TRAIN:
        if not isinstance(form, TrainForm):
            raise TypeError("train requires a TrainForm")
        return train_params(form)
    if op is Operation.LOAD:
        return load_params(form)
    return history_params(form)
