"""Dashboard session: request generations and the current result model."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from coinview.alerting import ErrorRouter
from coinview.client.request import RequestClient
from coinview.errors import CoinviewError
from coinview.normalize.history import normalize_history, parse_model_ids
from coinview.normalize.model import HistoryModel, ModelOption, VisualizationModel
from coinview.normalize.payload import normalize
from coinview.scenario.forms import RangeForm, RunForm, TrainForm
from coinview.scenario.params import (
    Operation,
    ScenarioParameters,
    history_params,
    load_params,
    models_params,
    run_params,
    train_params,
)

logger = logging.getLogger(__name__)

_FAILED = object()


class DashboardSession:
    """Chains builder, client and normalizer for one operator session.

    Each request takes a new generation number. A result is applied only if
    its generation is still the latest when it completes, so a slow response
    to a superseded request can never overwrite a newer model. Failures go to
    the router and leave the current model as it was.
    """

    def __init__(self, client: RequestClient, router: ErrorRouter) -> None:
        self.client = client
        self.router = router
        self._generation = 0
        self.model: VisualizationModel | None = None
        self.results: dict[Operation, VisualizationModel] = {}
        self._failed: set[Operation] = set()
        self.history: HistoryModel | None = None
        self.models: list[ModelOption] = []

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> int:
        """Start a new request generation and return it."""
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def apply(
        self,
        generation: int,
        model: VisualizationModel,
        operation: Operation = Operation.RUN,
    ) -> bool:
        """Replace the current model if *generation* is still the latest.

        The model also becomes the result of *operation*, so each page keeps
        showing its own last result.
        """
        if not self.is_current(generation):
            logger.info(
                "Discarding stale result (generation %s, current %s)",
                generation,
                self._generation,
            )
            return False
        self.model = model
        self.results[operation] = model
        return True

    def result(self, operation: Operation) -> VisualizationModel | None:
        return self.results.get(operation)

    def has_failed(self, operation: Operation) -> bool:
        """Whether the last request for *operation* failed."""
        return operation in self._failed

    def reset(self) -> None:
        self.begin()
        self.model = None
        self.results = {}
        self.history = None
        self.models = []
        self._failed.clear()

    def _request(
        self,
        operation: Operation,
        params: ScenarioParameters,
        transform: Callable[[Any], Any],
    ) -> Any:
        try:
            raw = self.client.fetch(operation.value, params)
            result = transform(raw)
        except CoinviewError as exc:
            logger.error("%s request failed: %s", operation.value, exc)
            self.router.report(exc)
            self._failed.add(operation)
            return _FAILED
        self._failed.discard(operation)
        return result

    def _fetch_model(self, operation: Operation, params: ScenarioParameters) -> VisualizationModel | None:
        generation = self.begin()
        model = self._request(operation, params, normalize)
        if model is _FAILED:
            return None
        if not self.apply(generation, model, operation):
            return None
        logger.info(
            "%s result applied: coin=%s price=%d signals=%d",
            operation.value,
            model.coin,
            len(model.price_series),
            len(model.signal_series),
        )
        return model

    def run_scenario(self, form: RunForm) -> VisualizationModel | None:
        return self._fetch_model(Operation.RUN, run_params(form))

    def train_model(self, form: TrainForm) -> VisualizationModel | None:
        return self._fetch_model(Operation.TRAIN, train_params(form))

    def load_history(self, form: RangeForm) -> HistoryModel | None:
        """Fetch the stored history ranges for the form's coin and range."""
        generation = self.begin()
        history = self._request(
            Operation.HISTORY,
            history_params(form),
            lambda raw: normalize_history(raw, form.coin),
        )
        if history is _FAILED or not self.is_current(generation):
            return None
        self.history = history
        return history

    def trigger_load(self, form: RangeForm) -> bool:
        """Ask the backend to load trade history; the body is only logged."""
        outcome = self._request(Operation.LOAD, load_params(form), lambda raw: raw)
        if outcome is _FAILED:
            return False
        logger.info("Load requested for %s: %s", form.coin, outcome)
        return True

    def refresh_models(self) -> list[ModelOption] | None:
        outcome = self._request(Operation.MODELS, models_params(), parse_model_ids)
        if outcome is _FAILED:
            return None
        self.models = outcome
        return self.models
