"""Single-shot GET client for the backtest backend."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlsplit

import requests

from coinview.config.loader import get_runtime_config, section
from coinview.errors import BackendFailure, CoinviewError, MalformedPayload, NetworkFailure

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:6090/test"
DEFAULT_TIMEOUT = 20.0


@runtime_checkable
class SessionProtocol(Protocol):
    def get(  # pragma: no cover - protocol
        self,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """Perform a GET request."""


_QUERY_ORIGIN = "http://query.invalid/"


def _wire_value(value: Any) -> Any:
    # the backend binds lowercase booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_wire_value(item) for item in value]
    return value


def prepare_url(url: str, params: Mapping[str, Any]) -> str:
    """Attach *params* to *url* using requests' query encoding.

    Sequence values expand into one pair per element (``model=a&model=b``),
    which is how the backend binds array parameters; an empty sequence adds
    no pair at all.
    """
    pairs = [(str(key), _wire_value(value)) for key, value in params.items()]
    return requests.Request("GET", url, params=pairs).prepare().url


def build_query(params: Mapping[str, Any]) -> str:
    """The encoded query string for *params*, in mapping order."""
    return urlsplit(prepare_url(_QUERY_ORIGIN, params)).query


def _log_result(result: Any) -> None:
    logger.info("Unhandled backend result: %s", type(result).__name__)


class RequestClient:
    """Issue one GET per call and resolve the JSON body.

    There is no retry: timeouts and connection errors surface once as
    :class:`NetworkFailure`, non-2xx answers as :class:`BackendFailure` with the
    body text, and undecodable success bodies as :class:`MalformedPayload`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: SessionProtocol | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any] | None = None,
        *,
        session: SessionProtocol | None = None,
    ) -> RequestClient:
        backend = section("backend", config if config is not None else get_runtime_config())
        return cls(
            str(backend.get("base_url", DEFAULT_BASE_URL)),
            timeout=float(backend.get("timeout_seconds", DEFAULT_TIMEOUT)),
            session=session,
        )

    def url_for(self, endpoint: str, params: Mapping[str, Any]) -> str:
        return prepare_url(f"{self.base_url}/{endpoint.strip('/')}", params)

    def fetch(self, endpoint: str, params: Mapping[str, Any]) -> Any:
        """Request *endpoint* and return the decoded JSON body."""
        url = self.url_for(endpoint, params)
        logger.debug("GET %s", url)
        try:
            response = self.session.get(
                url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as exc:
            logger.warning("No response from backend for %s: %s", endpoint, exc)
            raise NetworkFailure(f"Could not reach backend ({endpoint}): {exc}") from exc

        status = int(response.status_code)
        if not 200 <= status < 300:
            body = str(getattr(response, "text", "") or "")
            logger.warning("Backend %s failed with status %s: %s", endpoint, status, body[:200])
            raise BackendFailure(status, body)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedPayload(
                f"Backend {endpoint} returned status {status} with a non-JSON body"
            ) from exc

    def call(
        self,
        endpoint: str,
        params: Mapping[str, Any],
        handle: Callable[[Any], Any] | None = None,
        on_error: Callable[[CoinviewError], Any] | None = None,
    ) -> Any:
        """Continuation-style wrapper around :meth:`fetch`.

        The parsed body goes to *handle*; a failure goes to *on_error* or is
        re-raised when no error continuation was given.
        """
        if handle is None:
            handle = _log_result
        try:
            result = self.fetch(endpoint, params)
        except CoinviewError as exc:
            if on_error is None:
                raise
            return on_error(exc)
        return handle(result)
