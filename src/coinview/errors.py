"""Error taxonomy for talking to the backtest backend."""

from __future__ import annotations


class CoinviewError(RuntimeError):
    """Base class for every failure surfaced to the operator."""


class NetworkFailure(CoinviewError):
    """Raised when no response was received (timeout, refused connection)."""


class BackendFailure(CoinviewError):
    """Raised when the backend answers with a non-success status.

    The body is kept verbatim as text; it is never parsed as a result payload.
    """

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(body or f"Backend returned status {status_code}")


class MalformedPayload(CoinviewError, ValueError):
    """Raised when a success response violates the documented payload shape."""
