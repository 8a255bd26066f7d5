"""Route failures to the one notification channel the operator is watching."""

from __future__ import annotations

import logging
from collections.abc import Callable

from coinview.errors import BackendFailure

logger = logging.getLogger(__name__)

Channel = Callable[[str], object]


def describe(reason: str | BaseException) -> str:
    """Coerce a backend error text or a client-side exception to a message."""
    if isinstance(reason, BackendFailure):
        return reason.body or str(reason)
    if isinstance(reason, BaseException):
        text = str(reason).strip()
        return text or type(reason).__name__
    return str(reason)


class ErrorRouter:
    """Forward every reported failure to exactly one active channel.

    The router neither classifies nor retries; callers decide what kind of
    failure happened and the router only makes sure the operator sees it.
    """

    def __init__(self, channel: Channel) -> None:
        self._channel = channel
        self.last_message: str | None = None

    def attach(self, channel: Channel) -> None:
        """Replace the active channel."""
        self._channel = channel

    def report(self, reason: str | BaseException) -> str:
        message = describe(reason)
        logger.warning("Reporting failure to operator: %s", message)
        self.last_message = message
        self._channel(message)
        return message
