"""Exceptions raised by the interaction lifecycle."""

from __future__ import annotations


class InteractionError(Exception):
    """Base error for interaction handling."""


class EmptyPayloadError(InteractionError):
    """Raised when a reply omits every content-bearing field."""


class InvalidTransitionError(InteractionError):
    """Raised when an acknowledgement method is not valid in the current state or kind."""


class HandlerNotFoundError(InteractionError):
    """Raised when no handler is registered for an interaction."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No handler registered for '{key}'")
        self.key = key


class InvalidInteractionPayload(InteractionError):
    """Raised when an inbound payload does not match the expected shape."""


class FollowUpDeliveryError(InteractionError):
    """Raised when a follow-up webhook request fails.

    The error is never retried by the engine; ``retryable`` is a hint for
    callers that want to apply their own policy. Pass ``retryable=False`` for
    configuration problems that no retry can fix.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self._retryable = retryable

    @property
    def retryable(self) -> bool:
        if self._retryable is not None:
            return self._retryable
        if self.status_code is None:
            return True
        return self.status_code == 429 or 500 <= self.status_code < 600
