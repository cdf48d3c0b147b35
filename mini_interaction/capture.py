"""Single-slot holder for the last response produced for an interaction."""

from __future__ import annotations

from .responses import InteractionResponse


class ResponseCapture:
    """Keeps the most recent response; every write replaces the previous one."""

    def __init__(self) -> None:
        self._response: InteractionResponse | None = None

    def capture(self, response: InteractionResponse) -> InteractionResponse:
        self._response = response
        return response

    def get(self) -> InteractionResponse | None:
        return self._response

    @property
    def is_empty(self) -> bool:
        return self._response is None
