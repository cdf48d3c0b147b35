"""One-shot acknowledgement rules for a single interaction.

The platform accepts exactly one synchronous acknowledgement, returned as the
HTTP response body. Once that slot is consumed by a deferral, the rest of the
conversation happens over the webhook follow-up channel addressed by the
interaction token: finalising the deferred message edits ``@original``, and
further messages are posted as new follow-ups.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet

import structlog

from .capture import ResponseCapture
from .constants import ORIGINAL_MESSAGE, InteractionResponseType, InteractionType
from .errors import EmptyPayloadError, FollowUpDeliveryError, InvalidTransitionError
from .follow_up import FollowUpChannel
from .responses import (
    InteractionResponse,
    PayloadLike,
    has_content,
    normalise_message_data,
    resolve_payload,
)

logger = structlog.get_logger(__name__)

_UPDATE_KINDS: FrozenSet[InteractionType] = frozenset({InteractionType.MESSAGE_COMPONENT})
_MODAL_KINDS: FrozenSet[InteractionType] = frozenset(
    {InteractionType.APPLICATION_COMMAND, InteractionType.MESSAGE_COMPONENT}
)


class AcknowledgementStateMachine:
    """Track whether an interaction has been acknowledged and route later messages.

    ``initial_response`` is the first acknowledgement and never changes once
    set; it is what the HTTP layer serializes. The capture cell holds the
    most recent response produced, including follow-up edits.
    """

    def __init__(
        self,
        *,
        interaction_type: InteractionType,
        token: str,
        interaction_id: str | None = None,
        follow_up_channel: FollowUpChannel | None = None,
        capture: ResponseCapture | None = None,
    ) -> None:
        self._interaction_type = InteractionType(interaction_type)
        self._token = token
        self._follow_up_channel = follow_up_channel
        self._capture = capture or ResponseCapture()
        self._initial: InteractionResponse | None = None
        self._log = logger.bind(
            interaction_id=interaction_id,
            interaction_type=self._interaction_type.name,
        )

    @property
    def interaction_type(self) -> InteractionType:
        return self._interaction_type

    @property
    def acknowledged(self) -> bool:
        return self._initial is not None

    @property
    def deferred(self) -> bool:
        return self._initial is not None and self._initial.deferred

    @property
    def initial_response(self) -> InteractionResponse | None:
        return self._initial

    def get_response(self) -> InteractionResponse | None:
        return self._capture.get()

    def _require_kind(self, operation: str, allowed: FrozenSet[InteractionType]) -> None:
        if self._interaction_type not in allowed:
            kinds = ", ".join(sorted(kind.name.lower() for kind in allowed))
            raise InvalidTransitionError(
                f"{operation}() is not available for {self._interaction_type.name.lower()} "
                f"interactions (allowed: {kinds})"
            )

    def _acknowledge(self, response: InteractionResponse) -> InteractionResponse:
        if self._initial is not None:
            raise InvalidTransitionError(
                "Interaction was already acknowledged with response type "
                f"{self._initial.type.name}; use follow_up() to send more messages"
            )
        self._initial = response
        self._log.info(
            "interaction_deferred" if response.deferred else "interaction_acknowledged",
            response_type=response.type.name,
        )
        return self._capture.capture(response)

    def _deliver(self, payload: Dict[str, Any], message_id: str | None) -> Dict[str, Any]:
        if self._follow_up_channel is None:
            raise FollowUpDeliveryError(
                "No follow-up channel is configured for this interaction", retryable=False
            )
        return self._follow_up_channel.send(self._token, payload, message_id)

    def reply(self, data: PayloadLike | None) -> InteractionResponse:
        """Send a channel message, or finalise the deferred message if already deferred."""

        payload = normalise_message_data(data)
        if not has_content(payload):
            raise EmptyPayloadError("reply() requires content, embeds, components, attachments or a poll")

        response = InteractionResponse.channel_message(payload)
        if self.deferred:
            self._deliver(payload, ORIGINAL_MESSAGE)
            return self._capture.capture(response)
        return self._acknowledge(response)

    def defer_reply(self, flags: int | None = None) -> InteractionResponse:
        return self._acknowledge(InteractionResponse.deferred_channel_message(flags))

    def update(self, data: PayloadLike | None = None) -> InteractionResponse:
        """Edit the message the component is attached to."""

        self._require_kind("update", _UPDATE_KINDS)
        payload = normalise_message_data(data)
        response = InteractionResponse.update_message(payload)
        if self.deferred:
            if payload is not None:
                self._deliver(payload, ORIGINAL_MESSAGE)
            return self._capture.capture(response)
        return self._acknowledge(response)

    def defer_update(self) -> InteractionResponse:
        self._require_kind("defer_update", _UPDATE_KINDS)
        return self._acknowledge(InteractionResponse.deferred_update_message())

    def show_modal(self, data: PayloadLike) -> InteractionResponse:
        self._require_kind("show_modal", _MODAL_KINDS)
        payload = resolve_payload(data)
        if not payload:
            raise EmptyPayloadError("show_modal() requires a modal payload")
        return self._acknowledge(InteractionResponse.modal(payload))

    def acknowledge(self, response: InteractionResponse) -> InteractionResponse:
        """Use a prebuilt response as the acknowledgement, applying the same kind rules."""

        if response.type == InteractionResponseType.MODAL:
            self._require_kind("show_modal", _MODAL_KINDS)
        elif response.type in (
            InteractionResponseType.UPDATE_MESSAGE,
            InteractionResponseType.DEFERRED_UPDATE_MESSAGE,
        ):
            self._require_kind("update", _UPDATE_KINDS)
        elif response.type == InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE and not has_content(
            response.data
        ):
            raise EmptyPayloadError("A channel message response requires content")
        elif response.type == InteractionResponseType.PONG:
            raise InvalidTransitionError("PONG only answers PING interactions")
        return self._acknowledge(response)

    def edit_reply(self, data: PayloadLike | None = None) -> InteractionResponse:
        """Edit the original response through the follow-up channel."""

        payload = normalise_message_data(data) or {"content": ""}
        self._deliver(payload, ORIGINAL_MESSAGE)
        return self._capture.capture(InteractionResponse.channel_message(payload))

    def follow_up(self, data: PayloadLike) -> Dict[str, Any]:
        """Post an additional message; returns the created message."""

        payload = normalise_message_data(data)
        if not has_content(payload):
            raise EmptyPayloadError("follow_up() requires content, embeds, components, attachments or a poll")
        return self._deliver(payload, None)
