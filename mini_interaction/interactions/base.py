"""Behaviour shared by every interaction facade."""

from __future__ import annotations

from typing import Any, Dict

from ..acknowledgement import AcknowledgementStateMachine
from ..constants import InteractionType
from ..follow_up import FollowUpChannel
from ..payloads import InteractionPayload
from ..responses import InteractionResponse, PayloadLike


class BaseInteraction:
    """Bind one inbound payload to its acknowledgement state machine.

    Construction never performs I/O. Methods that a kind does not support
    raise :class:`~mini_interaction.errors.InvalidTransitionError` instead of
    silently doing nothing.
    """

    def __init__(
        self,
        payload: InteractionPayload,
        *,
        follow_up_channel: FollowUpChannel | None = None,
    ) -> None:
        self._payload = payload
        self._ack = AcknowledgementStateMachine(
            interaction_type=payload.type,
            token=payload.token,
            interaction_id=payload.id,
            follow_up_channel=follow_up_channel,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} acknowledged={self.acknowledged}>"

    @property
    def payload(self) -> InteractionPayload:
        return self._payload

    @property
    def id(self) -> str:
        return self._payload.id

    @property
    def token(self) -> str:
        return self._payload.token

    @property
    def application_id(self) -> str:
        return self._payload.application_id

    @property
    def type(self) -> InteractionType:
        return self._payload.type

    @property
    def guild_id(self) -> str | None:
        return self._payload.guild_id

    @property
    def channel_id(self) -> str | None:
        return self._payload.channel_id

    @property
    def user(self) -> Dict[str, Any] | None:
        return self._payload.invoking_user

    @property
    def user_id(self) -> str | None:
        return self._payload.invoking_user_id

    @property
    def locale(self) -> str | None:
        return self._payload.locale

    @property
    def acknowledged(self) -> bool:
        return self._ack.acknowledged

    @property
    def deferred(self) -> bool:
        return self._ack.deferred

    @property
    def initial_response(self) -> InteractionResponse | None:
        return self._ack.initial_response

    def get_response(self) -> InteractionResponse | None:
        return self._ack.get_response()

    def reply(self, data: PayloadLike | None) -> InteractionResponse:
        return self._ack.reply(data)

    def defer_reply(self, flags: int | None = None) -> InteractionResponse:
        return self._ack.defer_reply(flags)

    def update(self, data: PayloadLike | None = None) -> InteractionResponse:
        return self._ack.update(data)

    def defer_update(self) -> InteractionResponse:
        return self._ack.defer_update()

    def show_modal(self, data: PayloadLike) -> InteractionResponse:
        return self._ack.show_modal(data)

    def edit_reply(self, data: PayloadLike | None = None) -> InteractionResponse:
        return self._ack.edit_reply(data)

    def follow_up(self, data: PayloadLike) -> Dict[str, Any]:
        return self._ack.follow_up(data)

    def respond(self, response: InteractionResponse) -> InteractionResponse:
        """Acknowledge with a response built elsewhere, such as one returned by a handler."""

        return self._ack.acknowledge(response)
