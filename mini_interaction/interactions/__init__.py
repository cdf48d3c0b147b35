"""Interaction facades and the factory choosing one per payload kind."""

from __future__ import annotations

from typing import Any, Mapping, Union

from ..constants import InteractionType
from ..errors import InvalidInteractionPayload
from ..follow_up import FollowUpChannel
from ..payloads import InteractionPayload
from .base import BaseInteraction
from .command import CommandInteraction
from .component import ComponentInteraction
from .modal import ModalSubmitInteraction

_FACADES = {
    InteractionType.APPLICATION_COMMAND: CommandInteraction,
    InteractionType.MESSAGE_COMPONENT: ComponentInteraction,
    InteractionType.MODAL_SUBMIT: ModalSubmitInteraction,
}


def wrap_interaction(
    payload: Union[InteractionPayload, Mapping[str, Any]],
    *,
    follow_up_channel: FollowUpChannel | None = None,
) -> BaseInteraction:
    """Wrap a verified payload in the facade matching its interaction type."""

    if not isinstance(payload, InteractionPayload):
        payload = InteractionPayload.parse(payload)

    facade = _FACADES.get(payload.type)
    if facade is None:
        raise InvalidInteractionPayload(
            f"Interaction type {payload.type.name} cannot be wrapped by a handler facade"
        )
    return facade(payload, follow_up_channel=follow_up_channel)


__all__ = [
    "BaseInteraction",
    "CommandInteraction",
    "ComponentInteraction",
    "ModalSubmitInteraction",
    "wrap_interaction",
]
