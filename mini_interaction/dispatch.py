"""Registry mapping command names and custom ids to handler functions."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import structlog

from .background import run_async
from .config import AppSettings
from .constants import InteractionType, MessageFlags
from .errors import HandlerNotFoundError, InvalidTransitionError
from .follow_up import FollowUpChannel, WebhookFollowUpClient
from .interactions import (
    BaseInteraction,
    CommandInteraction,
    ComponentInteraction,
    ModalSubmitInteraction,
    wrap_interaction,
)
from .payloads import InteractionPayload
from .responses import InteractionResponse

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], Optional[InteractionResponse]]

CUSTOM_ID_SEPARATOR = ":"


@dataclass(frozen=True)
class Registration:
    handler: Handler
    deferred: bool = False
    ephemeral: bool = False


@dataclass(frozen=True)
class DispatchResult:
    """The acknowledgement to send now and the deferred work to start once it is sent."""

    response: InteractionResponse
    pending: Callable[[], Future] | None = None

    def start(self) -> Future | None:
        if self.pending is None:
            return None
        return self.pending()


def _lookup_key(interaction: BaseInteraction) -> str:
    if isinstance(interaction, CommandInteraction):
        return interaction.name
    if isinstance(interaction, (ComponentInteraction, ModalSubmitInteraction)):
        return interaction.custom_id
    raise InvalidTransitionError(f"Unsupported interaction facade {type(interaction).__name__}")


class InteractionRegistry:
    """Route wrapped interactions to handlers and return their acknowledgement.

    Command handlers are keyed by command name. Component and modal handlers
    are keyed by custom id; an id such as ``"approve:42"`` falls back to the
    handler registered for ``"approve"`` when there is no exact match.

    Handlers registered with ``deferred=True`` are acknowledged immediately
    (``defer_update`` for components, ``defer_reply`` otherwise) and run on
    the background pool once the deferral has been sent. They finish with
    ``reply``/``edit_reply``/``update``, which the acknowledgement state
    machine routes to the follow-up channel.
    """

    def __init__(
        self,
        *,
        settings: AppSettings | None = None,
        follow_up_channel: FollowUpChannel | None = None,
    ) -> None:
        if follow_up_channel is None and settings is not None:
            follow_up_channel = WebhookFollowUpClient.from_settings(settings)
        self._follow_up_channel = follow_up_channel
        self._handlers: Dict[Tuple[InteractionType, str], Registration] = {}

    @property
    def follow_up_channel(self) -> FollowUpChannel | None:
        return self._follow_up_channel

    def register(
        self,
        interaction_type: InteractionType,
        key: str,
        handler: Handler,
        *,
        deferred: bool = False,
        ephemeral: bool = False,
    ) -> Handler:
        if not key:
            raise ValueError("Handler key must be a non-empty string")
        slot = (InteractionType(interaction_type), key)
        if slot in self._handlers:
            raise ValueError(f"A handler is already registered for {slot[0].name} '{key}'")
        self._handlers[slot] = Registration(handler=handler, deferred=deferred, ephemeral=ephemeral)
        return handler

    def _decorator(self, interaction_type: InteractionType, key: str, **options: bool):
        def decorator(handler: Handler) -> Handler:
            return self.register(interaction_type, key, handler, **options)

        return decorator

    def command(self, name: str, *, deferred: bool = False, ephemeral: bool = False):
        return self._decorator(
            InteractionType.APPLICATION_COMMAND, name, deferred=deferred, ephemeral=ephemeral
        )

    def component(self, custom_id: str, *, deferred: bool = False):
        return self._decorator(InteractionType.MESSAGE_COMPONENT, custom_id, deferred=deferred)

    def modal(self, custom_id: str, *, deferred: bool = False, ephemeral: bool = False):
        return self._decorator(
            InteractionType.MODAL_SUBMIT, custom_id, deferred=deferred, ephemeral=ephemeral
        )

    def lookup(self, interaction: BaseInteraction) -> Registration | None:
        key = _lookup_key(interaction)
        registration = self._handlers.get((interaction.type, key))
        if registration is None and CUSTOM_ID_SEPARATOR in key:
            prefix = key.split(CUSTOM_ID_SEPARATOR, 1)[0]
            registration = self._handlers.get((interaction.type, prefix))
        return registration

    def wrap(self, payload: InteractionPayload | Mapping[str, Any]) -> BaseInteraction:
        return wrap_interaction(payload, follow_up_channel=self._follow_up_channel)

    def dispatch(self, payload: InteractionPayload | Mapping[str, Any]) -> DispatchResult:
        """Run the matching handler and return the initial acknowledgement.

        Deferred handlers are not started here. The caller writes
        ``result.response`` first and then calls ``result.start()``, so the
        handler's follow-ups never reach the webhook before the deferral does.
        """

        interaction = self.wrap(payload)
        registration = self.lookup(interaction)
        if registration is None:
            raise HandlerNotFoundError(_lookup_key(interaction))

        log = logger.bind(interaction_id=interaction.id, key=_lookup_key(interaction))
        log.info("interaction_received", interaction_type=interaction.type.name)

        if registration.deferred:
            return self._dispatch_deferred(interaction, registration)

        result = registration.handler(interaction)
        return DispatchResult(self._finalise(interaction, result))

    def _dispatch_deferred(
        self, interaction: BaseInteraction, registration: Registration
    ) -> DispatchResult:
        if isinstance(interaction, ComponentInteraction):
            response = interaction.defer_update()
        else:
            flags = MessageFlags.EPHEMERAL if registration.ephemeral else None
            response = interaction.defer_reply(flags)
        pending = partial(run_async, registration.handler, interaction, interaction_id=interaction.id)
        return DispatchResult(response, pending)

    @staticmethod
    def _finalise(interaction: BaseInteraction, result: InteractionResponse | None) -> InteractionResponse:
        if interaction.acknowledged:
            return interaction.initial_response
        if isinstance(result, InteractionResponse):
            return interaction.respond(result)
        raise InvalidTransitionError(
            f"Handler for interaction {interaction.id} returned without acknowledging it"
        )
