"""Interaction lifecycle engine for Discord HTTP interactions."""

from .background import run_async  # noqa: F401
from .components import ComponentTreeResolver, parse_component_tree  # noqa: F401
from .config import AppSettings, get_settings  # noqa: F401
from .constants import (  # noqa: F401
    ComponentType,
    InteractionResponseType,
    InteractionType,
    MessageFlags,
)
from .dispatch import DispatchResult, InteractionRegistry  # noqa: F401
from .errors import (  # noqa: F401
    EmptyPayloadError,
    FollowUpDeliveryError,
    HandlerNotFoundError,
    InteractionError,
    InvalidInteractionPayload,
    InvalidTransitionError,
)
from .follow_up import FollowUpChannel, WebhookFollowUpClient  # noqa: F401
from .interactions import (  # noqa: F401
    CommandInteraction,
    ComponentInteraction,
    ModalSubmitInteraction,
    wrap_interaction,
)
from .logging_config import configure_logging  # noqa: F401
from .payloads import InteractionPayload  # noqa: F401
from .responses import InteractionResponse, Serializable  # noqa: F401

__all__ = [
    "AppSettings",
    "get_settings",
    "run_async",
    "configure_logging",
    "ComponentTreeResolver",
    "parse_component_tree",
    "ComponentType",
    "InteractionResponseType",
    "InteractionType",
    "MessageFlags",
    "DispatchResult",
    "InteractionRegistry",
    "InteractionError",
    "EmptyPayloadError",
    "InvalidTransitionError",
    "FollowUpDeliveryError",
    "HandlerNotFoundError",
    "InvalidInteractionPayload",
    "FollowUpChannel",
    "WebhookFollowUpClient",
    "CommandInteraction",
    "ComponentInteraction",
    "ModalSubmitInteraction",
    "wrap_interaction",
    "InteractionPayload",
    "InteractionResponse",
    "Serializable",
]
