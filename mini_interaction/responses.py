"""Interaction response variants and payload normalisation."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntFlag
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

from .constants import InteractionResponseType

CONTENT_FIELDS = ("content", "embeds", "components", "attachments", "poll")

_DEFERRED_TYPES = frozenset(
    {
        InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
        InteractionResponseType.DEFERRED_UPDATE_MESSAGE,
    }
)


class Serializable(ABC):
    """Contract for payload builders that can render themselves to JSON data."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-compatible payload."""


PayloadLike = Union[Mapping[str, Any], Serializable]


def resolve_payload(data: PayloadLike) -> Dict[str, Any]:
    """Return a private copy of *data* as a plain dict."""

    if isinstance(data, Serializable):
        return _thaw(data.to_dict())
    if isinstance(data, Mapping):
        return _thaw(data)
    raise TypeError(f"Unsupported payload type: {type(data).__name__}")


def normalise_flags(flags: int | IntFlag | None) -> int | None:
    if flags is None:
        return None
    return int(flags)


def normalise_message_data(data: PayloadLike | None) -> Dict[str, Any] | None:
    """Resolve builders and coerce flag enums; empty payloads become ``None``."""

    if data is None:
        return None
    payload = resolve_payload(data)
    if not payload:
        return None
    if "flags" in payload:
        flags = normalise_flags(payload["flags"])
        if flags is None:
            del payload["flags"]
        else:
            payload["flags"] = flags
    return payload


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return copy.deepcopy(value)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value) == 0
    return False


def has_content(payload: Mapping[str, Any] | None) -> bool:
    """Return True when the payload carries at least one content-bearing field."""

    if not payload:
        return False
    for field in CONTENT_FIELDS:
        if not _is_blank(payload.get(field)):
            return True
    return False


@dataclass(frozen=True)
class InteractionResponse:
    """A single response to an interaction, tagged by its platform type code.

    ``data`` is frozen on construction: mappings become read-only views and
    lists become tuples. ``to_dict`` returns a fresh mutable copy. Responses
    compare by value but are not hashable.
    """

    type: InteractionResponseType
    data: Mapping[str, Any] | None = None

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", InteractionResponseType(self.type))
        if self.data is not None:
            object.__setattr__(self, "data", _freeze(self.data))

    @classmethod
    def pong(cls) -> "InteractionResponse":
        return cls(InteractionResponseType.PONG)

    @classmethod
    def channel_message(cls, data: Dict[str, Any]) -> "InteractionResponse":
        return cls(InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE, data)

    @classmethod
    def deferred_channel_message(cls, flags: int | IntFlag | None = None) -> "InteractionResponse":
        flags = normalise_flags(flags)
        data = {"flags": flags} if flags is not None else None
        return cls(InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE, data)

    @classmethod
    def update_message(cls, data: Dict[str, Any] | None = None) -> "InteractionResponse":
        return cls(InteractionResponseType.UPDATE_MESSAGE, data)

    @classmethod
    def deferred_update_message(cls) -> "InteractionResponse":
        return cls(InteractionResponseType.DEFERRED_UPDATE_MESSAGE)

    @classmethod
    def modal(cls, data: Dict[str, Any]) -> "InteractionResponse":
        return cls(InteractionResponseType.MODAL, data)

    @property
    def deferred(self) -> bool:
        return self.type in _DEFERRED_TYPES

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"type": int(self.type)}
        if self.data is not None:
            body["data"] = _thaw(self.data)
        return body

    @classmethod
    def from_dict(cls, body: Mapping[str, Any]) -> "InteractionResponse":
        try:
            response_type = InteractionResponseType(body["type"])
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown interaction response: {body!r}") from exc
        data = body.get("data")
        if data is not None and not isinstance(data, Mapping):
            raise ValueError("Interaction response data must be an object")
        return cls(response_type, data)
