"""Pydantic models for inbound interaction payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .components import ComponentNode
from .constants import CommandOptionType, InteractionType
from .errors import InvalidInteractionPayload


class ResolvedEntities(BaseModel):
    """Entity data the platform attaches for identifiers referenced in a payload."""

    model_config = ConfigDict(frozen=True, extra="allow")

    users: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    members: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    roles: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    channels: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    attachments: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    messages: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class CommandData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    id: str | None = None
    name: str
    type: int = 1
    options: List[Dict[str, Any]] = Field(default_factory=list)
    resolved: ResolvedEntities = Field(default_factory=ResolvedEntities)
    target_id: str | None = None
    guild_id: str | None = None

    def command_path(self) -> Tuple[Tuple[str, ...], Dict[str, Any]]:
        """Return the command path through sub-command groups and the leaf options."""

        path: List[str] = [self.name]
        current = self.options
        while current:
            first = current[0]
            if first.get("type") not in (
                CommandOptionType.SUB_COMMAND,
                CommandOptionType.SUB_COMMAND_GROUP,
            ):
                break
            name = first.get("name")
            if isinstance(name, str) and name:
                path.append(name)
            nested = first.get("options")
            current = nested if isinstance(nested, list) else []

        parsed: Dict[str, Any] = {}
        for item in current:
            name = item.get("name")
            if isinstance(name, str) and name:
                parsed[name] = item.get("value")
        return tuple(path), parsed


class ComponentData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    custom_id: str
    component_type: int
    values: List[str] | None = None
    resolved: ResolvedEntities = Field(default_factory=ResolvedEntities)


class ModalSubmitData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    custom_id: str
    components: List[ComponentNode] = Field(default_factory=list)
    resolved: ResolvedEntities = Field(default_factory=ResolvedEntities)


class InteractionPayload(BaseModel):
    """An inbound interaction, already signature-verified.

    ``data`` is kept raw here and parsed per kind by :meth:`command_data`,
    :meth:`component_data` and :meth:`modal_data`.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    application_id: str
    type: InteractionType
    token: str
    version: int = 1
    data: Dict[str, Any] | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    member: Dict[str, Any] | None = None
    user: Dict[str, Any] | None = None
    message: Dict[str, Any] | None = None
    locale: str | None = None
    guild_locale: str | None = None
    app_permissions: str | None = None

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> "InteractionPayload":
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise InvalidInteractionPayload(f"Invalid interaction payload: {exc}") from exc

    def _parse_data(self, model: type[BaseModel]) -> Any:
        try:
            return model.model_validate(self.data or {})
        except ValidationError as exc:
            raise InvalidInteractionPayload(
                f"Invalid {self.type.name.lower()} data: {exc}"
            ) from exc

    def command_data(self) -> CommandData:
        return self._parse_data(CommandData)

    def component_data(self) -> ComponentData:
        return self._parse_data(ComponentData)

    def modal_data(self) -> ModalSubmitData:
        return self._parse_data(ModalSubmitData)

    @property
    def invoking_user(self) -> Dict[str, Any] | None:
        """Return the user who triggered the interaction, inside or outside a guild."""

        if self.member and isinstance(self.member.get("user"), dict):
            return self.member["user"]
        return self.user

    @property
    def invoking_user_id(self) -> str | None:
        user = self.invoking_user
        if not user:
            return None
        user_id = user.get("id")
        return str(user_id) if user_id is not None else None
