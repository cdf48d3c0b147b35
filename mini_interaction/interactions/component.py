"""Button and select-menu interactions on an existing message."""

from __future__ import annotations

from typing import Any, Dict, List

from ..components import resolve_entities
from ..constants import ComponentType
from ..follow_up import FollowUpChannel
from ..payloads import InteractionPayload
from .base import BaseInteraction


class ComponentInteraction(BaseInteraction):
    def __init__(
        self,
        payload: InteractionPayload,
        *,
        follow_up_channel: FollowUpChannel | None = None,
    ) -> None:
        super().__init__(payload, follow_up_channel=follow_up_channel)
        self._data = payload.component_data()

    @property
    def custom_id(self) -> str:
        return self._data.custom_id

    @property
    def component_type(self) -> ComponentType | int:
        try:
            return ComponentType(self._data.component_type)
        except ValueError:
            return self._data.component_type

    @property
    def values(self) -> List[str] | None:
        """Selected option values for select menus; ``None`` for buttons."""

        return list(self._data.values) if self._data.values is not None else None

    @property
    def message(self) -> Dict[str, Any] | None:
        return self._payload.message

    def get_selected_roles(self) -> List[Dict[str, Any]]:
        return resolve_entities(self._data.values, self._data.resolved.roles)

    def get_selected_channels(self) -> List[Dict[str, Any]]:
        return resolve_entities(self._data.values, self._data.resolved.channels)

    def get_selected_users(self) -> List[Dict[str, Any]]:
        members = self._data.resolved.members
        return [
            {"user": user, "member": members.get(user["id"])}
            for user in resolve_entities(self._data.values, self._data.resolved.users)
        ]
