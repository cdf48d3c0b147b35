"""Modal submissions and the value queries over their submitted components."""

from __future__ import annotations

from typing import Any, Dict, List

from ..components import ComponentTreeResolver
from ..follow_up import FollowUpChannel
from ..payloads import InteractionPayload
from .base import BaseInteraction


class ModalSubmitInteraction(BaseInteraction):
    """A submitted modal.

    ``edit_reply`` always goes through the follow-up channel, so it is the
    natural way to finish after :meth:`defer_reply`.
    """

    def __init__(
        self,
        payload: InteractionPayload,
        *,
        follow_up_channel: FollowUpChannel | None = None,
    ) -> None:
        super().__init__(payload, follow_up_channel=follow_up_channel)
        self._data = payload.modal_data()
        self._resolver = ComponentTreeResolver(self._data.components, self._data.resolved)

    @property
    def custom_id(self) -> str:
        return self._data.custom_id

    @property
    def fields(self) -> ComponentTreeResolver:
        return self._resolver

    def get_text_value(self, custom_id: str) -> str | None:
        return self._resolver.get_text_value(custom_id)

    def get_selection_values(self, custom_id: str) -> List[str] | None:
        return self._resolver.get_selection_values(custom_id)

    def get_component_value(self, custom_id: str) -> str | List[str] | None:
        return self._resolver.get_component_value(custom_id)

    def get_roles(self, custom_id: str) -> List[Dict[str, Any]]:
        return self._resolver.get_roles(custom_id)

    def get_role(self, custom_id: str) -> Dict[str, Any] | None:
        return self._resolver.get_role(custom_id)

    def get_users(self, custom_id: str) -> List[Dict[str, Any]]:
        return self._resolver.get_users(custom_id)

    def get_user(self, custom_id: str) -> Dict[str, Any] | None:
        return self._resolver.get_user(custom_id)

    def get_channels(self, custom_id: str) -> List[Dict[str, Any]]:
        return self._resolver.get_channels(custom_id)

    def get_channel(self, custom_id: str) -> Dict[str, Any] | None:
        return self._resolver.get_channel(custom_id)

    def get_attachment(self, custom_id: str) -> Dict[str, Any] | None:
        return self._resolver.get_attachment(custom_id)
