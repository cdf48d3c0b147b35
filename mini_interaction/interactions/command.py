"""Slash-command and context-menu interactions."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from ..constants import ApplicationCommandType
from ..follow_up import FollowUpChannel
from ..payloads import InteractionPayload
from .base import BaseInteraction


class CommandInteraction(BaseInteraction):
    """An application command: chat input, user context menu or message context menu."""

    def __init__(
        self,
        payload: InteractionPayload,
        *,
        follow_up_channel: FollowUpChannel | None = None,
    ) -> None:
        super().__init__(payload, follow_up_channel=follow_up_channel)
        self._data = payload.command_data()
        self._path, self._options = self._data.command_path()

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def command_type(self) -> ApplicationCommandType:
        return ApplicationCommandType(self._data.type)

    @property
    def command_path(self) -> Tuple[str, ...]:
        """Command name followed by any sub-command group and sub-command names."""

        return self._path

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def get_option(self, name: str, default: Any = None) -> Any:
        return self._options.get(name, default)

    @property
    def target_id(self) -> str | None:
        return self._data.target_id

    @property
    def target_user(self) -> Dict[str, Any] | None:
        """Return ``{"user": ..., "member": ...}`` for user context menus."""

        if self.command_type is not ApplicationCommandType.USER or self.target_id is None:
            return None
        user = self._data.resolved.users.get(self.target_id)
        if user is None:
            return None
        return {"user": user, "member": self._data.resolved.members.get(self.target_id)}

    @property
    def target_message(self) -> Dict[str, Any] | None:
        if self.command_type is not ApplicationCommandType.MESSAGE or self.target_id is None:
            return None
        return self._data.resolved.messages.get(self.target_id)
