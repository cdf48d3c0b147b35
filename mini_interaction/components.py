"""Submitted component trees and the resolver answering value queries over them.

Modal submissions arrive as a list of top-level nodes. Two wrapper shapes
exist: action rows carrying a ``components`` list, and labels carrying a
single ``component``. Values live on the leaves: text inputs expose
``value`` and select menus expose ``values``. Nodes are parsed into a closed
set of models keyed on the ``type`` discriminant so the walk never has to
guess a node's shape from the keys it happens to carry.
"""

from __future__ import annotations

from typing import Any, Annotated, Callable, Dict, Iterator, List, Mapping, Sequence, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

from .constants import ComponentType

T = TypeVar("T")


def _node_tag(value: Any) -> str:
    if isinstance(value, Mapping):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    if kind == ComponentType.ACTION_ROW:
        return "action_row"
    if kind == ComponentType.LABEL:
        return "label"
    return "leaf"


class LeafNode(BaseModel):
    """An input component holding a submitted value."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: int
    custom_id: str | None = None
    value: Any = None
    values: List[str] | None = None
    id: int | None = None


class ActionRowNode(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    type: int = ComponentType.ACTION_ROW
    components: List["ComponentNode"] = Field(default_factory=list)
    id: int | None = None


class LabelNode(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    type: int = ComponentType.LABEL
    component: "ComponentNode"
    id: int | None = None


ComponentNode = Annotated[
    Union[
        Annotated[ActionRowNode, Tag("action_row")],
        Annotated[LabelNode, Tag("label")],
        Annotated[LeafNode, Tag("leaf")],
    ],
    Discriminator(_node_tag),
]

ActionRowNode.model_rebuild()
LabelNode.model_rebuild()

_TREE_ADAPTER = TypeAdapter(List[ComponentNode])


def parse_component_tree(raw: Sequence[Any] | None) -> List[ComponentNode]:
    """Validate a submitted component list into typed nodes; parsed nodes pass through."""

    if not raw:
        return []
    return _TREE_ADAPTER.validate_python(list(raw))


def iter_leaves(nodes: Sequence[ComponentNode]) -> Iterator[LeafNode]:
    """Yield every leaf in pre-order, unwrapping rows and labels at any depth."""

    for node in nodes:
        if isinstance(node, ActionRowNode):
            yield from iter_leaves(node.components)
        elif isinstance(node, LabelNode):
            yield from iter_leaves([node.component])
        else:
            yield node


def resolve_entities(
    identifiers: Sequence[str] | None,
    entities: Mapping[str, T] | None,
) -> List[T]:
    """Map identifiers through *entities*, dropping ones with no entry."""

    if not identifiers or not entities:
        return []
    return [entities[identifier] for identifier in identifiers if identifier in entities]


class ComponentTreeResolver:
    """Answer point queries against one submitted component tree.

    Lookups never raise for unknown identifiers: a missing component is
    reported as ``None``. Selections that matched nothing are reported as an
    empty list, which is a different answer from "no such component".

    *components* may hold parsed nodes or raw platform mappings; raw entries
    are validated on construction.
    """

    def __init__(
        self,
        components: Sequence[ComponentNode | Mapping[str, Any]] | None = None,
        resolved: Any = None,
    ) -> None:
        self._components: List[ComponentNode] = parse_component_tree(components)
        self._resolved = resolved

    @classmethod
    def from_raw(
        cls,
        components: Sequence[Mapping[str, Any]] | None,
        resolved: Any = None,
    ) -> "ComponentTreeResolver":
        return cls(components, resolved)

    def _find(self, custom_id: str, extract: Callable[[LeafNode], T | None]) -> T | None:
        for leaf in iter_leaves(self._components):
            if leaf.custom_id != custom_id:
                continue
            found = extract(leaf)
            if found is not None:
                return found
        return None

    def get_text_value(self, custom_id: str) -> str | None:
        return self._find(custom_id, lambda leaf: leaf.value if isinstance(leaf.value, str) else None)

    def get_selection_values(self, custom_id: str) -> List[str] | None:
        found = self._find(custom_id, lambda leaf: leaf.values)
        return list(found) if found is not None else None

    def get_component_value(self, custom_id: str) -> str | List[str] | None:
        text = self.get_text_value(custom_id)
        if text is not None:
            return text
        return self.get_selection_values(custom_id)

    def _entity_map(self, entity_key: str) -> Mapping[str, Any] | None:
        if self._resolved is None:
            return None
        if isinstance(self._resolved, Mapping):
            return self._resolved.get(entity_key)
        return getattr(self._resolved, entity_key, None)

    def get_resolved_entities(self, custom_id: str, entity_key: str) -> List[Any]:
        return resolve_entities(self.get_selection_values(custom_id), self._entity_map(entity_key))

    def get_roles(self, custom_id: str) -> List[Dict[str, Any]]:
        return self.get_resolved_entities(custom_id, "roles")

    def get_role(self, custom_id: str) -> Dict[str, Any] | None:
        return next(iter(self.get_roles(custom_id)), None)

    def get_users(self, custom_id: str) -> List[Dict[str, Any]]:
        """Return ``{"user": ..., "member": ...}`` entries; ``member`` is None outside guilds."""

        users = self._entity_map("users") or {}
        members = self._entity_map("members") or {}
        return [
            {"user": users[user_id], "member": members.get(user_id)}
            for user_id in self.get_selection_values(custom_id) or []
            if user_id in users
        ]

    def get_user(self, custom_id: str) -> Dict[str, Any] | None:
        return next(iter(self.get_users(custom_id)), None)

    def get_channels(self, custom_id: str) -> List[Dict[str, Any]]:
        return self.get_resolved_entities(custom_id, "channels")

    def get_channel(self, custom_id: str) -> Dict[str, Any] | None:
        return next(iter(self.get_channels(custom_id)), None)

    def get_attachments(self, custom_id: str) -> List[Dict[str, Any]]:
        return self.get_resolved_entities(custom_id, "attachments")

    def get_attachment(self, custom_id: str) -> Dict[str, Any] | None:
        """Return the first uploaded attachment for a file-upload component."""

        text = self.get_text_value(custom_id)
        if text is not None:
            attachments = self._entity_map("attachments") or {}
            return attachments.get(text)
        return next(iter(self.get_attachments(custom_id)), None)
