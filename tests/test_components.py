"""Tests for the submitted component tree resolver."""

from pathlib import Path
import sys

import pytest
from pydantic import ValidationError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover
    sys.path.insert(0, str(ROOT))

from mini_interaction.components import (  # noqa: E402
    ActionRowNode,
    ComponentTreeResolver,
    LabelNode,
    LeafNode,
    iter_leaves,
    parse_component_tree,
    resolve_entities,
)
from mini_interaction.payloads import ResolvedEntities  # noqa: E402


def _text(custom_id, value):
    return {"type": 4, "custom_id": custom_id, "value": value}


def _select(custom_id, values, kind=3):
    return {"type": kind, "custom_id": custom_id, "values": values}


def _row(*children):
    return {"type": 1, "components": list(children)}


def _label(child):
    return {"type": 18, "component": child}


def test_parse_component_tree_builds_typed_nodes():
    nodes = parse_component_tree([_row(_text("a", "hello")), _label(_select("b", ["x"]))])

    assert isinstance(nodes[0], ActionRowNode)
    assert isinstance(nodes[0].components[0], LeafNode)
    assert isinstance(nodes[1], LabelNode)
    assert nodes[1].component.values == ["x"]


def test_text_value_from_action_row():
    resolver = ComponentTreeResolver.from_raw([_row(_text("a", "hello"))])

    assert resolver.get_text_value("a") == "hello"
    assert resolver.get_text_value("missing") is None


def test_selection_values_from_label_wrapper():
    resolver = ComponentTreeResolver.from_raw([_label(_select("b", ["r1", "r2"], kind=6))])

    assert resolver.get_selection_values("b") == ["r1", "r2"]
    assert resolver.get_component_value("b") == ["r1", "r2"]
    assert resolver.get_text_value("b") is None


def test_component_value_prefers_text():
    resolver = ComponentTreeResolver.from_raw([_row(_text("name", "Ada"))])

    assert resolver.get_component_value("name") == "Ada"


def test_empty_selection_is_distinct_from_missing_component():
    resolver = ComponentTreeResolver.from_raw([_label(_select("roles", [], kind=6))])

    assert resolver.get_selection_values("roles") == []
    assert resolver.get_selection_values("other") is None
    assert resolver.get_component_value("roles") == []


def test_empty_text_value_is_returned():
    resolver = ComponentTreeResolver.from_raw([_row(_text("notes", ""))])

    assert resolver.get_text_value("notes") == ""


def test_first_match_wins_in_pre_order():
    resolver = ComponentTreeResolver.from_raw(
        [
            _row(_text("dup", "first")),
            _label(_text("dup", "second")),
        ]
    )

    assert resolver.get_text_value("dup") == "first"


def test_nested_wrappers_are_unwrapped():
    resolver = ComponentTreeResolver.from_raw([_label(_row(_label(_text("deep", "found"))))])

    assert resolver.get_text_value("deep") == "found"


def test_leaves_without_values_are_skipped():
    resolver = ComponentTreeResolver.from_raw(
        [
            {"type": 10, "content": "Please fill in the form"},
            _row({"type": 4, "custom_id": "x"}, _text("x", "later")),
        ]
    )

    assert resolver.get_text_value("x") == "later"


@pytest.mark.parametrize("components", [[], None])
def test_empty_tree_yields_absent_values(components):
    resolver = ComponentTreeResolver.from_raw(components, ResolvedEntities())

    assert resolver.get_text_value("a") is None
    assert resolver.get_selection_values("a") is None
    assert resolver.get_component_value("a") is None
    assert resolver.get_roles("a") == []
    assert resolver.get_role("a") is None
    assert resolver.get_users("a") == []
    assert resolver.get_user("a") is None
    assert resolver.get_channels("a") == []
    assert resolver.get_channel("a") is None
    assert resolver.get_attachment("a") is None


def test_roles_drop_unresolved_identifiers():
    role = {"id": "r1", "name": "Moderator"}
    resolved = ResolvedEntities(roles={"r1": role})
    resolver = ComponentTreeResolver.from_raw([_label(_select("b", ["r1", "r2"], kind=6))], resolved)

    assert resolver.get_roles("b") == [role]
    assert resolver.get_role("b") == role


def test_users_include_member_when_present():
    resolved = ResolvedEntities(
        users={"u1": {"id": "u1", "username": "ada"}, "u2": {"id": "u2", "username": "bob"}},
        members={"u1": {"nick": "Ada"}},
    )
    resolver = ComponentTreeResolver.from_raw([_label(_select("who", ["u1", "u2", "u3"], kind=5))], resolved)

    assert resolver.get_users("who") == [
        {"user": {"id": "u1", "username": "ada"}, "member": {"nick": "Ada"}},
        {"user": {"id": "u2", "username": "bob"}, "member": None},
    ]
    assert resolver.get_user("who")["user"]["username"] == "ada"


def test_channels_and_attachments_resolve_from_plain_mapping():
    resolved = {
        "channels": {"c1": {"id": "c1", "name": "general"}},
        "attachments": {"a1": {"id": "a1", "filename": "report.pdf"}},
    }
    resolver = ComponentTreeResolver.from_raw(
        [
            _label(_select("channel", ["c1"], kind=8)),
            _label(_select("upload", ["a1"], kind=19)),
        ],
        resolved,
    )

    assert resolver.get_channel("channel") == {"id": "c1", "name": "general"}
    assert resolver.get_attachment("upload") == {"id": "a1", "filename": "report.pdf"}


def test_resolve_entities_without_map_returns_empty_list():
    assert resolve_entities(["a"], None) == []
    assert resolve_entities(None, {"a": 1}) == []


def test_iter_leaves_preserves_order():
    nodes = parse_component_tree([_row(_text("a", "1"), _text("b", "2")), _label(_text("c", "3"))])

    assert [leaf.custom_id for leaf in iter_leaves(nodes)] == ["a", "b", "c"]


def test_constructor_accepts_raw_mappings():
    resolver = ComponentTreeResolver([_row(_text("name", "Ada")), _label(_select("color", ["red"]))])

    assert resolver.get_text_value("name") == "Ada"
    assert resolver.get_selection_values("color") == ["red"]


def test_constructor_accepts_parsed_and_raw_nodes_together():
    parsed = parse_component_tree([_row(_text("name", "Ada"))])

    resolver = ComponentTreeResolver([*parsed, _text("city", "Paris")])

    assert resolver.get_text_value("name") == "Ada"
    assert resolver.get_text_value("city") == "Paris"


def test_constructor_rejects_malformed_nodes():
    with pytest.raises(ValidationError):
        ComponentTreeResolver([{"custom_id": "missing-type"}])
