"""
Narrative Tree Tests
====================

Tests for the tree model and the canvas record loader.

VERIFIES:
=========
1. Construction preconditions raise TreeValidationError with explicit codes
2. Root resolution (explicit ids, outline children, parentless nodes)
3. Structural queries (children, ancestors, scenes)
4. Record loading from canvas exports
"""

import json

import pytest

from screentime.contracts.base import ErrorCode, TreeValidationError
from screentime.contracts.narrative import (
    ActPayload, EntityKind, NarrativeNode, NodeKind, OutlinePayload, ScenePayload,
)
from screentime.sample import sample_records, sample_tree
from screentime.tree import (
    TreeModel, load_manuscript, load_tree, load_tree_file, node_from_record,
)

from tests.fixtures import act, chapter, scenario_tree, scene


class TestNodeContract:

    def test_default_payload_matches_kind(self):
        node = NarrativeNode("sc", NodeKind.SCENE)
        assert isinstance(node.payload, ScenePayload)
        assert node.is_scene

    def test_payload_kind_mismatch_rejected(self):
        with pytest.raises(TreeValidationError) as exc_info:
            NarrativeNode("sc", NodeKind.SCENE, payload=ActPayload(title="wrong"))
        assert exc_info.value.code == ErrorCode.PAYLOAD_KIND_MISMATCH

    def test_empty_id_rejected(self):
        with pytest.raises(TreeValidationError) as exc_info:
            NarrativeNode("", NodeKind.ACT)
        assert exc_info.value.code == ErrorCode.MALFORMED_RECORD

    def test_child_ids_become_tuple(self):
        node = NarrativeNode("a", NodeKind.ACT, ["x", "y"])
        assert node.child_ids == ("x", "y")

    def test_scene_members_by_kind(self):
        payload = ScenePayload(
            character_ids=("c",), location_ids=("l",), object_ids=("o",), lore_ids=("r",)
        )
        assert payload.members(EntityKind.CHARACTER) == ("c",)
        assert payload.members(EntityKind.LOCATION) == ("l",)
        assert payload.members(EntityKind.OBJECT) == ("o",)
        assert payload.members(EntityKind.LORE) == ("r",)


class TestTreeValidation:

    def test_duplicate_node_id(self):
        with pytest.raises(TreeValidationError) as exc_info:
            TreeModel([act("a"), act("a")])
        assert exc_info.value.code == ErrorCode.DUPLICATE_NODE_ID

    def test_duplicate_child_id(self):
        with pytest.raises(TreeValidationError) as exc_info:
            TreeModel([act("a", ("b", "b")), chapter("b", parent="a")])
        assert exc_info.value.code == ErrorCode.DUPLICATE_CHILD_ID

    def test_multiple_parents(self):
        with pytest.raises(TreeValidationError) as exc_info:
            TreeModel([act("a", ("c",)), act("b", ("c",)), chapter("c")])
        assert exc_info.value.code == ErrorCode.MULTIPLE_PARENTS

    def test_cycle(self):
        with pytest.raises(TreeValidationError) as exc_info:
            TreeModel([act("a", ("b",)), act("b", ("a",))])
        assert exc_info.value.code == ErrorCode.CYCLE_DETECTED

    def test_self_loop(self):
        with pytest.raises(TreeValidationError) as exc_info:
            TreeModel([act("a", ("a",))])
        assert exc_info.value.code == ErrorCode.CYCLE_DETECTED

    def test_error_carries_context(self):
        with pytest.raises(TreeValidationError) as exc_info:
            TreeModel([act("a"), act("a")])
        assert ("node_id", "a") in exc_info.value.error.context

    def test_dangling_child_tolerated(self):
        tree = TreeModel([act("a", ("ghost",))])
        assert tree.resolve_children("a") == ()
        assert not tree.has_valid_children("a")
        assert tree.get("a").child_ids == ("ghost",)


class TestRootResolution:

    def test_parentless_nodes_in_insertion_order(self):
        tree = TreeModel([act("b"), act("a", ("c",)), chapter("c", parent="a")])
        assert tree.root_ids == ("b", "a")

    def test_outline_children(self):
        tree = sample_tree()
        assert tree.root_ids == ("act-1", "act-2", "act-3")

    def test_outline_children_skip_unresolvable(self):
        tree = TreeModel([
            NarrativeNode("o", NodeKind.OUTLINE, ("a2", "gone", "a1"), payload=OutlinePayload()),
            act("a1"),
            act("a2"),
        ])
        assert tree.root_ids == ("a2", "a1")

    def test_explicit_roots(self):
        tree = TreeModel(
            [act("a"), act("b"), act("c")],
            root_ids=["c", "missing", "a"],
        )
        assert tree.root_ids == ("c", "a")


class TestStructure:

    def test_resolve_children_in_display_order(self):
        tree = scenario_tree()
        assert [n.node_id for n in tree.resolve_children("ch1")] == ["sc1", "sc2"]
        assert tree.resolve_children("unknown") == ()

    def test_expandable_ids(self):
        assert set(scenario_tree().expandable_ids()) == {"act1", "ch1", "ch2"}

    def test_ancestors_top_down(self):
        tree = scenario_tree()
        assert tree.ancestors("sc2") == ["act1", "ch1"]
        assert tree.ancestors("act1") == []
        assert tree.ancestors("unknown") == []

    def test_descendant_scenes(self):
        tree = scenario_tree()
        assert [n.node_id for n in tree.descendant_scenes("act1")] == ["sc1", "sc2", "sc3"]
        assert [n.node_id for n in tree.descendant_scenes("sc3")] == ["sc3"]

    def test_lookup(self):
        tree = scenario_tree()
        assert "ch2" in tree
        assert "nope" not in tree
        assert len(tree) == 6
        assert tree.get("nope") is None


class TestRecordLoader:

    def test_plain_record(self):
        node = node_from_record({
            "id": "sc1",
            "type": "scene",
            "childIds": [],
            "parentId": "ch1",
            "data": {
                "title": "Scene 1",
                "povCharacterId": "mara",
                "characters": ["mara", "tobin"],
                "worlds": ["harbor"],
                "timelineEventIds": ["t1"],
            },
        })
        assert node.kind is NodeKind.SCENE
        assert node.parent_id == "ch1"
        assert node.payload.pov_character_id == "mara"
        assert node.payload.character_ids == ("mara", "tobin")
        assert node.payload.location_ids == ("harbor",)
        assert node.payload.timeline_event_ids == ("t1",)

    def test_canvas_wrapper_unwrapped(self):
        node = node_from_record({
            "id": "canvas-7",
            "type": "narrative",
            "data": {"id": "act1", "type": "act", "childIds": ["ch1"], "data": {"title": "Act One"}},
        })
        assert node.node_id == "act1"
        assert node.child_ids == ("ch1",)
        assert node.display_title == "Act One"

    def test_arc_nodes_skipped(self):
        assert node_from_record({"id": "arc1", "type": "arc", "data": {}}) is None

    def test_missing_id_rejected(self):
        with pytest.raises(TreeValidationError) as exc_info:
            node_from_record({"type": "scene", "data": {}})
        assert exc_info.value.code == ErrorCode.MALFORMED_RECORD

    def test_non_object_data_rejected(self):
        with pytest.raises(TreeValidationError):
            node_from_record({"id": "x", "type": "act", "data": ["oops"]})

    def test_load_tree_skips_unknown_types(self):
        records = [
            {"id": "act1", "type": "act", "childIds": ["sc1", "arc1"], "data": {}},
            {"id": "sc1", "type": "scene", "parentId": "act1", "data": {}},
            {"id": "arc1", "type": "arc", "data": {}},
        ]
        tree = load_tree(records)
        assert len(tree) == 2
        assert [n.node_id for n in tree.resolve_children("act1")] == ["sc1"]

    def test_sample_records_round_trip_through_loader(self):
        tree = load_tree(sample_records())
        assert len(tree.descendant_scenes("outline-glass-meridian")) == 12

    def test_load_tree_file_object_form(self, tmp_path):
        path = tmp_path / "manuscript.json"
        path.write_text(json.dumps({
            "nodes": [
                {"id": "a", "type": "act", "childIds": ["s"], "data": {"title": "A"}},
                {"id": "s", "type": "scene", "parentId": "a", "data": {}},
                {"id": "b", "type": "act", "data": {}},
            ],
            "rootIds": ["b", "a"],
        }), encoding="utf-8")

        tree = load_tree_file(path)
        assert tree.root_ids == ("b", "a")

    def test_load_tree_file_list_form(self, tmp_path):
        path = tmp_path / "manuscript.json"
        path.write_text(json.dumps([
            {"id": "a", "type": "act", "data": {}},
        ]), encoding="utf-8")

        assert load_tree_file(str(path)).root_ids == ("a",)

    def test_load_manuscript_returns_entity_records(self, tmp_path):
        path = tmp_path / "manuscript.json"
        path.write_text(json.dumps({
            "nodes": [{"id": "a", "type": "act", "data": {}}],
            "entities": [{"id": "kit", "name": "Kit"}],
        }), encoding="utf-8")

        tree, entities = load_manuscript(path)
        assert tree.root_ids == ("a",)
        assert entities == [{"id": "kit", "name": "Kit"}]

    def test_load_manuscript_without_entities(self, tmp_path):
        path = tmp_path / "manuscript.json"
        path.write_text(json.dumps({"nodes": [{"id": "a", "type": "act", "data": {}}], "entities": []}), encoding="utf-8")
        assert load_manuscript(path)[1] is None

        path.write_text(json.dumps([{"id": "a", "type": "act", "data": {}}]), encoding="utf-8")
        tree, entities = load_manuscript(path)
        assert len(tree) == 1
        assert entities is None
