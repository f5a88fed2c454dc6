"""
Entity Registry and Filter Tests
"""

from screentime.contracts.narrative import Entity, EntityKind
from screentime.entities import EntityFilter, EntityRegistry
from screentime.sample import sample_registry

from tests.fixtures import nine_entities, nine_entity_registry


class TestEntityRegistry:

    def test_order_preserved(self):
        registry = nine_entity_registry()
        assert [e.entity_id for e in registry] == [f"e{i}" for i in range(9)]
        assert len(registry) == 9
        assert "e3" in registry
        assert registry.get("e10") is None

    def test_groups_known_tiers_first(self):
        registry = EntityRegistry([
            Entity("a", "A", "c", "Tertiary"),
            Entity("b", "B", "c", "Cameo"),
            Entity("c", "C", "c", "Primary"),
            Entity("d", "D", "c", "Antagonists"),
            Entity("e", "E", "c", ""),
        ])
        groups = registry.groups()
        assert list(groups) == ["Primary", "Tertiary", "Antagonists", "Cameo", "Other"]
        assert [e.entity_id for e in groups["Primary"]] == ["c"]

    def test_of_kind(self):
        registry = EntityRegistry(
            list(sample_registry(EntityKind.CHARACTER)) + list(sample_registry(EntityKind.OBJECT))
        )
        objects = registry.of_kind(EntityKind.OBJECT)
        assert {e.entity_id for e in objects} == {"obj-lens", "obj-seal", "obj-ledger"}

    def test_search_name_and_attributes(self):
        registry = sample_registry()
        assert [e.entity_id for e in registry.search("mar")] == ["char-mara"]
        assert [e.entity_id for e in registry.search("ARCHIVIST")] == ["char-quill"]
        assert len(registry.search("  ")) == len(registry)

    def test_from_records(self):
        registry = EntityRegistry.from_records([
            {"id": "x", "name": "Xan", "color": "red", "tier": "Primary", "attributes": ["hero"]},
            {"id": "y", "kind": "location"},
            {"id": "z", "kind": "vehicle"},
            {"name": "no id"},
        ])
        assert [e.entity_id for e in registry] == ["x", "y"]
        assert registry.get("x").kind is EntityKind.CHARACTER
        assert registry.get("x").attributes == ("hero",)
        assert registry.get("y").display_name == "y"
        assert registry.get("y").kind is EntityKind.LOCATION

    def test_sample_has_nine_characters(self):
        assert len(sample_registry()) == 9


class TestEntityFilter:

    def test_default_shows_everything(self):
        registry = nine_entity_registry()
        assert EntityFilter().visible(registry) == nine_entities()

    def test_toggle_entity_from_all(self):
        registry = nine_entity_registry()
        f = EntityFilter().toggle_entity("e2", registry)

        visible = [e.entity_id for e in f.visible(registry)]
        assert "e2" not in visible
        assert len(visible) == 8

        f = f.toggle_entity("e2", registry)
        assert len(f.visible(registry)) == 9

    def test_toggle_unknown_entity_ignored(self):
        registry = nine_entity_registry()
        f = EntityFilter()
        assert f.toggle_entity("ghost", registry) is f

    def test_hidden_tier(self):
        registry = nine_entity_registry()
        f = EntityFilter().toggle_tier("Primary")
        assert all(e.tier != "Primary" for e in f.visible(registry))
        assert len(f.toggle_tier("Primary").visible(registry)) == 9

    def test_query_keeps_registry_order(self):
        registry = nine_entity_registry()
        f = EntityFilter().with_query("entity 1")
        assert [e.entity_id for e in f.visible(registry)] == ["e1"]

    def test_select_all_clears_selection(self):
        registry = nine_entity_registry()
        f = EntityFilter(selected_ids=frozenset({"e1"}))
        assert len(f.visible(registry)) == 1
        assert len(f.select_all().visible(registry)) == 9
