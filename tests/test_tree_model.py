"""Tree Model: arena construction, visible forest walk, forest mutation."""

import pytest

from conftest import folder
from tree import ORIGIN, Position, TreeModel, generate_node_id


@pytest.fixture
def model(scenario_forest):
    m = TreeModel()
    m.load_forest(scenario_forest)
    return m


class TestConstruction:
    def test_generate_node_id_replaces_separators(self):
        assert generate_node_id("C:/Users/a b") == "C__Users_a_b"

    def test_ids_default_to_generated_from_path(self):
        m = TreeModel()
        m.load_forest([{"path": "/home/user", "children": [{"path": "/home/user/docs"}]}])
        assert m.roots == ["_home_user"]
        assert m.get("_home_user").children == ["_home_user_docs"]
        assert m.get("_home_user").label == "/home/user"

    def test_duplicate_id_raises(self):
        m = TreeModel()
        with pytest.raises(ValueError, match="Duplicate"):
            m.load_forest([folder("X", folder("Y")), folder("Y")])

    def test_spec_without_locator_raises(self):
        with pytest.raises(ValueError):
            TreeModel().load_forest([{"name": "nameless"}])

    def test_unknown_id_raises(self, model):
        with pytest.raises(ValueError, match="Unknown node id"):
            model.get("missing")
        assert model.find("missing") is None

    def test_positions_parse_from_dict(self):
        m = TreeModel()
        m.load_forest([folder("P", position={"x": 3, "y": 4})])
        assert m.get("P").position == Position(3.0, 4.0)


class TestVisibleForest:
    def test_preorder_over_expanded_nodes(self, model):
        assert model.visible_ids() == ["R", "A", "C", "B"]
        assert model.derived_edges() == [("R", "A"), ("A", "C"), ("R", "B")]

    def test_collapsed_children_are_hidden(self, model):
        model.set_expanded("A", False)
        assert model.visible_ids() == ["R", "A", "B"]
        assert model.visible_descendants("R") == ["A", "B"]

    def test_depths_and_parents(self, model):
        entries = {e.node.id: e for e in model.iter_visible()}
        assert entries["C"].depth == 2
        assert entries["C"].parent_id == "A"
        assert entries["R"].parent_id is None

    def test_parent_map_covers_hidden_nodes(self, model):
        model.set_expanded("A", False)
        assert model.parent_map()["C"] == "A"


class TestMutation:
    def test_toggle_returns_new_state(self, model):
        assert model.toggle_expanded("A") is False
        assert model.toggle_expanded("A") is True

    def test_set_attribute_only_for_display_fields(self, model):
        model.set_attribute("A", "color", "#ff0000")
        assert model.get("A").color == "#ff0000"
        with pytest.raises(ValueError, match="not editable"):
            model.set_attribute("A", "expanded", False)

    def test_collapse_all_keeps_roots_open(self, model):
        model.collapse_all()
        assert model.visible_ids() == ["R", "A", "B"]
        model.expand_all()
        assert model.get("C").expanded is True

    def test_add_and_remove_root(self, model):
        model.add_root(folder("D", folder("E")))
        assert model.roots == ["R", "D"]
        removed = model.remove_root("D")
        assert sorted(removed) == ["D", "E"]
        assert "E" not in model

    def test_add_root_with_clashing_id_leaves_model_untouched(self, model):
        with pytest.raises(ValueError):
            model.add_root(folder("Z", folder("A")))
        assert "Z" not in model
        assert model.roots == ["R"]

    def test_remove_non_root_raises(self, model):
        with pytest.raises(ValueError, match="Not a root"):
            model.remove_root("A")

    def test_materialize_children_replaces_listing(self, model):
        model.get("B").has_more = True
        assert model.materialize_children("B", [folder("B1"), folder("B2", folder("B21"))]) == []
        assert model.get("B").children == ["B1", "B2"]
        model.set_position("B1", Position(5, 5))

        removed = model.materialize_children("B", [folder("B1"), folder("B3")])
        assert removed == ["B2", "B21"]
        assert model.get("B").children == ["B1", "B3"]
        assert "B21" not in model
        assert model.get("B1").position == Position(5, 5)
        assert model.get("B").has_more is False

    def test_materialize_children_clash_leaves_model_untouched(self, model):
        with pytest.raises(ValueError, match="Duplicate"):
            model.materialize_children("B", [folder("A")])
        assert model.get("B").children == []
        assert model.get("R").children == ["A", "B"]

    def test_find_by_locator_follows_structure(self, model):
        assert model.find_by_locator("/C").id == "C"
        model.add_root(folder("Z"))
        assert model.find_by_locator("/Z").id == "Z"
        model.remove_root("Z")
        assert model.find_by_locator("/Z") is None
        assert model.find_by_locator("/nowhere") is None


class TestSerialization:
    def test_forest_round_trip(self, model):
        model.set_position("C", Position(1.5, -2.25))
        copy = TreeModel()
        copy.load_forest(model.to_forest())
        assert copy.visible_ids() == model.visible_ids()
        assert copy.get("C").position == Position(1.5, -2.25)
        assert copy.get("B").position == ORIGIN
