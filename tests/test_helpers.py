"""Search-driven expansion and areas."""

from conftest import folder
from engine import VIEWPORT_FIT_REQUESTED, PassKind, calculate_area_bounds, create_area_from_node, zoom_to_area
from tree import Position, TreeModel, compute_signature
from tree.search import collect_matches, expand_for_matches


def deep_forest():
    return [
        folder(
            "projects",
            folder("web", folder("assets", folder("logo"), expanded=False), expanded=False),
            folder("notes", expanded=False),
        )
    ]


class TestSearch:
    def test_matches_hidden_nodes_case_insensitively(self):
        m = TreeModel()
        m.load_forest(deep_forest())
        assert collect_matches(m, "LOGO") == ["logo"]
        assert collect_matches(m, "  ") == []

    def test_expand_opens_ancestors_only(self):
        m = TreeModel()
        m.load_forest(deep_forest())
        flipped = expand_for_matches(m, ["logo"])
        assert sorted(flipped) == ["assets", "web"]
        assert "logo" in m.visible_ids()
        assert m.get("notes").expanded is False

    def test_highlight_is_not_structure(self):
        m = TreeModel()
        m.load_forest(deep_forest())
        before = compute_signature(m)
        collect_matches(m, "web")
        assert compute_signature(m) == before

    def test_search_expansion_goes_through_engine(self, engine):
        engine.load_forest(deep_forest())
        expand_for_matches(engine.model, collect_matches(engine.model, "logo"))
        result = engine.notify_tree_changed()
        # one branch opened: the revealed chain fans out from "web"
        assert result.kind == PassKind.LOCAL_FANOUT
        assert set(result.positions) == {"assets", "logo"}


class TestAreas:
    def test_area_covers_subtree(self, engine, scenario_forest):
        engine.load_forest(scenario_forest)
        area = create_area_from_node(engine.model, "A", "area_1")
        assert area.nodes == ["A", "C"]
        assert area.name == "A"

    def test_bounds_pad_visible_nodes(self, engine, scenario_forest):
        engine.load_forest(scenario_forest)
        area = create_area_from_node(engine.model, "R", "area_r")
        position, size = calculate_area_bounds(area, engine.model)
        # R(0, 40) A(60, 0) C(120, 0) B(60, 80)
        assert position == Position(-20, -20)
        assert size == (120 + 240, 80 + 120)

    def test_bounds_fall_back_when_nothing_visible(self, engine, scenario_forest):
        engine.load_forest(scenario_forest)
        engine.toggle_expanded("A")
        area = create_area_from_node(engine.model, "C", "area_c")
        assert calculate_area_bounds(area, engine.model) == (area.position, area.size)

    def test_zoom_requests_fit_on_visible_members(self, engine, scenario_forest, recorder):
        engine.load_forest(scenario_forest)
        engine.toggle_expanded("A")
        recorder.clear()
        area = create_area_from_node(engine.model, "A", "area_a")
        assert zoom_to_area(engine, area) == ["A"]
        assert recorder.of(VIEWPORT_FIT_REQUESTED) == [{"nodeIds": ["A"]}]
