"""Structural signature and change classification."""

from conftest import folder
from tree import TreeModel, compute_signature, diff_signatures, structure_changed
from tree.signature import signature_from_rows, signature_parents, signature_to_rows


def make_model(forest):
    m = TreeModel()
    m.load_forest(forest)
    return m


class TestComputeSignature:
    def test_preorder_entries(self, scenario_forest):
        sig = compute_signature(make_model(scenario_forest))
        assert [tuple(e) for e in sig] == [("R", 2, True), ("A", 1, True), ("C", 0, False), ("B", 0, False)]

    def test_display_attributes_do_not_change_signature(self, scenario_forest):
        m = make_model(scenario_forest)
        before = compute_signature(m)
        m.set_attribute("A", "color", "#123456")
        m.set_attribute("B", "label", "renamed")
        m.set_position("C", (500, 500))
        assert not structure_changed(before, compute_signature(m))

    def test_missing_previous_counts_as_changed(self, scenario_forest):
        assert structure_changed(None, compute_signature(make_model(scenario_forest)))

    def test_rows_round_trip(self, scenario_forest):
        sig = compute_signature(make_model(scenario_forest))
        assert signature_from_rows(signature_to_rows(sig)) == sig

    def test_parents_decoded_from_preorder(self, scenario_forest):
        parents = signature_parents(compute_signature(make_model(scenario_forest)))
        assert parents == {"R": None, "A": "R", "C": "A", "B": "R"}


class TestDiff:
    def test_collapse_is_isolable(self, scenario_forest):
        m = make_model(scenario_forest)
        before = compute_signature(m)
        m.set_expanded("A", False)
        diff = diff_signatures(before, compute_signature(m))
        assert diff.isolable
        assert diff.isolated_node == "A"
        assert diff.disappeared == ["C"]

    def test_expand_revealing_subtree_is_isolable(self, scenario_forest):
        m = make_model(scenario_forest)
        m.set_expanded("A", False)
        before = compute_signature(m)
        m.set_expanded("A", True)
        diff = diff_signatures(before, compute_signature(m))
        assert diff.isolated_node == "A"
        assert diff.appeared == ["C"]

    def test_new_root_is_not_isolable(self, scenario_forest):
        m = make_model(scenario_forest)
        before = compute_signature(m)
        m.add_root(folder("D"))
        diff = diff_signatures(before, compute_signature(m))
        assert not diff.isolable
        assert diff.appeared == ["D"]

    def test_two_toggles_are_not_isolable(self):
        m = make_model([folder("R", folder("A", folder("A1"), expanded=False), folder("B", folder("B1"), expanded=False))])
        before = compute_signature(m)
        m.set_expanded("A", True)
        m.set_expanded("B", True)
        diff = diff_signatures(before, compute_signature(m))
        assert sorted(diff.changed) == ["A", "B"]
        assert not diff.isolable
