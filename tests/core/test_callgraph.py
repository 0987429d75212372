"""
Tests for the call-graph index.

With "1" -> 19, "+" -> 23, "2" -> 29, "4" -> 31:
    Axiom_1: 8303 = 29      (1 + 1 = 2)
    Axiom_2: 19343 = 31     (2 + 2 = 4)
    Theorem: 19^4 * 23^3 = 31

Claims:
    - Edges are exactly the divisibility relations, one per opcode
    - No record links to itself
    - Building twice from the same inputs gives the same graph
"""

from euclid.core.callgraph import CallGraph, CallGraphEdge, build_graph, relations_between
from euclid.core.rules import RuleStore
from euclid.core.state import Opcode


# ── Helpers ──────────────────────────────────────────────────────────────────

def four_ones_store() -> RuleStore:
    store = RuleStore()
    store.add_axiom(["1", "+", "1"], ["2"])
    store.add_axiom(["2", "+", "2"], ["4"])
    store.set_theorem(["1", "+", "1", "+", "1", "+", "1"], ["4"])
    return store


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestRelations:
    def test_theorem_to_axiom_1(self):
        store = four_ones_store()
        graph = CallGraph(store.theorem, store.rules)
        assert graph.relations(0, 1) == [Opcode.LHS_REDUCE]

    def test_theorem_to_axiom_2(self):
        store = four_ones_store()
        graph = CallGraph(store.theorem, store.rules)
        assert graph.relations(0, 2) == [Opcode.RHS_EXPAND]

    def test_axiom_to_axiom(self):
        store = four_ones_store()
        graph = CallGraph(store.theorem, store.rules)
        # 2 + 2 contains the 2 of Axiom_1's right side
        assert graph.relations(2, 1) == [Opcode.LHS_EXPAND]
        assert graph.relations(1, 2) == []

    def test_relations_between_all_four(self):
        store = RuleStore()
        rule = store.add_axiom(["a", "b"], ["a"])
        found = relations_between(rule.lhs, rule.lhs, rule)
        assert found == [Opcode.LHS_REDUCE, Opcode.LHS_EXPAND,
                         Opcode.RHS_REDUCE, Opcode.RHS_EXPAND]

    def test_no_self_edges(self):
        store = four_ones_store()
        graph = CallGraph(store.theorem, store.rules)
        assert all(edge.source != edge.target for edge in graph.edges)

    def test_targets_and_reachable(self):
        store = four_ones_store()
        graph = CallGraph(store.theorem, store.rules)
        assert graph.targets(0) == {1, 2}
        assert graph.reachable(0) == {1, 2}

    def test_contains_and_len(self):
        store = four_ones_store()
        graph = CallGraph(store.theorem, store.rules)
        assert CallGraphEdge(0, Opcode.RHS_EXPAND, 2) in graph
        assert len(graph) == 3

    def test_edge_name(self):
        edge = CallGraphEdge(0, Opcode.LHS_REDUCE, 1)
        assert edge.name == "Theorem --lhs_reduce--> Axiom_1"


class TestBuildGraph:
    def test_deterministic(self):
        store = four_ones_store()
        assert build_graph(store.theorem, store.rules) == build_graph(store.theorem, store.rules)

    def test_unrelated_rules_have_no_edges(self):
        store = RuleStore()
        store.add_axiom(["x"], ["y"])
        store.set_theorem(["a"], ["b"])
        assert build_graph(store.theorem, store.rules) == set()

    def test_inputs_untouched(self):
        store = four_ones_store()
        before = list(store.rules)
        build_graph(store.theorem, store.rules)
        assert store.rules == before
