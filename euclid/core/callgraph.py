"""
Call-graph index: which rules can touch which sides, computed once.

For every ordered pair (A, B) of distinct records among the theorem
(guid 0) and the axioms:

    A.lhs % B.lhs == 0  ->  (A, lhs_reduce, B)
    A.lhs % B.rhs == 0  ->  (A, lhs_expand, B)
    A.rhs % B.lhs == 0  ->  (A, rhs_reduce, B)
    A.rhs % B.rhs == 0  ->  (A, rhs_expand, B)

The engine only consults the graph for the root state, where its answer
is exact. Every other state is tested directly, so search results are
the same with or without a graph.
"""

from dataclasses import dataclass

from .state import Opcode, RuleRecord

THEOREM_ID = 0


@dataclass(frozen=True)
class CallGraphEdge:
    source: int
    relation: Opcode
    target: int

    @property
    def name(self):
        src = "Theorem" if self.source == THEOREM_ID else f"Axiom_{self.source}"
        return f"{src} --{self.relation.label}--> Axiom_{self.target}"

    def __repr__(self):
        return f"CallGraphEdge({self.name})"


def relations_between(a_lhs: int, a_rhs: int, b: RuleRecord) -> list:
    """The opcodes under which rule b applies to the sides (a_lhs, a_rhs)."""
    found = []
    if a_lhs % b.lhs == 0:
        found.append(Opcode.LHS_REDUCE)
    if a_lhs % b.rhs == 0:
        found.append(Opcode.LHS_EXPAND)
    if a_rhs % b.lhs == 0:
        found.append(Opcode.RHS_REDUCE)
    if a_rhs % b.rhs == 0:
        found.append(Opcode.RHS_EXPAND)
    return found


def build_graph(theorem, rules) -> set:
    """
    Args:
        theorem: TheoremState or RuleRecord for the theorem (guid 0)
        rules:   iterable of RuleRecord

    Returns the set of CallGraphEdge. Pure: reads its inputs only.
    """
    rules = list(rules)
    nodes = [(THEOREM_ID, theorem.lhs, theorem.rhs)]
    nodes += [(r.id, r.lhs, r.rhs) for r in rules]

    edges = set()
    for source, lhs, rhs in nodes:
        for target in rules:
            if target.id == source:
                continue
            for relation in relations_between(lhs, rhs, target):
                edges.add(CallGraphEdge(source, relation, target.id))
    return edges


class CallGraph:
    """
    Lookup view over build_graph's edges.

        graph.relations(0, 2)    -> opcodes rule 2 can apply to the theorem
        graph.targets(0)         -> rule ids touching the theorem
        graph.reachable(0)       -> rule ids reachable through any chain
    """

    def __init__(self, theorem, rules):
        self.edges = build_graph(theorem, rules)
        self._out = {}
        for edge in self.edges:
            self._out.setdefault(edge.source, {}).setdefault(edge.target, []).append(edge.relation)
        for by_target in self._out.values():
            for relations in by_target.values():
                relations.sort()

    def relations(self, source: int, target: int) -> list:
        return list(self._out.get(source, {}).get(target, ()))

    def targets(self, source: int) -> set:
        return set(self._out.get(source, {}))

    def reachable(self, source: int = THEOREM_ID) -> set:
        found = set()
        stack = [source]
        while stack:
            node = stack.pop()
            for target in self._out.get(node, {}):
                if target not in found:
                    found.add(target)
                    stack.append(target)
        found.discard(source)
        return found

    def __len__(self):
        return len(self.edges)

    def __contains__(self, edge):
        return edge in self.edges
