"""
Tests for the core data structures.

Claims:
    - Opcode numbering and labels: 0..3 = lhs_reduce, lhs_expand,
      rhs_reduce, rhs_expand
    - Priority frontier pops the largest lhs first, then the largest rhs
    - FIFO frontier pops in insertion order
    - A state is admitted at most once, keyed on composites AND tokens
    - TheoremState and RuleRecord survive to_dict -> from_dict
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from euclid.core.state import (
    Opcode, RuleRecord, TheoremState, Frontier, SearchState, format_step,
)


# ── Helpers ──────────────────────────────────────────────────────────────────

def st_state(lhs, rhs, *steps):
    return TheoremState(lhs, rhs, tuple(steps))


def tok_state(lhs, rhs, lhs_tokens, rhs_tokens, *steps):
    return TheoremState(lhs, rhs, tuple(steps), tuple(lhs_tokens), tuple(rhs_tokens))


# ── Opcodes ──────────────────────────────────────────────────────────────────

class TestOpcode:
    def test_numbering(self):
        assert [int(op) for op in Opcode] == [0, 1, 2, 3]

    def test_labels(self):
        assert [op.label for op in Opcode] == \
               ["lhs_reduce", "lhs_expand", "rhs_reduce", "rhs_expand"]

    def test_side_and_direction(self):
        assert Opcode.RHS_EXPAND.side == "rhs"
        assert not Opcode.RHS_EXPAND.is_reduce
        assert Opcode.LHS_REDUCE.is_reduce

    def test_from_label(self):
        assert Opcode.from_label("rhs_reduce") is Opcode.RHS_REDUCE
        with pytest.raises(ValueError):
            Opcode.from_label("sideways")

    def test_format_step(self):
        assert format_step((Opcode.LHS_REDUCE, 3)) == "lhs_reduce via Axiom_3"
        assert format_step((3, 12)) == "rhs_expand via Axiom_12"


class TestTheoremState:
    def test_terminal(self):
        assert st_state(6, 6).is_terminal
        assert not st_state(6, 5).is_terminal

    def test_commit_log(self):
        s = st_state(1, 1, (Opcode.RHS_EXPAND, 2), (Opcode.RHS_EXPAND, 1))
        assert s.commit_log() == ["rhs_expand via Axiom_2", "rhs_expand via Axiom_1"]
        assert s.depth == 2

    def test_round_trip(self):
        s = st_state(30, 7, (Opcode.LHS_EXPAND, 4))
        restored = TheoremState.from_dict(s.to_dict())
        assert restored == s
        assert isinstance(restored.proof_stack[0][0], Opcode)

    def test_round_trip_keeps_tokens(self):
        s = tok_state(23 * 29, 19, ["a", "b"], ["p"], (Opcode.LHS_EXPAND, 1))
        restored = TheoremState.from_dict(s.to_dict())
        assert restored == s
        assert restored.lhs_tokens == ("a", "b")

    def test_key_tells_token_orders_apart(self):
        ab = tok_state(23 * 29, 31, ["a", "b"], ["q"])
        ba = tok_state(23 * 29, 31, ["b", "a"], ["q"])
        assert ab.composites == ba.composites
        assert ab.key != ba.key

    def test_state_without_tokens(self):
        assert not st_state(6, 5).has_tokens
        assert st_state(6, 5).key == (6, 5, (), ())


class TestRuleRecord:
    def test_name_and_content(self):
        r = RuleRecord(2, 8303, 29, ("1", "+", "1"), ("2",), label="one plus one")
        assert r.name == "Axiom_2"
        assert r.content == "[one plus one] 1 + 1 = 2"

    def test_original_sides(self):
        r = RuleRecord(1, 8303, 29, ("1", "+", "1"), ("2",), was_swapped=True)
        assert r.original_sides() == (("2",), ("1", "+", "1"))

    def test_round_trip(self):
        r = RuleRecord(1, 8303, 29, ("1", "+", "1"), ("2",), True, "x")
        assert RuleRecord.from_dict(r.to_dict()) == r


# ── Frontier ─────────────────────────────────────────────────────────────────

class TestFrontier:
    def test_unknown_ordering(self):
        with pytest.raises(ValueError):
            Frontier("random")

    def test_priority_pops_largest_lhs_then_rhs(self):
        f = Frontier("priority")
        for lhs, rhs in [(5, 1), (9, 2), (9, 4), (3, 3)]:
            f.push(st_state(lhs, rhs))
        assert [f.pop().composites for _ in range(4)] == [(9, 4), (9, 2), (5, 1), (3, 3)]
        assert f.pop() is None

    def test_fifo_pops_in_insertion_order(self):
        f = Frontier("fifo")
        for lhs, rhs in [(5, 1), (9, 2), (3, 3)]:
            f.push(st_state(lhs, rhs))
        assert [f.pop().composites for _ in range(3)] == [(5, 1), (9, 2), (3, 3)]

    def test_state_admitted_once(self):
        f = Frontier()
        assert f.push(st_state(6, 5))
        assert not f.push(st_state(6, 5, (Opcode.LHS_REDUCE, 1)))
        assert len(f) == 1

    def test_same_composites_other_token_order_admitted(self):
        f = Frontier()
        assert f.push(tok_state(23 * 29, 31, ["a", "b"], ["q"], (Opcode.LHS_EXPAND, 3)))
        assert f.push(tok_state(23 * 29, 31, ["b", "a"], ["q"], (Opcode.LHS_EXPAND, 2)))
        assert not f.push(tok_state(23 * 29, 31, ["b", "a"], ["q"], (Opcode.RHS_REDUCE, 1)))
        assert len(f) == 2

    def test_terminal_pairs_deduplicated_too(self):
        f = Frontier()
        assert f.push(st_state(7, 7, (Opcode.LHS_REDUCE, 1)))
        assert not f.push(st_state(7, 7, (Opcode.RHS_EXPAND, 2)))

    def test_state_stays_seen_after_pop(self):
        f = Frontier()
        f.push(st_state(6, 5))
        f.pop()
        assert not f.push(st_state(6, 5))

    def test_push_all_counts(self):
        f = Frontier()
        f.push(st_state(6, 5))
        admitted, duplicates = f.push_all([st_state(6, 5), st_state(7, 5), st_state(7, 5)])
        assert [s.composites for s in admitted] == [(7, 5)]
        assert duplicates == 2

    def test_requeue_skips_seen_check(self):
        f = Frontier()
        f.push(st_state(6, 5))
        s = f.pop()
        f.requeue([s])
        assert f.pop() == s

    def test_pop_batch(self):
        f = Frontier("fifo")
        for i in range(3):
            f.push(st_state(10 + i, 1))
        assert len(f.pop_batch(2)) == 2
        assert len(f.pop_batch(5)) == 1
        assert f.pop_batch(1) == []

    def test_snapshot_does_not_consume(self):
        f = Frontier()
        f.push(st_state(6, 5))
        f.push(st_state(8, 5))
        assert [s.composites for s in f.snapshot()] == [(8, 5), (6, 5)]
        assert len(f) == 2


class TestSearchStateSerialization:
    def test_round_trip(self):
        search = SearchState(frontier=Frontier("fifo"))
        search.frontier.push(st_state(10, 3, (Opcode.LHS_REDUCE, 1)))
        search.frontier.push(st_state(8, 3))
        search.proofs.append(((Opcode.RHS_EXPAND, 2),))
        search.step = 4
        search.rejected = 2
        search.best_partial = st_state(8, 3)
        search.frontier.push(tok_state(6, 6, ["x", "y"], ["y", "x"]))
        search.unmatched = 5

        restored = SearchState.from_dict(search.to_dict())
        assert restored.frontier.ordering == "fifo"
        assert restored.frontier.snapshot() == search.frontier.snapshot()
        assert restored.frontier.seen == search.frontier.seen
        assert restored.proofs == search.proofs
        assert restored.step == 4
        assert restored.rejected == 2
        assert restored.unmatched == 5
        assert restored.best_partial == search.best_partial

    def test_json_round_trip(self, tmp_path):
        search = SearchState()
        search.frontier.push(st_state(10, 3))
        path = str(tmp_path / "search.json")
        search.save(path)
        restored = SearchState.load(path)
        assert restored.frontier.snapshot() == search.frontier.snapshot()


# ── Property-based tests ─────────────────────────────────────────────────────

pairs = st.tuples(st.integers(min_value=1, max_value=50), st.integers(min_value=1, max_value=50))


class TestFrontierProperties:

    @given(st.lists(pairs, max_size=30))
    def test_priority_order_is_descending(self, keys):
        f = Frontier("priority")
        for lhs, rhs in keys:
            f.push(st_state(lhs, rhs))
        popped = []
        while f:
            popped.append(f.pop().composites)
        assert popped == sorted(set(keys), reverse=True)

    @given(st.lists(pairs, max_size=30))
    def test_each_pair_admitted_once(self, keys):
        f = Frontier("fifo")
        admitted = [f.push(st_state(lhs, rhs)) for lhs, rhs in keys]
        assert sum(admitted) == len(set(keys))

    @given(st.lists(st.permutations(["a", "b", "c"]), max_size=20))
    def test_each_token_order_admitted_once(self, orders):
        # Every order has composite 19 * 23 * 29; only the tokens differ.
        f = Frontier("priority")
        admitted = [f.push(tok_state(19 * 23 * 29, 31, order, ["q"])) for order in orders]
        assert sum(admitted) == len({tuple(order) for order in orders})
