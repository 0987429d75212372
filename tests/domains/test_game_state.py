"""
Integration tests for the game-state domain.

Scope markers are ordinary symbols here, so these exercise the seeded
structural primes and multi-token patterns.
"""

import pytest

from euclid.domains import DOMAINS
from euclid.domains.game_state import (
    GAME_AXIOMS,
    GAME_THEOREMS,
    make_game_prover,
    prove_game_theorem,
    run_game_suite,
)


class TestGameTheoremSuite:

    @pytest.mark.parametrize("theorem_name", list(GAME_THEOREMS.keys()))
    def test_theorem_verdict(self, theorem_name):
        report = prove_game_theorem(theorem_name)
        assert report.proof_found == GAME_THEOREMS[theorem_name]["provable"]
        if report.proof_found:
            assert report.verification.ok

    def test_suite_matches_expectations(self):
        results = run_game_suite(verbose=False)
        wrong = [name for name, r in results.items() if r["proved"] != r["expected"]]
        assert wrong == []


class TestGameProofs:
    def test_theorem_equal_to_an_axiom(self):
        report = prove_game_theorem("sidekick_in_quad")
        assert report.commit_log == ["lhs_reduce via Axiom_6"]

    def test_shared_fact_takes_two_steps(self):
        report = prove_game_theorem("europa")
        assert len(report.commit_log) == 2
        lhs, rhs = report.proof_steps[-1]
        assert lhs == rhs

    def test_missing_lemma(self):
        report = prove_game_theorem("styx_helper")
        assert report.halt_reason == "frontier exhausted"


class TestGameSetup:
    def test_braces_get_seeded_primes(self):
        with make_game_prover() as prover:
            assert prover.store.codec.prime_of("{") == 3
            assert prover.store.codec.prime_of("}") == 5

    def test_six_axioms(self):
        with make_game_prover() as prover:
            assert len(prover.store) == len(GAME_AXIOMS) == 6

    def test_breadth_first_by_default(self):
        with make_game_prover() as prover:
            assert prover.ordering == "fifo"
            assert prover.max_depth == 4

    def test_unknown_theorem_raises(self):
        with pytest.raises(ValueError, match="Unknown theorem"):
            prove_game_theorem("not_a_theorem")

    def test_registered(self):
        assert set(DOMAINS) == {"arithmetic", "game_state"}
