"""
Domain registry.

Each domain is a dict describing a ready-made axiom set:
    axioms:       list of (lhs_tokens, rhs_tokens, label)
    theorems:     dict name -> {description, lhs, rhs, provable}
    make_prover:  (**kwargs) -> Prover with the axioms loaded
    prove:        (name, **kwargs) -> ProofReport
    run_suite:    (verbose, **kwargs) -> results dict
    print_results: (results) -> None
    description:  str
"""

from .arithmetic import (
    ARITHMETIC_AXIOMS, ARITHMETIC_THEOREMS, make_arithmetic_prover,
    prove_arithmetic_theorem, run_arithmetic_suite, print_arithmetic_results,
)
from .game_state import (
    GAME_AXIOMS, GAME_THEOREMS, make_game_prover,
    prove_game_theorem, run_game_suite, print_game_results,
)


DOMAINS = {
    "arithmetic": {
        "axioms":        ARITHMETIC_AXIOMS,
        "theorems":      ARITHMETIC_THEOREMS,
        "make_prover":   make_arithmetic_prover,
        "prove":         prove_arithmetic_theorem,
        "run_suite":     run_arithmetic_suite,
        "print_results": print_arithmetic_results,
        "description":   "Unary addition: 1 + 1 = 2, 2 + 2 = 4",
    },
    "game_state": {
        "axioms":        GAME_AXIOMS,
        "theorems":      GAME_THEOREMS,
        "make_prover":   make_game_prover,
        "prove":         prove_game_theorem,
        "run_suite":     run_game_suite,
        "print_results": print_game_results,
        "description":   "Adventure-game facts with curly-brace scopes",
    },
}
