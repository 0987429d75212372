"""
Domain: unary addition.

The smallest system that shows every moving part:

    Axiom_1:  1 + 1 = 2
    Axiom_2:  2 + 2 = 4

"1 + 1 + 1 + 1 = 4" is proved by expanding the right side
(4 -> 2 + 2 -> 1 + 1 + 2 -> 1 + 1 + 1 + 1). "1 + 1 + 1 = 4" is not
provable: every rewrite preserves the value of a side, and the frontier
runs dry.

"1 + 2 = 2 + 1" is the interesting one. Both sides have the same
composite from the start, so the root is a tentative proof that fails
token replay. The search keeps rewriting and finds a real proof two
steps later.
"""

from ..prover import Prover


ARITHMETIC_AXIOMS = [
    (["1", "+", "1"], ["2"], "one plus one"),
    (["2", "+", "2"], ["4"], "two plus two"),
]


ARITHMETIC_THEOREMS = {
    "four_ones": {
        "description": "1 + 1 + 1 + 1 = 4",
        "lhs": ["1", "+", "1", "+", "1", "+", "1"],
        "rhs": ["4"],
        "provable": True,
    },
    "three_ones": {
        "description": "1 + 1 + 1 = 4 (false: the frontier is exhausted)",
        "lhs": ["1", "+", "1", "+", "1"],
        "rhs": ["4"],
        "provable": False,
    },
    "two": {
        "description": "1 + 1 = 2 (one step)",
        "lhs": ["1", "+", "1"],
        "rhs": ["2"],
        "provable": True,
    },
    "mixed": {
        "description": "2 + 1 + 1 = 4",
        "lhs": ["2", "+", "1", "+", "1"],
        "rhs": ["4"],
        "provable": True,
    },
    "commuted": {
        "description": "1 + 2 = 2 + 1 (equal composites, different order)",
        "lhs": ["1", "+", "2"],
        "rhs": ["2", "+", "1"],
        "provable": True,
    },
}


def make_arithmetic_prover(**kwargs) -> Prover:
    """A Prover loaded with the unary-addition axioms."""
    prover = Prover(**kwargs)
    prover.set_axioms(ARITHMETIC_AXIOMS)
    return prover


def prove_arithmetic_theorem(name: str, **kwargs):
    """Prove one theorem from ARITHMETIC_THEOREMS by name."""
    if name not in ARITHMETIC_THEOREMS:
        raise ValueError(f"Unknown theorem: {name}. Choose from: {list(ARITHMETIC_THEOREMS)}")
    thm = ARITHMETIC_THEOREMS[name]
    with make_arithmetic_prover(**kwargs) as prover:
        return prover.prove(thm["lhs"], thm["rhs"])


def run_arithmetic_suite(verbose=True, **kwargs) -> dict:
    """
    Prove every arithmetic theorem.

    Returns dict: theorem_name -> {proved, expected, status, steps, report}
    """
    results = {}
    for name, thm in ARITHMETIC_THEOREMS.items():
        if verbose:
            print(f"\n{'='*60}")
            print(f"THEOREM: {name}")
            print(f"  {thm['description']}")
            print(f"{'='*60}")
        report = prove_arithmetic_theorem(name, **kwargs)
        results[name] = {
            "proved": report.proof_found,
            "expected": thm["provable"],
            "status": report.status,
            "steps": report.search.step,
            "description": thm["description"],
            "report": report,
        }
        if verbose:
            if report.proof_found:
                for line in report.commit_log:
                    print(f"  {line}")
            else:
                print(f"  {report.status.upper()} after {report.search.step} steps")
    return results


def print_arithmetic_results(results: dict):
    print(f"\n{'='*60}")
    print("ARITHMETIC: Suite Results")
    print(f"{'='*60}")
    as_expected = True
    for name, r in results.items():
        status = "PROVED" if r["proved"] else "NOT PROVED"
        mark = "" if r["proved"] == r["expected"] else "  <-- unexpected"
        if mark:
            as_expected = False
        print(f"  {status:>11s} ({r['steps']:3d} steps)  {r['description']}{mark}")
    print(f"{'='*60}")
    if as_expected:
        print("  Every theorem behaved as expected.")
    else:
        print("  SOME THEOREMS MISBEHAVED. Check the axioms and search settings.")
    print(f"{'='*60}")
