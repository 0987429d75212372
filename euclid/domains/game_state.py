"""
Domain: adventure-game state facts.

Scope markers are plain tokens, so "{ Vehicle { QuadUtilityVehicle } }"
is one multiset of symbols like any other. Each axiom is a fact about
where the sidekick is; theorems ask whether two descriptions of the game
state are interchangeable.

    Axiom_1  { PCS } IsIn { StyxBoat }  = { StyxBoat } IsIn { StyxRiver }
    Axiom_2  { PCS } IsIn { Vehicle { QUV } }
               = { Vehicle { QUV } } IsIn { EuropaLand } and { Vehicle { QUV { VDD } } }
    Axiom_3  { PCS } IsIn { EuropaLand } = { Vehicle { QUV } } IsIn { EuropaLand }
    Axiom_4  { PCS } IsIn { QUV }        = { Vehicle { QUV { VDD } } }
    Axiom_5  { PCS } IsNotIn { Vehicle { QUV } } = { Vehicle { QUV } } IsIn { EuropaLand }
    Axiom_6  { PCS } IsIn { QUV }        = { QUV } and { VDD }

The search is breadth-first with a depth cap: these rules chain into
each other, and the answers of interest are all a few steps deep.
"""

from ..prover import Prover
from ..tokens import tokenize


def _rule(lhs, rhs, label=""):
    return tokenize(lhs), tokenize(rhs), label


GAME_AXIOMS = [
    _rule("{ PlayerCharacterSideKick } IsIn { StyxBoat }",
          "{ StyxBoat } IsIn { StyxRiver }",
          "current game state"),
    _rule("{ PlayerCharacterSideKick } IsIn { Vehicle { QuadUtilityVehicle } }",
          "{ Vehicle { QuadUtilityVehicle } } IsIn { EuropaLand } and "
          "{ Vehicle { QuadUtilityVehicle { VehicleDriveDisabled } } }"),
    _rule("{ PlayerCharacterSideKick } IsIn { EuropaLand }",
          "{ Vehicle { QuadUtilityVehicle } } IsIn { EuropaLand }"),
    _rule("{ PlayerCharacterSideKick } IsIn { QuadUtilityVehicle }",
          "{ Vehicle { QuadUtilityVehicle { VehicleDriveDisabled } } }"),
    _rule("{ PlayerCharacterSideKick } IsNotIn { Vehicle { QuadUtilityVehicle } }",
          "{ Vehicle { QuadUtilityVehicle } } IsIn { EuropaLand }"),
    _rule("{ PlayerCharacterSideKick } IsIn { QuadUtilityVehicle }",
          "{ QuadUtilityVehicle } and { VehicleDriveDisabled }"),
]


GAME_THEOREMS = {
    "sidekick_in_quad": {
        "description": "Sidekick in the quad = quad with its drive disabled",
        "lhs": tokenize("{ PlayerCharacterSideKick } IsIn { QuadUtilityVehicle }"),
        "rhs": tokenize("{ QuadUtilityVehicle } and { VehicleDriveDisabled }"),
        "provable": True,
    },
    "europa": {
        "description": "Sidekick in Europa = sidekick not in the vehicle (via a shared fact)",
        "lhs": tokenize("{ PlayerCharacterSideKick } IsIn { EuropaLand }"),
        "rhs": tokenize("{ PlayerCharacterSideKick } IsNotIn { Vehicle { QuadUtilityVehicle } }"),
        "provable": True,
    },
    "styx_helper": {
        "description": "Sidekick in the boat = boat not in the river (needs a lemma, none given)",
        "lhs": tokenize("{ PlayerCharacterSideKick } IsIn { StyxBoat }"),
        "rhs": tokenize("{ StyxBoat } IsNotIn { StyxRiver }"),
        "provable": False,
    },
}


def make_game_prover(**kwargs) -> Prover:
    """A Prover loaded with the game-state axioms, breadth-first, depth 4."""
    kwargs.setdefault("ordering", "fifo")
    kwargs.setdefault("max_depth", 4)
    prover = Prover(**kwargs)
    prover.set_axioms(GAME_AXIOMS)
    return prover


def prove_game_theorem(name: str, **kwargs):
    """Prove one theorem from GAME_THEOREMS by name."""
    if name not in GAME_THEOREMS:
        raise ValueError(f"Unknown theorem: {name}. Choose from: {list(GAME_THEOREMS)}")
    thm = GAME_THEOREMS[name]
    with make_game_prover(**kwargs) as prover:
        return prover.prove(thm["lhs"], thm["rhs"])


def run_game_suite(verbose=True, **kwargs) -> dict:
    results = {}
    for name, thm in GAME_THEOREMS.items():
        if verbose:
            print(f"\n{'='*60}")
            print(f"THEOREM: {name}")
            print(f"  {thm['description']}")
            print(f"{'='*60}")
        report = prove_game_theorem(name, **kwargs)
        results[name] = {
            "proved": report.proof_found,
            "expected": thm["provable"],
            "status": report.status,
            "steps": report.search.step,
            "description": thm["description"],
            "report": report,
        }
        if verbose:
            for line in report.commit_log:
                print(f"  {line}")
            if not report.proof_found:
                print(f"  {report.status.upper()} ({report.halt_reason})")
    return results


def print_game_results(results: dict):
    print(f"\n{'='*60}")
    print("GAME STATE: Suite Results")
    print(f"{'='*60}")
    for name, r in results.items():
        status = "PROVED" if r["proved"] else "NOT PROVED"
        mark = "" if r["proved"] == r["expected"] else "  <-- unexpected"
        print(f"  {status:>11s} ({r['steps']:3d} steps)  {r['description']}{mark}")
    print(f"{'='*60}")
