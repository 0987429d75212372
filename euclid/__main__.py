"""
CLI entry point. Run as: python -m euclid --domain <name>
"""

import argparse
import logging
import sys

from .core.callgraph import CallGraph
from .core.limiter import DEFAULT_CEILING
from .core.proof import print_proof
from .core.state import ORDERINGS
from .domains import DOMAINS
from .prover import Prover
from .tokens import BRACKETS, parse_equation
from .visualization import print_state, print_history, print_result, export_dot


def main():
    parser = argparse.ArgumentParser(description="Euclid prime-composite rewriting prover")
    parser.add_argument("--domain", choices=list(DOMAINS.keys()), default="arithmetic",
                        help="Which sample axiom set to use")
    parser.add_argument("--theorem", type=str, default=None,
                        help="Prove one named theorem of the domain (default: the whole suite)")
    parser.add_argument("--axiom", action="append", default=[],
                        help='Axiom as text, e.g. "1 + 1 = 2" (repeatable; replaces --domain)')
    parser.add_argument("--prove", type=str, default=None,
                        help='Theorem as text, e.g. "1 + 1 + 1 + 1 = 4" (with --axiom)')
    parser.add_argument("--bracket", choices=list(BRACKETS), default=None,
                        help="Elide nested brackets of this type in --axiom/--prove text")
    parser.add_argument("--steps", type=int, default=10_000, help="Max steps")
    parser.add_argument("--ceiling", type=int, default=DEFAULT_CEILING,
                        help="Limiter ceiling on sibling branches")
    parser.add_argument("--ordering", choices=list(ORDERINGS), default=None,
                        help="Frontier ordering (default: priority, fifo for game_state)")
    parser.add_argument("--max-depth", type=int, default=None, help="Prune deeper proofs")
    parser.add_argument("--max-proofs", type=int, default=1, help="Stop after this many proofs")
    parser.add_argument("--workers", type=int, default=1, help="Parallel expansion workers")
    parser.add_argument("--session-dir", type=str, default=".",
                        help="Where suspended sessions are written")
    parser.add_argument("--suspend", action="store_true",
                        help="If no proof is found, save the session and print its id")
    parser.add_argument("--resume", type=int, default=None, help="Resume a suspended session")
    parser.add_argument("--dot", type=str, default=None, help="Export call graph DOT to file")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Enable logging at this level (e.g. WARNING, DEBUG)")
    parser.add_argument("--quiet", action="store_true", help="Less output")
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(level=args.log_level.upper(),
                            format="%(levelname)s %(name)s: %(message)s")

    kwargs = {
        "ceiling": args.ceiling,
        "max_steps": args.steps,
        "max_proofs": args.max_proofs,
        "workers": args.workers,
        "session_dir": args.session_dir,
        "verbose": not args.quiet,
    }
    if args.ordering:
        kwargs["ordering"] = args.ordering
    if args.max_depth is not None:
        kwargs["max_depth"] = args.max_depth

    # --- Resume a parked search ---
    if args.resume is not None:
        prover = Prover(**kwargs)
        if not prover.resume(args.resume):
            print(f"No suspended session {args.resume} in {args.session_dir}")
            sys.exit(1)
        print(f"Resumed session {args.resume}")
        report = prover.result()
        _finish(prover, report, args)
        return

    # --- Free-form axioms ---
    if args.axiom:
        if not args.prove:
            parser.error("--axiom needs --prove")
        prover = Prover(**kwargs)
        prover.set_axioms([parse_equation(a, args.bracket) for a in args.axiom])
        lhs, rhs = parse_equation(args.prove, args.bracket)
        print(f"Axioms: {len(prover.axioms)}")
        report = _prove(prover, lhs, rhs)
        _finish(prover, report, args)
        return

    domain = DOMAINS[args.domain]
    print(f"Domain: {args.domain} ({domain['description']})")

    # --- Whole suite ---
    if args.theorem is None:
        kwargs["verbose"] = False
        results = domain["run_suite"](verbose=not args.quiet, **kwargs)
        domain["print_results"](results)
        return

    # --- One named theorem ---
    if args.theorem not in domain["theorems"]:
        parser.error(f"unknown theorem {args.theorem!r} for {args.domain}; "
                     f"choose from {list(domain['theorems'])}")
    thm = domain["theorems"][args.theorem]
    print(f"Theorem: {thm['description']}")
    prover = domain["make_prover"](**kwargs)
    report = _prove(prover, thm["lhs"], thm["rhs"])
    _finish(prover, report, args)


def _prove(prover, lhs, rhs):
    future = prover.prove_async(lhs, rhs)
    try:
        return future.result()
    except KeyboardInterrupt:
        print("\nInterrupted.")
        prover.cancel()
        return future.result()


def _finish(prover, report, args):
    if not args.quiet:
        print_state(report.search)
        print_history(report.search)
    print_result(report)
    print_proof(report.verification, prover.store.rules)

    if args.dot:
        export_dot(CallGraph(prover.store.theorem, prover.store.rules), args.dot)

    if args.suspend and not report.proof_found:
        session_id = prover.suspend()
        print(f"Session saved: resume with --resume {session_id}")
    prover.close()


if __name__ == "__main__":
    main()
