"""
The prover session: axioms in, proofs out.

    with Prover() as prover:
        prover.set_axioms([
            (["1", "+", "1"], ["2"]),
            (["2", "+", "2"], ["4"]),
        ])
        found, steps, log = prover.prove(["1", "+", "1", "+", "1", "+", "1"], ["4"])

prove() runs the whole pipeline: encode the theorem with the session's
codec, search on composites, replay the winning proof stack on tokens.
prove_async() does the same on a background thread and hands back a
concurrent.futures.Future. The worker thread is started by the first
search and stopped by close(); the with form closes it on exit.

A long search can be parked with suspend(), which writes the frontier,
the rule store and the search settings to a JSON file and returns an
integer session id. resume(session_id) reloads that file and carries on.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional
import json
import logging
import os
import threading
import uuid

from .core.codec import SymbolCodec, STRUCTURAL_SYMBOLS
from .core.rules import RuleStore, MalformedRuleError, check_side
from .core.callgraph import CallGraph
from .core.limiter import RecursionLimiter, DEFAULT_CEILING
from .core.engine import new_search, run_search
from .core.proof import verify_proof, Verification
from .core.state import ORDERINGS, SearchState
from .tokens import parse_equation

logger = logging.getLogger(__name__)


@dataclass
class ProofReport:
    """
    What prove() hands back. Unpacks like the plain triple:

        found, steps, log = report

    steps are (lhs_tokens, rhs_tokens) pairs in the canonical orientation
    the search used; was_swapped says whether that differs from the
    theorem as entered (see oriented_steps()).

    status: "proved", "verification mismatch" (composites agreed but no
    token replay succeeded) or "no proof". A report that is not proved
    can still carry a partial trace.
    """
    proof_found: bool
    proof_steps: list = field(default_factory=list)
    commit_log: list = field(default_factory=list)
    status: str = "no proof"
    was_swapped: bool = False
    search: Optional[SearchState] = None
    verification: Optional[Verification] = None

    @property
    def partial(self):
        return not self.proof_found and bool(self.commit_log)

    @property
    def halt_reason(self):
        return self.search.halt_reason if self.search else ""

    @property
    def rejected(self):
        return self.search.rejected if self.search else 0

    def oriented_steps(self) -> list:
        """proof_steps with each equation in the orientation it was entered."""
        if not self.was_swapped:
            return list(self.proof_steps)
        return [(rhs, lhs) for lhs, rhs in self.proof_steps]

    def __iter__(self):
        return iter((self.proof_found, self.proof_steps, self.commit_log))

    def __repr__(self):
        return f"ProofReport({self.status}, {len(self.commit_log)} steps)"


def _as_sides(rule) -> tuple:
    """Accept ("1 + 1 = 2"), (lhs, rhs) or (lhs, rhs, label)."""
    if isinstance(rule, str):
        lhs, rhs = parse_equation(rule)
        return lhs, rhs, ""
    rule = tuple(rule)
    if len(rule) == 2:
        return rule[0], rule[1], ""
    if len(rule) == 3:
        return rule
    raise MalformedRuleError(f"expected (lhs, rhs) or (lhs, rhs, label), got {rule!r}")


class Prover:
    """
    One proof session: a codec, a rule store, a limiter and at most one
    search in flight.
    """

    def __init__(
        self,
        ceiling: int = DEFAULT_CEILING,
        ordering: str = "priority",
        max_proofs: int = 1,
        max_steps: int = 10_000,
        max_depth: Optional[int] = None,
        workers: int = 1,
        use_call_graph: bool = True,
        session_dir: str = ".",
        seed_symbols=STRUCTURAL_SYMBOLS,
        verbose: bool = False,
    ):
        if ordering not in ORDERINGS:
            raise ValueError(f"Unknown ordering: {ordering!r}")
        self.limiter = RecursionLimiter(ceiling)
        self.ordering = ordering
        self.max_proofs = max_proofs
        self.max_steps = max_steps
        self.max_depth = max_depth
        self.workers = workers
        self.use_call_graph = use_call_graph
        self.session_dir = session_dir
        self.seed_symbols = tuple(seed_symbols or ())
        self.verbose = verbose

        self.axioms = []
        self.store = None
        self.search = None
        self._future = None
        self._cancel = threading.Event()
        self._suspend = threading.Event()
        self._executor = None

    # ── Configuration ───────────────────────────────────────────────────────

    def config(self) -> dict:
        return {
            "ordering": self.ordering,
            "max_proofs": self.max_proofs,
            "max_steps": self.max_steps,
            "max_depth": self.max_depth,
            "workers": self.workers,
            "use_call_graph": self.use_call_graph,
        }

    def _apply_config(self, config: dict):
        self.ordering = config.get("ordering", self.ordering)
        self.max_proofs = config.get("max_proofs", self.max_proofs)
        self.max_steps = config.get("max_steps", self.max_steps)
        self.max_depth = config.get("max_depth", self.max_depth)
        self.workers = config.get("workers", self.workers)
        self.use_call_graph = config.get("use_call_graph", self.use_call_graph)

    # ── Axioms ──────────────────────────────────────────────────────────────

    def set_axioms(self, rules) -> list:
        """
        Replace the axiom set. Every rule is validated before anything is
        replaced, so a malformed rule leaves the previous session intact.

        Returns the canonical RuleRecords, guids 1..n in the given order.
        """
        self._check_idle()
        parsed = []
        for i, rule in enumerate(rules, start=1):
            lhs, rhs, label = _as_sides(rule)
            parsed.append((check_side(lhs, f"Axiom_{i} lhs"),
                           check_side(rhs, f"Axiom_{i} rhs"),
                           label))

        store = RuleStore(SymbolCodec(self.seed_symbols))
        for lhs, rhs, label in parsed:
            store.add_axiom(lhs, rhs, label=label)
        self.axioms = parsed
        self.store = store
        self.search = None
        return list(store.rules)

    # ── Proving ─────────────────────────────────────────────────────────────

    def prove_async(self, theorem_lhs, theorem_rhs=None) -> Future:
        """Start a search on a background thread; the Future yields a ProofReport."""
        self._check_idle()
        if self.store is None:
            raise RuntimeError("No axioms set: call set_axioms first")
        if theorem_rhs is None and isinstance(theorem_lhs, str):
            theorem_lhs, theorem_rhs = parse_equation(theorem_lhs)
        self.store.set_theorem(theorem_lhs, theorem_rhs)

        search = new_search(self.store, self.ordering)
        return self._submit(search)

    def prove(self, theorem_lhs, theorem_rhs=None, timeout: Optional[float] = None) -> ProofReport:
        return self.prove_async(theorem_lhs, theorem_rhs).result(timeout=timeout)

    def result(self, timeout: Optional[float] = None) -> Optional[ProofReport]:
        """Wait for the search in flight (or the last one) and return its report."""
        if self._future is None:
            return None
        return self._future.result(timeout=timeout)

    @property
    def running(self) -> bool:
        return self._future is not None and not self._future.done()

    def cancel(self):
        """Ask the search in flight to stop at the next frontier pop."""
        self._cancel.set()

    def _check_idle(self):
        if self.running:
            raise RuntimeError("A search is already in flight")

    def _submit(self, search: SearchState) -> Future:
        self._cancel.clear()
        self._suspend.clear()
        store = self.store
        call_graph = CallGraph(store.theorem, store.rules) if self.use_call_graph else None
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1)
        self._future = self._executor.submit(self._run, search, store, call_graph)
        return self._future

    def _run(self, search: SearchState, store: RuleStore, call_graph) -> ProofReport:
        search = run_search(
            search, store, self.limiter,
            max_steps=self.max_steps,
            max_proofs=self.max_proofs,
            max_depth=self.max_depth,
            call_graph=call_graph,
            workers=self.workers,
            cancel_event=self._cancel,
            suspend_event=self._suspend,
            verbose=self.verbose,
        )
        self.search = search
        return self._report(search, store)

    def _report(self, search: SearchState, store: RuleStore) -> ProofReport:
        theorem = store.theorem
        tokens = (theorem.lhs_tokens, theorem.rhs_tokens)
        rules = store.by_id()

        if search.proofs:
            v = verify_proof(tokens, search.proofs[0], rules)
            return ProofReport(True, v.steps, v.trace, "proved",
                               theorem.was_swapped, search, v)

        status = "verification mismatch" if search.mismatches else "no proof"
        partial = search.best_partial
        if partial is not None and partial.proof_stack:
            v = verify_proof(tokens, partial.proof_stack, rules)
            if v.trace:
                return ProofReport(False, v.steps, v.trace, status,
                                   theorem.was_swapped, search, v)
        return ProofReport(False, [], [], status, theorem.was_swapped, search, None)

    # ── Sessions ────────────────────────────────────────────────────────────

    def _session_path(self, session_id: int) -> str:
        return os.path.join(self.session_dir, f"euclid_session_{session_id}.json")

    def suspend(self) -> int:
        """
        Stop the search in flight at its next pop (if any), persist it and
        return the session id to resume it with.
        """
        if self.running:
            self._suspend.set()
            self._future.result()
        if self.search is None or self.store is None:
            raise RuntimeError("Nothing to suspend: no search has run")

        session_id = uuid.uuid4().int
        payload = {
            "session_id": session_id,
            "store": self.store.to_dict(),
            "config": self.config(),
            "limiter": self.limiter.to_dict(),
            "search": self.search.to_dict(),
        }
        os.makedirs(self.session_dir, exist_ok=True)
        with open(self._session_path(session_id), "w") as f:
            json.dump(payload, f, indent=2)
        return session_id

    def resume(self, session_id: int) -> bool:
        """
        Reload a suspended session and continue its search in the
        background. Returns False if there is no such session.
        Use result() to collect the report.
        """
        self._check_idle()
        path = self._session_path(session_id)
        if not os.path.exists(path):
            logger.warning("no suspended session %s in %s", session_id, self.session_dir)
            return False
        with open(path) as f:
            payload = json.load(f)

        self.store = RuleStore.from_dict(payload["store"])
        self.axioms = [(r.lhs_tokens, r.rhs_tokens, r.label) for r in self.store.rules]
        self._apply_config(payload.get("config", {}))
        self.limiter = RecursionLimiter.from_dict(payload.get("limiter", {}))
        self.search = SearchState.from_dict(payload["search"])
        self._submit(self.search)
        return True

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def close(self):
        self.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
