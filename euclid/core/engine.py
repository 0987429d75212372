"""
The search loop.

Pop a state from the frontier. If its two composites are equal, replay
its proof stack on the real tokens. Otherwise (or if the replay fails)
try every rule on both sides, ask the limiter for room for the whole
batch of children, and push the admitted batch back onto the frontier.

Composites decide which rules may apply: a divisibility test is cheap
and rules out most of them. A state that carries its token sides is
then rewritten on those too, so two orderings of the same symbols stay
two separate states, and a child whose pattern is not a contiguous run
of tokens is dropped. The final replay in proof.verify_proof is still
what accepts a proof.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional
import logging

from .callgraph import THEOREM_ID, CallGraph, relations_between
from .limiter import RecursionLimiter
from .proof import apply_step, verify_proof
from .rules import RuleStore
from .state import Frontier, Opcode, RuleRecord, SearchState, TheoremState

logger = logging.getLogger(__name__)

RESUMABLE = ("suspended", "cancelled", "max steps reached")


def apply_opcode(state: TheoremState, opcode: Opcode, rule: RuleRecord) -> Optional[TheoremState]:
    """
    The single transition function.

    reduce: divide out rule.lhs, multiply in rule.rhs
    expand: divide out rule.rhs, multiply in rule.lhs
    on whichever side the opcode names. The caller has already checked
    divisibility.

    If state carries token sides, the same step is applied to them, and
    None is returned when the pattern is not among those tokens.
    """
    opcode = Opcode(opcode)
    if opcode.is_reduce:
        find, replace = rule.lhs, rule.rhs
    else:
        find, replace = rule.rhs, rule.lhs
    stack = state.proof_stack + ((opcode, rule.id),)

    lhs_tokens, rhs_tokens = state.lhs_tokens, state.rhs_tokens
    if state.has_tokens:
        sides = apply_step(lhs_tokens, rhs_tokens, opcode, rule)
        if sides is None:
            return None
        lhs_tokens, rhs_tokens = sides

    if opcode.side == "lhs":
        return TheoremState(state.lhs // find * replace, state.rhs, stack, lhs_tokens, rhs_tokens)
    return TheoremState(state.lhs, state.rhs // find * replace, stack, lhs_tokens, rhs_tokens)


def candidate_moves(state: TheoremState, rules, call_graph: Optional[CallGraph] = None):
    """
    Yield (opcode, rule) for every move the composites allow, in rule order.

    For the root the call graph already knows which relations hold, so
    the divisibility tests are skipped there.
    """
    use_graph = call_graph is not None and not state.proof_stack
    for rule in rules:
        if use_graph:
            opcodes = call_graph.relations(THEOREM_ID, rule.id)
        else:
            opcodes = relations_between(state.lhs, state.rhs, rule)
        for opcode in opcodes:
            yield opcode, rule


def expand_state(state: TheoremState, rules, call_graph: Optional[CallGraph] = None) -> list:
    """Every child of state: up to four per rule, in rule order."""
    children = []
    for opcode, rule in candidate_moves(state, rules, call_graph):
        child = apply_opcode(state, opcode, rule)
        if child is not None:
            children.append(child)
    return children


def new_search(store: RuleStore, ordering: str = "priority") -> SearchState:
    """A fresh SearchState whose frontier holds only the theorem's root."""
    if store.theorem is None:
        raise RuntimeError("No theorem set: call RuleStore.set_theorem first")
    search = SearchState(frontier=Frontier(ordering))
    search.frontier.push(store.root())
    return search


def _expand_and_admit(state, rules, frontier, limiter, call_graph, max_depth) -> dict:
    """
    Runs on a worker thread when workers > 1. The limiter counter it
    touches belongs to that thread alone; the frontier is locked.
    """
    moves = list(candidate_moves(state, rules, call_graph))
    children = [c for c in (apply_opcode(state, op, rule) for op, rule in moves)
                if c is not None]
    unmatched = len(moves) - len(children)
    pruned = 0
    if max_depth is not None:
        kept = [c for c in children if c.depth <= max_depth]
        pruned = len(children) - len(kept)
        children = kept

    outcome = {"state": state, "admitted": [], "rejected": 0,
               "duplicates": 0, "pruned": pruned, "unmatched": unmatched}
    with limiter.admit(len(children)) as admitted:
        if not admitted:
            outcome["rejected"] = len(children)
            return outcome
        outcome["admitted"], outcome["duplicates"] = frontier.push_all(children)
    return outcome


def _check_tentative(search: SearchState, state: TheoremState, store: RuleStore,
                     rules_by_id: dict, verbose: bool) -> bool:
    """Replay a composite-equal state. Returns True if it verified."""
    search.tentative += 1
    theorem = store.theorem
    verification = verify_proof(
        (theorem.lhs_tokens, theorem.rhs_tokens), state.proof_stack, rules_by_id,
    )
    if verification.ok:
        search.proofs.append(state.proof_stack)
        if verbose:
            print(f"  [proof] {' -> '.join(state.commit_log()) or '(theorem is trivial)'}")
        return True

    search.mismatches += 1
    logger.warning(
        "verification mismatch: %s composites agree but token replay %s",
        state.commit_log(),
        "stopped at step %d" % (verification.failed_at + 1)
        if verification.failed_at is not None else "left the sides in different orders",
    )
    if verbose:
        print(f"  [mismatch] {state.name}")
    if verification.applied > search.best_partial_steps:
        search.best_partial = state
        search.best_partial_steps = verification.applied
    return False


def search_step(
    search: SearchState,
    store: RuleStore,
    limiter: RecursionLimiter,
    call_graph: Optional[CallGraph] = None,
    max_depth: Optional[int] = None,
    max_proofs: int = 1,
    workers: int = 1,
    executor: Optional[ThreadPoolExecutor] = None,
    verbose: bool = True,
) -> SearchState:
    """
    Execute one step of the search.

    One step = pop up to `workers` states. Composite-equal states are
    verified here, in pop order. The rest are expanded, on the executor
    when one is given, each batch of children going through the limiter
    before it reaches the frontier.

    Args:
        search:      current SearchState
        store:       rules and theorem tokens (read-only here)
        limiter:     admission control for each batch of children
        call_graph:  optional precomputed relations for the root
        max_depth:   children with longer proof stacks are pruned
        max_proofs:  halt once this many proofs have verified
        workers:     states popped per step
        executor:    thread pool for parallel expansion
        verbose:     print progress
    """
    batch = search.frontier.pop_batch(workers)
    if not batch:
        search.halted = True
        search.halt_reason = "frontier exhausted"
        return search

    rules = store.rules
    rules_by_id = store.by_id()
    to_expand = []

    for i, state in enumerate(batch):
        search.step += 1
        if verbose:
            print(f"\n--- Step {search.step}: Focus on {state.name} ---")
        if state.is_terminal:
            if _check_tentative(search, state, store, rules_by_id, verbose):
                if len(search.proofs) >= max_proofs:
                    search.frontier.requeue(batch[i + 1:])
                    search.halted = True
                    search.halt_reason = "proof found"
                    break
                continue
            # Equal multisets in the wrong order: keep rewriting.
            to_expand.append(state)
            continue
        if state.proof_stack and search.best_partial_steps < 0 and (
                search.best_partial is None or state.gap < search.best_partial.gap):
            search.best_partial = state
        to_expand.append(state)

    if search.halted:
        return search

    args = (rules, search.frontier, limiter, call_graph, max_depth)
    if executor is not None and len(to_expand) > 1:
        futures = [executor.submit(_expand_and_admit, s, *args) for s in to_expand]
        outcomes = [f.result() for f in futures]
    else:
        outcomes = [_expand_and_admit(s, *args) for s in to_expand]

    for outcome in outcomes:
        search.expanded += 1
        search.duplicates += outcome["duplicates"]
        search.pruned += outcome["pruned"]
        search.unmatched += outcome["unmatched"]
        if outcome["rejected"]:
            search.rejected += outcome["rejected"]
            search.rejected_batches += 1
        if verbose:
            for child in outcome["admitted"]:
                print(f"  [new] {child.name}")
            if outcome["duplicates"]:
                print(f"  [seen] {outcome['duplicates']} already explored")
            if outcome["pruned"]:
                print(f"  [pruned] {outcome['pruned']} deeper than {max_depth}")
            if outcome["unmatched"]:
                print(f"  [unmatched] {outcome['unmatched']} not found in the tokens")
            if outcome["rejected"]:
                print(f"  [rejected] {outcome['rejected']} children "
                      f"(limiter ceiling {limiter.ceiling})")
        search.history.append({
            "step": search.step,
            "focus": outcome["state"].name,
            "produced": len(outcome["admitted"]),
            "duplicates": outcome["duplicates"],
            "pruned": outcome["pruned"],
            "unmatched": outcome["unmatched"],
            "rejected": outcome["rejected"],
            "frontier_size": len(search.frontier),
        })

    if verbose:
        print(f"  Frontier: {len(search.frontier)} | Seen: {len(search.frontier.seen)}"
              f" | Rejected: {search.rejected}")
    return search


def run_search(
    search: SearchState,
    store: RuleStore,
    limiter: Optional[RecursionLimiter] = None,
    max_steps: int = 10_000,
    max_proofs: int = 1,
    max_depth: Optional[int] = None,
    call_graph: Optional[CallGraph] = None,
    workers: int = 1,
    cancel_event=None,
    suspend_event=None,
    save_path: Optional[str] = None,
    verbose: bool = True,
) -> SearchState:
    """
    Run search_step until halted or max_steps steps have run.

    Args:
        search:        initial state (see new_search), or a resumed one
        store:         rules and theorem
        limiter:       default RecursionLimiter()
        max_steps:     safety limit for this call
        cancel_event:  threading.Event; checked between steps
        suspend_event: threading.Event; like cancel, but resumable
        save_path:     if set, checkpoint state after each step
        the rest:      passed through to search_step
    """
    if limiter is None:
        limiter = RecursionLimiter()
    if search.halted and search.halt_reason in RESUMABLE:
        search.halted = False
        search.halt_reason = ""

    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        for _ in range(max_steps):
            if search.halted:
                break
            if cancel_event is not None and cancel_event.is_set():
                search.halted = True
                search.halt_reason = "cancelled"
                break
            if suspend_event is not None and suspend_event.is_set():
                search.halted = True
                search.halt_reason = "suspended"
                break
            search = search_step(
                search, store, limiter,
                call_graph=call_graph,
                max_depth=max_depth,
                max_proofs=max_proofs,
                workers=workers,
                executor=executor,
                verbose=verbose,
            )
            if save_path:
                search.save(save_path)
        else:
            if not search.halted:
                search.halted = True
                search.halt_reason = "max steps reached"
    finally:
        if executor is not None:
            executor.shutdown(wait=True)
    return search
