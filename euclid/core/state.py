"""
Core data structures: Opcode, RuleRecord, TheoremState, Frontier, SearchState.

These are the atoms of the whole system. Nothing in here knows how
children are generated or how proofs are verified.

Sides and composites:
    Every side of an equation is carried twice: as a composite (product
    of per-symbol primes, see codec.py) for the search, and as the
    original token tuple for the verifier.

    Canonical form: lhs >= rhs. Sides are swapped on entry if needed and
    the swap is remembered in RuleRecord.was_swapped.

Proof stacks:
    A tuple of (Opcode, rule_id) pairs, oldest first.
    ((Opcode.RHS_EXPAND, 2), (Opcode.RHS_EXPAND, 1))
"""

from dataclasses import dataclass, field
from enum import IntEnum
from collections import deque
from typing import Optional
import heapq
import json
import threading


class Opcode(IntEnum):
    """Which side is rewritten, and in which direction."""
    LHS_REDUCE = 0
    LHS_EXPAND = 1
    RHS_REDUCE = 2
    RHS_EXPAND = 3

    @property
    def side(self) -> str:
        return "lhs" if self in (Opcode.LHS_REDUCE, Opcode.LHS_EXPAND) else "rhs"

    @property
    def is_reduce(self) -> bool:
        return self in (Opcode.LHS_REDUCE, Opcode.RHS_REDUCE)

    @property
    def label(self) -> str:
        return f"{self.side}_{'reduce' if self.is_reduce else 'expand'}"

    @classmethod
    def from_label(cls, label: str) -> "Opcode":
        for op in cls:
            if op.label == label:
                return op
        raise ValueError(f"Unknown opcode label: {label!r}")


def format_step(step) -> str:
    """(Opcode.LHS_REDUCE, 3) -> 'lhs_reduce via Axiom_3'"""
    opcode, rule_id = step
    return f"{Opcode(opcode).label} via Axiom_{rule_id}"


@dataclass(frozen=True)
class RuleRecord:
    """
    An axiom in canonical form.

    lhs/rhs are composites with lhs >= rhs. lhs_tokens/rhs_tokens follow
    the same orientation, so a reduce always rewrites lhs_tokens into
    rhs_tokens. was_swapped records that the user wrote the sides the
    other way round.
    """
    id: int
    lhs: int
    rhs: int
    lhs_tokens: tuple
    rhs_tokens: tuple
    was_swapped: bool = False
    label: str = ""

    @property
    def name(self):
        return f"Axiom_{self.id}"

    @property
    def is_canonical(self):
        return self.lhs >= self.rhs

    @property
    def content(self):
        text = f"{' '.join(self.lhs_tokens)} = {' '.join(self.rhs_tokens)}"
        if self.label:
            text = f"[{self.label}] {text}"
        return text

    def original_sides(self) -> tuple:
        """The sides in the orientation the user entered them."""
        if self.was_swapped:
            return self.rhs_tokens, self.lhs_tokens
        return self.lhs_tokens, self.rhs_tokens

    def to_dict(self):
        return {"id": self.id, "lhs": self.lhs, "rhs": self.rhs,
                "lhs_tokens": list(self.lhs_tokens),
                "rhs_tokens": list(self.rhs_tokens),
                "was_swapped": self.was_swapped, "label": self.label}

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["lhs"], d["rhs"],
                   tuple(d["lhs_tokens"]), tuple(d["rhs_tokens"]),
                   d.get("was_swapped", False), d.get("label", ""))

    def __repr__(self):
        return f"RuleRecord({self.name}: {self.lhs} = {self.rhs})"


@dataclass(frozen=True)
class TheoremState:
    """
    One node of the search tree. Immutable: a rewrite yields a new node.

    The root is built by RuleStore.set_theorem with an empty proof stack.
    lhs_tokens/rhs_tokens are rewritten in step with the composites; a
    node built from composites alone leaves them empty.
    """
    lhs: int
    rhs: int
    proof_stack: tuple = ()
    lhs_tokens: tuple = ()
    rhs_tokens: tuple = ()

    @property
    def composites(self):
        return (self.lhs, self.rhs)

    @property
    def key(self):
        """
        Identity for the seen set. Composites forget symbol order, so two
        token states with the same composites are still different nodes.
        """
        return (self.lhs, self.rhs, self.lhs_tokens, self.rhs_tokens)

    @property
    def has_tokens(self):
        return bool(self.lhs_tokens)

    @property
    def is_terminal(self):
        return self.lhs == self.rhs

    @property
    def depth(self):
        return len(self.proof_stack)

    @property
    def gap(self):
        return abs(self.lhs - self.rhs)

    @property
    def name(self):
        if not self.proof_stack:
            return f"{{{self.lhs}, {self.rhs}}} [root]"
        return f"{{{self.lhs}, {self.rhs}}} [{format_step(self.proof_stack[-1])}]"

    def commit_log(self) -> list:
        return [format_step(step) for step in self.proof_stack]

    def to_dict(self):
        return {"lhs": self.lhs, "rhs": self.rhs,
                "proof_stack": [[int(op), rid] for op, rid in self.proof_stack],
                "lhs_tokens": list(self.lhs_tokens),
                "rhs_tokens": list(self.rhs_tokens)}

    @classmethod
    def from_dict(cls, d):
        stack = tuple((Opcode(op), rid) for op, rid in d.get("proof_stack", ()))
        return cls(d["lhs"], d["rhs"], stack,
                   tuple(d.get("lhs_tokens", ())), tuple(d.get("rhs_tokens", ())))

    def __repr__(self):
        return f"TheoremState({self.name})"


def _key_from_json(key) -> tuple:
    lhs, rhs, lhs_tokens, rhs_tokens = key
    return (lhs, rhs, tuple(lhs_tokens), tuple(rhs_tokens))


ORDERINGS = ("priority", "fifo")


class Frontier:
    """
    The set of states waiting to be expanded, plus the key of every state
    ever admitted to it.

    "priority": largest lhs first, then largest rhs (max-heap).
    "fifo":     breadth-first, insertion order.

    This is the one structure workers share, so every method takes the
    lock. A state is admitted at most once, whichever route reaches it
    first; that is what makes the search terminate on cyclic rule sets.
    """

    def __init__(self, ordering: str = "priority"):
        if ordering not in ORDERINGS:
            raise ValueError(f"Unknown ordering: {ordering!r}. Choose from: {list(ORDERINGS)}")
        self.ordering = ordering
        self.seen = set()
        self._heap = []
        self._queue = deque()
        self._counter = 0
        self._lock = threading.Lock()

    def _insert(self, state: TheoremState):
        if self.ordering == "priority":
            heapq.heappush(self._heap, (-state.lhs, -state.rhs, self._counter, state))
        else:
            self._queue.append(state)
        self._counter += 1

    def push(self, state: TheoremState) -> bool:
        """Add a state unless its key was already admitted."""
        with self._lock:
            if state.key in self.seen:
                return False
            self.seen.add(state.key)
            self._insert(state)
            return True

    def push_all(self, states) -> tuple:
        """Add a batch under one lock. Returns (admitted, duplicates)."""
        admitted = []
        duplicates = 0
        with self._lock:
            for state in states:
                if state.key in self.seen:
                    duplicates += 1
                    continue
                self.seen.add(state.key)
                self._insert(state)
                admitted.append(state)
        return admitted, duplicates

    def requeue(self, states):
        """Put popped-but-unprocessed states back, skipping the seen check."""
        with self._lock:
            for state in states:
                self._insert(state)

    def pop(self) -> Optional[TheoremState]:
        with self._lock:
            if self.ordering == "priority":
                return heapq.heappop(self._heap)[-1] if self._heap else None
            return self._queue.popleft() if self._queue else None

    def pop_batch(self, n: int) -> list:
        batch = []
        for _ in range(max(n, 1)):
            state = self.pop()
            if state is None:
                break
            batch.append(state)
        return batch

    def snapshot(self) -> list:
        """States in pop order, without removing them."""
        with self._lock:
            if self.ordering == "priority":
                return [entry[-1] for entry in sorted(self._heap)]
            return list(self._queue)

    def __len__(self):
        with self._lock:
            return len(self._heap) if self.ordering == "priority" else len(self._queue)

    def __bool__(self):
        return len(self) > 0

    def __iter__(self):
        return iter(self.snapshot())


@dataclass
class SearchState:
    """
    Full state of one proof search, serializable for suspend/resume.

    frontier:    states not yet expanded
    proofs:      proof stacks that reached lhs == rhs AND verified
    tentative:   composite-equal states popped (verified or not)
    mismatches:  tentative states whose token replay failed
    rejected:    children dropped because the limiter refused their batch
    duplicates:  children dropped because their key was already seen
    unmatched:   children whose rule pattern is absent from the token side
    pruned:      children dropped by max_depth
    best_partial: closest rewritten state seen, or the mismatched tentative state
                  whose replay got furthest
    """
    frontier: Frontier = field(default_factory=Frontier)
    proofs: list = field(default_factory=list)
    history: list = field(default_factory=list)
    step: int = 0
    expanded: int = 0
    tentative: int = 0
    mismatches: int = 0
    rejected: int = 0
    rejected_batches: int = 0
    duplicates: int = 0
    pruned: int = 0
    unmatched: int = 0
    best_partial: Optional[TheoremState] = None
    best_partial_steps: int = -1
    halted: bool = False
    halt_reason: str = ""

    @property
    def proof_found(self):
        return bool(self.proofs)

    def to_dict(self):
        return {
            "ordering": self.frontier.ordering,
            "frontier": [s.to_dict() for s in self.frontier.snapshot()],
            "seen": [list(key) for key in self.frontier.seen],
            "proofs": [[[int(op), rid] for op, rid in stack] for stack in self.proofs],
            "history": self.history,
            "step": self.step,
            "expanded": self.expanded,
            "tentative": self.tentative,
            "mismatches": self.mismatches,
            "rejected": self.rejected,
            "rejected_batches": self.rejected_batches,
            "duplicates": self.duplicates,
            "pruned": self.pruned,
            "unmatched": self.unmatched,
            "best_partial": self.best_partial.to_dict() if self.best_partial else None,
            "best_partial_steps": self.best_partial_steps,
            "halted": self.halted,
            "halt_reason": self.halt_reason,
        }

    @classmethod
    def from_dict(cls, d):
        frontier = Frontier(d.get("ordering", "priority"))
        for s in d["frontier"]:
            frontier._insert(TheoremState.from_dict(s))
        frontier.seen = {_key_from_json(key) for key in d.get("seen", ())}

        state = cls(frontier=frontier)
        state.proofs = [tuple((Opcode(op), rid) for op, rid in stack)
                        for stack in d.get("proofs", ())]
        state.history = d.get("history", [])
        state.step = d.get("step", 0)
        state.expanded = d.get("expanded", 0)
        state.tentative = d.get("tentative", 0)
        state.mismatches = d.get("mismatches", 0)
        state.rejected = d.get("rejected", 0)
        state.rejected_batches = d.get("rejected_batches", 0)
        state.duplicates = d.get("duplicates", 0)
        state.pruned = d.get("pruned", 0)
        state.unmatched = d.get("unmatched", 0)
        if d.get("best_partial"):
            state.best_partial = TheoremState.from_dict(d["best_partial"])
        state.best_partial_steps = d.get("best_partial_steps", -1)
        state.halted = d.get("halted", False)
        state.halt_reason = d.get("halt_reason", "")
        return state

    def save(self, path="euclid_state.json"):
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path="euclid_state.json"):
        with open(path) as f:
            return cls.from_dict(json.load(f))
