"""
Proof verification and display.

The search only compares composites, and a composite forgets symbol
order. A proof stack is therefore tentative until it has been replayed on
the real token sequences: every step must find its pattern as a
contiguous run of tokens, and the two sides must come out identical.

Only the FIRST occurrence of a pattern is rewritten per step:
    ["x", "x"]  --lhs_reduce (x -> y)-->  ["y", "x"]
"""

from dataclasses import dataclass, field
from typing import Optional

from .state import Opcode, RuleRecord, format_step


def find_first(tokens: tuple, pattern: tuple) -> int:
    """Index of the first contiguous occurrence of pattern, or -1."""
    n, m = len(tokens), len(pattern)
    if m == 0 or m > n:
        return -1
    for i in range(n - m + 1):
        if tokens[i:i + m] == pattern:
            return i
    return -1


def rewrite_first(tokens, pattern, replacement) -> Optional[tuple]:
    """Replace the first occurrence of pattern. None if there is none."""
    tokens, pattern = tuple(tokens), tuple(pattern)
    i = find_first(tokens, pattern)
    if i < 0:
        return None
    return tokens[:i] + tuple(replacement) + tokens[i + len(pattern):]


def apply_step(lhs_tokens: tuple, rhs_tokens: tuple, opcode: Opcode,
               rule: RuleRecord) -> Optional[tuple]:
    """
    Apply one (opcode, rule) to a pair of token sides.
    Returns the new (lhs_tokens, rhs_tokens), or None if the pattern is absent.
    """
    opcode = Opcode(opcode)
    if opcode.is_reduce:
        pattern, replacement = rule.lhs_tokens, rule.rhs_tokens
    else:
        pattern, replacement = rule.rhs_tokens, rule.lhs_tokens

    if opcode.side == "lhs":
        rewritten = rewrite_first(lhs_tokens, pattern, replacement)
        return None if rewritten is None else (rewritten, tuple(rhs_tokens))
    rewritten = rewrite_first(rhs_tokens, pattern, replacement)
    return None if rewritten is None else (tuple(lhs_tokens), rewritten)


@dataclass
class Verification:
    """
    Result of replaying a proof stack.

    steps:     (lhs_tokens, rhs_tokens) before the first step and after
               every applied step
    trace:     "lhs_reduce via Axiom_3" for every applied step
    failed_at: index into the proof stack of the step that found no
               occurrence, or None
    """
    ok: bool
    lhs_tokens: tuple
    rhs_tokens: tuple
    steps: list = field(default_factory=list)
    trace: list = field(default_factory=list)
    failed_at: Optional[int] = None

    @property
    def complete(self):
        return self.failed_at is None

    @property
    def sides_equal(self):
        return self.lhs_tokens == self.rhs_tokens

    @property
    def applied(self):
        return len(self.trace)


def verify_proof(theorem_tokens, proof_stack, rules) -> Verification:
    """
    Replay proof_stack against the theorem's tokens.

    Args:
        theorem_tokens: (lhs_tokens, rhs_tokens) in the same canonical
                        orientation the search used
        proof_stack:    sequence of (Opcode, rule_id)
        rules:          dict {rule_id: RuleRecord} or iterable of RuleRecord

    The input sequences are never mutated. The same inputs always give
    the same Verification.
    """
    if not isinstance(rules, dict):
        rules = {r.id: r for r in rules}

    lhs, rhs = tuple(theorem_tokens[0]), tuple(theorem_tokens[1])
    steps = [(lhs, rhs)]
    trace = []

    for i, (opcode, rule_id) in enumerate(proof_stack):
        rule = rules.get(rule_id)
        result = None if rule is None else apply_step(lhs, rhs, opcode, rule)
        if result is None:
            return Verification(False, lhs, rhs, steps, trace, failed_at=i)
        lhs, rhs = result
        steps.append(result)
        trace.append(format_step((opcode, rule_id)))

    return Verification(lhs == rhs, lhs, rhs, steps, trace)


def print_proof(verification: Verification, rules=None):
    """Pretty-print a replayed proof, one equation per line."""
    if verification is None or not verification.steps:
        print("No proof found.")
        return
    title = "PROOF" if verification.ok else "PARTIAL PROOF"
    print(f"\n{'='*60}")
    print(title)
    print(f"{'='*60}")
    for i, (lhs, rhs) in enumerate(verification.steps):
        via = f"  [{verification.trace[i - 1]}]" if i else "  [theorem]"
        print(f"  {i+1}. {' '.join(lhs)} = {' '.join(rhs)}{via}")
    if rules:
        used = sorted({int(t.rsplit('_', 1)[1]) for t in verification.trace})
        by_id = rules if isinstance(rules, dict) else {r.id: r for r in rules}
        for rule_id in used:
            if rule_id in by_id:
                print(f"     Axiom_{rule_id}: {by_id[rule_id].content}")
    print(f"{'='*60}")
    if verification.ok:
        print("  Q.E.D.")
    elif verification.failed_at is not None:
        print(f"  Replay stopped at step {verification.failed_at + 1}: pattern not found.")
    else:
        print("  Every step applied, but the two sides differ in token order.")
