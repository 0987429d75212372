"""
The rule store: axioms and the working theorem in canonical form.

Canonicalization swaps the two sides of an equation whenever
lhs < rhs, so every rule and every root state satisfies lhs >= rhs.
Reduce therefore always means "towards the smaller composite".
"""

from typing import Optional

from .codec import SymbolCodec
from .state import RuleRecord, TheoremState


class MalformedRuleError(ValueError):
    """An axiom or theorem side is empty or contains non-string tokens."""


def check_side(tokens, what: str) -> tuple:
    """Validate one side of an equation and return it as a tuple."""
    if isinstance(tokens, str):
        raise MalformedRuleError(f"{what}: expected a token sequence, got the string {tokens!r}")
    tokens = tuple(tokens)
    if not tokens:
        raise MalformedRuleError(f"{what}: side is empty")
    for token in tokens:
        if not isinstance(token, str) or not token:
            raise MalformedRuleError(f"{what}: invalid token {token!r}")
    return tokens


def canonicalize(rule: RuleRecord) -> RuleRecord:
    """
    Return rule with lhs >= rhs, swapping composites and tokens together.
    Canonical records are returned unchanged.
    """
    if rule.lhs >= rule.rhs:
        return rule
    return RuleRecord(
        id=rule.id,
        lhs=rule.rhs,
        rhs=rule.lhs,
        lhs_tokens=rule.rhs_tokens,
        rhs_tokens=rule.lhs_tokens,
        was_swapped=not rule.was_swapped,
        label=rule.label,
    )


class RuleStore:
    """
    Axioms plus the theorem under proof, all encoded with one codec.

    Guids start at 1 and only grow; the theorem is always guid 0.
    """

    def __init__(self, codec: Optional[SymbolCodec] = None):
        self.codec = codec if codec is not None else SymbolCodec()
        self.rules = []
        self.theorem = None
        self._next_guid = 1

    def add_axiom(self, lhs_tokens, rhs_tokens, label: str = "") -> RuleRecord:
        guid = self._next_guid
        lhs_tokens = check_side(lhs_tokens, f"Axiom_{guid} lhs")
        rhs_tokens = check_side(rhs_tokens, f"Axiom_{guid} rhs")
        rule = canonicalize(RuleRecord(
            id=guid,
            lhs=self.codec.encode(lhs_tokens),
            rhs=self.codec.encode(rhs_tokens),
            lhs_tokens=lhs_tokens,
            rhs_tokens=rhs_tokens,
            label=label,
        ))
        self._next_guid += 1
        self.rules.append(rule)
        return rule

    def set_theorem(self, lhs_tokens, rhs_tokens) -> TheoremState:
        """Encode the theorem as guid 0 and return the search root."""
        lhs_tokens = check_side(lhs_tokens, "theorem lhs")
        rhs_tokens = check_side(rhs_tokens, "theorem rhs")
        self.theorem = canonicalize(RuleRecord(
            id=0,
            lhs=self.codec.encode(lhs_tokens),
            rhs=self.codec.encode(rhs_tokens),
            lhs_tokens=lhs_tokens,
            rhs_tokens=rhs_tokens,
            label="theorem",
        ))
        return self.root()

    def root(self) -> TheoremState:
        """The theorem as an unrewritten search state."""
        if self.theorem is None:
            raise RuntimeError("No theorem set: call RuleStore.set_theorem first")
        t = self.theorem
        return TheoremState(t.lhs, t.rhs, (), t.lhs_tokens, t.rhs_tokens)

    def get(self, rule_id: int) -> RuleRecord:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        raise KeyError(f"No axiom with guid {rule_id}")

    def by_id(self) -> dict:
        return {rule.id: rule for rule in self.rules}

    def __iter__(self):
        return iter(self.rules)

    def __len__(self):
        return len(self.rules)

    def to_dict(self):
        return {
            "codec": self.codec.to_dict(),
            "rules": [r.to_dict() for r in self.rules],
            "theorem": self.theorem.to_dict() if self.theorem else None,
            "next_guid": self._next_guid,
        }

    @classmethod
    def from_dict(cls, d):
        store = cls(SymbolCodec.from_dict(d["codec"]))
        store.rules = [RuleRecord.from_dict(r) for r in d["rules"]]
        if d.get("theorem"):
            store.theorem = RuleRecord.from_dict(d["theorem"])
        store._next_guid = d.get("next_guid", len(store.rules) + 1)
        return store
