"""
Euclid: a term-rewriting prover that searches on prime composites.

Every symbol is assigned a prime and every side of an equation becomes
the product of its symbols' primes. Rule applicability is a divisibility
test and a rewrite is a division and a multiplication. Candidate proofs
found this way are replayed on the real token sequences before they
are reported.

Usage:
    python -m euclid --domain arithmetic
    python -m euclid --domain game_state --theorem europa
    python -m euclid --axiom "1 + 1 = 2" --axiom "2 + 2 = 4" --prove "1 + 1 + 1 + 1 = 4"
"""

from .core.codec import SymbolCodec, STRUCTURAL_SYMBOLS
from .core.state import Opcode, RuleRecord, TheoremState, Frontier, SearchState, format_step
from .core.rules import RuleStore, MalformedRuleError, canonicalize
from .core.callgraph import CallGraph, CallGraphEdge, build_graph
from .core.limiter import RecursionLimiter, DEFAULT_CEILING
from .core.engine import apply_opcode, expand_state, new_search, search_step, run_search
from .core.proof import rewrite_first, verify_proof, Verification, print_proof
from .tokens import tokenize, elide, parse_equation
from .prover import Prover, ProofReport

__all__ = [
    "SymbolCodec", "STRUCTURAL_SYMBOLS",
    "Opcode", "RuleRecord", "TheoremState", "Frontier", "SearchState", "format_step",
    "RuleStore", "MalformedRuleError", "canonicalize",
    "CallGraph", "CallGraphEdge", "build_graph",
    "RecursionLimiter", "DEFAULT_CEILING",
    "apply_opcode", "expand_state", "new_search", "search_step", "run_search",
    "rewrite_first", "verify_proof", "Verification", "print_proof",
    "tokenize", "elide", "parse_equation",
    "Prover", "ProofReport",
]
