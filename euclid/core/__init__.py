from .codec import SymbolCodec, STRUCTURAL_SYMBOLS
from .state import Opcode, RuleRecord, TheoremState, Frontier, SearchState, format_step
from .rules import RuleStore, MalformedRuleError, canonicalize
from .callgraph import CallGraph, CallGraphEdge, build_graph
from .limiter import RecursionLimiter, DEFAULT_CEILING
from .engine import apply_opcode, expand_state, new_search, search_step, run_search
from .proof import rewrite_first, apply_step, verify_proof, Verification, print_proof

__all__ = [
    "SymbolCodec", "STRUCTURAL_SYMBOLS",
    "Opcode", "RuleRecord", "TheoremState", "Frontier", "SearchState", "format_step",
    "RuleStore", "MalformedRuleError", "canonicalize",
    "CallGraph", "CallGraphEdge", "build_graph",
    "RecursionLimiter", "DEFAULT_CEILING",
    "apply_opcode", "expand_state", "new_search", "search_step", "run_search",
    "rewrite_first", "apply_step", "verify_proof", "Verification", "print_proof",
]
