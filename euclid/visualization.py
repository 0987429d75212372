"""
Visualization and reporting utilities.
"""

from .core.callgraph import THEOREM_ID, CallGraph
from .core.state import SearchState


def print_state(search: SearchState, limit: int = 10):
    """Print a summary of a search: counters, then the head of the frontier."""
    print(f"\n{'='*60}")
    print(f"Step: {search.step}" + (f"  [{search.halt_reason}]" if search.halted else ""))
    print(f"Expanded: {search.expanded} | Tentative: {search.tentative}"
          f" | Mismatches: {search.mismatches}")
    print(f"Duplicates: {search.duplicates} | Pruned: {search.pruned}"
          f" | Unmatched: {search.unmatched}"
          f" | Rejected: {search.rejected} in {search.rejected_batches} batches")
    waiting = search.frontier.snapshot()
    print(f"Frontier ({len(waiting)}, {search.frontier.ordering}):")
    for state in waiting[:limit]:
        print(f"  {state.name}")
    if len(waiting) > limit:
        print(f"  ... {len(waiting) - limit} more")
    print(f"Proofs: {len(search.proofs)}")
    print(f"{'='*60}")


def print_history(search: SearchState):
    """Print the expansion history."""
    print(f"\n{'='*60}")
    print("Expansion history:")
    print(f"{'='*60}")
    for entry in search.history:
        extra = []
        if entry["duplicates"]:
            extra.append(f"{entry['duplicates']} seen")
        if entry["pruned"]:
            extra.append(f"{entry['pruned']} pruned")
        if entry.get("unmatched"):
            extra.append(f"{entry['unmatched']} unmatched")
        if entry["rejected"]:
            extra.append(f"{entry['rejected']} rejected")
        tail = f" ({', '.join(extra)})" if extra else ""
        print(f"  Step {entry['step']}: Focused on {entry['focus']}"
              f" -> {entry['produced']} new{tail}")


def print_result(report):
    """Print a ProofReport: status line, then the commit log."""
    print(f"\n{'='*60}")
    print(f"RESULT: {report.status.upper()}")
    if report.search is not None:
        print(f"  halted: {report.halt_reason} after {report.search.step} steps")
    print(f"{'='*60}")
    if report.proof_found:
        for i, line in enumerate(report.commit_log, start=1):
            print(f"  {i}. {line}")
        if not report.commit_log:
            print("  (sides already identical)")
    elif report.commit_log:
        print("  Best partial trace:")
        for i, line in enumerate(report.commit_log, start=1):
            print(f"  {i}. {line}")
    if report.rejected:
        print(f"  {report.rejected} children were rejected by the limiter.")
    print(f"{'='*60}")


def export_dot(call_graph: CallGraph, path="euclid_callgraph.dot"):
    """Export the call graph as a DOT file for Graphviz visualization."""
    def node(rule_id):
        return "Theorem" if rule_id == THEOREM_ID else f"Axiom_{rule_id}"

    with open(path, "w") as f:
        f.write("digraph euclid {\n")
        f.write("  rankdir=LR;\n")
        f.write("  node [shape=box, style=rounded];\n")
        f.write('  "Theorem" [fillcolor=lightblue, style=filled];\n')
        for edge in sorted(call_graph.edges, key=lambda e: (e.source, e.target, e.relation)):
            color = "black" if edge.relation.is_reduce else "gray"
            f.write(f'  "{node(edge.source)}" -> "{node(edge.target)}"'
                    f' [label="{edge.relation.label}", color={color}];\n')
        f.write("}\n")
    print(f"Graph exported to {path}")
