# src/core/cost_model.py
"""
Description-length style cost of a materialized candidate.

The score is a heuristic proxy, not an exact code length:

    error = max(0, original_edges - covered_edges)
    score = super_nodes + super_edges + internal_edges + 2 * error

Lower is better.
"""
import math
from typing import List, Optional

from src.models.condense_models import CandidateResult, ErrorMode, MaterializationReport

SUPER_NODE_COST = 1.0
SUPER_EDGE_COST = 1.0
INTERNAL_EDGE_COST = 1.0
ERROR_PENALTY = 2.0


def coverage_error(original_edges: int, covered_edges: int) -> int:
    """Original edges whose endpoints are not both covered by the grouping."""
    return max(0, original_edges - covered_edges)


def score(super_nodes: int, super_edges: int, internal_edges: int, original_edges: int, covered_edges: int) -> float:
    """
    Scores one candidate.

    Args:
        super_nodes (int): SuperNodes created, singletons included.
        super_edges (int): Distinct super-edges created.
        internal_edges (int): Original edges hidden inside a SuperNode.
        original_edges (int): Edges of the original graph.
        covered_edges (int): Original edges whose endpoints both belong to a group.

    Returns:
        float: The cost; lower is better.
    """
    error = coverage_error(original_edges, covered_edges)
    return (SUPER_NODE_COST * super_nodes
            + SUPER_EDGE_COST * super_edges
            + INTERNAL_EDGE_COST * internal_edges
            + ERROR_PENALTY * error)


def score_report(report: MaterializationReport, original_edges: int,
                 error_mode: ErrorMode = ErrorMode.POST_FALLBACK) -> float:
    """Scores a materialization report, measuring coverage where error_mode says."""
    if error_mode == ErrorMode.PRE_FALLBACK:
        covered = report.pre_fallback_covered_edges
    else:
        covered = report.covered_edges
    return score(report.super_nodes, report.super_edges, report.internal_edges, original_edges, covered)


def compression_ratio(super_nodes: int, super_edges: int, original_nodes: int, original_edges: int) -> float:
    """(super-nodes + super-edges) / (nodes + edges); 1.0 for an empty graph."""
    total = original_nodes + original_edges
    if total == 0:
        return 1.0
    return (super_nodes + super_edges) / total


def select_winner(results: List[CandidateResult]) -> Optional[str]:
    """
    Picks the candidate with the strictly smallest finite score. On ties the
    earliest result wins. Returns None when no score is finite.
    """
    best: Optional[CandidateResult] = None
    for result in results:
        if not math.isfinite(result.score):
            continue
        if best is None or result.score < best.score:
            best = result
    return best.candidate if best else None
