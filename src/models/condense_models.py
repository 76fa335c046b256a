# src/models/condense_models.py
import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

import src.config as config
from src.core.errors import NoViableCandidateError


class CandidateStatus(str, Enum):
    """Lifecycle of one candidate within a run."""
    PENDING = "pending"
    BUILDING = "building"
    SCORED = "scored"
    FAILED = "failed"


class ErrorMode(str, Enum):
    """Where the cost model measures covered edges."""
    POST_FALLBACK = "post_fallback"
    PRE_FALLBACK = "pre_fallback"


class CondenseOptions(BaseModel):
    """
    The configuration bag accepted by a condensation run.

    Keys follow the invocation contract (camelCase); snake_case field names are
    accepted too so Python callers can construct it directly.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    candidates: List[str] = Field(default_factory=lambda: list(config.DEFAULT_CANDIDATES), description="Strategies to evaluate, in this order.")
    degree_threshold: int = Field(config.DEGREE_THRESHOLD, alias="degreeThreshold", ge=0, description="Hub qualification threshold for the star partitioner.")
    k_value: int = Field(config.K_VALUE, alias="kValue", ge=0, description="Minimum core number forwarded to the kcore oracle call.")
    write: bool = Field(config.WRITE_RESULTS, description="Persist the winning candidate's artifacts.")
    drop_graph: bool = Field(config.DROP_GRAPH, alias="dropGraph", description="Drop the oracle-side graph projection after the run.")
    error_mode: ErrorMode = Field(ErrorMode(config.COST_ERROR_MODE), alias="errorMode", description="Where coverage is measured for the cost model's error term.")

    @field_validator("candidates", mode="before")
    @classmethod
    def _split_candidates(cls, value: Any) -> Any:
        # Accept "stars,chains" from CLIs and env vars
        if isinstance(value, str):
            return [c.strip() for c in value.split(",") if c.strip()]
        if isinstance(value, tuple):
            return list(value)
        return value


class MaterializationReport(BaseModel):
    """Counts gathered while materializing one candidate."""
    super_nodes: int = Field(0, description="SuperNodes for the (run, candidate), singletons included.")
    super_edges: int = Field(0, description="Distinct SuperEdges for the (run, candidate).")
    internal_edges: int = Field(0, description="Original edges whose endpoints share a SuperNode.")
    covered_edges: int = Field(0, description="Original edges whose endpoints both have a Membership, after fallback.")
    pre_fallback_covered_edges: int = Field(0, description="Original edges whose endpoints were both assigned by the partitioner.")
    assigned_nodes: int = Field(0, description="Nodes placed by the partitioner's own assignment.")
    singleton_nodes: int = Field(0, description="Nodes covered by the singleton fallback.")


class CandidateResult(BaseModel):
    """Outcome of evaluating one candidate."""
    candidate: str
    score: float = math.inf
    super_node_count: int = 0
    super_edge_count: int = 0
    compression_ratio: float = 0.0
    status: CandidateStatus = CandidateStatus.PENDING
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == CandidateStatus.FAILED or math.isinf(self.score)

    def to_row(self) -> Dict[str, Any]:
        """Serializes the result with the keys of the invocation contract."""
        return {
            "candidate": self.candidate,
            "score": self.score,
            "superNodeCount": self.super_node_count,
            "superEdgeCount": self.super_edge_count,
            "compressionRatio": self.compression_ratio,
        }


class RunReport(BaseModel):
    """Everything a caller learns from one orchestrator run."""
    run_id: str
    graph_handle: str
    original_node_count: int = 0
    original_edge_count: int = 0
    results: List[CandidateResult] = Field(default_factory=list)
    winner: Optional[str] = None
    persisted: bool = False

    def rows(self) -> List[Dict[str, Any]]:
        return [result.to_row() for result in self.results]

    def require_winner(self) -> str:
        """Returns the winning candidate or raises NoViableCandidateError."""
        if self.winner is None:
            raise NoViableCandidateError(self.run_id, [r.candidate for r in self.results])
        return self.winner
