# src/core/errors.py
from typing import Optional


class CondenseError(Exception):
    """Base class for every error raised by the condensation pipeline."""


class UnknownCandidateError(CondenseError):
    """A requested candidate name does not match any known strategy."""

    def __init__(self, candidate: str):
        super().__init__(f"Unknown candidate '{candidate}'")
        self.candidate = candidate


class OracleError(CondenseError):
    """The partition oracle failed to compute labels for an algorithm."""

    def __init__(self, algorithm: str, message: str):
        super().__init__(f"Partition oracle failed for '{algorithm}': {message}")
        self.algorithm = algorithm


class MaterializationError(CondenseError):
    """A store write failed while building a candidate's supergraph."""

    def __init__(self, candidate: str, step: str, message: str):
        super().__init__(f"Materialization of '{candidate}' failed at step '{step}': {message}")
        self.candidate = candidate
        self.step = step


class NoViableCandidateError(CondenseError):
    """Every evaluated candidate failed, so no winner could be selected."""

    def __init__(self, run_id: str, candidates: Optional[list] = None):
        super().__init__(f"Run {run_id} produced no viable candidate (evaluated: {candidates or []})")
        self.run_id = run_id
        self.candidates = candidates or []


class StoreConnectionError(CondenseError):
    """The graph store cannot execute queries at all. Fatal for a whole run."""
