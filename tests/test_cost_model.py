"""Tests for the cost model and winner selection."""

import math

import pytest

from src.core import cost_model
from src.models.condense_models import CandidateResult, CandidateStatus, ErrorMode, MaterializationReport


class TestScore:
    """Tests for the description-length score."""

    def test_fully_covered_graph_has_no_penalty(self):
        """Test that the score is the plain sum when every edge is covered."""
        assert cost_model.score(3, 2, 2, original_edges=4, covered_edges=4) == 7.0

    def test_uncovered_edges_cost_twice(self):
        """Test the 2x penalty for edges whose endpoints are not both grouped."""
        assert cost_model.score(1, 0, 0, original_edges=5, covered_edges=3) == 5.0

    def test_error_is_never_negative(self):
        """Test that over-counted coverage does not reduce the score."""
        assert cost_model.coverage_error(3, 5) == 0
        assert cost_model.score(1, 1, 1, original_edges=3, covered_edges=5) == 3.0


class TestScoreReport:
    """Tests for the two coverage-error modes."""

    @pytest.fixture
    def report(self):
        return MaterializationReport(
            super_nodes=3,
            super_edges=2,
            internal_edges=2,
            covered_edges=4,
            pre_fallback_covered_edges=1,
        )

    def test_post_fallback_mode(self, report):
        """Test that post-fallback coverage makes the error term vanish."""
        assert cost_model.score_report(report, 4, ErrorMode.POST_FALLBACK) == 7.0

    def test_pre_fallback_mode(self, report):
        """Test that pre-fallback coverage penalizes unassigned endpoints."""
        assert cost_model.score_report(report, 4, ErrorMode.PRE_FALLBACK) == 7.0 + 2 * 3


class TestCompressionRatio:
    """Tests for the compression ratio."""

    def test_ratio(self):
        assert cost_model.compression_ratio(3, 2, 5, 4) == pytest.approx(5 / 9)

    def test_empty_graph(self):
        """Test that an empty graph has ratio 1.0 instead of dividing by zero."""
        assert cost_model.compression_ratio(0, 0, 0, 0) == 1.0


class TestSelectWinner:
    """Tests for winner selection."""

    def _result(self, name, score):
        status = CandidateStatus.FAILED if math.isinf(score) else CandidateStatus.SCORED
        return CandidateResult(candidate=name, score=score, status=status)

    def test_lowest_score_wins(self):
        results = [self._result("stars", 10.0), self._result("chains", 7.0), self._result("wcc", 9.0)]
        assert cost_model.select_winner(results) == "chains"

    def test_tie_goes_to_first_listed(self):
        """Test that equal scores keep the earlier candidate."""
        results = [self._result("chains", 7.0), self._result("stars", 7.0)]
        assert cost_model.select_winner(results) == "chains"
        assert cost_model.select_winner(list(reversed(results))) == "stars"

    def test_failed_candidates_never_win(self):
        results = [self._result("wcc", math.inf), self._result("stars", 100.0)]
        assert cost_model.select_winner(results) == "stars"

    def test_no_finite_score(self):
        """Test that a run where everything failed has no winner."""
        assert cost_model.select_winner([self._result("wcc", math.inf)]) is None
        assert cost_model.select_winner([]) is None
