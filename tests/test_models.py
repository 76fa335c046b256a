"""Tests for the options bag and result models."""

import math

import pytest
from pydantic import ValidationError

import src.config as config
from src.core.errors import NoViableCandidateError
from src.models.condense_models import CandidateResult, CandidateStatus, CondenseOptions, ErrorMode, RunReport


class TestCondenseOptions:
    """Tests for CondenseOptions parsing."""

    def test_defaults_come_from_config(self):
        options = CondenseOptions()
        assert options.candidates == config.DEFAULT_CANDIDATES
        assert options.degree_threshold == config.DEGREE_THRESHOLD
        assert options.k_value == config.K_VALUE

    def test_camel_case_keys(self):
        options = CondenseOptions.model_validate(
            {"degreeThreshold": 4, "kValue": 2, "dropGraph": True, "errorMode": "pre_fallback", "write": False}
        )
        assert options.degree_threshold == 4
        assert options.k_value == 2
        assert options.drop_graph is True
        assert options.error_mode == ErrorMode.PRE_FALLBACK
        assert options.write is False

    def test_snake_case_keys(self):
        options = CondenseOptions(degree_threshold=9, k_value=5)
        assert options.degree_threshold == 9
        assert options.k_value == 5

    @pytest.mark.parametrize("value", ["stars, chains", ("stars", "chains"), ["stars", "chains"]])
    def test_candidate_forms(self, value):
        assert CondenseOptions(candidates=value).candidates == ["stars", "chains"]

    def test_unknown_keys_are_ignored(self):
        assert CondenseOptions.model_validate({"graphName": "g"}).candidates == config.DEFAULT_CANDIDATES

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            CondenseOptions(errorMode="sometimes")
        with pytest.raises(ValidationError):
            CondenseOptions(degreeThreshold=-1)


class TestResults:
    """Tests for result rows and reports."""

    def test_row_keys(self):
        result = CandidateResult(candidate="stars", score=13.0, super_node_count=1, compression_ratio=0.04,
                                 status=CandidateStatus.SCORED)
        assert result.to_row() == {
            "candidate": "stars",
            "score": 13.0,
            "superNodeCount": 1,
            "superEdgeCount": 0,
            "compressionRatio": 0.04,
        }
        assert result.failed is False

    def test_failed_defaults(self):
        result = CandidateResult(candidate="wcc", status=CandidateStatus.FAILED, error="boom")
        assert math.isinf(result.score)
        assert result.failed is True

    def test_require_winner(self):
        report = RunReport(run_id="r", graph_handle="g", results=[CandidateResult(candidate="wcc")])
        with pytest.raises(NoViableCandidateError):
            report.require_winner()
        report.winner = "wcc"
        assert report.require_winner() == "wcc"
