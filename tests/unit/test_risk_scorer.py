"""
Tests for RiskScorer
====================
"""

import itertools

import pytest
from conftest import make_finding

from chemverify.domain.entities import FindingKind, ValidationStatus
from chemverify.domain.services.scorer import RiskScorer, ScoringWeights


class TestRiskScorer:
    """Tests for the mean-of-weights scorer."""

    @pytest.fixture
    def scorer(self) -> RiskScorer:
        return RiskScorer()

    def test_empty_findings(self, scorer: RiskScorer) -> None:
        """No findings means no risk."""
        assert scorer.score([]) == 0.0

    def test_all_pass(self, scorer: RiskScorer) -> None:
        findings = [make_finding(ValidationStatus.PASS) for _ in range(3)]

        assert scorer.score(findings) == 0.0

    def test_all_fail(self, scorer: RiskScorer) -> None:
        findings = [make_finding(ValidationStatus.FAIL) for _ in range(2)]

        assert scorer.score(findings) == 1.0

    def test_unverified_weights(self, scorer: RiskScorer) -> None:
        assert scorer.score([make_finding(ValidationStatus.UNVERIFIED)]) == pytest.approx(0.3)
        assert scorer.score(
            [make_finding(ValidationStatus.UNVERIFIED, FindingKind.NOT_CHECKABLE)]
        ) == pytest.approx(0.05)

    def test_mixed_is_mean(self, scorer: RiskScorer) -> None:
        findings = [
            make_finding(ValidationStatus.FAIL),
            make_finding(ValidationStatus.UNVERIFIED, FindingKind.MULTI_SCENARIO),
            make_finding(ValidationStatus.UNVERIFIED, FindingKind.NOT_CHECKABLE),
            make_finding(ValidationStatus.PASS),
        ]

        assert scorer.score(findings) == pytest.approx((1.0 + 0.3 + 0.05 + 0.0) / 4)

    def test_permutation_invariant(self, scorer: RiskScorer) -> None:
        findings = [
            make_finding(ValidationStatus.FAIL),
            make_finding(ValidationStatus.UNVERIFIED),
            make_finding(ValidationStatus.UNVERIFIED, FindingKind.NOT_CHECKABLE),
            make_finding(ValidationStatus.PASS),
        ]
        scores = {scorer.score(list(p)) for p in itertools.permutations(findings)}

        assert len(scores) == 1

    def test_bounded_with_custom_weights(self) -> None:
        scorer = RiskScorer(ScoringWeights(fail=3.0, passed=-1.0))

        assert scorer.score([make_finding(ValidationStatus.FAIL)]) == 1.0
        assert scorer.score([make_finding(ValidationStatus.PASS)]) == 0.0

    def test_scoring_method(self, scorer: RiskScorer) -> None:
        assert scorer.scoring_method == "mean_status_weight"
