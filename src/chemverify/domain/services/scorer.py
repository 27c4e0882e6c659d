"""
Risk Scorer
===========

Reduces a finding set to one risk number in [0, 1]: the mean of fixed
per-finding weights. The mean is deliberately simple so every score can
be explained by counting findings.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chemverify.domain.entities import FindingKind, ValidationStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from chemverify.domain.entities import Finding

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Per-finding risk weights by status."""

    fail: float = 1.0
    unverified: float = 0.3
    low_signal: float = 0.05  # Unverified findings with a low-signal kind
    passed: float = 0.0
    low_signal_kinds: frozenset[FindingKind] = field(
        default_factory=lambda: frozenset({FindingKind.NOT_CHECKABLE})
    )

    def weight_for(self, finding: Finding) -> float:
        if finding.status == ValidationStatus.FAIL:
            return self.fail
        if finding.status == ValidationStatus.UNVERIFIED:
            if finding.kind in self.low_signal_kinds:
                return self.low_signal
            return self.unverified
        return self.passed


DEFAULT_WEIGHTS = ScoringWeights()


class RiskScorer:
    """Mean-of-weights risk scorer."""

    def __init__(self, weights: ScoringWeights = DEFAULT_WEIGHTS) -> None:
        self._weights = weights

    @property
    def weights(self) -> ScoringWeights:
        return self._weights

    @property
    def scoring_method(self) -> str:
        return "mean_status_weight"

    def score(self, findings: Iterable[Finding]) -> float:
        """
        Compute the risk score.

        Args:
            findings: Every finding of the run.

        Returns:
            0.0 for no findings, otherwise the clamped mean weight.
        """
        weights = [self._weights.weight_for(f) for f in findings]
        if not weights:
            return 0.0
        # fsum keeps the result independent of finding order
        mean = math.fsum(weights) / len(weights)
        return min(1.0, max(0.0, mean))
