"""
Composite Extractor
===================

Runs every configured extractor over the same text and concatenates
their claims. A failing extractor is reported as a diagnostic finding
and never stops the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chemverify.domain.entities import Claim, Finding, FindingKind, ValidationStatus
from chemverify.domain.services.extractors.doi import DoiExtractor
from chemverify.domain.services.extractors.numeric_unit import NumericUnitExtractor
from chemverify.domain.services.extractors.reagent_role import ReagentRoleExtractor
from chemverify.ports.claim_extractor import ClaimExtractor

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExtractionOutcome:
    """Claims from one extractor, or the diagnostic explaining its failure."""

    extractor_name: str
    claims: list[Claim] = field(default_factory=list)
    diagnostic: Finding | None = None

    @property
    def succeeded(self) -> bool:
        return self.diagnostic is None


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Claims from all extractors plus diagnostics for those that failed."""

    claims: list[Claim] = field(default_factory=list)
    diagnostics: list[Finding] = field(default_factory=list)


def run_extractor(extractor: ClaimExtractor, run_id: UUID, text: str) -> ExtractionOutcome:
    """Run one extractor and wrap its result or failure."""
    name = extractor.name
    try:
        claims = extractor.extract(run_id, text)
    except Exception as e:
        logger.warning(f"Extractor {name} failed: {e}")
        return ExtractionOutcome(
            extractor_name=name,
            diagnostic=Finding(
                run_id=run_id,
                validator_name=name,
                status=ValidationStatus.UNVERIFIED,
                kind=FindingKind.EXTRACTION_FAILURE,
                message=f"Extractor failed: {e}",
                confidence=0.0,
            ),
        )
    return ExtractionOutcome(extractor_name=name, claims=list(claims))


class CompositeClaimExtractor(ClaimExtractor):
    """Fan-out over an ordered list of extractors."""

    def __init__(self, extractors: Sequence[ClaimExtractor]) -> None:
        self._extractors = tuple(extractors)

    @property
    def extractors(self) -> tuple[ClaimExtractor, ...]:
        return self._extractors

    def extract_all(self, run_id: UUID, text: str) -> ExtractionResult:
        result = ExtractionResult()
        for extractor in self._extractors:
            outcome = run_extractor(extractor, run_id, text)
            if outcome.succeeded:
                result.claims.extend(outcome.claims)
            else:
                result.diagnostics.append(outcome.diagnostic)

        logger.debug(
            f"Extracted {len(result.claims)} claims with "
            f"{len(result.diagnostics)} extractor failures"
        )
        return result

    def extract(self, run_id: UUID, text: str) -> list[Claim]:
        return self.extract_all(run_id, text).claims


def default_extractors() -> list[ClaimExtractor]:
    return [NumericUnitExtractor(), DoiExtractor(), ReagentRoleExtractor()]
